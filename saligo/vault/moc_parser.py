"""Parsing map-of-content (MOC) notes into headings and links."""

import re

from saligo.domain.moc import MOCHeading, MOCLink, MOCNote
from saligo.domain.note import Note

HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$")
# Embeds (![[...]]) are treated as links
LINK_PATTERN = re.compile(r"!?\[\[([^\]]+)\]\]")


def frontmatter_end(lines: list[str]) -> int:
    """Index of the first line after a leading frontmatter block, 0 when there is none."""
    if not lines or not "\n".join(lines).lstrip().startswith("---"):
        return 0
    start = next(i for i, line in enumerate(lines) if line.strip())
    for index in range(start + 1, len(lines)):
        if lines[index].strip() == "---":
            return index + 1
    return 0


def remove_frontmatter(content: str) -> str:
    """Remove a leading YAML frontmatter block.

    The block must open with --- and close with a line that is exactly ---.
    Without a closing marker the content is returned unchanged.
    """
    lines = content.split("\n")
    end = frontmatter_end(lines)
    if end == 0:
        return content
    return "\n".join(lines[end:])


def parse_headings(lines: list[str], start: int = 0) -> list[MOCHeading]:
    """Parse headings into a tree, nesting deeper levels under the closest shallower one."""
    roots: list[MOCHeading] = []
    stack: list[MOCHeading] = []

    for line_number in range(start, len(lines)):
        match = HEADING_PATTERN.match(lines[line_number])
        if not match:
            continue

        heading = MOCHeading(
            level=len(match.group(1)), text=match.group(2).strip(), line_number=line_number
        )
        while stack and stack[-1].level >= heading.level:
            stack.pop()
        if stack:
            stack[-1].children.append(heading)
        else:
            roots.append(heading)
        stack.append(heading)

    return roots


def parse_links(lines: list[str], start: int = 0) -> list[MOCLink]:
    """Parse wikilinks with the closest heading above each link."""
    links: list[MOCLink] = []
    current_heading: str | None = None

    for line_number in range(start, len(lines)):
        line = lines[line_number]
        heading_match = HEADING_PATTERN.match(line)
        if heading_match:
            current_heading = heading_match.group(2).strip()

        for raw in LINK_PATTERN.findall(line):
            parts = raw.split("|")
            path = parts[0].split("#")[0].strip()
            if not path:
                continue
            display_text = parts[1].strip() if len(parts) > 1 else path
            links.append(
                MOCLink(
                    path=path,
                    display_text=display_text,
                    heading=current_heading,
                    line_number=line_number,
                )
            )

    return links


def parse_moc(note: Note) -> MOCNote:
    """Parse a MOC note.

    Args:
        note: Note whose content indexes other notes

    Returns:
        MOCNote titled after its first heading, or the file name when it has none
    """
    lines = note.content.split("\n")
    start = frontmatter_end(lines)

    headings = parse_headings(lines, start)
    links = parse_links(lines, start)
    title = headings[0].text if headings else note.stem

    return MOCNote(id=note.id, title=title, links=links, headings=headings)
