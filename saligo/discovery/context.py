"""Building the privacy-scrubbed context sent to the provider.

Nothing that identifies a file leaves this module: notes become seed-N ids,
and the MOC is described by its headings only.
"""

import re
from pathlib import PurePosixPath

from saligo.domain.context import CenterFindingContext, MOCContext, SeedContext
from saligo.domain.moc import MOCNote
from saligo.domain.note import Note
from saligo.vault.moc_parser import remove_frontmatter

EMBED_PATTERN = re.compile(r"!\[\[([^\]]+)\]\]")
MARKDOWN_IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".bmp", ".tiff", ".heic")

ROOT_HEADING = "(root)"
UNTITLED_MOC = "Untitled MOC"


def _adjacent_caption(lines: list[str], index: int) -> str | None:
    if index + 1 < len(lines) and lines[index + 1].strip():
        return lines[index + 1].strip()
    if index > 0 and lines[index - 1].strip():
        return lines[index - 1].strip()
    return None


def _file_name(target: str) -> str | None:
    if target.startswith(("http://", "https://")):
        return None
    return PurePosixPath(target.strip()).name or None


def detect_photo(content: str) -> tuple[bool, str | None]:
    """Detect the first image in a note and a best-effort caption for it.

    Embedded images (![[photo.png]]) are checked before markdown images
    (![alt](photo.png)). The caption is the next non-empty line, else the
    previous one, else the file name, else the alt text.

    Returns:
        Tuple of (has_photo, caption)
    """
    lines = content.split("\n")

    for index, line in enumerate(lines):
        for target in EMBED_PATTERN.findall(line):
            path = target.split("|")[0].strip()
            if path.lower().endswith(IMAGE_EXTENSIONS):
                return True, _adjacent_caption(lines, index) or _file_name(path)

    for index, line in enumerate(lines):
        match = MARKDOWN_IMAGE_PATTERN.search(line)
        if match:
            alt_text, src = match.group(1).strip(), match.group(2).strip()
            caption = _adjacent_caption(lines, index) or _file_name(src) or alt_text or None
            return True, caption

    return False, None


def build_seed_contexts(notes: list[Note]) -> tuple[list[SeedContext], dict[str, str]]:
    """Anonymize notes into seed contexts.

    Args:
        notes: Notes in the order they should be presented

    Returns:
        Tuple of (seed contexts, seed id -> note id)
    """
    seeds: list[SeedContext] = []
    seed_ids: dict[str, str] = {}

    for index, note in enumerate(notes, start=1):
        seed_id = f"seed-{index}"
        has_photo, caption = detect_photo(note.content)
        seeds.append(
            SeedContext(
                id=seed_id,
                content=remove_frontmatter(note.content).strip(),
                tags=note.tags,
                created=note.created,
                backlink_count=len(note.backlinks),
                has_photo=has_photo,
                photo_caption=caption,
            )
        )
        seed_ids[seed_id] = note.id

    return seeds, seed_ids


def build_moc_context(
    moc: MOCNote, resolved_links: dict[str, str], seed_ids: dict[str, str]
) -> MOCContext:
    """Describe a MOC's structure in terms of seed ids.

    Args:
        moc: Parsed MOC
        resolved_links: Link path -> note id for every readable link
        seed_ids: Seed id -> note id

    Returns:
        MOC context titled after the MOC's first heading
    """
    note_to_seed = {note_id: seed_id for seed_id, note_id in seed_ids.items()}
    seeds_from_heading: dict[str, str] = {}

    for link in moc.links:
        seed_id = note_to_seed.get(resolved_links.get(link.path, ""))
        if seed_id and seed_id not in seeds_from_heading:
            seeds_from_heading[seed_id] = link.heading or ROOT_HEADING

    flat = moc.flat_headings()
    return MOCContext(
        title=flat[0].text if flat else UNTITLED_MOC,
        headings=[heading.text for heading in flat],
        seeds_from_heading=seeds_from_heading,
    )


def build_context(
    notes: list[Note],
    *,
    moc: MOCNote | None = None,
    resolved_links: dict[str, str] | None = None,
    min_centers: int | None = None,
    max_centers: int | None = None,
) -> tuple[CenterFindingContext, dict[str, str]]:
    seeds, seed_ids = build_seed_contexts(notes)
    moc_context = None
    if moc is not None:
        moc_context = build_moc_context(moc, resolved_links or {}, seed_ids)

    context = CenterFindingContext(
        seeds=seeds, moc=moc_context, min_centers=min_centers, max_centers=max_centers
    )
    return context, seed_ids
