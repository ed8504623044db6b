"""Detecting weighted relationships between notes from links and shared tags."""

import logging
import re

from saligo.domain.note import Note
from saligo.domain.relationships import NoteRelationships, RelationshipEdge

logger = logging.getLogger(__name__)

WIKILINK_PATTERN = re.compile(r"\[\[([^\]|]+)(?:\|[^\]]*)?\]\]")

BIDIRECTIONAL_STRENGTH = 1.0
BACKLINK_STRENGTH = 0.8
WIKILINK_STRENGTH = 0.8
SHARED_TAG_BASE = 0.3
SHARED_TAG_SPAN = 0.4

STRONGEST_LIMIT = 10
MAX_CONTEXT_LINES = 3
MAX_CONTEXT_CHARS = 200


def normalize_link(link: str) -> str:
    """Normalize a link target for comparison.

    Strips any #anchor and |alias suffix, then a trailing .md extension and
    surrounding whitespace, and lowercases the result.
    """
    normalized = link.split("#")[0].split("|")[0].strip()
    return re.sub(r"\.md$", "", normalized).strip().lower()


def link_matches(link: str, note: Note) -> bool:
    normalized = normalize_link(link)
    if not normalized:
        return False
    return normalized in (normalize_link(note.id), normalize_link(note.stem))


def extract_link_context(content: str, target: Note) -> list[str]:
    """Extract the lines of content that link to the target note.

    Args:
        content: Full content of the linking note
        target: Note being linked to

    Returns:
        Up to three whitespace-collapsed lines, each at most 200 characters
    """
    context: list[str] = []
    for line in content.splitlines():
        if any(link_matches(link, target) for link in WIKILINK_PATTERN.findall(line)):
            context.append(re.sub(r"\s+", " ", line).strip()[:MAX_CONTEXT_CHARS])
            if len(context) >= MAX_CONTEXT_LINES:
                break
    return context


class RelationshipGraphBuilder:
    """Builds weighted relationship edges between notes.

    Never raises: notes with missing links, backlinks or tags simply produce
    fewer edges.
    """

    def detect_relationships(self, source: Note, notes: list[Note]) -> NoteRelationships:
        """Detect every relationship between a source note and a candidate set.

        Args:
            source: Note to analyze
            notes: All candidate notes (the source itself is skipped)

        Returns:
            NoteRelationships with disjoint backlink, wikilink and shared-tag lists
        """
        candidates = [note for note in notes if note.id != source.id]

        backlinks = self._detect_backlinks(source, candidates)
        wikilinks = self._detect_wikilinks(source, candidates)
        shared_tags = self._detect_shared_tags(source, candidates)

        every_edge = backlinks + wikilinks + shared_tags
        # sorted() is stable, equal strengths keep detection order
        strongest = sorted(every_edge, key=lambda edge: edge.strength, reverse=True)

        return NoteRelationships(
            source_id=source.id,
            backlinks=backlinks,
            wikilinks=wikilinks,
            shared_tags=shared_tags,
            total_count=len(every_edge),
            strongest=strongest[:STRONGEST_LIMIT],
        )

    def detect_relationships_batch(self, notes: list[Note]) -> dict[str, NoteRelationships]:
        """Detect relationships for every note against the same note set."""
        return {note.id: self.detect_relationships(note, notes) for note in notes}

    def _links_to(self, source: Note, target: Note) -> bool:
        return any(link_matches(link, target) for link in source.outbound_links)

    def _detect_backlinks(self, source: Note, candidates: list[Note]) -> list[RelationshipEdge]:
        edges = []
        for candidate in candidates:
            if candidate.id not in source.backlinks:
                continue

            if self._links_to(source, candidate):
                kind, strength = "bidirectional", BIDIRECTIONAL_STRENGTH
            else:
                kind, strength = "backlink", BACKLINK_STRENGTH

            edges.append(
                RelationshipEdge(
                    source_id=source.id,
                    target_id=candidate.id,
                    kind=kind,
                    strength=strength,
                    context=extract_link_context(candidate.content, source),
                )
            )
        return edges

    def _detect_wikilinks(self, source: Note, candidates: list[Note]) -> list[RelationshipEdge]:
        edges = []
        for candidate in candidates:
            if not self._links_to(source, candidate):
                continue

            # Already counted as bidirectional among the backlinks
            if candidate.id in source.backlinks:
                continue

            edges.append(
                RelationshipEdge(
                    source_id=source.id,
                    target_id=candidate.id,
                    kind="wikilink",
                    strength=WIKILINK_STRENGTH,
                    context=extract_link_context(source.content, candidate),
                )
            )
        return edges

    def _detect_shared_tags(self, source: Note, candidates: list[Note]) -> list[RelationshipEdge]:
        if not source.tags:
            return []

        source_tags = set(source.tags)
        edges = []
        for candidate in candidates:
            if not candidate.tags:
                continue

            shared = [tag for tag in candidate.tags if tag in source_tags]
            if not shared:
                continue

            similarity = len(shared) / len(source_tags | set(candidate.tags))
            edges.append(
                RelationshipEdge(
                    source_id=source.id,
                    target_id=candidate.id,
                    kind="shared-tag",
                    strength=SHARED_TAG_BASE + similarity * SHARED_TAG_SPAN,
                    context=[f"#{tag}" for tag in shared],
                )
            )

        logger.debug(f"Found {len(edges)} shared-tag relationships for {source.id}")
        return edges
