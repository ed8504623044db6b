"""In-memory vault built from note snapshots supplied by the caller."""

import json
import logging
from pathlib import Path, PurePosixPath

from saligo.domain.note import Note
from saligo.graph.relationships import WIKILINK_PATTERN

logger = logging.getLogger(__name__)


def extract_wikilinks(content: str) -> list[str]:
    """Extract wikilink targets in the form [[target]] or [[target|alias]]."""
    return WIKILINK_PATTERN.findall(content)


class InMemoryVault:
    """Note reader and link resolver over a fixed set of notes.

    Outbound links are extracted from the content when a note does not carry
    them, and backlinks are recomputed from the resolved outbound links.
    """

    def __init__(self, notes: list[Note]):
        self._notes: dict[str, Note] = {}
        for note in notes:
            outbound = note.outbound_links or extract_wikilinks(note.content)
            self._notes[note.id] = note.model_copy(update={"outbound_links": outbound})
        self._update_backlinks()

    @classmethod
    def load(cls, path: Path) -> "InMemoryVault":
        """Load notes from a JSON export: a list of note objects."""
        with open(path) as f:
            raw = json.load(f)
        notes = [Note.model_validate(item) for item in raw]
        logger.info(f"Loaded {len(notes)} notes from {path}")
        return cls(notes)

    @property
    def notes(self) -> list[Note]:
        return list(self._notes.values())

    async def read_note(self, note_id: str) -> Note:
        try:
            return self._notes[note_id]
        except KeyError:
            raise KeyError(f"Note not found: {note_id}") from None

    def resolve_link(self, link: str, source_id: str) -> str | None:  # noqa: ARG002
        target = link.split("|")[0].split("#")[0].strip()
        if not target:
            return None

        # Try exact match first
        if target in self._notes:
            return target

        # Try with .md extension
        md_target = f"{target}.md"
        if md_target in self._notes:
            return md_target

        # Try as filename stem, case-insensitively
        stem = PurePosixPath(target).stem.lower()
        for note_id, note in self._notes.items():
            if note.stem.lower() == stem:
                return note_id

        logger.debug(f"Could not resolve link: {link}")
        return None

    def _update_backlinks(self) -> None:
        backlinks: dict[str, list[str]] = {note_id: [] for note_id in self._notes}
        for note in self._notes.values():
            for link in note.outbound_links:
                target_id = self.resolve_link(link, note.id)
                if target_id and target_id != note.id and note.id not in backlinks[target_id]:
                    backlinks[target_id].append(note.id)

        for note_id, note in self._notes.items():
            merged = list(note.backlinks)
            merged.extend(source for source in backlinks[note_id] if source not in merged)
            self._notes[note_id] = note.model_copy(update={"backlinks": merged})
