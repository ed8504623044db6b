"""Relationship domain models."""

from typing import Literal

from pydantic import BaseModel

from saligo.domain.note import Note

RelationshipKind = Literal["backlink", "wikilink", "bidirectional", "shared-tag"]


class RelationshipEdge(BaseModel):
    """Represents a weighted relationship from a source note to a target note."""

    source_id: str
    target_id: str
    kind: RelationshipKind
    strength: float  # 0.0 - 1.0
    context: list[str] = []  # short snippets where the link or tags appear


class NoteRelationships(BaseModel):
    """All relationships detected for a single source note."""

    source_id: str
    backlinks: list[RelationshipEdge] = []  # includes bidirectional pairs
    wikilinks: list[RelationshipEdge] = []
    shared_tags: list[RelationshipEdge] = []
    total_count: int = 0
    strongest: list[RelationshipEdge] = []  # top 10 by strength


class Cluster(BaseModel):
    """A group of two or more strongly connected notes."""

    notes: list[Note]

    @property
    def note_ids(self) -> list[str]:
        return [note.id for note in self.notes]

    def __len__(self) -> int:
        return len(self.notes)
