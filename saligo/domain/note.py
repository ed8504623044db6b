"""Note domain models."""

from pathlib import PurePosixPath

from pydantic import BaseModel, field_validator

# Epoch values above this are read as milliseconds (1e11 seconds is the year 5138)
MILLISECONDS_THRESHOLD = 1e11


def normalize_tag(tag: str) -> str:
    return tag.strip().lstrip("#").strip().lower()


def epoch_seconds(timestamp: float) -> float:
    """Convert a millisecond epoch timestamp to seconds, leaving seconds unchanged."""
    if abs(timestamp) > MILLISECONDS_THRESHOLD:
        return timestamp / 1000
    return timestamp


class Note(BaseModel):
    """Represents a note supplied by the host, treated as read-only input.

    Attributes:
        id: Opaque external identifier, usually the vault-relative path
        content: Full markdown content
        tags: Normalized tags (lowercase, no # prefix, deduplicated)
        created: Creation timestamp (seconds since epoch, milliseconds are converted)
        modified: Modification timestamp (seconds since epoch, milliseconds are converted)
        backlinks: IDs of notes that link to this note
        outbound_links: Raw link targets as written in the note
    """

    id: str
    content: str = ""
    tags: list[str] = []
    created: float = 0.0
    modified: float = 0.0
    backlinks: list[str] = []
    outbound_links: list[str] = []

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, tags: list[str]) -> list[str]:
        normalized: list[str] = []
        for tag in tags:
            clean = normalize_tag(tag)
            if clean and clean not in normalized:
                normalized.append(clean)
        return normalized

    @field_validator("created", "modified")
    @classmethod
    def _to_seconds(cls, timestamp: float) -> float:
        return epoch_seconds(timestamp)

    @property
    def stem(self) -> str:
        """File name without folders or extension."""
        return PurePosixPath(self.id).stem
