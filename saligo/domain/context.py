"""Privacy-scrubbed request context sent to the provider."""

from pydantic import BaseModel, field_validator

from saligo.domain.note import epoch_seconds


class SeedContext(BaseModel):
    """A note stripped of any path or file identity.

    Attributes:
        id: Anonymized sequence id (seed-1, seed-2, ...)
        content: Content without frontmatter
        tags: Normalized tags
        created: Creation timestamp (seconds since epoch)
        backlink_count: Number of notes linking to the note
        has_photo: Whether an image is embedded in the note
        photo_caption: Best-effort caption for the first image
    """

    id: str
    content: str
    tags: list[str] = []
    created: float = 0.0
    backlink_count: int = 0
    has_photo: bool = False
    photo_caption: str | None = None

    @field_validator("created")
    @classmethod
    def _to_seconds(cls, timestamp: float) -> float:
        return epoch_seconds(timestamp)


class MOCContext(BaseModel):
    title: str
    headings: list[str] = []
    seeds_from_heading: dict[str, str] = {}  # seed id -> parent heading


class CenterFindingContext(BaseModel):
    seeds: list[SeedContext]
    moc: MOCContext | None = None
    min_centers: int | None = None
    max_centers: int | None = None
