"""Tag statistics domain models."""

import math
from typing import Literal

from pydantic import BaseModel, Field

TagFilterMode = Literal["any", "all"]


class DateRange(BaseModel):
    earliest: float = math.inf  # earliest creation timestamp
    latest: float = 0.0  # latest modification timestamp


class TagStats(BaseModel):
    """Metadata about a single tag across notes.

    Attributes:
        tag: Normalized tag name
        count: Number of notes carrying the tag
        note_ids: IDs of the notes carrying the tag
        co_occurrence: Other tag -> number of notes carrying both, in first-seen order
        date_range: Earliest creation and latest modification among those notes
    """

    tag: str
    count: int = 0
    note_ids: list[str] = []
    co_occurrence: dict[str, int] = {}
    date_range: DateRange = Field(default_factory=DateRange)
