"""Map-of-content (MOC) domain models."""

from typing import Literal

from pydantic import BaseModel


class MOCHeading(BaseModel):
    level: int  # 1-6
    text: str
    line_number: int  # 0-indexed
    children: list["MOCHeading"] = []


class MOCLink(BaseModel):
    """A link found in a MOC.

    Attributes:
        path: Link target without alias or anchor
        display_text: Alias if present, otherwise the path
        heading: Text of the closest heading above the link, None at the root
        line_number: 0-indexed line of the link
    """

    path: str
    display_text: str
    heading: str | None = None
    line_number: int


class MOCNote(BaseModel):
    """A note whose purpose is to index other notes."""

    id: str
    title: str
    links: list[MOCLink] = []
    headings: list[MOCHeading] = []

    @property
    def link_count(self) -> int:
        return len(self.links)

    def flat_headings(self) -> list[MOCHeading]:
        flat: list[MOCHeading] = []
        stack = list(reversed(self.headings))
        while stack:
            heading = stack.pop()
            flat.append(heading)
            stack.extend(reversed(heading.children))
        return flat


class ValidationWarning(BaseModel):
    """Non-fatal issue with a MOC that may weaken the discovered centers."""

    severity: Literal["low", "medium", "high"]
    type: Literal["too_few_notes", "too_many_notes", "broken_links", "no_structure"]
    message: str
    suggestion: str | None = None


class NoteCount(BaseModel):
    total: int
    readable: int
    broken: int


class MOCValidationResult(BaseModel):
    """Pre-flight assessment of a MOC.

    Attributes:
        valid: False only when the MOC has no readable notes
        warnings: Non-fatal issues
        estimated_cost: Estimated analysis cost in USD, rounded to 4 decimals
        estimated_time: Estimated analysis time in seconds
        note_count: Link counts by readability
    """

    valid: bool
    warnings: list[ValidationWarning] = []
    estimated_cost: float
    estimated_time: int
    note_count: NoteCount
