"""Request and response bodies for the HTTP API.

Every request carries the notes it operates on, the engine keeps no vault of its own.
"""

from pydantic import BaseModel, Field

from saligo.domain.centers import TextCenter
from saligo.domain.note import Note
from saligo.domain.tags import TagFilterMode


class NotesRequest(BaseModel):
    notes: list[Note]


class SeedDiscoveryRequest(NotesRequest):
    pass


class MOCRequest(NotesRequest):
    moc_id: str


class MOCDiscoveryRequest(MOCRequest):
    min_centers: int | None = Field(default=None, ge=1)
    max_centers: int | None = Field(default=None, ge=1)


class RelationshipsRequest(NotesRequest):
    note_id: str | None = None  # all notes when omitted


class ClustersRequest(NotesRequest):
    min_strength: float = Field(default=0.5, ge=0.0, le=1.0)


class TagsRequest(NotesRequest):
    tags: list[str] = []
    mode: TagFilterMode = "any"
    min_co_occurrence: int = Field(default=3, ge=1)


class TagSummary(BaseModel):
    tag: str
    count: int
    note_ids: list[str]
    related: list[tuple[str, int]]
    date_range: str


class TagsResponse(BaseModel):
    tags: list[TagSummary]
    suggested_combinations: list[list[str]]
    matching_note_ids: list[str]


class ClusterResponse(BaseModel):
    note_ids: list[str]
    size: int


class FindCentersRequest(BaseModel):
    text: str
    context: str | None = None


class ExpansionsRequest(BaseModel):
    center: TextCenter
    document_context: str | None = None


class WholenessRequest(BaseModel):
    document: str


class UnityRequest(BaseModel):
    paragraph: str
