from typing import Protocol

from saligo.domain.note import Note


class NoteReader(Protocol):
    async def read_note(self, note_id: str) -> Note:
        """Read a note by id. Raises KeyError when the note does not exist."""
        ...


class LinkResolver(Protocol):
    def resolve_link(self, link: str, source_id: str) -> str | None:
        """Resolve a raw link target to a note id, or None when the link is broken."""
        ...
