"""Tests for the in-memory vault."""

import json
from pathlib import Path

import pytest

from saligo.domain.note import Note
from saligo.vault.memory import InMemoryVault, extract_wikilinks


def test_extract_wikilinks() -> None:
    content = "See [[Pensieve]], [[Another Note|alias]] and ![[image.png]]."

    assert extract_wikilinks(content) == ["Pensieve", "Another Note", "image.png"]


def test_backlinks_are_computed(walking_vault: InMemoryVault) -> None:
    notes = {note.id: note for note in walking_vault.notes}

    assert notes["notes/a.md"].backlinks == ["notes/b.md", "notes/c.md"]
    assert notes["notes/b.md"].backlinks == ["notes/a.md"]
    assert notes["notes/e.md"].backlinks == []


def test_existing_backlinks_are_kept() -> None:
    vault = InMemoryVault([Note(id="a.md", backlinks=["elsewhere.md"]), Note(id="b.md", content="[[a]]")])

    assert vault.notes[0].backlinks == ["elsewhere.md", "b.md"]


def test_resolve_link() -> None:
    vault = InMemoryVault(
        [Note(id="Projects/Deep Work.md"), Note(id="inbox"), Note(id="Daily.md")]
    )

    assert vault.resolve_link("inbox", "x") == "inbox"
    assert vault.resolve_link("Daily", "x") == "Daily.md"
    assert vault.resolve_link("deep work#Rules", "x") == "Projects/Deep Work.md"
    assert vault.resolve_link("Deep Work|alias", "x") == "Projects/Deep Work.md"
    assert vault.resolve_link("Missing", "x") is None
    assert vault.resolve_link("#anchor", "x") is None


@pytest.mark.asyncio
async def test_read_note(walking_vault: InMemoryVault) -> None:
    note = await walking_vault.read_note("notes/a.md")

    assert note.outbound_links == ["b"]
    with pytest.raises(KeyError):
        await walking_vault.read_note("notes/missing.md")


def test_load(tmp_path: Path) -> None:
    export = tmp_path / "notes.json"
    export.write_text(
        json.dumps(
            [
                {"id": "one.md", "content": "Links to [[two]]", "tags": ["#A"]},
                {"id": "two.md", "content": "Plain"},
            ]
        )
    )

    vault = InMemoryVault.load(export)

    assert [note.id for note in vault.notes] == ["one.md", "two.md"]
    assert vault.notes[0].tags == ["a"]
    assert vault.notes[1].backlinks == ["one.md"]
