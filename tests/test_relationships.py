"""Tests for relationship detection between notes."""

import pytest

from saligo.domain.note import Note
from saligo.graph.relationships import (
    RelationshipGraphBuilder,
    extract_link_context,
    link_matches,
    normalize_link,
)
from saligo.vault.memory import InMemoryVault


def _by_id(notes: list[Note]) -> dict[str, Note]:
    return {note.id: note for note in notes}


def test_normalize_link() -> None:
    """Test that extensions, anchors and aliases are stripped from link targets."""
    assert normalize_link("Folder/Note.md") == "folder/note"
    assert normalize_link("Note#Heading") == "note"
    assert normalize_link(" Note|alias ") == "note"
    assert normalize_link("Note.md#Heading|alias") == "note"
    assert normalize_link("Note.md|alias") == "note"


def test_link_matches_id_or_stem() -> None:
    """Test that a link matches either the full note id or its file name."""
    note = Note(id="notes/Deep Work.md")

    assert link_matches("Deep Work", note)
    assert link_matches("notes/deep work", note)
    assert link_matches("deep work#Rules", note)
    assert not link_matches("Shallow Work", note)
    assert not link_matches("", note)


def test_extract_link_context_limits_lines() -> None:
    """Test that at most three collapsed lines are returned."""
    target = Note(id="target.md")
    content = "\n".join(f"line {i}   with   [[target]]" for i in range(5))

    context = extract_link_context(content, target)

    assert context == [f"line {i} with [[target]]" for i in range(3)]


def test_extract_link_context_truncates_long_lines() -> None:
    target = Note(id="target.md")
    content = "x" * 300 + " [[target]]"

    context = extract_link_context(content, target)

    assert len(context) == 1
    assert len(context[0]) == 200


def test_bidirectional_relationship(walking_vault: InMemoryVault) -> None:
    """Test that mutual links become a single bidirectional edge of strength 1.0."""
    notes = _by_id(walking_vault.notes)
    builder = RelationshipGraphBuilder()

    relationships = builder.detect_relationships(notes["notes/a.md"], walking_vault.notes)

    bidirectional = [edge for edge in relationships.backlinks if edge.kind == "bidirectional"]
    assert [edge.target_id for edge in bidirectional] == ["notes/b.md"]
    assert bidirectional[0].strength == 1.0
    assert bidirectional[0].context == ["Slow attention. Back to [[a|the walk]]."]
    assert "notes/b.md" not in [edge.target_id for edge in relationships.wikilinks]


def test_backlink_without_return_link(walking_vault: InMemoryVault) -> None:
    """Test that an incoming link without a return link is a plain backlink."""
    notes = _by_id(walking_vault.notes)
    builder = RelationshipGraphBuilder()

    relationships = builder.detect_relationships(notes["notes/a.md"], walking_vault.notes)

    backlink = next(edge for edge in relationships.backlinks if edge.target_id == "notes/c.md")
    assert backlink.kind == "backlink"
    assert backlink.strength == 0.8
    assert backlink.context == ["Inspired by [[a]] and nothing else."]


def test_wikilink_relationship() -> None:
    """Test that an outbound link without a backlink is a wikilink edge."""
    vault = InMemoryVault(
        [
            Note(id="source.md", content="Read [[Target]] today."),
            Note(id="Target.md", content="Nothing here."),
        ]
    )
    source = next(note for note in vault.notes if note.id == "source.md")

    relationships = RelationshipGraphBuilder().detect_relationships(source, vault.notes)

    assert relationships.backlinks == []
    assert len(relationships.wikilinks) == 1
    edge = relationships.wikilinks[0]
    assert edge.target_id == "Target.md"
    assert edge.strength == 0.8
    assert edge.context == ["Read [[Target]] today."]


def test_wikilink_with_extension_and_anchor() -> None:
    """Test that a link written as file.md#heading still matches its note."""
    vault = InMemoryVault(
        [
            Note(id="a.md", content="Start here.", outbound_links=["b.md#Intro"]),
            Note(id="b.md", content="Intro section."),
        ]
    )
    source = next(note for note in vault.notes if note.id == "a.md")
    target = next(note for note in vault.notes if note.id == "b.md")

    relationships = RelationshipGraphBuilder().detect_relationships(source, vault.notes)

    assert target.backlinks == ["a.md"]
    assert [edge.target_id for edge in relationships.wikilinks] == ["b.md"]


def test_identical_tags_strength() -> None:
    """Test that identical tag sets score 0.3 + 1.0 * 0.4."""
    first = Note(id="first.md", tags=["walking", "thinking"])
    second = Note(id="second.md", tags=["thinking", "walking"])

    relationships = RelationshipGraphBuilder().detect_relationships(first, [first, second])

    assert len(relationships.shared_tags) == 1
    edge = relationships.shared_tags[0]
    assert edge.strength == pytest.approx(0.7)
    assert sorted(edge.context) == ["#thinking", "#walking"]


def test_partial_tag_overlap_strength() -> None:
    """Test that shared-tag strength follows the Jaccard similarity."""
    first = Note(id="first.md", tags=["a", "b"])
    second = Note(id="second.md", tags=["b", "c"])

    relationships = RelationshipGraphBuilder().detect_relationships(first, [first, second])

    assert relationships.shared_tags[0].strength == pytest.approx(0.3 + 0.4 / 3)


def test_source_never_relates_to_itself() -> None:
    note = Note(id="self.md", content="I link to [[self]].", tags=["solo"], backlinks=["self.md"])

    relationships = RelationshipGraphBuilder().detect_relationships(note, [note])

    assert relationships.total_count == 0
    assert relationships.strongest == []


def test_strongest_sorted_and_capped() -> None:
    """Test that strongest holds the ten strongest edges, strongest first."""
    source = Note(
        id="hub.md",
        content=" ".join(f"[[linked-{i}]]" for i in range(4)),
        tags=["shared"],
    )
    linked = [Note(id=f"linked-{i}.md") for i in range(4)]
    tagged = [Note(id=f"tagged-{i}.md", tags=["shared", f"extra-{i}"]) for i in range(10)]
    vault = InMemoryVault([source, *linked, *tagged])
    hub = next(note for note in vault.notes if note.id == "hub.md")

    relationships = RelationshipGraphBuilder().detect_relationships(hub, vault.notes)

    assert relationships.total_count == 14
    assert len(relationships.strongest) == 10
    strengths = [edge.strength for edge in relationships.strongest]
    assert strengths == sorted(strengths, reverse=True)
    assert [edge.target_id for edge in relationships.strongest[:4]] == [
        f"linked-{i}.md" for i in range(4)
    ]


def test_notes_without_links_or_tags() -> None:
    """Test that bare notes produce no edges and no errors."""
    notes = [Note(id="one.md"), Note(id="two.md")]

    batch = RelationshipGraphBuilder().detect_relationships_batch(notes)

    assert set(batch) == {"one.md", "two.md"}
    assert all(relationships.total_count == 0 for relationships in batch.values())


def test_edge_lists_are_disjoint(walking_vault: InMemoryVault) -> None:
    """Test that no target appears in both the backlink and wikilink lists."""
    batch = RelationshipGraphBuilder().detect_relationships_batch(walking_vault.notes)

    for relationships in batch.values():
        backlink_targets = {edge.target_id for edge in relationships.backlinks}
        wikilink_targets = {edge.target_id for edge in relationships.wikilinks}
        assert not backlink_targets & wikilink_targets
