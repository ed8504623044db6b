"""Tests for clustering strongly connected notes."""

from saligo.domain.note import Note
from saligo.graph.clusters import ClusterFinder
from saligo.vault.memory import InMemoryVault


def test_clusters_from_links_and_tags(walking_vault: InMemoryVault) -> None:
    """Test that linked and tag-sharing notes form one cluster, isolated notes none."""
    clusters = ClusterFinder().find_clusters(walking_vault.notes, min_strength=0.5)

    assert len(clusters) == 1
    assert sorted(clusters[0].note_ids) == [
        "notes/a.md",
        "notes/b.md",
        "notes/c.md",
        "notes/d.md",
    ]


def test_every_cluster_has_at_least_two_notes(walking_vault: InMemoryVault) -> None:
    for min_strength in (0.0, 0.5, 0.75, 0.9, 1.0):
        clusters = ClusterFinder().find_clusters(walking_vault.notes, min_strength=min_strength)
        assert all(len(cluster) >= 2 for cluster in clusters)


def test_higher_threshold_never_increases_coverage(walking_vault: InMemoryVault) -> None:
    """Test that raising min_strength never clusters more notes."""
    finder = ClusterFinder()
    covered = []
    for min_strength in (0.3, 0.5, 0.75, 0.9, 1.0):
        clusters = finder.find_clusters(walking_vault.notes, min_strength=min_strength)
        covered.append(sum(len(cluster) for cluster in clusters))

    assert covered == sorted(covered, reverse=True)


def test_only_bidirectional_edges_at_full_strength(walking_vault: InMemoryVault) -> None:
    clusters = ClusterFinder().find_clusters(walking_vault.notes, min_strength=1.0)

    assert [sorted(cluster.note_ids) for cluster in clusters] == [["notes/a.md", "notes/b.md"]]


def test_disconnected_notes_have_no_clusters() -> None:
    notes = [Note(id=f"{i}.md", content="alone", tags=[f"tag-{i}"]) for i in range(4)]

    assert ClusterFinder().find_clusters(notes) == []


def test_separate_components() -> None:
    """Test that two unconnected pairs become two clusters in note order."""
    vault = InMemoryVault(
        [
            Note(id="x1.md", content="[[x2]]"),
            Note(id="y1.md", content="[[y2]]"),
            Note(id="x2.md"),
            Note(id="y2.md"),
        ]
    )

    clusters = ClusterFinder().find_clusters(vault.notes)

    assert [cluster.note_ids for cluster in clusters] == [["x1.md", "x2.md"], ["y1.md", "y2.md"]]
