"""Grouping strongly connected notes into clusters."""

import logging

from saligo.domain.note import Note
from saligo.domain.relationships import Cluster
from saligo.graph.relationships import RelationshipGraphBuilder

logger = logging.getLogger(__name__)


class ClusterFinder:
    """Finds connected components over each note's strongest relationships."""

    def __init__(self, builder: RelationshipGraphBuilder | None = None):
        self.builder = builder or RelationshipGraphBuilder()

    def find_clusters(self, notes: list[Note], min_strength: float = 0.5) -> list[Cluster]:
        """Find clusters of interconnected notes.

        Args:
            notes: Notes to cluster
            min_strength: Minimum relationship strength for an edge

        Returns:
            Clusters of two or more notes, in order of their first note
        """
        adjacency: dict[str, set[str]] = {note.id: set() for note in notes}
        by_id = {note.id: note for note in notes}

        for note in notes:
            relationships = self.builder.detect_relationships(note, notes)
            for edge in relationships.strongest:
                if edge.strength >= min_strength and edge.target_id in adjacency:
                    adjacency[note.id].add(edge.target_id)
                    adjacency[edge.target_id].add(note.id)

        visited: set[str] = set()
        clusters: list[Cluster] = []

        for note in notes:
            if note.id in visited:
                continue

            members: list[Note] = []
            stack = [note.id]
            while stack:
                current = stack.pop()
                if current in visited:
                    continue
                visited.add(current)
                members.append(by_id[current])
                # Reverse-sorted so neighbours are visited in id order
                stack.extend(
                    n for n in sorted(adjacency[current], reverse=True) if n not in visited
                )

            if len(members) > 1:
                clusters.append(Cluster(notes=members))

        logger.info(f"Found {len(clusters)} clusters among {len(notes)} notes")
        return clusters
