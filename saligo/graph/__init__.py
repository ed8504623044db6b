"""Relationship graph, tag statistics and clustering over notes."""

from saligo.graph.clusters import ClusterFinder
from saligo.graph.relationships import RelationshipGraphBuilder
from saligo.graph.tag_index import TagCoOccurrenceIndex, filter_by_tags, format_date_range

__all__ = [
    "ClusterFinder",
    "RelationshipGraphBuilder",
    "TagCoOccurrenceIndex",
    "filter_by_tags",
    "format_date_range",
]
