"""Tag frequency and co-occurrence statistics over a set of notes."""

import logging
import math
from datetime import datetime, timezone

from saligo.domain.note import Note, epoch_seconds, normalize_tag
from saligo.domain.tags import DateRange, TagFilterMode, TagStats

logger = logging.getLogger(__name__)

COMBINATION_RELATED_LIMIT = 3
COMBINATION_LIMIT = 10


def filter_by_tags(notes: list[Note], tags: list[str], mode: TagFilterMode = "any") -> list[Note]:
    """Filter notes by tag membership.

    Args:
        notes: Notes to filter
        tags: Tags to match; an empty list returns the notes unchanged
        mode: "any" keeps notes with at least one tag, "all" keeps notes with every tag

    Returns:
        Matching notes in their original order
    """
    wanted = [normalize_tag(tag) for tag in tags]
    if not wanted:
        return notes

    if mode == "all":
        return [note for note in notes if all(tag in note.tags for tag in wanted)]
    return [note for note in notes if any(tag in note.tags for tag in wanted)]


def format_date_range(date_range: DateRange) -> str:
    """Format a date range as "Used from X to Y", "Used on X" or "No dates available"."""
    if math.isinf(date_range.earliest) or date_range.latest == 0:
        return "No dates available"

    start = _format_day(date_range.earliest)
    end = _format_day(date_range.latest)
    if start == end:
        return f"Used on {start}"
    return f"Used from {start} to {end}"


def _format_day(timestamp: float) -> str:
    try:
        day = datetime.fromtimestamp(epoch_seconds(timestamp), tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return "an unknown date"
    return f"{day:%b} {day.day}, {day.year}"


class TagCoOccurrenceIndex:
    """Per-tag statistics computed in a single pass over the notes."""

    def __init__(self, stats: list[TagStats]):
        self.stats = stats
        self._by_tag = {stat.tag: stat for stat in stats}

    @classmethod
    def from_notes(cls, notes: list[Note]) -> "TagCoOccurrenceIndex":
        """Build the index from notes.

        Args:
            notes: Notes with normalized tags

        Returns:
            Index whose stats are ordered by count, most common first
        """
        by_tag: dict[str, TagStats] = {}

        for note in notes:
            for tag in note.tags:
                if tag not in by_tag:
                    by_tag[tag] = TagStats(tag=tag)
                stats = by_tag[tag]

                stats.count += 1
                stats.note_ids.append(note.id)
                stats.date_range.earliest = min(stats.date_range.earliest, note.created)
                stats.date_range.latest = max(stats.date_range.latest, note.modified)

                for other in note.tags:
                    if other != tag:
                        stats.co_occurrence[other] = stats.co_occurrence.get(other, 0) + 1

        ordered = sorted(by_tag.values(), key=lambda stat: stat.count, reverse=True)
        logger.debug(f"Indexed {len(ordered)} tags across {len(notes)} notes")
        return cls(ordered)

    def get(self, tag: str) -> TagStats | None:
        return self._by_tag.get(normalize_tag(tag))

    def get_related_tags(self, tag: str | TagStats, limit: int = 5) -> list[tuple[str, int]]:
        """Return the tags that most often appear together with a tag.

        Args:
            tag: Tag name or its stats
            limit: Maximum number of related tags

        Returns:
            (tag, count) pairs, count descending, ties in first-seen order
        """
        stats = tag if isinstance(tag, TagStats) else self.get(tag)
        if stats is None:
            return []
        related = sorted(stats.co_occurrence.items(), key=lambda item: item[1], reverse=True)
        return related[:limit]

    def co_occurrence_percentage(self, tag: str, related_tag: str) -> int:
        """Percentage (0-100) of the tag's notes that also carry the related tag."""
        stats = self.get(tag)
        if stats is None or stats.count == 0:
            return 0
        together = stats.co_occurrence.get(normalize_tag(related_tag), 0)
        return math.floor(together / stats.count * 100 + 0.5)

    def get_suggested_combinations(
        self, min_co_occurrence: int = 3, limit: int = COMBINATION_LIMIT
    ) -> list[list[str]]:
        """Suggest tag pairs that frequently appear together.

        Pairs are drawn from each tag's three most related tags, deduplicated
        by their sorted form and ranked by the combined frequency of both tags.
        """
        suggestions: list[list[str]] = []
        seen: set[str] = set()

        for stats in self.stats:
            for related, count in self.get_related_tags(stats, COMBINATION_RELATED_LIMIT):
                if count < min_co_occurrence:
                    continue
                combo = sorted([stats.tag, related])
                key = "|".join(combo)
                if key not in seen:
                    seen.add(key)
                    suggestions.append(combo)

        def combined_count(combo: list[str]) -> int:
            return sum(self._by_tag[tag].count for tag in combo if tag in self._by_tag)

        return sorted(suggestions, key=combined_count, reverse=True)[:limit]

    def __len__(self) -> int:
        return len(self.stats)
