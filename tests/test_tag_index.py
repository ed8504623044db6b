"""Tests for tag statistics, co-occurrence and filtering."""

from datetime import datetime, timezone

from saligo.domain.note import Note
from saligo.domain.tags import DateRange
from saligo.graph.tag_index import TagCoOccurrenceIndex, filter_by_tags, format_date_range


def _timestamp(year: int, month: int, day: int) -> float:
    return datetime(year, month, day, 12, tzinfo=timezone.utc).timestamp()


def test_tags_are_normalized_on_notes() -> None:
    note = Note(id="n.md", tags=["#Walking", " walking ", "Deep-Work", "#"])

    assert note.tags == ["walking", "deep-work"]


def test_index_counts_and_order(walking_notes: list[Note]) -> None:
    """Test that tags are ordered by count with their note ids and co-occurrences."""
    index = TagCoOccurrenceIndex.from_notes(walking_notes)

    walking = index.get("#Walking")
    assert walking is not None
    assert walking.count == 2
    assert walking.note_ids == ["notes/a.md", "notes/d.md"]
    assert walking.co_occurrence == {"thinking": 2}
    assert index.stats[0].tag == "walking"
    assert len(index) == 5


def test_date_range_spans_created_and_modified(walking_notes: list[Note]) -> None:
    index = TagCoOccurrenceIndex.from_notes(walking_notes)

    walking = index.get("walking")
    assert walking.date_range.earliest == walking_notes[0].created
    assert walking.date_range.latest == walking_notes[3].modified


def test_related_tags_and_percentage() -> None:
    """Test related tag ranking and the rounded co-occurrence percentage."""
    notes = [
        Note(id="1.md", tags=["python", "testing"]),
        Note(id="2.md", tags=["python", "testing", "async"]),
        Note(id="3.md", tags=["python", "async"]),
        Note(id="4.md", tags=["python", "testing"]),
        Note(id="5.md", tags=["python", "packaging"]),
        Note(id="6.md", tags=["python"]),
    ]
    index = TagCoOccurrenceIndex.from_notes(notes)

    assert index.get_related_tags("python") == [("testing", 3), ("async", 2), ("packaging", 1)]
    assert index.get_related_tags("python", limit=1) == [("testing", 3)]
    # 3 of 6 python notes carry testing, 1 of 6 carries packaging (16.67%)
    assert index.co_occurrence_percentage("python", "testing") == 50
    assert index.co_occurrence_percentage("python", "packaging") == 17
    assert index.co_occurrence_percentage("unknown", "python") == 0
    assert index.get_related_tags("unknown") == []


def test_suggested_combinations() -> None:
    """Test that frequent pairs are suggested once, ranked by combined tag counts."""
    notes = [Note(id=f"py-{i}.md", tags=["python", "testing"]) for i in range(3)]
    notes += [Note(id=f"w-{i}.md", tags=["writing", "drafts"]) for i in range(4)]
    notes += [Note(id="w-extra.md", tags=["writing"])]
    notes += [Note(id="rare.md", tags=["python", "rare"])]
    index = TagCoOccurrenceIndex.from_notes(notes)

    combinations = index.get_suggested_combinations(min_co_occurrence=3)

    assert combinations == [["drafts", "writing"], ["python", "testing"]]


def test_filter_by_tags_any_and_all(walking_notes: list[Note]) -> None:
    any_match = filter_by_tags(walking_notes, ["attention", "#Routine"], mode="any")
    all_match = filter_by_tags(walking_notes, ["walking", "thinking"], mode="all")

    assert [note.id for note in any_match] == ["notes/b.md", "notes/c.md"]
    assert [note.id for note in all_match] == ["notes/a.md", "notes/d.md"]
    assert filter_by_tags(walking_notes, []) == walking_notes


def test_format_date_range() -> None:
    same_day = DateRange(earliest=_timestamp(2024, 3, 5), latest=_timestamp(2024, 3, 5))
    span = DateRange(earliest=_timestamp(2024, 3, 5), latest=_timestamp(2024, 11, 20))

    assert format_date_range(same_day) == "Used on Mar 5, 2024"
    assert format_date_range(span) == "Used from Mar 5, 2024 to Nov 20, 2024"
    assert format_date_range(DateRange()) == "No dates available"


def test_millisecond_timestamps_are_converted() -> None:
    """Test that notes stamped in milliseconds produce the same dates as seconds."""
    created = _timestamp(2024, 3, 5)
    note = Note(id="a.md", tags=["walking"], created=created * 1000, modified=created * 1000)

    walking = TagCoOccurrenceIndex.from_notes([note]).get("walking")

    assert note.created == created
    assert format_date_range(walking.date_range) == "Used on Mar 5, 2024"
    assert format_date_range(DateRange(earliest=created * 1000, latest=created * 1000)) == (
        "Used on Mar 5, 2024"
    )


def test_out_of_range_dates_do_not_raise() -> None:
    date_range = DateRange(earliest=1e20, latest=1e20)

    assert format_date_range(date_range) == "Used on an unknown date"
