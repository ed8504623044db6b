import math

from loguru import logger

from saligo.domain.centers import STRENGTH_RANK, Coverage, DiscoveredCenter


def rank_centers(centers: list[DiscoveredCenter]) -> list[DiscoveredCenter]:
    """Sort centers strong > medium > weak, keeping the original order within a strength.

    Only the top-ranked center keeps its recommendation.
    """
    ranked = sorted(centers, key=lambda center: STRENGTH_RANK[center.strength], reverse=True)
    return [
        center if index == 0 else center.model_copy(update={"recommendation": None})
        for index, center in enumerate(ranked)
    ]


def map_seed_ids(
    centers: list[DiscoveredCenter], seed_ids: dict[str, str]
) -> list[DiscoveredCenter]:
    """Replace anonymized seed ids with the note ids they stand for.

    Unknown seed ids are dropped.
    """
    mapped = []
    for center in centers:
        note_ids: list[str] = []
        for seed_id in center.connected_note_ids:
            note_id = seed_ids.get(seed_id.strip().lower())
            if note_id is None:
                logger.warning(f"Center '{center.name}' references unknown seed {seed_id!r}")
            elif note_id not in note_ids:
                note_ids.append(note_id)
        mapped.append(center.model_copy(update={"connected_note_ids": note_ids}))
    return mapped


def compute_coverage(centers: list[DiscoveredCenter], note_ids: list[str]) -> Coverage:
    """Share of notes connected to at least one center, as a percentage rounded half up."""
    known = set(note_ids)
    connected = {note_id for center in centers for note_id in center.connected_note_ids}
    connected &= known

    total = len(known)
    percentage = math.floor(len(connected) / total * 100 + 0.5) if total else 0
    return Coverage(connected_notes=len(connected), total_notes=total, percentage=percentage)
