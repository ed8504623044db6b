"""Tests for prompt construction."""

from saligo.ai.prompts import format_seed, seed_centers_prompt
from saligo.domain.context import CenterFindingContext, SeedContext


def test_format_seed() -> None:
    seed = SeedContext(
        id="seed-3",
        content="Fog over the river.",
        tags=["walking", "photos"],
        created=1_709_640_000,
        backlink_count=2,
        has_photo=True,
        photo_caption="Morning fog",
    )

    assert format_seed(seed) == (
        "seed-3:\n"
        "Content: Fog over the river.\n"
        "Tags: walking, photos\n"
        "Created: 2024-03-05\n"
        "Photo: Morning fog\n"
        "Backlinks: 2"
    )


def test_format_seed_without_content_or_photo() -> None:
    text = format_seed(SeedContext(id="seed-1", content="", created=0))

    assert "Content: [No text content]" in text
    assert "Photo:" not in text
    assert "Backlinks:" not in text


def test_format_seed_dates() -> None:
    """Test that millisecond and out-of-range creation times still format."""
    in_milliseconds = format_seed(SeedContext(id="seed-1", content="x", created=1_709_640_000_000))
    out_of_range = format_seed(SeedContext(id="seed-2", content="x", created=1e20))

    assert "Created: 2024-03-05" in in_milliseconds
    assert "Created: unknown" in out_of_range


def test_seed_prompt_defaults_to_two_to_four_centers() -> None:
    seeds = [SeedContext(id=f"seed-{i}", content="x", created=0) for i in (1, 2)]

    prompt = seed_centers_prompt(CenterFindingContext(seeds=seeds))

    assert "2-4" in prompt.system
    assert "2-4" in prompt.user
    assert "MOC CONTEXT" not in prompt.user
