from typing import Callable

import pytest

from saligo.ai.cache import ResponseCache
from saligo.ai.orchestrator import AIOrchestrator
from saligo.ai.providers import ClaudeAdapter
from saligo.ai.rate_limiter import SlidingWindowRateLimiter
from saligo.ai.retry import RetryPolicy
from saligo.domain.note import Note
from saligo.vault.memory import InMemoryVault
from tests.fakes import FakeClock, FakeSleep, FakeTransport, seed_center, seed_centers_reply

DAY = 24 * 60 * 60


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def default_reply() -> str:
    return seed_centers_reply(
        seed_center("Attention as craft", "medium", ["seed-2"]),
        seed_center("Walking as thinking", "strong", ["seed-1", "seed-2"], "Write the essay"),
    )


@pytest.fixture
def make_orchestrator(
    fake_clock: FakeClock, fake_sleep: FakeSleep
) -> Callable[..., tuple[AIOrchestrator, FakeTransport]]:
    """Factory for an orchestrator backed by a scripted transport."""

    def _make(
        replies: list,
        *,
        max_requests: int = 60,
        max_attempts: int = 3,
        cache_enabled: bool = True,
    ) -> tuple[AIOrchestrator, FakeTransport]:
        transport = FakeTransport(replies)
        adapter = ClaudeAdapter(
            transport=transport,
            policy=RetryPolicy(max_attempts=max_attempts, initial_delay=1.0),
            sleep=fake_sleep,
        )
        orchestrator = AIOrchestrator(
            adapter,
            cache=ResponseCache(enabled=cache_enabled, clock=fake_clock),
            rate_limiter=SlidingWindowRateLimiter(max_requests=max_requests, clock=fake_clock),
        )
        return orchestrator, transport

    return _make


@pytest.fixture
def walking_notes() -> list[Note]:
    """Small vault: a links to b and back, c links to a, d shares tags with a."""
    return [
        Note(
            id="notes/a.md",
            content="# Walking\nLong walks clear my head. See [[b]].",
            tags=["#walking", "thinking"],
            created=1_700_000_000,
            modified=1_700_000_000 + DAY,
        ),
        Note(
            id="notes/b.md",
            content="Slow attention. Back to [[a|the walk]].",
            tags=["attention"],
            created=1_700_000_000 + DAY,
            modified=1_700_000_000 + 2 * DAY,
        ),
        Note(
            id="notes/c.md",
            content="Morning routine.\nInspired by [[a]] and nothing else.",
            tags=["routine"],
            created=1_700_000_000 + 3 * DAY,
            modified=1_700_000_000 + 3 * DAY,
        ),
        Note(
            id="notes/d.md",
            content="Thinking on foot.",
            tags=["Walking", "thinking"],
            created=1_700_000_000 + 4 * DAY,
            modified=1_700_000_000 + 5 * DAY,
        ),
        Note(id="notes/e.md", content="Unrelated grocery list.", tags=["errands"]),
    ]


@pytest.fixture
def walking_vault(walking_notes: list[Note]) -> InMemoryVault:
    return InMemoryVault(walking_notes)


def make_moc_vault(note_count: int, broken_links: int = 0, headings: bool = True) -> InMemoryVault:
    """Vault with a MOC linking to note_count notes plus some links to missing notes."""
    notes = [
        Note(
            id=f"garden/note-{i}.md",
            content=f"Thoughts number {i} about gardens.",
            tags=["garden"],
            created=1_700_000_000 + i * DAY,
        )
        for i in range(1, note_count + 1)
    ]
    lines = ["---", "type: moc", "---"]
    if headings:
        lines.append("# Garden MOC")
        lines.append("## Soil")
    lines.extend(f"- [[note-{i}]]" for i in range(1, note_count + 1))
    if headings:
        lines.append("## Missing")
    lines.extend(f"- [[missing-{i}]]" for i in range(1, broken_links + 1))
    moc = Note(id="garden/Garden MOC.md", content="\n".join(lines), tags=["moc"])
    return InMemoryVault([moc, *notes])


@pytest.fixture
def moc_vault_factory() -> Callable[..., InMemoryVault]:
    return make_moc_vault
