"""Turning a set of notes into ranked, coverage-scored centers."""

import asyncio
import math
import time
from enum import Enum
from typing import Awaitable, TypeVar

from loguru import logger
from pydantic import BaseModel

from saligo.ai.orchestrator import AIOrchestrator
from saligo.discovery.context import build_context
from saligo.discovery.ranking import compute_coverage, map_seed_ids, rank_centers
from saligo.domain.centers import CenterDiscoveryResult, CenterFindingResult
from saligo.domain.moc import MOCNote, MOCValidationResult, NoteCount, ValidationWarning
from saligo.domain.note import Note
from saligo.errors import ErrorCode, SaligoError
from saligo.vault.base import LinkResolver, NoteReader
from saligo.vault.moc_parser import parse_moc

MIN_SEEDS = 2
MIN_MOC_NOTES = 5
MAX_MOC_NOTES = 50
LARGE_MOC_NOTES = 30

# MOC cost estimate constants, USD per 1K tokens
COST_PER_1K_INPUT_TOKENS = 0.003
COST_PER_1K_OUTPUT_TOKENS = 0.015
AVG_TOKENS_PER_NOTE = 650
SYSTEM_PROMPT_TOKENS = 500
AVG_OUTPUT_TOKENS = 800

T = TypeVar("T")


class DiscoveryState(str, Enum):
    VALIDATING = "validating"
    CONTEXT_BUILDING = "context-building"
    AWAITING_PROVIDER = "awaiting-provider"
    RANKING = "ranking"
    DONE = "done"
    FAILED = "failed"


TRANSITIONS = {
    DiscoveryState.VALIDATING: DiscoveryState.CONTEXT_BUILDING,
    DiscoveryState.CONTEXT_BUILDING: DiscoveryState.AWAITING_PROVIDER,
    DiscoveryState.AWAITING_PROVIDER: DiscoveryState.RANKING,
    DiscoveryState.RANKING: DiscoveryState.DONE,
}


class DiscoveryRun(BaseModel):
    """State of a single discovery request."""

    source: str
    state: DiscoveryState = DiscoveryState.VALIDATING
    history: list[DiscoveryState] = [DiscoveryState.VALIDATING]
    error_code: ErrorCode | None = None

    def advance(self, state: DiscoveryState) -> None:
        if TRANSITIONS.get(self.state) != state:
            raise ValueError(f"Cannot move from {self.state.value} to {state.value}")
        self.state = state
        self.history.append(state)

    def fail(self, code: ErrorCode | None = None) -> None:
        if self.state in (DiscoveryState.DONE, DiscoveryState.FAILED):
            raise ValueError(f"Cannot fail a run that is already {self.state.value}")
        self.state = DiscoveryState.FAILED
        self.error_code = code
        self.history.append(DiscoveryState.FAILED)


def estimate_moc_cost(note_count: int) -> float:
    input_tokens = SYSTEM_PROMPT_TOKENS + note_count * AVG_TOKENS_PER_NOTE
    return (
        input_tokens / 1000 * COST_PER_1K_INPUT_TOKENS
        + AVG_OUTPUT_TOKENS / 1000 * COST_PER_1K_OUTPUT_TOKENS
    )


def _validation_warnings(readable: int, broken: int, has_headings: bool) -> list[ValidationWarning]:
    warnings = []
    total = readable + broken

    if readable == 0:
        warnings.append(
            ValidationWarning(
                severity="high",
                type="too_few_notes",
                message="MOC has no readable notes. Cannot proceed with analysis.",
                suggestion="Fix broken links or add valid note links to the MOC.",
            )
        )
    elif readable < MIN_MOC_NOTES:
        warnings.append(
            ValidationWarning(
                severity="high",
                type="too_few_notes",
                message=f"MOC has only {readable} readable notes. "
                f"Centers may be weak with fewer than {MIN_MOC_NOTES} notes.",
                suggestion="Add more related notes to your MOC for stronger center discovery.",
            )
        )
    elif readable < 10:
        warnings.append(
            ValidationWarning(
                severity="medium",
                type="too_few_notes",
                message=f"MOC has {readable} readable notes. Optimal range is 10-25 notes.",
                suggestion="Consider adding a few more related notes for better results.",
            )
        )

    if readable > LARGE_MOC_NOTES:
        warnings.append(
            ValidationWarning(
                severity="high",
                type="too_many_notes",
                message=f"MOC has {readable} notes. Analysis may be slow and expensive.",
                suggestion="Consider splitting the MOC into several smaller ones.",
            )
        )
    elif readable > 25:
        warnings.append(
            ValidationWarning(
                severity="medium",
                type="too_many_notes",
                message=f"MOC has {readable} notes. This is near the upper limit ({LARGE_MOC_NOTES}).",
            )
        )

    if broken > 0:
        percentage = math.floor(broken / total * 100 + 0.5)
        severity = "high" if percentage > 30 else "medium" if percentage > 10 else "low"
        warnings.append(
            ValidationWarning(
                severity=severity,
                type="broken_links",
                message=f"{broken} of {total} links are broken ({percentage}%).",
                suggestion=(
                    "Fix broken links or remove them from the MOC before analysis."
                    if broken > 5
                    else "Broken links will be skipped during analysis."
                ),
            )
        )

    if not has_headings and readable > 10:
        warnings.append(
            ValidationWarning(
                severity="low",
                type="no_structure",
                message="MOC has no headings. Structural organization helps center discovery.",
                suggestion="Consider organizing notes under headings.",
            )
        )

    return warnings


class CenterDiscoveryCoordinator:
    """Validates a discovery request, builds its context, and ranks the centers found.

    Args:
        orchestrator: Runs the provider call
        reader: Reads notes by id, needed for MOC discovery
        resolver: Resolves links to note ids, needed for MOC discovery
    """

    def __init__(
        self,
        orchestrator: AIOrchestrator,
        *,
        reader: NoteReader | None = None,
        resolver: LinkResolver | None = None,
    ):
        self.orchestrator = orchestrator
        self.reader = reader
        self.resolver = resolver
        self.last_run: DiscoveryRun | None = None

    async def discover_from_seeds(self, notes: list[Note]) -> CenterDiscoveryResult:
        """Discover centers across an ad-hoc set of seed notes.

        Args:
            notes: At least two notes

        Returns:
            Ranked centers whose connected ids are the given notes' ids
        """
        started = time.monotonic()
        source = f"{len(notes)} seed notes"
        run = self._start(source)

        try:
            if len(notes) < MIN_SEEDS:
                raise SaligoError(
                    ErrorCode.INSUFFICIENT_SEEDS,
                    f"Need at least {MIN_SEEDS} seeds to find centers, got {len(notes)}. "
                    "Consider gathering more seeds first.",
                    details={"seed_count": len(notes)},
                )

            run.advance(DiscoveryState.CONTEXT_BUILDING)
            context, seed_ids = build_context(notes)

            run.advance(DiscoveryState.AWAITING_PROVIDER)
            found = await self._call_provider(
                self.orchestrator.find_centers_from_seeds(context), source, len(notes)
            )

            run.advance(DiscoveryState.RANKING)
            centers = rank_centers(map_seed_ids(found.centers, seed_ids))
        except SaligoError as e:
            run.fail(e.code)
            raise
        except Exception:
            run.fail()
            raise

        run.advance(DiscoveryState.DONE)
        return CenterDiscoveryResult(
            centers=centers,
            source=source,
            note_ids=[note.id for note in notes],
            usage=found.usage,
            estimated_cost=found.estimated_cost,
            duration_ms=self._elapsed_ms(started),
        )

    async def discover_from_moc(
        self,
        moc_id: str,
        min_centers: int | None = None,
        max_centers: int | None = None,
    ) -> CenterDiscoveryResult:
        """Discover centers across the notes a MOC links to.

        Args:
            moc_id: Id of the MOC note
            min_centers: Minimum number of centers to ask for
            max_centers: Maximum number of centers to ask for

        Returns:
            Ranked centers with coverage over the MOC's readable notes
        """
        started = time.monotonic()
        source = f'MOC "{moc_id}"'
        run = self._start(source)

        try:
            moc = await self._read_moc(moc_id)
            source = f'MOC "{moc.title}"'
            run.source = source
            if not moc.links:
                raise SaligoError(
                    ErrorCode.INVALID_MOC,
                    f"{source} has no links. A MOC must contain links to other notes.",
                    details={"link_count": 0},
                )

            resolved = self._resolve_links(moc)
            notes = await self._read_notes(list(dict.fromkeys(resolved.values())))
            self._check_moc_size(len(notes), source)

            run.advance(DiscoveryState.CONTEXT_BUILDING)
            context, seed_ids = build_context(
                notes,
                moc=moc,
                resolved_links=resolved,
                min_centers=min_centers,
                max_centers=max_centers,
            )

            run.advance(DiscoveryState.AWAITING_PROVIDER)
            found = await self._call_provider(
                self.orchestrator.discover_centers_from_moc(context), source, len(notes)
            )

            run.advance(DiscoveryState.RANKING)
            centers = rank_centers(map_seed_ids(found.centers, seed_ids))
            note_ids = [note.id for note in notes]
            coverage = compute_coverage(centers, note_ids)
        except SaligoError as e:
            run.fail(e.code)
            raise
        except Exception:
            run.fail()
            raise

        run.advance(DiscoveryState.DONE)
        logger.info(
            f"Discovered {len(centers)} centers in {source}, "
            f"covering {coverage.percentage}% of {coverage.total_notes} notes"
        )
        return CenterDiscoveryResult(
            centers=centers,
            source=source,
            note_ids=note_ids,
            coverage=coverage,
            usage=found.usage,
            estimated_cost=found.estimated_cost,
            duration_ms=self._elapsed_ms(started),
        )

    async def validate_moc(self, moc_id: str) -> MOCValidationResult:
        """Assess a MOC before analysis without calling the provider.

        Args:
            moc_id: Id of the MOC note

        Returns:
            Validation result with warnings and cost and time estimates. Each linked
            note counts once, and links back to the MOC itself are ignored.
        """
        moc = await self._read_moc(moc_id)
        resolver = self._require(self.resolver, "link resolver")

        readable_ids: set[str] = set()
        broken_paths: set[str] = set()
        for link in moc.links:
            note_id = resolver.resolve_link(link.path, moc.id)
            if not note_id:
                broken_paths.add(link.path)
            elif note_id != moc.id:
                readable_ids.add(note_id)
        readable = len(readable_ids)
        broken = len(broken_paths)

        return MOCValidationResult(
            valid=readable > 0,
            warnings=_validation_warnings(readable, broken, bool(moc.headings)),
            estimated_cost=round(estimate_moc_cost(readable), 4),
            estimated_time=math.ceil(readable * 0.05 + 4),
            note_count=NoteCount(total=readable + broken, readable=readable, broken=broken),
        )

    def _start(self, source: str) -> DiscoveryRun:
        self.last_run = DiscoveryRun(source=source)
        return self.last_run

    async def _call_provider(
        self, call: Awaitable[CenterFindingResult], source: str, note_count: int
    ) -> CenterFindingResult:
        try:
            return await call
        except SaligoError as e:
            if e.is_validation:
                raise
            raise SaligoError(
                e.code,
                f"Failed to analyze {source}: {e.message}",
                retry_after=e.retry_after,
                provider=e.provider,
                details={**e.details, "note_count": note_count},
            ) from e

    async def _read_moc(self, moc_id: str) -> MOCNote:
        reader = self._require(self.reader, "note reader")
        try:
            note = await reader.read_note(moc_id)
        except Exception as e:
            logger.warning(f"MOC {moc_id} could not be read: {e}")
            raise SaligoError(
                ErrorCode.INVALID_MOC, f'MOC "{moc_id}" could not be read'
            ) from e
        return parse_moc(note)

    def _resolve_links(self, moc: MOCNote) -> dict[str, str]:
        resolver = self._require(self.resolver, "link resolver")
        resolved: dict[str, str] = {}
        for link in moc.links:
            note_id = resolver.resolve_link(link.path, moc.id)
            if note_id and note_id != moc.id:
                resolved[link.path] = note_id
            elif not note_id:
                logger.debug(f"Skipping broken link {link.path!r} in {moc.id}")
        return resolved

    async def _read_notes(self, note_ids: list[str]) -> list[Note]:
        results = await asyncio.gather(*(self._read_or_skip(note_id) for note_id in note_ids))
        return [note for note in results if note is not None]

    async def _read_or_skip(self, note_id: str) -> Note | None:
        reader = self._require(self.reader, "note reader")
        try:
            return await reader.read_note(note_id)
        except Exception as e:
            logger.warning(f"Skipping note {note_id}, read failed: {e}")
            return None

    def _check_moc_size(self, note_count: int, source: str) -> None:
        details = {"note_count": note_count}
        if note_count == 0:
            raise SaligoError(
                ErrorCode.MOC_NO_VALID_NOTES,
                f"No readable notes found in {source}. All links may be broken.",
                details=details,
            )
        if note_count < MIN_MOC_NOTES:
            raise SaligoError(
                ErrorCode.MOC_TOO_SMALL,
                f"{source} has only {note_count} readable notes. "
                f"At least {MIN_MOC_NOTES} notes are required for meaningful center discovery.",
                details=details,
            )
        if note_count > MAX_MOC_NOTES:
            raise SaligoError(
                ErrorCode.MOC_TOO_LARGE,
                f"{source} has {note_count} notes, which exceeds the maximum of {MAX_MOC_NOTES}. "
                "Consider splitting it into several MOCs.",
                details=details,
            )
        if note_count > LARGE_MOC_NOTES:
            logger.warning(
                f"Large MOC with {note_count} notes. Analysis may take longer and cost more "
                f"(~${estimate_moc_cost(note_count):.4f})"
            )

    @staticmethod
    def _require(collaborator: T | None, name: str) -> T:
        if collaborator is None:
            raise SaligoError(
                ErrorCode.INVALID_REQUEST, f"MOC discovery needs a {name}"
            )
        return collaborator

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return int((time.monotonic() - started) * 1000)
