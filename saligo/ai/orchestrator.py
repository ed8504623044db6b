"""Caching, rate limiting and validation around provider calls."""

from typing import Any, Callable, TypeVar

from loguru import logger
from pydantic import BaseModel

from saligo.ai import prompts
from saligo.ai.cache import CacheStats, ResponseCache, make_cache_key
from saligo.ai.parsing import Invalid
from saligo.ai.prompts import Prompt
from saligo.ai.providers.base import Operation, ProviderAdapter
from saligo.ai.rate_limiter import SlidingWindowRateLimiter
from saligo.ai.schemas import (
    FindCentersPayload,
    SeedCentersPayload,
    SuggestExpansionsPayload,
    UnityPayload,
    WholenessPayload,
)
from saligo.ai.transport import ProviderResponse
from saligo.config import Settings
from saligo.domain.centers import (
    CenterFindingResult,
    CostEstimate,
    ExpansionPrompt,
    TextCenter,
    TokenUsage,
    UnityCheck,
    WholenessAnalysis,
)
from saligo.domain.context import CenterFindingContext
from saligo.errors import ErrorCode, SaligoError

P = TypeVar("P", bound=BaseModel)
R = TypeVar("R")

MIN_SEEDS = 2


def usage_from(response: ProviderResponse) -> TokenUsage:
    prompt_tokens = response.usage.input_tokens
    completion_tokens = response.usage.output_tokens
    return TokenUsage(
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        total_tokens=prompt_tokens + completion_tokens,
    )


class AIOrchestrator:
    """Runs every provider operation through validate, cache, rate limit and delegate.

    A cache hit returns before the rate limiter is consulted, so repeated
    requests never count against the limit and never reach the network.
    Each instance owns its cache and limiter.
    """

    def __init__(
        self,
        adapter: ProviderAdapter,
        *,
        cache: ResponseCache | None = None,
        rate_limiter: SlidingWindowRateLimiter | None = None,
    ):
        self.adapter = adapter
        self.cache = cache if cache is not None else ResponseCache()
        self.rate_limiter = rate_limiter if rate_limiter is not None else SlidingWindowRateLimiter()

    @classmethod
    def from_settings(cls, settings: Settings, adapter: ProviderAdapter) -> "AIOrchestrator":
        return cls(
            adapter,
            cache=ResponseCache(
                ttl_seconds=settings.cache_ttl_seconds, enabled=settings.cache_enabled
            ),
            rate_limiter=SlidingWindowRateLimiter(
                max_requests=settings.max_requests_per_minute,
                enabled=settings.rate_limit_enabled,
            ),
        )

    async def find_centers(self, text: str, context: str | None = None) -> list[TextCenter]:
        """Find structural pivots in a piece of prose.

        Args:
            text: Text to analyze
            context: Optional surrounding paragraphs

        Returns:
            Centers with positions and paragraph indexes
        """
        if not text or not text.strip():
            raise self._invalid_request(Operation.FIND_CENTERS, "Cannot find centers in empty text")

        return await self._execute(
            Operation.FIND_CENTERS,
            {"text": text, "context": context},
            prompts.find_centers_prompt(text, context),
            FindCentersPayload,
            lambda payload, _: payload.to_centers(text),
        )

    async def suggest_expansions(
        self, center: TextCenter | None, document_context: str | None = None
    ) -> list[ExpansionPrompt]:
        """Suggest ways to develop content around a center.

        Args:
            center: Center to expand around
            document_context: Optional surrounding text

        Returns:
            Expansion prompts, highest priority first
        """
        if center is None or not center.text.strip():
            raise self._invalid_request(
                Operation.SUGGEST_EXPANSIONS, "A center with non-empty text is required"
            )

        return await self._execute(
            Operation.SUGGEST_EXPANSIONS,
            {"center_id": center.id, "text": center.text, "context": document_context},
            prompts.suggest_expansions_prompt(center, document_context),
            SuggestExpansionsPayload,
            lambda payload, _: payload.to_prompts(center.id),
        )

    async def analyze_wholeness(self, document: str) -> WholenessAnalysis:
        if not document or not document.strip():
            raise self._invalid_request(Operation.ANALYZE_WHOLENESS, "Cannot analyze empty document")

        return await self._execute(
            Operation.ANALYZE_WHOLENESS,
            {"document": document},
            prompts.analyze_wholeness_prompt(document),
            WholenessPayload,
            lambda payload, _: payload.to_analysis(),
        )

    async def check_paragraph_unity(self, paragraph: str) -> UnityCheck:
        if not paragraph or not paragraph.strip():
            raise self._invalid_request(
                Operation.CHECK_UNITY, "Cannot check unity of empty paragraph"
            )

        return await self._execute(
            Operation.CHECK_UNITY,
            {"paragraph": paragraph},
            prompts.check_unity_prompt(paragraph),
            UnityPayload,
            lambda payload, _: payload.to_unity_check(),
        )

    async def find_centers_from_seeds(self, context: CenterFindingContext) -> CenterFindingResult:
        """Discover thematic centers across anonymized seed notes.

        Connected note ids in the result are the anonymized seed ids of the context.
        """
        if len(context.seeds) < MIN_SEEDS:
            raise self._invalid_request(
                Operation.FIND_CENTERS_FROM_SEEDS,
                f"Need at least {MIN_SEEDS} seeds to find centers, got {len(context.seeds)}",
                seed_count=len(context.seeds),
            )
        return await self._discover(Operation.FIND_CENTERS_FROM_SEEDS, context)

    async def discover_centers_from_moc(self, context: CenterFindingContext) -> CenterFindingResult:
        """Discover thematic centers across the notes of a MOC, using its structure."""
        if context.moc is None or not context.seeds:
            raise self._invalid_request(
                Operation.DISCOVER_CENTERS_FROM_MOC,
                "MOC discovery needs a MOC context and at least one note",
                seed_count=len(context.seeds),
            )
        return await self._discover(Operation.DISCOVER_CENTERS_FROM_MOC, context)

    def estimate_cost(self, operation: Operation, text: str) -> CostEstimate:
        return self.adapter.estimate_cost(operation, text)

    def clear_cache(self) -> None:
        self.cache.clear()

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def dispose(self) -> None:
        self.clear_cache()
        logger.debug("AI orchestrator disposed")

    async def _discover(
        self, operation: Operation, context: CenterFindingContext
    ) -> CenterFindingResult:
        seed_count = len(context.seeds)
        if seed_count > 10 and operation == Operation.FIND_CENTERS_FROM_SEEDS:
            logger.warning(
                f"{seed_count} seeds may dilute the analysis, consider filtering to the most relevant"
            )
        logger.debug(
            f"Sending {seed_count} seeds, about "
            f"{self.adapter.estimate_seed_prompt_tokens(seed_count)} prompt tokens"
        )

        def to_result(payload: SeedCentersPayload, response: ProviderResponse) -> CenterFindingResult:
            usage = usage_from(response)
            return CenterFindingResult(
                centers=payload.to_centers(),
                usage=usage,
                estimated_cost=self.adapter.usage_cost(usage),
                provider=self.adapter.name,
            )

        result = await self._execute(
            operation,
            {"context": context},
            prompts.seed_centers_prompt(context),
            SeedCentersPayload,
            to_result,
        )
        logger.info(
            f"Found {len(result.centers)} centers across {seed_count} seeds "
            f"(estimated cost ${result.estimated_cost:.4f})"
        )
        return result

    async def _execute(
        self,
        operation: Operation,
        params: dict[str, Any],
        prompt: Prompt,
        schema: type[P],
        convert: Callable[[P, ProviderResponse], R],
    ) -> R:
        key, source = make_cache_key(operation.value, params)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Returning cached result for {operation.value}")
            return cached

        try:
            self.rate_limiter.check()
            response = await self.adapter.send(self.adapter.build_request(prompt))
        except SaligoError as e:
            e.details.setdefault("operation", operation.value)
            raise

        result = self.adapter.parse_response(response, schema)
        if isinstance(result, Invalid):
            error = result.to_error(provider=self.adapter.name)
            error.details["operation"] = operation.value
            logger.error(f"{operation.value} returned an invalid response: {result.message}")
            raise error

        value = convert(result.value, response)
        self.cache.set(key, value, source)
        return value

    def _invalid_request(self, operation: Operation, message: str, **counts: int) -> SaligoError:
        logger.warning(f"Rejected {operation.value} request: {message}")
        return SaligoError(
            ErrorCode.INVALID_REQUEST,
            message,
            provider=self.adapter.name,
            details={"operation": operation.value, **counts},
        )
