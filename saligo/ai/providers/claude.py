import asyncio
import math

from saligo.ai.parsing import ParseResult, parse_reply
from saligo.ai.prompts import Prompt
from saligo.ai.providers.base import Operation, T
from saligo.ai.retry import RetryingSender, RetryPolicy, Sleep
from saligo.ai.transport import ProviderMessage, ProviderRequest, ProviderResponse, Transport
from saligo.domain.centers import CostEstimate, TokenUsage

DEFAULT_MODEL = "claude-3-5-sonnet-20241022"
DEFAULT_MAX_TOKENS = 4096

# USD per 1M tokens
INPUT_PRICE = 3.0
OUTPUT_PRICE = 15.0

TOKENS_PER_WORD = 1.3

OUTPUT_TOKEN_ESTIMATES = {
    Operation.FIND_CENTERS: 500,
    Operation.SUGGEST_EXPANSIONS: 800,
    Operation.ANALYZE_WHOLENESS: 1500,
    Operation.CHECK_UNITY: 400,
    Operation.FIND_CENTERS_FROM_SEEDS: 800,
    Operation.DISCOVER_CENTERS_FROM_MOC: 800,
}

SEED_PROMPT_BASE_TOKENS = 600
SEED_PROMPT_TOKENS_PER_SEED = 150


class ClaudeAdapter:
    """Provider adapter for Anthropic's Claude messages API.

    Args:
        transport: Sends a single request to the API
        model: Model identifier
        max_tokens: Maximum output tokens per request
        policy: Retry policy for transient failures
        sleep: Async delay used between attempts
        attempt_timeout: Seconds before a single attempt counts as timed out
    """

    name = "claude"

    def __init__(
        self,
        *,
        transport: Transport,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        policy: RetryPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
        attempt_timeout: float | None = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.sender = RetryingSender(
            transport,
            policy or RetryPolicy(),
            provider=self.name,
            sleep=sleep,
            attempt_timeout=attempt_timeout,
        )

    def build_request(self, prompt: Prompt) -> ProviderRequest:
        return ProviderRequest(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[ProviderMessage(role="user", content=prompt.user)],
            system=prompt.system,
        )

    def parse_response(self, response: ProviderResponse, schema: type[T]) -> ParseResult:
        return parse_reply(response.text, schema)

    async def send(self, request: ProviderRequest) -> ProviderResponse:
        return await self.sender.send(request)

    def count_tokens(self, text: str) -> int:
        """Approximate token count, about 1.3 tokens per word of English text."""
        return math.ceil(len(text.split()) * TOKENS_PER_WORD)

    def estimate_cost(self, operation: Operation, text: str) -> CostEstimate:
        input_tokens = self.count_tokens(text)
        output_tokens = OUTPUT_TOKEN_ESTIMATES[operation]
        return CostEstimate(
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_usd=self._cost(input_tokens, output_tokens),
        )

    def estimate_seed_prompt_tokens(self, seed_count: int) -> int:
        return SEED_PROMPT_BASE_TOKENS + seed_count * SEED_PROMPT_TOKENS_PER_SEED

    def usage_cost(self, usage: TokenUsage) -> float:
        return self._cost(usage.prompt_tokens, usage.completion_tokens)

    def _cost(self, input_tokens: int, output_tokens: int) -> float:
        return input_tokens / 1_000_000 * INPUT_PRICE + output_tokens / 1_000_000 * OUTPUT_PRICE
