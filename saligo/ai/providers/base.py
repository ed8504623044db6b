from enum import Enum
from typing import Protocol, TypeVar

from pydantic import BaseModel

from saligo.ai.parsing import ParseResult
from saligo.ai.prompts import Prompt
from saligo.ai.transport import ProviderRequest, ProviderResponse
from saligo.domain.centers import CostEstimate, TokenUsage

T = TypeVar("T", bound=BaseModel)


class Operation(str, Enum):
    FIND_CENTERS = "find-centers"
    SUGGEST_EXPANSIONS = "suggest-expansions"
    ANALYZE_WHOLENESS = "analyze-wholeness"
    CHECK_UNITY = "check-unity"
    FIND_CENTERS_FROM_SEEDS = "find-centers-from-seeds"
    DISCOVER_CENTERS_FROM_MOC = "discover-centers-from-moc"


class ProviderAdapter(Protocol):
    name: str

    def build_request(self, prompt: Prompt) -> ProviderRequest: ...

    def parse_response(self, response: ProviderResponse, schema: type[T]) -> ParseResult:
        """Extract and validate the JSON payload of a reply without raising."""
        ...

    def count_tokens(self, text: str) -> int: ...

    def estimate_cost(self, operation: Operation, text: str) -> CostEstimate: ...

    def estimate_seed_prompt_tokens(self, seed_count: int) -> int: ...

    def usage_cost(self, usage: TokenUsage) -> float: ...

    async def send(self, request: ProviderRequest) -> ProviderResponse:
        """Send a request, retrying transient failures. Raises SaligoError."""
        ...
