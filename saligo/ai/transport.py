"""Provider wire types and the Anthropic messages transport."""

from typing import Literal, Protocol

import anthropic
from loguru import logger
from pydantic import BaseModel, ConfigDict


class ProviderMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ProviderRequest(BaseModel):
    """Request sent to a provider backend."""

    model: str
    max_tokens: int
    messages: list[ProviderMessage]
    system: str | None = None


class ContentBlock(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    text: str = ""


class ProviderUsage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    input_tokens: int = 0
    output_tokens: int = 0


class ProviderResponse(BaseModel):
    """Response returned by a provider backend."""

    model_config = ConfigDict(extra="ignore")

    id: str
    role: str = "assistant"
    content: list[ContentBlock] = []
    stop_reason: str | None = None
    usage: ProviderUsage = ProviderUsage()

    @property
    def text(self) -> str:
        return "".join(block.text for block in self.content if block.type == "text")


class TransportError(Exception):
    """Failure while talking to the provider backend."""


class ProviderHTTPError(TransportError):
    def __init__(self, status_code: int, body: str = "", retry_after: float | None = None):
        super().__init__(f"HTTP {status_code}: {body[:200]}")
        self.status_code = status_code
        self.body = body
        self.retry_after = retry_after


class ProviderConnectionError(TransportError):
    pass


class ProviderTimeoutError(TransportError):
    pass


class Transport(Protocol):
    async def send(self, request: ProviderRequest) -> ProviderResponse: ...


def parse_retry_after(value: str | None) -> float | None:
    """Parse a retry-after header given in seconds."""
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


class AnthropicTransport:
    """Sends requests through the Anthropic SDK with its own retries disabled."""

    def __init__(self, *, api_key: str, timeout: float):
        self.client = anthropic.AsyncAnthropic(api_key=api_key, max_retries=0, timeout=timeout)

    async def send(self, request: ProviderRequest) -> ProviderResponse:
        params = request.model_dump(exclude_none=True)
        try:
            message = await self.client.messages.create(**params)
        except anthropic.APITimeoutError as e:
            raise ProviderTimeoutError(str(e)) from e
        except anthropic.APIConnectionError as e:
            raise ProviderConnectionError(str(e)) from e
        except anthropic.APIStatusError as e:
            retry_after = parse_retry_after(e.response.headers.get("retry-after"))
            logger.debug(f"Anthropic returned status {e.status_code}")
            raise ProviderHTTPError(e.status_code, str(e.message), retry_after) from e

        return ProviderResponse.model_validate(message.model_dump())
