import asyncio

from loguru import logger

from saligo.ai.providers.base import ProviderAdapter
from saligo.ai.providers.claude import ClaudeAdapter
from saligo.ai.retry import RetryPolicy, Sleep
from saligo.ai.transport import AnthropicTransport, Transport
from saligo.config import ProviderKind, Settings
from saligo.errors import ErrorCode, SaligoError


def create_adapter(
    settings: Settings,
    *,
    transport: Transport | None = None,
    sleep: Sleep = asyncio.sleep,
) -> ProviderAdapter:
    """Create the provider adapter selected in the settings.

    Args:
        settings: Application settings
        transport: Transport to use instead of the provider's real API client
        sleep: Async delay used between retry attempts

    Returns:
        Configured provider adapter
    """
    policy = RetryPolicy(
        max_attempts=settings.max_attempts,
        initial_delay=settings.initial_retry_delay_seconds,
    )

    if settings.provider == ProviderKind.CLAUDE:
        if transport is None:
            api_key = settings.anthropic_api_key.strip()
            if not api_key:
                raise SaligoError(
                    ErrorCode.INVALID_API_KEY,
                    "No Anthropic API key configured",
                    provider=ProviderKind.CLAUDE.value,
                )
            transport = AnthropicTransport(
                api_key=api_key, timeout=settings.request_timeout_seconds
            )

        logger.info(f"Using Claude provider with model {settings.model}")
        return ClaudeAdapter(
            transport=transport,
            model=settings.model,
            max_tokens=settings.max_output_tokens,
            policy=policy,
            sleep=sleep,
            attempt_timeout=settings.request_timeout_seconds,
        )

    raise ValueError(f"Unknown provider: {settings.provider}")
