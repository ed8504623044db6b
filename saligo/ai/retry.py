"""Bounded retry policy for provider calls.

The policy is a pure decision function over (attempt, failure) so it can be
tested without a network or real delays. RetryingSender drives it with an
injected sleep.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

from loguru import logger

from saligo.ai.transport import (
    ProviderConnectionError,
    ProviderHTTPError,
    ProviderRequest,
    ProviderResponse,
    ProviderTimeoutError,
    Transport,
    TransportError,
)
from saligo.errors import ErrorCode, SaligoError

Sleep = Callable[[float], Awaitable[None]]

QUOTA_MARKERS = ("credit balance", "quota")


@dataclass(frozen=True)
class RetryDecision:
    retry: bool
    delay: float = 0.0
    error_code: ErrorCode | None = None
    exhausted: bool = False


def classify_failure(failure: TransportError) -> tuple[ErrorCode, bool]:
    """Map a transport failure to its error code and whether it may be retried."""
    if isinstance(failure, ProviderTimeoutError):
        return ErrorCode.TIMEOUT, True
    if isinstance(failure, ProviderConnectionError):
        return ErrorCode.NETWORK_ERROR, True
    if isinstance(failure, ProviderHTTPError):
        status = failure.status_code
        if status == 429 or status >= 500:
            return ErrorCode.PROVIDER_ERROR, True
        if status in (401, 403):
            return ErrorCode.INVALID_API_KEY, False
        body = failure.body.lower()
        if status == 402 or any(marker in body for marker in QUOTA_MARKERS):
            return ErrorCode.QUOTA_EXCEEDED, False
        return ErrorCode.PROVIDER_ERROR, False
    return ErrorCode.NETWORK_ERROR, True


class RetryPolicy:
    """Exponential backoff over a fixed number of attempts.

    Args:
        max_attempts: Total attempts, including the first one
        initial_delay: Delay in seconds after the first failed attempt, doubled each time
    """

    def __init__(self, max_attempts: int = 3, initial_delay: float = 1.0):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay

    def backoff_delay(self, attempt: int) -> float:
        """Delay after the given 1-based attempt: 1s, 2s, 4s with the defaults."""
        return self.initial_delay * 2 ** (attempt - 1)

    def decide(self, attempt: int, failure: TransportError) -> RetryDecision:
        code, retryable = classify_failure(failure)
        if not retryable:
            return RetryDecision(retry=False, error_code=code)
        if attempt >= self.max_attempts:
            return RetryDecision(retry=False, error_code=code, exhausted=True)

        delay = self.backoff_delay(attempt)
        if isinstance(failure, ProviderHTTPError) and failure.status_code == 429:
            if failure.retry_after is not None:
                delay = failure.retry_after
        return RetryDecision(retry=True, delay=delay, error_code=code)


class RetryingSender:
    """Sends a request through a transport, retrying per the policy."""

    def __init__(
        self,
        transport: Transport,
        policy: RetryPolicy,
        *,
        provider: str,
        sleep: Sleep = asyncio.sleep,
        attempt_timeout: float | None = None,
    ):
        self.transport = transport
        self.policy = policy
        self.provider = provider
        self.sleep = sleep
        self.attempt_timeout = attempt_timeout

    async def send(self, request: ProviderRequest) -> ProviderResponse:
        attempt = 0
        while True:
            attempt += 1
            try:
                response = await self._attempt(request)
            except TransportError as failure:
                decision = self.policy.decide(attempt, failure)
                if not decision.retry:
                    raise self._terminal_error(decision, failure, attempt) from failure

                logger.warning(
                    f"{self.provider} request failed on attempt {attempt}/{self.policy.max_attempts} "
                    f"({failure}). Retrying in {decision.delay:.1f}s"
                )
                await self.sleep(decision.delay)
                continue

            if not response.content or not response.text.strip():
                logger.error(f"{self.provider} returned an empty response")
                raise SaligoError(
                    ErrorCode.INVALID_RESPONSE,
                    f"Invalid {self.provider} response: empty content",
                    provider=self.provider,
                    details={"attempts": attempt},
                )

            logger.debug(
                f"{self.provider} request succeeded "
                f"(input tokens {response.usage.input_tokens}, "
                f"output tokens {response.usage.output_tokens})"
            )
            return response

    async def _attempt(self, request: ProviderRequest) -> ProviderResponse:
        if self.attempt_timeout is None:
            return await self.transport.send(request)
        try:
            return await asyncio.wait_for(self.transport.send(request), self.attempt_timeout)
        except asyncio.TimeoutError as e:
            raise ProviderTimeoutError(
                f"no response within {self.attempt_timeout:.0f}s"
            ) from e

    def _terminal_error(
        self, decision: RetryDecision, failure: TransportError, attempt: int
    ) -> SaligoError:
        details: dict = {"attempts": attempt}
        retry_after = None
        if isinstance(failure, ProviderHTTPError):
            details["status_code"] = failure.status_code
            retry_after = failure.retry_after

        if decision.exhausted:
            message = f"{self.provider} request failed after {attempt} attempts: {failure}"
        else:
            message = f"{self.provider} API error: {failure}"

        logger.error(message)
        return SaligoError(
            decision.error_code or ErrorCode.PROVIDER_ERROR,
            message,
            retry_after=retry_after,
            provider=self.provider,
            details=details,
        )
