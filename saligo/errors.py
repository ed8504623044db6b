"""Error taxonomy shared by every layer of the engine."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    INVALID_REQUEST = "INVALID_REQUEST"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    INVALID_API_KEY = "INVALID_API_KEY"
    INSUFFICIENT_SEEDS = "INSUFFICIENT_SEEDS"
    MOC_TOO_SMALL = "MOC_TOO_SMALL"
    MOC_TOO_LARGE = "MOC_TOO_LARGE"
    MOC_NO_VALID_NOTES = "MOC_NO_VALID_NOTES"
    INVALID_MOC = "INVALID_MOC"


VALIDATION_CODES = frozenset(
    {
        ErrorCode.INVALID_REQUEST,
        ErrorCode.INSUFFICIENT_SEEDS,
        ErrorCode.MOC_TOO_SMALL,
        ErrorCode.MOC_TOO_LARGE,
        ErrorCode.MOC_NO_VALID_NOTES,
        ErrorCode.INVALID_MOC,
    }
)

RETRYABLE_CODES = frozenset({ErrorCode.NETWORK_ERROR, ErrorCode.TIMEOUT})


class SaligoError(Exception):
    """Error surfaced to callers of the engine.

    Attributes:
        code: Closed error kind
        message: Human-readable message, never containing note content
        retry_after: Seconds the caller should wait before retrying, if known
        provider: Provider that produced the failure, if any
        details: Operation name and counts that make the error actionable
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        *,
        retry_after: float | None = None,
        provider: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.retry_after = retry_after
        self.provider = provider
        self.details = details or {}

    @property
    def is_validation(self) -> bool:
        return self.code in VALIDATION_CODES

    @property
    def is_retryable(self) -> bool:
        return self.code in RETRYABLE_CODES

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.retry_after is not None:
            payload["retry_after"] = self.retry_after
        if self.provider:
            payload["provider"] = self.provider
        if self.details:
            payload["details"] = self.details
        return payload

    def __repr__(self) -> str:
        return f"SaligoError(code={self.code.value!r}, message={self.message!r})"
