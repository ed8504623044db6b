from enum import Enum

from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderKind(str, Enum):
    CLAUDE = "claude"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SALIGO_", env_file=".env", extra="ignore")

    # Basic auth settings
    auth_username: str = "admin"
    auth_password: str = "change-me"

    # LLM settings
    provider: ProviderKind = ProviderKind.CLAUDE
    anthropic_api_key: str = ""
    model: str = "claude-3-5-sonnet-20241022"
    max_output_tokens: int = 4096

    # Cache settings
    cache_enabled: bool = True
    cache_ttl_seconds: float = 24 * 60 * 60

    # Rate limit settings
    rate_limit_enabled: bool = True
    max_requests_per_minute: int = 60

    # Retry settings
    max_attempts: int = 3
    initial_retry_delay_seconds: float = 1.0
    request_timeout_seconds: float = 60.0

    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL
