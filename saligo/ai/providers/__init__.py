from saligo.ai.providers.base import Operation, ProviderAdapter
from saligo.ai.providers.claude import ClaudeAdapter
from saligo.ai.providers.factory import create_adapter

__all__ = [
    "ClaudeAdapter",
    "Operation",
    "ProviderAdapter",
    "create_adapter",
]
