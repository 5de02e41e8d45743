"""
LLM Provider abstraction layer.

Summaries are generated by a local model; Ollama is the bundled backend.
"""

from .base import LLMProvider, LLMResponse, ProviderError
from .ollama import OllamaProvider

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "ProviderError",
    "OllamaProvider",
]
