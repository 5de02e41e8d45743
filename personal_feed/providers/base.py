"""
Provider interface for the summarizer's language model.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class ProviderError(Exception):
    """The model backend failed to produce a completion."""


@dataclass
class LLMResponse:
    """Completion text plus token accounting."""
    text: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    metadata: dict = field(default_factory=dict)


class LLMProvider(ABC):
    """A text-completion backend called from the event loop."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short provider identifier, reported in summaries."""

    @abstractmethod
    async def complete_async(
        self,
        user_prompt: str,
        system_prompt: str | None = None,
        model: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.0,
    ) -> LLMResponse:
        """
        Complete ``user_prompt``.

        ``model`` overrides the provider default. ``max_tokens`` caps the
        reply length.

        Raises:
            ProviderError: the backend returned an error
        """
