"""
Summarizer - short TLDR-plus-bullets digests from a local model.

Features:
- One-sentence TLDR and three bullet points per article
- Tolerant parsing: a reply without the expected shape yields placeholder
  text instead of an error
- In-memory cache keyed by article URL
"""

import re
from dataclasses import dataclass, field

from .providers import LLMProvider

SUMMARY_UNAVAILABLE = "Summary unavailable"

_TLDR_PATTERN = re.compile(r"TLDR:\s*(.+?)(?:\n|$)")
_BULLET_PATTERN = re.compile(r"•\s*(.+?)(?:\n|$)")


@dataclass
class Summary:
    """Structured article digest."""
    tldr: str
    bullets: list[str] = field(default_factory=list)
    model_used: str = ""
    cached: bool = False


class Summarizer:
    """LLM-powered article summarizer."""

    # Maximum content length to send to the model
    MAX_CONTENT_LENGTH = 15000

    PROMPT_TEMPLATE = """Summarize this article titled "{title}". Provide:
1. A one-sentence TLDR (max 20 words)
2. Exactly 3 bullet points with the main ideas (each max 15 words)

Format your response exactly like this:
TLDR: [your tldr here]
• [bullet 1]
• [bullet 2]
• [bullet 3]

Article content:
{content}"""

    def __init__(self, provider: LLMProvider, model: str | None = None):
        """
        Initialize summarizer with an LLM provider.

        Args:
            provider: LLM provider instance
            model: Optional model override passed to the provider
        """
        self.provider = provider
        self.model = model
        self._cache: dict[str, Summary] = {}

    def build_prompt(self, content: str, title: str = "") -> str:
        return self.PROMPT_TEMPLATE.format(
            title=title,
            content=content[:self.MAX_CONTENT_LENGTH],
        )

    async def summarize_async(self, content: str, url: str, title: str = "") -> Summary:
        """
        Summarize article text, reusing a cached digest for the same URL.

        Raises:
            ProviderError: the model backend failed.
        """
        if cached := self._cache.get(url):
            return Summary(
                tldr=cached.tldr,
                bullets=list(cached.bullets),
                model_used=cached.model_used,
                cached=True,
            )

        response = await self.provider.complete_async(
            user_prompt=self.build_prompt(content, title),
            model=self.model,
        )
        summary = self.parse_response(response.text)
        summary.model_used = response.model
        self._cache[url] = summary
        return summary

    @staticmethod
    def parse_response(text: str) -> Summary:
        """Pull the TLDR line and bullet lines out of the model's reply."""
        tldr_match = _TLDR_PATTERN.search(text or "")
        tldr = tldr_match.group(1).strip() if tldr_match else ""
        bullets = [b.strip() for b in _BULLET_PATTERN.findall(text or "") if b.strip()]
        return Summary(tldr=tldr or SUMMARY_UNAVAILABLE, bullets=bullets)
