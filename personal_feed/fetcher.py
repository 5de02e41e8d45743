"""
Content Fetcher - Extract readable article text from URLs.

Handles:
- HTTP fetching with browser-like headers
- Reader-mode extraction using trafilatura
- Fallback to BeautifulSoup, stripping page chrome and picking the main
  content container
- Capping extracted text to what the summarizer accepts
"""

import logging
import re
from dataclasses import dataclass

import aiohttp
import trafilatura
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 15000

# Page chrome removed before picking the content container
NOISE_SELECTORS = [
    "script", "style", "nav", "footer", "header", "aside",
    ".comments", ".sidebar", ".ad", ".subscription",
]

# First match wins
CONTENT_SELECTORS = ["article", ".post-content", ".entry-content", "main", "body"]


@dataclass
class FetchResult:
    """Result of fetching and extracting article content."""
    url: str
    title: str
    content: str
    extractor_used: str = "trafilatura"


def _collapse(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def extract_with_beautifulsoup(html: str) -> str:
    """Strip noise elements and return the text of the main content container."""
    soup = BeautifulSoup(html, "html.parser")
    for selector in NOISE_SELECTORS:
        for element in soup.select(selector):
            element.decompose()

    for selector in CONTENT_SELECTORS:
        container = soup.select_one(selector)
        if container:
            return _collapse(container.get_text(" "))[:MAX_CONTENT_LENGTH]

    return _collapse(soup.get_text(" "))[:MAX_CONTENT_LENGTH]


def extract_article_text(html: str, url: str | None = None) -> tuple[str, str]:
    """Return ``(text, extractor_used)``, preferring trafilatura."""
    extracted = trafilatura.extract(html, url=url, include_comments=False, favor_recall=True)
    if extracted and extracted.strip():
        return _collapse(extracted)[:MAX_CONTENT_LENGTH], "trafilatura"
    return extract_with_beautifulsoup(html), "beautifulsoup"


def extract_title(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    if og_title := soup.find("meta", property="og:title"):
        if og_title.get("content"):
            return og_title["content"].strip()
    if title_tag := soup.find("title"):
        return title_tag.get_text(strip=True)
    return "Untitled"


class Fetcher:
    """Fetches web pages and extracts their readable text."""

    def __init__(self, timeout: float = 30, user_agent: str | None = None):
        self.timeout = timeout
        self.user_agent = user_agent or (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        )
        self.headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        }

    async def fetch(self, url: str) -> FetchResult:
        """Fetch a page and extract its article text."""
        async with aiohttp.ClientSession(headers=self.headers) as session:
            async with session.get(
                url,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                allow_redirects=True
            ) as resp:
                resp.raise_for_status()
                html = await resp.text()
                final_url = str(resp.url)

        content, extractor = extract_article_text(html, final_url)
        logger.debug(f"Extracted {len(content)} chars from {final_url} with {extractor}")
        return FetchResult(
            url=final_url,
            title=extract_title(html),
            content=content,
            extractor_used=extractor,
        )
