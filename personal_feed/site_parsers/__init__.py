"""
Site-Specific HTML Parsers - listing pages for sources without a feed.

- OurNetwork: weekly on-chain data issues
- Vitalik: blog homepage post list

A source opts in with ``type="html"`` and a ``parser_key`` naming one of
the registered parsers.
"""

from .base import SiteParser
from .ournetwork import OurNetworkParser
from .vitalik import VitalikParser

# Registry of all parsers, keyed by parser_key
HTML_PARSERS: dict[str, type[SiteParser]] = {
    OurNetworkParser.KEY: OurNetworkParser,
    VitalikParser.KEY: VitalikParser,
}


def get_parser(parser_key: str | None) -> SiteParser | None:
    """Get the parser registered for a key, if any."""
    parser_class = HTML_PARSERS.get(parser_key) if parser_key else None
    return parser_class() if parser_class else None


__all__ = ["SiteParser", "OurNetworkParser", "VitalikParser", "HTML_PARSERS", "get_parser"]
