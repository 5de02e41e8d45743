"""
Personal Feed - a single-user RSS/HTML feed aggregator.

Pulls items from RSS/Atom feeds, scraped HTML pages and a remote sync
endpoint, normalizes and deduplicates them into a local SQLite store, and
lets one reader triage and summarize them.
"""

__version__ = "0.1.0"
