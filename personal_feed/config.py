"""
Configuration and application state management.
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv
from fastapi import HTTPException

if TYPE_CHECKING:
    from .database import Database
    from .discovery import FeedDiscovery
    from .feeds import FeedParser
    from .fetcher import Fetcher
    from .local_settings import LocalSettings
    from .providers import LLMProvider
    from .scheduler import RefreshScheduler
    from .summarizer import Summarizer
    from .sync import SyncClient
    from .tasks import RefreshCoordinator

# Load environment variables
load_dotenv()


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse boolean from environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


class Config:
    """Application configuration from environment."""
    DB_PATH: Path = Path(os.getenv("DB_PATH", "./data/personal-feed.db"))
    SETTINGS_PATH: Path = Path(os.getenv("SETTINGS_PATH", "./data/settings.json"))
    PORT: int = int(os.getenv("PORT", "5005"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Remote sync
    SYNC_ENDPOINT: str = os.getenv("SYNC_ENDPOINT", "http://localhost:18800/feed/items")
    SYNC_TIMEOUT: float = float(os.getenv("SYNC_TIMEOUT", "30"))
    SYNC_ON_STARTUP: bool = _parse_bool(os.getenv("SYNC_ON_STARTUP"), default=True)

    # Feed fetching
    FEED_TIMEOUT: float = float(os.getenv("FEED_TIMEOUT", "12"))
    FEED_RETRIES: int = int(os.getenv("FEED_RETRIES", "1"))
    REFRESH_INTERVAL_MINUTES: float = float(os.getenv("REFRESH_INTERVAL_MINUTES", "5"))
    ENABLE_SCHEDULER: bool = _parse_bool(os.getenv("ENABLE_SCHEDULER"), default=True)
    PERSIST_REFRESH: bool = _parse_bool(os.getenv("PERSIST_REFRESH"), default=True)

    # Local summarization
    OLLAMA_HOST: str = os.getenv("OLLAMA_HOST", "http://localhost:11434")
    OLLAMA_MODEL: str = os.getenv("OLLAMA_MODEL", "llama3.2")
    OLLAMA_TIMEOUT: float = float(os.getenv("OLLAMA_TIMEOUT", "120"))


config = Config()


class AppState:
    """Shared application state."""
    db: "Database | None" = None
    local_settings: "LocalSettings | None" = None
    feed_parser: "FeedParser | None" = None
    discovery: "FeedDiscovery | None" = None
    sync_client: "SyncClient | None" = None
    refresher: "RefreshCoordinator | None" = None
    scheduler: "RefreshScheduler | None" = None
    fetcher: "Fetcher | None" = None
    provider: "LLMProvider | None" = None
    summarizer: "Summarizer | None" = None


state = AppState()


def get_db() -> "Database":
    """Dependency to get database instance."""
    if not state.db:
        raise HTTPException(status_code=500, detail="Database not initialized")
    return state.db


def get_local_settings() -> "LocalSettings":
    """Dependency to get the local device settings store."""
    if not state.local_settings:
        raise HTTPException(status_code=500, detail="Local settings not initialized")
    return state.local_settings
