"""
Personal Feed API Server

FastAPI application providing endpoints for:
- Stored items (list, lookup, status, action log)
- Sources (stored, runtime registry, discovery, custom feeds)
- Refresh and remote sync
- Triage buckets
- Summarization
- Settings
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from . import __version__
from .config import config, state
from .database import Database
from .discovery import FeedDiscovery
from .feeds import FeedParser
from .fetcher import Fetcher
from .local_settings import LocalSettings
from .providers import OllamaProvider
from .scheduler import RefreshScheduler
from .summarizer import Summarizer
from .sync import SyncClient, initialize
from .tasks import RefreshCoordinator
from .routes import (
    items_router,
    sources_router,
    refresh_router,
    sync_router,
    triage_router,
    summarization_router,
    misc_router,
)

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup application resources."""
    # Startup - skip if already initialized (e.g., by tests)
    if state.db is None:
        state.db = Database(config.DB_PATH)
        state.local_settings = LocalSettings(config.SETTINGS_PATH)
        state.feed_parser = FeedParser(timeout=config.FEED_TIMEOUT, retries=config.FEED_RETRIES)
        state.discovery = FeedDiscovery(state.feed_parser.fetch_text, timeout=config.FEED_TIMEOUT)
        state.sync_client = SyncClient(state.db, config.SYNC_ENDPOINT, timeout=config.SYNC_TIMEOUT)
        state.refresher = RefreshCoordinator(
            state.feed_parser,
            state.local_settings,
            db=state.db,
            persist=config.PERSIST_REFRESH,
        )
        state.fetcher = Fetcher()

        state.provider = OllamaProvider(
            host=config.OLLAMA_HOST,
            default_model=config.OLLAMA_MODEL,
            timeout=config.OLLAMA_TIMEOUT,
        )
        state.summarizer = Summarizer(provider=state.provider)
        logger.info(f"LLM provider initialized: {state.provider.name} ({config.OLLAMA_MODEL})")

        await initialize(state.db, state.sync_client if config.SYNC_ON_STARTUP else None)

        if config.ENABLE_SCHEDULER:
            state.scheduler = RefreshScheduler(
                state.refresher,
                sync_client=state.sync_client,
                interval_minutes=config.REFRESH_INTERVAL_MINUTES,
            )
            await state.scheduler.start()

    yield

    # Shutdown
    if state.scheduler:
        await state.scheduler.stop()
        state.scheduler = None


app = FastAPI(
    title="Personal Feed API",
    version=__version__,
    lifespan=lifespan
)

# Include routers
app.include_router(misc_router)
app.include_router(items_router)
app.include_router(sources_router)
app.include_router(refresh_router)
app.include_router(sync_router)
app.include_router(triage_router)
app.include_router(summarization_router)


def main():
    uvicorn.run("personal_feed.server:app", host="127.0.0.1", port=config.PORT)
