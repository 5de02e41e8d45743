"""
Source routes: stored sources, the runtime registry, discovery and custom feeds.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from ..config import state, get_db, get_local_settings
from ..database import Database, SourceNotFoundError
from ..discovery import FeedDiscoveryError
from ..exceptions import require_source
from ..local_settings import LocalSettings
from ..schemas import (
    AddSourceRequest,
    CustomFeedResponse,
    DiscoverFeedRequest,
    DiscoverFeedResponse,
    RuntimeSourceResponse,
    SetEnabledRequest,
    SourceResponse,
)
from ..sources import (
    CustomFeed,
    build_runtime_sources,
    create_custom_feed_id,
    source_name_from_url,
    unique_source_id,
)
from ..timestamps import utc_now_iso

router = APIRouter(prefix="/sources", tags=["sources"])


def _same_url(a: str, b: str) -> bool:
    return a.strip().rstrip("/").lower() == b.strip().rstrip("/").lower()


# ─────────────────────────────────────────────────────────────
# Listing
# ─────────────────────────────────────────────────────────────

@router.get("")
async def list_sources(
    db: Annotated[Database, Depends(get_db)],
    enabled_only: bool = False
) -> list[SourceResponse]:
    """List stored sources, ordered by category then name."""
    return [SourceResponse.from_db(s) for s in db.get_sources(enabled_only)]


@router.get("/runtime")
async def list_runtime_sources(
    settings: Annotated[LocalSettings, Depends(get_local_settings)]
) -> list[RuntimeSourceResponse]:
    """List built-in and custom feeds as the refresh cycle sees them, with health."""
    health = state.refresher.health if state.refresher else {}
    sources = build_runtime_sources(settings.get_enabled_by_id(), settings.get_custom_feeds())
    return [RuntimeSourceResponse.from_runtime(s, health.get(s.id)) for s in sources]


@router.get("/{source_id}")
async def get_source(
    source_id: str,
    db: Annotated[Database, Depends(get_db)]
) -> SourceResponse:
    """Get a stored source."""
    return SourceResponse.from_db(require_source(db.get_source(source_id)))


# ─────────────────────────────────────────────────────────────
# Discovery and custom feeds
# ─────────────────────────────────────────────────────────────

@router.post("/discover")
async def discover_feed(request: DiscoverFeedRequest) -> DiscoverFeedResponse:
    """Find the RSS/Atom feed behind a URL."""
    if not state.discovery:
        raise HTTPException(status_code=500, detail="Feed discovery not initialized")

    try:
        found = await state.discovery.discover(request.url)
    except FeedDiscoveryError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return DiscoverFeedResponse(feed_url=found.feed_url, feed_title=found.feed_title)


@router.post("")
async def add_source(
    request: AddSourceRequest,
    db: Annotated[Database, Depends(get_db)],
    settings: Annotated[LocalSettings, Depends(get_local_settings)]
) -> CustomFeedResponse:
    """Discover a feed from a URL and subscribe to it as a custom source."""
    if not state.discovery:
        raise HTTPException(status_code=500, detail="Feed discovery not initialized")

    try:
        found = await state.discovery.discover(request.url)
    except FeedDiscoveryError as e:
        raise HTTPException(status_code=400, detail=str(e))

    custom_feeds = settings.get_custom_feeds()
    existing = build_runtime_sources(settings.get_enabled_by_id(), custom_feeds)
    duplicate = next((s for s in existing if _same_url(s.url, found.feed_url)), None)
    if duplicate:
        raise HTTPException(status_code=409, detail=f"Source already exists: {duplicate.source}")

    name = (request.name or "").strip() or found.feed_title or source_name_from_url(found.feed_url)
    taken = {s.id for s in existing} | {s.id for s in db.get_sources()}
    feed = CustomFeed(
        id=unique_source_id(create_custom_feed_id(name, found.feed_url), taken),
        url=found.feed_url,
        source=name,
        category=request.category,
        enabled=True,
        created_at=utc_now_iso(),
    )

    settings.set_custom_feeds([feed] + custom_feeds)
    runtime = build_runtime_sources(settings.get_enabled_by_id(), [feed])[-1]
    db.upsert_source(runtime.to_source_input())
    if state.refresher:
        state.refresher.invalidate()

    return CustomFeedResponse.from_custom(feed)


@router.put("/{source_id}/enabled")
async def set_source_enabled(
    source_id: str,
    request: SetEnabledRequest,
    db: Annotated[Database, Depends(get_db)],
    settings: Annotated[LocalSettings, Depends(get_local_settings)]
) -> dict:
    """Turn fetching of a source on or off."""
    known_ids = {s.id for s in build_runtime_sources({}, settings.get_custom_feeds())}
    in_store = db.get_source(source_id) is not None
    if source_id not in known_ids and not in_store:
        raise HTTPException(status_code=404, detail="Source not found")

    if source_id in known_ids:
        enabled_by_id = settings.get_enabled_by_id()
        enabled_by_id[source_id] = request.enabled
        settings.set_enabled_by_id(enabled_by_id)

    if in_store:
        try:
            db.set_source_enabled(source_id, request.enabled)
        except SourceNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))

    if state.refresher:
        state.refresher.invalidate()

    return {"success": True, "id": source_id, "enabled": request.enabled}
