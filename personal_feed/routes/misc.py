"""
Miscellaneous routes: health check and local device settings.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from .. import __version__
from ..config import state, get_local_settings
from ..local_settings import LocalSettings
from ..schemas import (
    CustomFeedResponse,
    SavedViewModel,
    SaveViewRequest,
    SettingsResponse,
    SettingsUpdateRequest,
)

router = APIRouter(tags=["misc"])


# ─────────────────────────────────────────────────────────────
# Health Check
# ─────────────────────────────────────────────────────────────

@router.get("/status")
async def health_check() -> dict:
    """API health check."""
    return {
        "status": "ok",
        "version": __version__,
        "summarization_enabled": state.summarizer is not None,
        "sync_enabled": state.sync_client is not None,
        "scheduler_running": bool(state.scheduler and state.scheduler.running),
        "item_count": state.db.count_items() if state.db else 0,
    }


# ─────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────

def _settings_response(settings: LocalSettings) -> SettingsResponse:
    return SettingsResponse(
        enabled_by_id=settings.get_enabled_by_id(),
        global_enabled=settings.get_global_enabled(),
        reading_mode=settings.get_reading_mode(),
        custom_feeds=[CustomFeedResponse.from_custom(f) for f in settings.get_custom_feeds()],
        saved_views=[SavedViewModel.from_view(v) for v in settings.get_saved_views()],
    )


@router.get("/settings")
async def get_settings(
    settings: Annotated[LocalSettings, Depends(get_local_settings)]
) -> SettingsResponse:
    """Get local device settings."""
    return _settings_response(settings)


@router.put("/settings")
async def update_settings(
    request: SettingsUpdateRequest,
    settings: Annotated[LocalSettings, Depends(get_local_settings)]
) -> SettingsResponse:
    """Update local device settings."""
    if request.enabled_by_id is not None:
        merged = settings.get_enabled_by_id()
        merged.update(request.enabled_by_id)
        settings.set_enabled_by_id(merged)
    if request.global_enabled is not None:
        settings.set_global_enabled(request.global_enabled)
    if request.reading_mode is not None:
        settings.set_reading_mode(request.reading_mode)

    if (request.enabled_by_id is not None or request.global_enabled is not None) and state.refresher:
        state.refresher.invalidate()

    return _settings_response(settings)


@router.post("/settings/views")
async def save_view(
    request: SaveViewRequest,
    settings: Annotated[LocalSettings, Depends(get_local_settings)]
) -> SavedViewModel:
    """Pin a category/source view."""
    return SavedViewModel.from_view(settings.save_view(request.category, request.source))


@router.delete("/settings/views/{view_id}")
async def delete_view(
    view_id: str,
    settings: Annotated[LocalSettings, Depends(get_local_settings)]
) -> dict:
    """Unpin a saved view."""
    views = settings.get_saved_views()
    remaining = [v for v in views if v.id != view_id]
    settings.set_saved_views(remaining)
    return {"success": True, "removed": len(views) - len(remaining)}
