"""
Refresh routes: trigger a fetch of every enabled source and read the result.
"""

from fastapi import APIRouter, BackgroundTasks, HTTPException

from ..config import state
from ..schemas import RefreshResultResponse

router = APIRouter(prefix="/refresh", tags=["refresh"])


@router.post("")
async def refresh_feeds(background_tasks: BackgroundTasks) -> dict:
    """Trigger a refresh (runs in background)."""
    if not state.refresher:
        raise HTTPException(status_code=500, detail="Refresh not initialized")

    if state.refresher.in_progress:
        return {"success": True, "message": "Refresh already in progress"}

    background_tasks.add_task(state.refresher.refresh)
    return {"success": True, "message": "Refresh started"}


@router.get("/last")
async def last_refresh() -> RefreshResultResponse:
    """Items and per-source issues from the most recent completed refresh."""
    if not state.refresher or not state.refresher.last_result:
        raise HTTPException(status_code=404, detail="No refresh has completed yet")
    return RefreshResultResponse.from_result(state.refresher.last_result)
