"""
Sync routes: pull from the remote endpoint and inspect the cursor.
"""

import asyncio

import aiohttp
from fastapi import APIRouter, HTTPException

from ..config import state
from ..schemas import SyncResponse
from ..sync import SYNC_CURSOR_KEY, SyncError

router = APIRouter(prefix="/sync", tags=["sync"])


@router.post("")
async def run_sync() -> SyncResponse:
    """Run a sync pass, or join the one already running."""
    if not state.sync_client:
        raise HTTPException(status_code=503, detail="Sync not configured")

    try:
        result = await state.sync_client.sync()
    except SyncError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        raise HTTPException(status_code=502, detail=f"Sync request failed: {e}")

    return SyncResponse.from_result(result)


@router.get("/status")
async def sync_status() -> dict:
    """Current cursor and whether a pass is running."""
    if not state.sync_client:
        raise HTTPException(status_code=503, detail="Sync not configured")

    return {
        "last_sync": state.sync_client.db.get_metadata(SYNC_CURSOR_KEY),
        "in_progress": state.sync_client.in_progress,
        "endpoint": state.sync_client.endpoint,
    }
