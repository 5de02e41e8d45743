"""
Triage routes: inbox/later/archive for stored items and for refreshed links.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from ..config import state, get_db, get_local_settings
from ..database import Database, ItemFilters, ItemNotFoundError
from ..exceptions import require_item
from ..local_settings import LocalSettings
from ..schemas import (
    Bucket,
    BucketCountsResponse,
    ItemResponse,
    LocalTriageRequest,
    StoreTriageRequest,
    TriageStateResponse,
)
from ..triage import LocalTriage, StoreTriage, bucket_to_status

router = APIRouter(prefix="/triage", tags=["triage"])


# ─────────────────────────────────────────────────────────────
# Stored items
# ─────────────────────────────────────────────────────────────

@router.get("/store")
async def list_bucket(
    bucket: Bucket,
    db: Annotated[Database, Depends(get_db)],
    limit: int = Query(default=200, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
) -> list[ItemResponse]:
    """List stored items in a bucket."""
    filters = ItemFilters(status=bucket_to_status(bucket), limit=limit, offset=offset)
    return [ItemResponse.from_db(item) for item in db.get_items(filters)]


@router.put("/store")
async def set_store_bucket(
    request: StoreTriageRequest,
    db: Annotated[Database, Depends(get_db)]
) -> ItemResponse:
    """Move a stored item to a bucket."""
    try:
        StoreTriage(db).set_bucket(request.url, request.bucket)
    except ItemNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return ItemResponse.from_db(require_item(db.get_item_by_url(request.url)))


# ─────────────────────────────────────────────────────────────
# Refreshed links (local device state)
# ─────────────────────────────────────────────────────────────

@router.put("/local")
async def set_local_triage(
    request: LocalTriageRequest,
    settings: Annotated[LocalSettings, Depends(get_local_settings)]
) -> TriageStateResponse:
    """Update a link's bucket and/or read flag."""
    triage = LocalTriage(settings)
    current = triage.get(request.link)
    if request.bucket is not None:
        current = triage.set_bucket(request.link, request.bucket)
    if request.read is not None:
        current = triage.mark_read(request.link, request.read)
    return TriageStateResponse.from_state(request.link, current)


@router.get("/local")
async def get_local_triage(
    link: str,
    settings: Annotated[LocalSettings, Depends(get_local_settings)]
) -> TriageStateResponse:
    """A link's triage state; untriaged links are unread in the inbox."""
    return TriageStateResponse.from_state(link, LocalTriage(settings).get(link))


@router.get("/local/counts")
async def local_bucket_counts(
    settings: Annotated[LocalSettings, Depends(get_local_settings)]
) -> BucketCountsResponse:
    """Bucket totals over the items of the last refresh."""
    result = state.refresher.last_result if state.refresher else None
    links = [item.link for item in result.items] if result else []
    return BucketCountsResponse.from_counts(LocalTriage(settings).counts(links))
