"""
Item routes: listing, lookup, status changes and the action log.
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from ..config import get_db
from ..database import Database, ItemFilters, ItemNotFoundError, StoreValidationError
from ..exceptions import require_item
from ..schemas import ActionResponse, ItemActionRequest, ItemResponse, UpdateStatusRequest

router = APIRouter(prefix="/items", tags=["items"])


@router.get("")
async def list_items(
    db: Annotated[Database, Depends(get_db)],
    status: Annotated[list[str] | None, Query()] = None,
    source_id: str | None = None,
    category: str | None = None,
    min_score: float | None = None,
    order_by: Literal["published_at", "fetched_at", "score"] = "published_at",
    order_dir: Literal["ASC", "DESC", "asc", "desc"] = "DESC",
    limit: int = Query(default=200, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
) -> list[ItemResponse]:
    """List stored items, newest first by default."""
    filters = ItemFilters(
        status=status or None,
        source_id=source_id,
        category=category,
        min_score=min_score,
        order_by=order_by,
        order_dir=order_dir,
        limit=limit,
        offset=offset,
    )
    return [ItemResponse.from_db(item) for item in db.get_items(filters)]


@router.get("/lookup")
async def lookup_item(
    url: str,
    db: Annotated[Database, Depends(get_db)]
) -> ItemResponse:
    """Get a stored item by its url."""
    return ItemResponse.from_db(require_item(db.get_item_by_url(url)))


@router.put("/status")
async def update_item_status(
    request: UpdateStatusRequest,
    db: Annotated[Database, Depends(get_db)]
) -> ItemResponse:
    """Set an item's status by url."""
    try:
        db.update_item_status(request.url, request.status)
    except ItemNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ItemResponse.from_db(require_item(db.get_item_by_url(request.url)))


@router.get("/{item_id}")
async def get_item(
    item_id: int,
    db: Annotated[Database, Depends(get_db)]
) -> ItemResponse:
    """Get a single stored item."""
    return ItemResponse.from_db(require_item(db.get_item(item_id)))


@router.post("/{item_id}/actions")
async def log_item_action(
    item_id: int,
    request: ItemActionRequest,
    db: Annotated[Database, Depends(get_db)]
) -> dict:
    """Append an action to an item's log."""
    require_item(db.get_item(item_id))
    action_id = db.log_action(item_id, request.action, request.metadata)
    return {"success": True, "id": action_id}


@router.get("/{item_id}/actions")
async def list_item_actions(
    item_id: int,
    db: Annotated[Database, Depends(get_db)]
) -> list[ActionResponse]:
    """Get an item's action log, oldest first."""
    require_item(db.get_item(item_id))
    return [ActionResponse.from_db(a) for a in db.get_actions(item_id)]
