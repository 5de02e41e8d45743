"""
404 helpers for route handlers.
"""

from typing import TypeVar

from fastapi import HTTPException

T = TypeVar("T")


def _or_404(found: T | None, detail: str) -> T:
    if found is None:
        raise HTTPException(status_code=404, detail=detail)
    return found


def require_item(item: T | None) -> T:
    """Return the stored item, or raise 404 when the lookup came back empty."""
    return _or_404(item, "Item not found")


def require_source(source: T | None) -> T:
    """Return the stored source, or raise 404 when the lookup came back empty."""
    return _or_404(source, "Source not found")
