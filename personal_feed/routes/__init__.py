"""
API route modules.
"""

from .items import router as items_router
from .sources import router as sources_router
from .refresh import router as refresh_router
from .sync import router as sync_router
from .triage import router as triage_router
from .summarization import router as summarization_router
from .misc import router as misc_router

__all__ = [
    "items_router",
    "sources_router",
    "refresh_router",
    "sync_router",
    "triage_router",
    "summarization_router",
    "misc_router",
]
