"""
Sync Client - incremental pull from the remote feed endpoint.

Handles:
- Cursor-based incremental fetch (``?since=<cursor>``)
- Normalization of every remote record, counting rejects as skipped
- Source upserts before item upserts, preserving the reader's toggles
- Forward-only cursor persistence
- Single-flight passes: overlapping callers share one in-flight pass
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import quote

import aiohttp

from .database.models import SourceInput
from .normalizer import SyncCandidate, extract_payload_items, normalize_sync_candidate
from .sources import seed_default_sources
from .timestamps import utc_now_iso

if TYPE_CHECKING:
    from .database import Database

logger = logging.getLogger(__name__)

SYNC_CURSOR_KEY = "sync.last_success_at"


class SyncError(Exception):
    """The remote endpoint answered with a non-success status."""

    def __init__(self, status: int, body: str):
        super().__init__(f"Sync request failed ({status}): {body}")
        self.status = status
        self.body = body


@dataclass
class SyncResult:
    last_sync: str
    previous_sync: str | None
    item_count: int
    skipped_count: int


class SyncClient:
    """Pulls remote items into the local store."""

    def __init__(self, db: "Database", endpoint: str, timeout: float = 30):
        self.db = db
        self.endpoint = endpoint
        self.timeout = timeout
        self._lock = asyncio.Lock()
        self._in_flight: asyncio.Task | None = None

    async def fetch_payload(self, since: str | None):
        """GET the endpoint for records newer than ``since``."""
        url = f"{self.endpoint}?since={quote(since or '', safe='')}"

        async with aiohttp.ClientSession() as session:
            async with session.get(
                url,
                headers={"Accept": "application/json"},
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as resp:
                if resp.status < 200 or resp.status >= 300:
                    raise SyncError(resp.status, await resp.text())
                return await resp.json(content_type=None)

    async def sync(self) -> SyncResult:
        """
        Run one sync pass, or join the pass already running.

        Raises:
            SyncError: the endpoint returned a non-2xx status; nothing was written.
        """
        async with self._lock:
            if self._in_flight is None or self._in_flight.done():
                self._in_flight = asyncio.create_task(self._run())
            task = self._in_flight
        return await asyncio.shield(task)

    @property
    def in_progress(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    async def _run(self) -> SyncResult:
        previous_sync = self.db.get_metadata(SYNC_CURSOR_KEY)
        payload = await self.fetch_payload(previous_sync)
        records = extract_payload_items(payload)

        candidates: list[SyncCandidate] = []
        skipped = 0
        for record in records:
            candidate = normalize_sync_candidate(record)
            if candidate is None:
                skipped += 1
            else:
                candidates.append(candidate)

        self._upsert_sources(candidates)

        max_cursor: str | None = None
        for candidate in candidates:
            self.db.upsert_item(candidate.item)
            if candidate.cursor and (max_cursor is None or candidate.cursor > max_cursor):
                max_cursor = candidate.cursor

        last_sync = self.db.advance_metadata(SYNC_CURSOR_KEY, max_cursor or utc_now_iso())

        logger.info(
            f"Sync complete: {len(candidates)} item(s), {skipped} skipped, cursor {last_sync}"
        )
        return SyncResult(
            last_sync=last_sync,
            previous_sync=previous_sync,
            item_count=len(candidates),
            skipped_count=skipped,
        )

    def _upsert_sources(self, candidates: list[SyncCandidate]):
        """Upsert each referenced source once, keeping stored enabled/added_at."""
        sources: dict[str, SourceInput] = {}
        for candidate in candidates:
            sources[candidate.source.id] = candidate.source

        existing = self.db.sources.get_by_ids(list(sources))
        for source_id, source in sources.items():
            stored = existing.get(source_id)
            if stored:
                source.enabled = stored.enabled
                source.added_at = stored.added_at
            self.db.upsert_source(source)


async def initialize(db: "Database", sync_client: SyncClient | None = None) -> SyncResult | None:
    """
    Bring a freshly opened store up to date: seed built-in sources, then sync.

    The schema itself is applied when the Database is opened. A failed
    first sync is logged and left for the next scheduled pass.
    """
    seed_default_sources(db)
    if sync_client is None:
        return None
    try:
        return await sync_client.sync()
    except (SyncError, aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        logger.warning(f"Initial sync failed: {e}")
        return None
