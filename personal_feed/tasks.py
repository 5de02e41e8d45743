"""
Background tasks for the refresh cycle.

A refresh fetches every enabled source concurrently, merges the results,
tracks per-source health and optionally persists the merged items into
the local store.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .database import StoreError
from .feeds import FeedFetchIssue, FeedFetchResult, FeedParser
from .merger import merge_feed_items
from .models import FeedItem
from .normalizer import feed_item_to_candidate
from .sources import FeedSource, build_runtime_sources
from .timestamps import utc_now_iso

if TYPE_CHECKING:
    from .database import Database
    from .local_settings import LocalSettings

logger = logging.getLogger(__name__)


@dataclass
class SourceHealth:
    status: str = "idle"  # idle | healthy | error | disabled
    last_checked_at: str | None = None
    last_success_at: str | None = None
    last_error: str | None = None
    failure_count: int = 0
    last_item_count: int = 0
    latency_ms: int | None = None


@dataclass
class RefreshResult:
    run_id: int
    items: list[FeedItem] = field(default_factory=list)
    issues: list[FeedFetchIssue] = field(default_factory=list)
    refreshed_at: str = ""
    persisted_count: int = 0


def next_health(
    previous: SourceHealth | None,
    result: FeedFetchResult | None,
    active: bool,
) -> SourceHealth:
    """Health of one source after a cycle."""
    previous = previous or SourceHealth()

    if not active:
        return SourceHealth(
            status="disabled",
            last_checked_at=previous.last_checked_at,
            last_success_at=previous.last_success_at,
            last_error=previous.last_error,
            failure_count=previous.failure_count,
            last_item_count=0,
            latency_ms=previous.latency_ms,
        )

    if result is None:
        return previous

    if result.issue:
        return SourceHealth(
            status="error",
            last_checked_at=result.checked_at,
            last_success_at=previous.last_success_at,
            last_error=result.issue.message,
            failure_count=previous.failure_count + 1,
            last_item_count=0,
            latency_ms=result.latency_ms,
        )

    return SourceHealth(
        status="healthy",
        last_checked_at=result.checked_at,
        last_success_at=result.checked_at,
        failure_count=0,
        last_item_count=len(result.items),
        latency_ms=result.latency_ms,
    )


class RefreshCoordinator:
    """
    Runs refresh cycles.

    Only one cycle runs at a time; a request made while one is in flight
    is a no-op. Each cycle takes a run id, and a cycle whose id has been
    superseded (see ``invalidate``) drops its results instead of
    publishing them.
    """

    def __init__(
        self,
        feed_parser: FeedParser,
        settings: "LocalSettings",
        db: "Database | None" = None,
        persist: bool = True,
    ):
        self.feed_parser = feed_parser
        self.settings = settings
        self.db = db
        self.persist = persist
        self.health: dict[str, SourceHealth] = {}
        self.last_result: RefreshResult | None = None
        self._run_id = 0
        self._in_flight = False

    @property
    def in_progress(self) -> bool:
        return self._in_flight

    def runtime_sources(self) -> list[FeedSource]:
        return build_runtime_sources(
            self.settings.get_enabled_by_id(),
            self.settings.get_custom_feeds(),
        )

    def invalidate(self):
        """Mark any in-flight cycle as stale, e.g. after the source set changed."""
        self._run_id += 1

    async def refresh(self) -> RefreshResult | None:
        """Run one cycle. Returns None when skipped or superseded."""
        if self._in_flight:
            logger.info("Refresh already in progress, skipping")
            return None

        self._in_flight = True
        self._run_id += 1
        run_id = self._run_id
        try:
            sources = self.runtime_sources()
            globally_enabled = self.settings.get_global_enabled()
            active = [s for s in sources if s.enabled and globally_enabled]

            results = await self.feed_parser.fetch_all(active)
            if run_id != self._run_id:
                logger.info(f"Discarding stale refresh run {run_id}")
                return None

            by_source = {result.source_id: result for result in results}
            active_ids = {source.id for source in active}
            for source in sources:
                self.health[source.id] = next_health(
                    self.health.get(source.id),
                    by_source.get(source.id),
                    source.id in active_ids,
                )

            items = merge_feed_items(item for result in results for item in result.items)
            issues = [result.issue for result in results if result.issue]

            persisted = 0
            if self.persist and self.db is not None:
                persisted = self._persist(items, {s.id: s for s in sources})

            result = RefreshResult(
                run_id=run_id,
                items=items,
                issues=issues,
                refreshed_at=utc_now_iso(),
                persisted_count=persisted,
            )
            self.last_result = result
            logger.info(
                f"Refresh {run_id}: {len(items)} item(s) from {len(active)} source(s), "
                f"{len(issues)} issue(s)"
            )
            return result
        finally:
            self._in_flight = False

    def _persist(self, items: list[FeedItem], sources: dict[str, FeedSource]) -> int:
        """Upsert merged items, inserting any source the store has not seen yet."""
        known = set(self.db.sources.get_by_ids(list(sources)))
        persisted = 0

        for item in items:
            source = sources.get(item.source_id or "")
            if source is None:
                continue
            candidate = feed_item_to_candidate(item, source)
            if candidate is None:
                continue
            try:
                if source.id not in known:
                    self.db.upsert_source(source.to_source_input())
                    known.add(source.id)
                self.db.upsert_item(candidate.item)
                persisted += 1
            except StoreError as e:
                logger.warning(f"Could not persist {item.link}: {e}")

        return persisted
