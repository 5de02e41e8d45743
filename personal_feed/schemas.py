"""
Pydantic models for API request/response validation.
"""

from typing import Literal

from pydantic import BaseModel

from .database import DBItem, DBSource, DBUserAction
from .feeds import FeedFetchIssue
from .local_settings import SavedView
from .models import FeedItem
from .sources import CustomFeed, FeedSource
from .summarizer import Summary
from .sync import SyncResult
from .tasks import RefreshResult, SourceHealth
from .triage import BucketCounts, TriageState, status_to_bucket

Bucket = Literal["inbox", "later", "archive"]
ItemStatus = Literal["unread", "read", "clipped", "dismissed", "saved"]
Category = Literal["Crypto", "Marketing", "Tech", "General"]


# ─────────────────────────────────────────────────────────────
# Item Schemas
# ─────────────────────────────────────────────────────────────

class ItemResponse(BaseModel):
    """Stored item for list and detail views."""
    id: int
    source_id: str
    source_name: str | None = None
    source_category: str | None = None
    title: str
    url: str
    author: str | None = None
    published_at: str | None
    fetched_at: str
    content_md: str | None = None
    content_text: str | None = None
    summary: str | None = None
    score: float
    status: str
    bucket: str | None = None
    acted_at: str | None = None

    @classmethod
    def from_db(cls, item: DBItem) -> "ItemResponse":
        return cls(
            id=item.id,
            source_id=item.source_id,
            source_name=item.source_name,
            source_category=item.source_category,
            title=item.title,
            url=item.url,
            author=item.author,
            published_at=item.published_at,
            fetched_at=item.fetched_at,
            content_md=item.content_md,
            content_text=item.content_text,
            summary=item.summary,
            score=item.score,
            status=item.status,
            bucket=status_to_bucket(item.status),
            acted_at=item.acted_at,
        )


class UpdateStatusRequest(BaseModel):
    url: str
    status: ItemStatus


class ItemActionRequest(BaseModel):
    action: Literal["clip", "dismiss", "content_idea", "save", "read"]
    metadata: dict | None = None


class ActionResponse(BaseModel):
    id: int
    item_id: int
    action: str
    created_at: str
    metadata: dict | None = None

    @classmethod
    def from_db(cls, action: DBUserAction) -> "ActionResponse":
        return cls(
            id=action.id,
            item_id=action.item_id,
            action=action.action,
            created_at=action.created_at,
            metadata=action.metadata,
        )


# ─────────────────────────────────────────────────────────────
# Source Schemas
# ─────────────────────────────────────────────────────────────

class SourceResponse(BaseModel):
    """Source as held in the store."""
    id: str
    name: str
    url: str
    type: str
    category: str
    enabled: bool
    added_at: str

    @classmethod
    def from_db(cls, source: DBSource) -> "SourceResponse":
        return cls(
            id=source.id,
            name=source.name,
            url=source.url,
            type=source.type,
            category=source.category,
            enabled=source.enabled,
            added_at=source.added_at,
        )


class SourceHealthResponse(BaseModel):
    status: str
    last_checked_at: str | None = None
    last_success_at: str | None = None
    last_error: str | None = None
    failure_count: int = 0
    last_item_count: int = 0
    latency_ms: int | None = None

    @classmethod
    def from_health(cls, health: SourceHealth) -> "SourceHealthResponse":
        return cls(
            status=health.status,
            last_checked_at=health.last_checked_at,
            last_success_at=health.last_success_at,
            last_error=health.last_error,
            failure_count=health.failure_count,
            last_item_count=health.last_item_count,
            latency_ms=health.latency_ms,
        )


class RuntimeSourceResponse(BaseModel):
    """Source as the refresh cycle sees it, with its health."""
    id: str
    url: str
    source: str
    type: str
    category: str
    enabled: bool
    built_in: bool
    health: SourceHealthResponse

    @classmethod
    def from_runtime(cls, source: FeedSource, health: SourceHealth | None) -> "RuntimeSourceResponse":
        return cls(
            id=source.id,
            url=source.url,
            source=source.source,
            type=source.type,
            category=source.category,
            enabled=source.enabled,
            built_in=source.built_in,
            health=SourceHealthResponse.from_health(health or SourceHealth()),
        )


class DiscoverFeedRequest(BaseModel):
    url: str


class DiscoverFeedResponse(BaseModel):
    feed_url: str
    feed_title: str | None


class AddSourceRequest(BaseModel):
    url: str
    name: str | None = None
    category: Category = "Crypto"


class CustomFeedResponse(BaseModel):
    id: str
    url: str
    source: str
    category: str
    enabled: bool
    created_at: str | None

    @classmethod
    def from_custom(cls, feed: CustomFeed) -> "CustomFeedResponse":
        return cls(
            id=feed.id,
            url=feed.url,
            source=feed.source,
            category=feed.category,
            enabled=feed.enabled,
            created_at=feed.created_at,
        )


class SetEnabledRequest(BaseModel):
    enabled: bool


# ─────────────────────────────────────────────────────────────
# Refresh Schemas
# ─────────────────────────────────────────────────────────────

class FeedItemResponse(BaseModel):
    title: str
    link: str
    published: str | None
    source: str
    source_id: str | None = None
    category: str
    summary: str = ""

    @classmethod
    def from_item(cls, item: FeedItem) -> "FeedItemResponse":
        return cls(
            title=item.title,
            link=item.link,
            published=item.published.isoformat() if item.published else None,
            source=item.source,
            source_id=item.source_id,
            category=item.category,
            summary=item.summary,
        )


class FeedIssueResponse(BaseModel):
    source_id: str
    source: str
    category: str
    url: str
    message: str

    @classmethod
    def from_issue(cls, issue: FeedFetchIssue) -> "FeedIssueResponse":
        return cls(
            source_id=issue.source_id,
            source=issue.source,
            category=issue.category,
            url=issue.url,
            message=issue.message,
        )


class RefreshResultResponse(BaseModel):
    run_id: int
    refreshed_at: str
    persisted_count: int
    items: list[FeedItemResponse]
    issues: list[FeedIssueResponse]

    @classmethod
    def from_result(cls, result: RefreshResult) -> "RefreshResultResponse":
        return cls(
            run_id=result.run_id,
            refreshed_at=result.refreshed_at,
            persisted_count=result.persisted_count,
            items=[FeedItemResponse.from_item(i) for i in result.items],
            issues=[FeedIssueResponse.from_issue(i) for i in result.issues],
        )


# ─────────────────────────────────────────────────────────────
# Sync Schemas
# ─────────────────────────────────────────────────────────────

class SyncResponse(BaseModel):
    last_sync: str
    previous_sync: str | None
    item_count: int
    skipped_count: int

    @classmethod
    def from_result(cls, result: SyncResult) -> "SyncResponse":
        return cls(
            last_sync=result.last_sync,
            previous_sync=result.previous_sync,
            item_count=result.item_count,
            skipped_count=result.skipped_count,
        )


# ─────────────────────────────────────────────────────────────
# Triage Schemas
# ─────────────────────────────────────────────────────────────

class StoreTriageRequest(BaseModel):
    url: str
    bucket: Bucket


class LocalTriageRequest(BaseModel):
    link: str
    bucket: Bucket | None = None
    read: bool | None = None


class TriageStateResponse(BaseModel):
    link: str
    bucket: str
    read: bool
    updated_at: str

    @classmethod
    def from_state(cls, link: str, state: TriageState) -> "TriageStateResponse":
        return cls(link=link, bucket=state.bucket, read=state.read, updated_at=state.updated_at)


class BucketCountsResponse(BaseModel):
    inbox: int
    later: int
    archive: int
    unread_inbox: int

    @classmethod
    def from_counts(cls, counts: BucketCounts) -> "BucketCountsResponse":
        return cls(
            inbox=counts.inbox,
            later=counts.later,
            archive=counts.archive,
            unread_inbox=counts.unread_inbox,
        )


# ─────────────────────────────────────────────────────────────
# Summarization Schemas
# ─────────────────────────────────────────────────────────────

class SummarizeRequest(BaseModel):
    url: str
    title: str | None = None


class SummaryResponse(BaseModel):
    url: str
    title: str
    tldr: str
    bullets: list[str]
    model_used: str
    cached: bool

    @classmethod
    def from_summary(cls, url: str, title: str, summary: Summary) -> "SummaryResponse":
        return cls(
            url=url,
            title=title,
            tldr=summary.tldr,
            bullets=summary.bullets,
            model_used=summary.model_used,
            cached=summary.cached,
        )


# ─────────────────────────────────────────────────────────────
# Settings Schemas
# ─────────────────────────────────────────────────────────────

class SavedViewModel(BaseModel):
    id: str
    category: str
    source: str

    @classmethod
    def from_view(cls, view: SavedView) -> "SavedViewModel":
        return cls(id=view.id, category=view.category, source=view.source)


class SettingsResponse(BaseModel):
    enabled_by_id: dict[str, bool]
    global_enabled: bool
    reading_mode: str
    custom_feeds: list[CustomFeedResponse]
    saved_views: list[SavedViewModel]


class SettingsUpdateRequest(BaseModel):
    enabled_by_id: dict[str, bool] | None = None
    global_enabled: bool | None = None
    reading_mode: Literal["headline", "expanded"] | None = None


class SaveViewRequest(BaseModel):
    category: Category
    source: str
