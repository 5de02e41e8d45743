"""
Triage - inbox/later/archive buckets over items.

Two variants share the bucket rules:
- StoreTriage keeps buckets as item statuses in the local store
- LocalTriage keeps per-link state in local device settings, for items
  seen in a refresh but not persisted
"""

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Iterable

from .timestamps import utc_now_iso

if TYPE_CHECKING:
    from .database import Database
    from .local_settings import LocalSettings

BUCKETS = ("inbox", "later", "archive")

BUCKET_TO_STATUS = {
    "inbox": "unread",
    "later": "saved",
    "archive": "read",
}
STATUS_TO_BUCKET = {status: bucket for bucket, status in BUCKET_TO_STATUS.items()}

# Action logged alongside a store bucket change
BUCKET_ACTIONS = {
    "later": "save",
    "archive": "read",
}


class InvalidBucketError(ValueError):
    pass


def bucket_to_status(bucket: str) -> str:
    if bucket not in BUCKET_TO_STATUS:
        raise InvalidBucketError(f'Invalid bucket "{bucket}"')
    return BUCKET_TO_STATUS[bucket]


def status_to_bucket(status: str) -> str | None:
    """Bucket for a status; clipped and dismissed items have none."""
    return STATUS_TO_BUCKET.get(status)


@dataclass
class TriageState:
    bucket: str = "inbox"
    read: bool = False
    updated_at: str = field(default_factory=utc_now_iso)


def apply_bucket(previous: TriageState, bucket: str) -> TriageState:
    """Move to a bucket. Archiving always marks read; other moves keep the read flag."""
    if bucket not in BUCKETS:
        raise InvalidBucketError(f'Invalid bucket "{bucket}"')
    return replace(
        previous,
        bucket=bucket,
        read=True if bucket == "archive" else previous.read,
        updated_at=utc_now_iso(),
    )


@dataclass
class BucketCounts:
    inbox: int = 0
    later: int = 0
    archive: int = 0
    unread_inbox: int = 0


class LocalTriage:
    """Per-link triage state persisted in local device settings."""

    def __init__(self, settings: "LocalSettings"):
        self.settings = settings

    def get(self, link: str) -> TriageState:
        return self.settings.get_triage_by_link().get(link) or TriageState()

    def _update(self, link: str, state: TriageState) -> TriageState:
        triage = self.settings.get_triage_by_link()
        triage[link] = state
        self.settings.set_triage_by_link(triage)
        return state

    def set_bucket(self, link: str, bucket: str) -> TriageState:
        return self._update(link, apply_bucket(self.get(link), bucket))

    def mark_read(self, link: str, read: bool = True) -> TriageState:
        """Set the read flag; archived links stay read."""
        previous = self.get(link)
        state = replace(
            previous,
            read=True if previous.bucket == "archive" else read,
            updated_at=utc_now_iso(),
        )
        return self._update(link, state)

    def counts(self, links: Iterable[str]) -> BucketCounts:
        """Bucket totals over the given links; untriaged links count as unread inbox."""
        triage = self.settings.get_triage_by_link()
        counts = BucketCounts()
        for link in links:
            state = triage.get(link) or TriageState()
            setattr(counts, state.bucket, getattr(counts, state.bucket) + 1)
            if state.bucket == "inbox" and not state.read:
                counts.unread_inbox += 1
        return counts


class StoreTriage:
    """Buckets mapped onto stored item statuses."""

    def __init__(self, db: "Database"):
        self.db = db

    def set_bucket(self, url: str, bucket: str):
        """
        Move a stored item to a bucket.

        Raises:
            InvalidBucketError: unknown bucket.
            ItemNotFoundError: no item has this url.
        """
        self.db.update_item_status(url, bucket_to_status(bucket))
        action = BUCKET_ACTIONS.get(bucket)
        if action:
            item = self.db.get_item_by_url(url)
            if item:
                self.db.log_action(item.id, action, {"bucket": bucket})
