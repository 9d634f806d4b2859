"""
Record store: the latest fetched snapshot, replaced wholesale on refresh.
"""

import logging
from collections.abc import Iterable

import pandas as pd

from .config import REPORT_TIMEZONE
from .models import FeedStats, ReportRecord, Snapshot

logger = logging.getLogger(__name__)


class RecordStore:
    """Holds one immutable Snapshot at a time.

    Readers take ``store.snapshot`` once and compute from it; a refresh
    swaps the reference in a single assignment, so a reader never sees a
    mix of old and new records.
    """

    def __init__(self, snapshot: Snapshot | None = None):
        self._snapshot = snapshot or Snapshot()

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def records(self) -> tuple[ReportRecord, ...]:
        return self._snapshot.records

    @property
    def last_updated(self) -> pd.Timestamp | None:
        return self._snapshot.fetched_at

    def replace(
        self,
        records: Iterable[ReportRecord],
        stats: FeedStats | None = None,
        fetched_at: pd.Timestamp | None = None,
    ) -> Snapshot:
        """Discard the current snapshot and install a new one."""
        snapshot = Snapshot(
            records=tuple(records),
            stats=stats or FeedStats(),
            fetched_at=fetched_at or pd.Timestamp.now(tz=REPORT_TIMEZONE),
        )
        self._snapshot = snapshot
        logger.info(
            "Record store replaced: %d records at %s",
            len(snapshot.records), snapshot.fetched_at,
        )
        return snapshot

    def __len__(self) -> int:
        return len(self._snapshot.records)
