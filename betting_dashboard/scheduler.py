"""
Refresh scheduler: drives re-fetches of the record store.

Manual refreshes and auto-refresh ticks share one fetch path. While a
fetch is in flight, further triggers join it instead of issuing another
request. Feed errors are caught here and surfaced as ``last_error``; the
previous snapshot stays in place and is reported as stale.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

import pandas as pd

from .config import AUTO_REFRESH_SECONDS, REPORT_TIMEZONE
from .exceptions import FeedError
from .models import FeedPayload, Snapshot
from .store import RecordStore

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[FeedPayload]]
Trigger = Callable[[], Awaitable[int]]
RefreshListener = Callable[[Snapshot], None]


class RefreshState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"


@dataclass(frozen=True)
class RefreshOutcome:
    ok: bool
    source: str
    snapshot: Snapshot
    error: str | None = None
    error_type: str | None = None


def _now() -> pd.Timestamp:
    return pd.Timestamp.now(tz=REPORT_TIMEZONE)


class RefreshScheduler:
    """Coordinates fetches into a RecordStore.

    Parameters
    ----------
    store : Store replaced on each successful fetch.
    fetch : Coroutine function returning the current FeedPayload.
    trigger : Optional coroutine function asking the producer to re-ingest.
    interval : Seconds between auto-refresh ticks.
    clock : Returns the timestamp recorded as ``last_updated``.
    """

    def __init__(
        self,
        store: RecordStore,
        fetch: Fetcher,
        trigger: Trigger | None = None,
        interval: float = AUTO_REFRESH_SECONDS,
        clock: Callable[[], pd.Timestamp] = _now,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.store = store
        self.interval = interval
        self._fetch = fetch
        self._trigger = trigger
        self._clock = clock
        self._listeners: list[RefreshListener] = []
        self._inflight: asyncio.Future | None = None
        self._timer: asyncio.Task | None = None

        self.state = RefreshState.IDLE
        self.last_error: str | None = None
        self.last_error_type: str | None = None
        self.fetch_count = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def is_fetching(self) -> bool:
        return self.state is RefreshState.FETCHING

    @property
    def is_stale(self) -> bool:
        """True when the displayed snapshot survived a failed refresh."""
        return self.last_error is not None and self.store.last_updated is not None

    @property
    def auto_refresh_enabled(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def subscribe(self, listener: RefreshListener) -> None:
        """Call listener with each new snapshot, after the store is replaced."""
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------
    async def refresh(self, source: str = "manual", reingest: bool = False) -> RefreshOutcome:
        """Fetch the feed into the store, or join the fetch already running.

        Cancelling the caller does not abort the underlying fetch.
        """
        if self._inflight is not None and not self._inflight.done():
            logger.info("Refresh (%s) joined the fetch already in flight", source)
        else:
            self._inflight = asyncio.ensure_future(self._run(source, reingest))
        return await asyncio.shield(self._inflight)

    async def _run(self, source: str, reingest: bool) -> RefreshOutcome:
        self.state = RefreshState.FETCHING
        self.last_error = None
        self.last_error_type = None
        self.fetch_count += 1
        logger.info("Refresh started (%s)", source)

        try:
            if reingest and self._trigger is not None:
                await self._trigger()
            payload = await self._fetch()
        except FeedError as exc:
            self.state = RefreshState.IDLE
            self.last_error = str(exc)
            self.last_error_type = type(exc).__name__
            logger.warning("Refresh (%s) failed: %s: %s", source, self.last_error_type, exc)
            return RefreshOutcome(
                ok=False,
                source=source,
                snapshot=self.store.snapshot,
                error=self.last_error,
                error_type=self.last_error_type,
            )
        except Exception as exc:
            self.state = RefreshState.IDLE
            self.last_error = str(exc) or type(exc).__name__
            self.last_error_type = type(exc).__name__
            raise
        except BaseException:
            self.state = RefreshState.IDLE
            raise

        snapshot = self.store.replace(payload.records, payload.stats, self._clock())
        self.state = RefreshState.IDLE
        for listener in self._listeners:
            listener(snapshot)
        return RefreshOutcome(ok=True, source=source, snapshot=snapshot)

    # ------------------------------------------------------------------
    # Auto-refresh
    # ------------------------------------------------------------------
    def start_auto_refresh(self) -> None:
        """Begin periodic refreshes. Must be called from a running event loop."""
        if self.auto_refresh_enabled:
            return
        self._timer = asyncio.get_running_loop().create_task(self._tick_loop())
        logger.info("Auto-refresh enabled every %.0fs", self.interval)

    def stop_auto_refresh(self) -> None:
        """Stop future ticks; a fetch already in flight still completes."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.info("Auto-refresh disabled")

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.refresh(source="timer")
            except Exception:
                logger.exception("Auto-refresh tick failed; next tick in %.0fs", self.interval)

    async def wait_idle(self) -> None:
        """Wait for the fetch in flight, if any."""
        if self._inflight is not None and not self._inflight.done():
            await asyncio.shield(self._inflight)
