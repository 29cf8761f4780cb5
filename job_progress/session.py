"""
Job tracking session.

Follows one document job: reads its row once, listens for row replacements,
drives the ticker for the current phase and exposes the merged feed. All
state changes happen on the event loop the session was first used on; store
callbacks from other threads are handed over with ``call_soon_threadsafe``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Sequence

from pydantic import ValidationError

from common.job_models import DocumentJob, JobStatus
from common.job_store import JobNotFoundError, JobSnapshotStore, JobSubscription
from job_progress.feed import DisplayMessage, merge_feed
from job_progress.ticker import TickerGenerator, TickerMessage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
    snapshot: Optional[DocumentJob] = None
    is_loading: bool = False
    error: Optional[Exception] = None
    feed: list[DisplayMessage] = field(default_factory=list)


StateListener = Callable[[SessionState], None]


class JobTrackingSession:
    """Tracks a single job id at a time.

    Usage::

        async with JobTrackingSession(store) as session:
            session.add_listener(render)
            await session.track(job_id)
    """

    def __init__(
        self,
        store: JobSnapshotStore,
        *,
        ticker_catalog: Optional[Mapping[str, Sequence[str]]] = None,
        ticker_interval: Optional[float] = None,
        ticker_max_messages: Optional[int] = None,
        feed_limit: Optional[int] = None,
    ):
        self._store = store
        self._feed_limit = feed_limit
        self._ticker = TickerGenerator(
            ticker_catalog,
            interval=ticker_interval,
            max_messages=ticker_max_messages,
            on_tick=self._on_tick,
        )

        self._job_id: Optional[str] = None
        self._snapshot: Optional[DocumentJob] = None
        self._is_loading = False
        self._error: Optional[Exception] = None
        self._subscription: Optional[JobSubscription] = None
        self._terminal_seen = False
        self._generation = 0
        self._closed = False
        self._in_update = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._listeners: list[StateListener] = []

    async def __aenter__(self) -> "JobTrackingSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ── Exposed state ─────────────────────────────────────────────────────

    @property
    def job_id(self) -> Optional[str]:
        return self._job_id

    @property
    def snapshot(self) -> Optional[DocumentJob]:
        return self._snapshot

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def error(self) -> Optional[Exception]:
        return self._error

    @property
    def ticker_messages(self) -> list[TickerMessage]:
        return self._ticker.messages

    @property
    def ticker_active(self) -> bool:
        return self._ticker.active

    @property
    def feed(self) -> list[DisplayMessage]:
        highlights = self._snapshot.highlights if self._snapshot is not None else []
        return merge_feed(highlights, self._ticker.messages, self._feed_limit)

    @property
    def closed(self) -> bool:
        return self._closed

    def state(self) -> SessionState:
        return SessionState(
            snapshot=self._snapshot,
            is_loading=self._is_loading,
            error=self._error,
            feed=self.feed,
        )

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """Call *listener* with a fresh state after every change. Returns a remover."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def track(self, job_id: Optional[str]) -> None:
        """Follow *job_id*, or stop following anything when it is ``None``.

        Returns once the initial read has finished (or failed). Re-tracking the
        current id is a no-op unless its initial read failed, in which case
        the read and subscription are retried.
        """
        if self._closed:
            raise RuntimeError("session is closed")
        if job_id == self._job_id and self._error is None:
            return

        self._loop = asyncio.get_running_loop()
        self._teardown()
        self._job_id = job_id
        self._snapshot = None
        self._error = None
        self._terminal_seen = False
        self._ticker.clear()

        if job_id is None:
            self._is_loading = False
            self._notify()
            return

        generation = self._generation
        self._subscribe(job_id, generation)

        self._is_loading = True
        self._notify()
        try:
            fetched = await self._store.get_job(job_id)
        except Exception as exc:
            if generation != self._generation:
                return
            logger.warning("Initial read of job %s failed: %s", job_id, exc)
            self._is_loading = False
            self._error = exc
            self._notify()
            return

        if generation != self._generation:
            return
        self._is_loading = False
        if fetched is None:
            if self._snapshot is None:
                self._error = JobNotFoundError(job_id)
        elif self._snapshot is None:
            self._snapshot = fetched
            if fetched.is_terminal:
                self._terminal_seen = True
            elif fetched.status == JobStatus.PROCESSING and fetched.phase:
                self._start_ticker(fetched.phase)
        else:
            # A notification arrived while the read was in flight and is newer
            logger.debug("Discarding initial read of job %s superseded by a notification", job_id)
        self._notify()

    def close(self) -> None:
        """Release the subscription and timer. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        self._teardown()
        self._listeners.clear()

    def _teardown(self) -> None:
        # Invalidate every callback registered for the previous job id
        self._generation += 1
        try:
            self._ticker.stop()
        except Exception:
            logger.warning("Failed to stop ticker for job %s", self._job_id, exc_info=True)

        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            try:
                subscription.unsubscribe()
            except Exception:
                logger.warning("Failed to unsubscribe from job %s", self._job_id, exc_info=True)

    # ── Event handling ────────────────────────────────────────────────────

    def _subscribe(self, job_id: str, generation: int) -> None:
        loop = self._loop

        def deliver(payload: dict[str, Any]) -> None:
            try:
                loop.call_soon_threadsafe(self._on_notification, generation, payload)
            except RuntimeError:
                logger.debug("Dropping notification for job %s: event loop closed", job_id)

        self._subscription = self._store.subscribe(job_id, deliver)

    def _on_notification(self, generation: int, payload: dict[str, Any]) -> None:
        if generation != self._generation:
            return
        try:
            incoming = DocumentJob.model_validate(payload)
        except ValidationError as exc:
            logger.warning("Dropping malformed update for job %s: %s", self._job_id, exc)
            return
        if incoming.id != self._job_id:
            logger.warning("Dropping update for job %s on the channel of job %s", incoming.id, self._job_id)
            return

        previous_phase = self._snapshot.phase if self._snapshot is not None else None
        self._snapshot = incoming
        if incoming.is_terminal:
            self._terminal_seen = True
            self._ticker.stop()
        elif (
            incoming.status == JobStatus.PROCESSING
            and incoming.phase != previous_phase
            and not self._terminal_seen
        ):
            self._start_ticker(incoming.phase)
        self._notify()

    def _start_ticker(self, phase: Optional[str]) -> None:
        # The immediate first message is reported by the caller's own notify
        self._in_update = True
        try:
            self._ticker.start(phase)
        finally:
            self._in_update = False

    def _on_tick(self, message: TickerMessage) -> None:
        if not self._in_update:
            self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        state = self.state()
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Session listener failed for job %s", self._job_id)
