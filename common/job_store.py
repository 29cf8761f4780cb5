"""Read-side access to ``document_jobs`` rows: point reads and change subscriptions."""

from __future__ import annotations

import asyncio
import copy
import logging
import threading
from typing import Any, Callable, Optional, Protocol, Union

from google.api_core import exceptions as google_exceptions
from pydantic import ValidationError

from common.config import settings
from common.firebase_init import _initialize_firebase
from common.job_models import DocumentJob

logger = logging.getLogger(__name__)

JobCallback = Callable[[dict[str, Any]], None]


class JobStoreError(Exception):
    """The job store could not serve a request."""


class JobNotFoundError(JobStoreError):
    def __init__(self, job_id: str):
        super().__init__(f"Job {job_id} not found")
        self.job_id = job_id


class JobSubscription(Protocol):
    def unsubscribe(self) -> None: ...


class JobSnapshotStore(Protocol):
    """What a tracking session needs from the store.

    ``subscribe`` callbacks receive the full replacement row as a dict and may
    be invoked from any thread.
    """

    async def get_job(self, job_id: str) -> Optional[DocumentJob]: ...

    def subscribe(self, job_id: str, callback: JobCallback) -> JobSubscription: ...


def _row_to_job(job_id: str, row: dict[str, Any]) -> DocumentJob:
    try:
        return DocumentJob.model_validate({**row, "id": job_id})
    except ValidationError as exc:
        raise JobStoreError(f"Malformed row for job {job_id}") from exc


# ── Firestore ────────────────────────────────────────────────────────────────


class _WatchSubscription:
    """Wraps a Firestore ``Watch`` so that unsubscribing twice is harmless."""

    def __init__(self, watch):
        self._watch = watch

    def unsubscribe(self) -> None:
        watch, self._watch = self._watch, None
        if watch is not None:
            watch.unsubscribe()


class FirestoreJobStore:
    """``document_jobs`` rows served from Firestore."""

    def __init__(self, db=None, collection: Optional[str] = None):
        self._db = db if db is not None else _initialize_firebase()
        self._collection = collection or settings.jobs_collection

    def _doc(self, job_id: str):
        return self._db.collection(self._collection).document(job_id)

    async def get_job(self, job_id: str) -> Optional[DocumentJob]:
        """Fetch a job by ID. Returns ``None`` if not found."""
        try:
            doc = await asyncio.to_thread(self._doc(job_id).get)
        except google_exceptions.GoogleAPICallError as exc:
            raise JobStoreError(f"Failed to read job {job_id}: {exc}") from exc
        if not doc.exists:
            return None
        return _row_to_job(doc.id, doc.to_dict())

    def subscribe(self, job_id: str, callback: JobCallback) -> JobSubscription:
        """Watch one job document; *callback* runs on the Firestore watch thread."""

        def on_snapshot(doc_snapshots, changes, read_time):
            for doc in doc_snapshots:
                if not doc.exists:
                    continue
                callback({**doc.to_dict(), "id": doc.id})

        watch = self._doc(job_id).on_snapshot(on_snapshot)
        logger.debug("Watching %s/%s", self._collection, job_id)
        return _WatchSubscription(watch)


# ── In-process ───────────────────────────────────────────────────────────────


class _MemorySubscription:
    def __init__(self, store: "InMemoryJobStore", job_id: str, callback: JobCallback):
        self._store = store
        self._job_id = job_id
        self._callback = callback
        self._active = True

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._store._remove_subscriber(self._job_id, self._callback)


class InMemoryJobStore:
    """Thread-safe in-process job rows for local development and tests.

    ``put`` and ``update`` replace the stored row and push the full row to every
    subscriber of that job, mirroring a row-level change feed.
    """

    def __init__(self):
        self._rows: dict[str, dict[str, Any]] = {}
        self._subscribers: dict[str, list[JobCallback]] = {}
        self._lock = threading.Lock()

    async def get_job(self, job_id: str) -> Optional[DocumentJob]:
        with self._lock:
            row = copy.deepcopy(self._rows.get(job_id))
        if row is None:
            return None
        return _row_to_job(job_id, row)

    def subscribe(self, job_id: str, callback: JobCallback) -> JobSubscription:
        with self._lock:
            self._subscribers.setdefault(job_id, []).append(callback)
        return _MemorySubscription(self, job_id, callback)

    def subscriber_count(self, job_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get(job_id, []))

    def put(self, job: Union[DocumentJob, dict[str, Any]]) -> None:
        """Insert or replace a full row."""
        if isinstance(job, DocumentJob):
            row = job.model_dump(mode="json", by_alias=True)
        else:
            row = dict(job)
        job_id = row["id"]
        with self._lock:
            self._rows[job_id] = row
        self._publish(job_id, row)

    def update(self, job_id: str, **fields: Any) -> None:
        """Merge *fields* into an existing row and publish the result."""
        with self._lock:
            if job_id not in self._rows:
                raise JobNotFoundError(job_id)
            row = {**self._rows[job_id], **fields}
            self._rows[job_id] = row
        self._publish(job_id, row)

    def publish_raw(self, job_id: str, payload: dict[str, Any]) -> None:
        """Push *payload* to subscribers without storing it."""
        self._publish(job_id, payload)

    def _remove_subscriber(self, job_id: str, callback: JobCallback) -> None:
        with self._lock:
            callbacks = self._subscribers.get(job_id, [])
            if callback in callbacks:
                callbacks.remove(callback)
            if not callbacks:
                self._subscribers.pop(job_id, None)

    def _publish(self, job_id: str, row: dict[str, Any]) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(job_id, []))
        for callback in callbacks:
            try:
                callback(copy.deepcopy(row))
            except Exception:
                logger.exception("Subscriber for job %s raised", job_id)
