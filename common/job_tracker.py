"""Firestore-backed writer for document ingestion jobs.

The ingestion pipeline uses this to publish progress; tracking sessions only
ever read the rows it writes.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional, Union

from common.config import settings
from common.firebase_init import _initialize_firebase
from common.job_models import (
    DocumentJob,
    JobHighlight,
    JobPhase,
    JobStatus,
    JobSummary,
    NewJobRequest,
)

logger = logging.getLogger(__name__)


class JobTrackerService:
    """Write operations on the ``document_jobs`` Firestore collection."""

    def __init__(self, db=None, collection: Optional[str] = None):
        self._db = db if db is not None else _initialize_firebase()
        self._collection = collection or settings.jobs_collection
        self._highlight_limit = settings.highlight_history_limit

    def _doc(self, job_id: str):
        return self._db.collection(self._collection).document(job_id)

    def _update(self, job_id: str, data: dict) -> None:
        data["updated_at"] = datetime.now(timezone.utc).isoformat()
        self._doc(job_id).update(data)

    def create_job(self, request: NewJobRequest) -> DocumentJob:
        """Create a new pending job and persist it."""
        now = datetime.now(timezone.utc).isoformat()
        job = DocumentJob(
            id=str(uuid.uuid4()),
            user_id=request.user_id,
            job_type=request.job_type,
            filename=request.filename,
            content_hash=request.content_hash,
            opportunity_id=request.opportunity_id,
            status=JobStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        self._doc(job.id).set(job.model_dump(mode="json", by_alias=True))
        logger.info("Created %s job %s for user %s", request.job_type.value, job.id, request.user_id)
        return job

    def get_job(self, job_id: str) -> Optional[DocumentJob]:
        """Fetch a job by ID. Returns ``None`` if not found."""
        doc = self._doc(job_id).get()
        if not doc.exists:
            return None
        return DocumentJob(**{**doc.to_dict(), "id": doc.id})

    def set_phase(
        self,
        job_id: str,
        phase: Union[JobPhase, str],
        progress: Optional[str] = None,
    ) -> None:
        """Enter *phase*; the first phase transition also stamps ``started_at``."""
        phase_value = phase.value if isinstance(phase, JobPhase) else phase
        data: dict = {
            "status": JobStatus.PROCESSING.value,
            "phase": phase_value,
            "progress": progress,
        }
        snapshot = self._doc(job_id).get()
        if not snapshot.exists or not (snapshot.to_dict() or {}).get("started_at"):
            data["started_at"] = datetime.now(timezone.utc).isoformat()
        self._update(job_id, data)
        logger.info("Job %s → phase %s", job_id, phase_value)

    def update_progress(self, job_id: str, progress: str) -> None:
        """Update progress within the current phase (e.g. ``"3/8"``)."""
        self._update(job_id, {"progress": progress})

    def add_highlight(self, job_id: str, text: str, type: str = "found") -> None:
        self.add_highlights(job_id, [JobHighlight(text=text, type=type)])

    def add_highlights(self, job_id: str, highlights: Iterable[JobHighlight]) -> None:
        """Append highlights, keeping only the most recent ones."""
        snapshot = self._doc(job_id).get()
        current = []
        if snapshot.exists:
            current = (snapshot.to_dict() or {}).get("highlights") or []
        merged = list(current) + [h.model_dump() for h in highlights]
        self._update(job_id, {"highlights": merged[-self._highlight_limit:]})

    def set_warning(self, job_id: str, warning: str) -> None:
        """Attach a non-fatal warning."""
        self._update(job_id, {"warning": warning})
        logger.warning("Job %s warning: %s", job_id, warning)

    def fail(self, job_id: str, error: str) -> None:
        """Mark the job as failed. The phase is cleared since the job is terminal."""
        now = datetime.now(timezone.utc).isoformat()
        self._update(
            job_id,
            {
                "status": JobStatus.FAILED.value,
                "phase": None,
                "error": error,
                "completed_at": now,
            },
        )
        logger.info("Job %s → failed: %s", job_id, error)

    def complete(self, job_id: str, summary: JobSummary, document_id: str) -> None:
        """Mark the job as completed with its result counters."""
        now = datetime.now(timezone.utc).isoformat()
        self._update(
            job_id,
            {
                "status": JobStatus.COMPLETED.value,
                "phase": None,
                "document_id": document_id,
                "summary": summary.model_dump(by_alias=True),
                "completed_at": now,
            },
        )
        logger.info("Job %s → completed", job_id)

    def list_jobs(self, user_id: str, limit: int = 20) -> list[DocumentJob]:
        """Return a user's most recent jobs, newest first."""
        docs = (
            self._db.collection(self._collection)
            .where("user_id", "==", user_id)
            .order_by("created_at", direction="DESCENDING")
            .limit(limit)
            .stream()
        )
        return [DocumentJob(**{**doc.to_dict(), "id": doc.id}) for doc in docs]

    def find_active_job(self, user_id: str, content_hash: str) -> Optional[DocumentJob]:
        """Find a non-terminal job for the same upload (prevents duplicate processing)."""
        active_statuses = [JobStatus.PENDING.value, JobStatus.PROCESSING.value]
        docs = (
            self._db.collection(self._collection)
            .where("user_id", "==", user_id)
            .where("content_hash", "==", content_hash)
            .where("status", "in", active_statuses)
            .limit(1)
            .stream()
        )
        for doc in docs:
            return DocumentJob(**{**doc.to_dict(), "id": doc.id})
        return None
