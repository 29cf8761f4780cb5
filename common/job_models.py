from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class JobPhase(str, Enum):
    VALIDATING = "validating"
    PARSING = "parsing"
    EXTRACTING = "extracting"
    EMBEDDINGS = "embeddings"
    SYNTHESIS = "synthesis"
    REFLECTION = "reflection"
    EVALUATION = "evaluation"
    ENRICHING = "enriching"
    RESEARCHING = "researching"


class JobType(str, Enum):
    RESUME = "resume"
    STORY = "story"
    OPPORTUNITY = "opportunity"


class JobHighlight(BaseModel):
    """A real event emitted by the ingestion pipeline (e.g. "Found 5 evidence items")."""

    text: str
    type: Optional[str] = None


class JobSummary(BaseModel):
    """Result counters written when a job completes."""

    model_config = ConfigDict(populate_by_name=True)

    document_id: Optional[str] = Field(None, alias="documentId")
    evidence_count: int = Field(0, alias="evidenceCount")
    work_history_count: int = Field(0, alias="workHistoryCount")
    claims_created: int = Field(0, alias="claimsCreated")
    claims_updated: int = Field(0, alias="claimsUpdated")


class DocumentJob(BaseModel):
    """
    One row of the ``document_jobs`` collection.

    The row is written server-side only. ``phase`` is meaningful while the job
    is processing, ``summary`` once it completed and ``error`` once it failed.
    ``phase`` stays a plain string so callers can supply their own phase
    catalogs; the known values are listed in :class:`JobPhase`.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    status: JobStatus = JobStatus.PENDING
    phase: Optional[str] = None
    progress: Optional[Union[str, int, float]] = None
    highlights: list[JobHighlight] = Field(default_factory=list)
    warning: Optional[str] = None
    error: Optional[str] = None
    summary: Optional[JobSummary] = None

    user_id: Optional[str] = None
    document_id: Optional[str] = None
    opportunity_id: Optional[str] = None
    job_type: Optional[JobType] = None
    filename: Optional[str] = None
    content_hash: Optional[str] = None
    created_at: Optional[str] = None
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("highlights", mode="before")
    @classmethod
    def _coerce_highlights(cls, value):
        # Rows may carry bare strings or null instead of structured events
        if value is None:
            return []
        return [{"text": item} if isinstance(item, str) else item for item in value]

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


class NewJobRequest(BaseModel):
    """Fields supplied when the ingestion pipeline registers a new job."""

    user_id: str
    job_type: JobType
    filename: Optional[str] = None
    content_hash: Optional[str] = None
    opportunity_id: Optional[str] = None
