from typing import Optional, List

from pydantic import BaseModel, Field

from common.job_catalog import PHASE_LABELS
from common.job_models import DocumentJob
from job_progress import SessionState, phase_steps, phases_for


class PhaseInfo(BaseModel):
    phase: str
    label: str


class PhaseListResponse(BaseModel):
    """Ordered phases for one job type."""

    job_type: str
    phases: List[PhaseInfo]


class FeedMessage(BaseModel):
    id: int
    text: str
    source: str


class PhaseStepResponse(BaseModel):
    phase: str
    label: str
    state: str
    detail: Optional[str] = None


class JobProgressEvent(BaseModel):
    """One Server-Sent Event of the progress stream."""

    job_id: str
    snapshot: Optional[DocumentJob] = None
    is_loading: bool = False
    error: Optional[str] = None
    feed: List[FeedMessage] = Field(default_factory=list)
    steps: List[PhaseStepResponse] = Field(default_factory=list)

    @classmethod
    def from_state(cls, job_id: str, state: SessionState) -> "JobProgressEvent":
        snapshot = state.snapshot
        steps: List[PhaseStepResponse] = []
        if snapshot is not None and snapshot.job_type is not None:
            steps = [
                PhaseStepResponse(phase=s.phase, label=s.label, state=s.state.value, detail=s.detail)
                for s in phase_steps(phases_for(snapshot.job_type), snapshot, PHASE_LABELS)
            ]
        return cls(
            job_id=job_id,
            snapshot=snapshot,
            is_loading=state.is_loading,
            error=str(state.error) if state.error is not None else None,
            feed=[FeedMessage(id=m.id, text=m.text, source=m.source.value) for m in state.feed],
            steps=steps,
        )
