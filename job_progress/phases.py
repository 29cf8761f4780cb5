"""Phase progress derived from a job snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Sequence, Union

from common.job_catalog import PHASE_LABELS, PHASES_BY_JOB_TYPE
from common.job_models import DocumentJob, JobStatus, JobType


class PhaseState(str, Enum):
    DONE = "done"
    CURRENT = "current"
    PENDING = "pending"


@dataclass(frozen=True)
class PhaseStep:
    phase: str
    label: str
    state: PhaseState
    detail: Optional[str] = None


def phases_for(job_type: Union[JobType, str]) -> list[str]:
    """Ordered phase list for a job type. Raises ``ValueError`` for unknown types."""
    return list(PHASES_BY_JOB_TYPE[JobType(job_type)])


def completed_phases(phases: Sequence[str], snapshot: Optional[DocumentJob]) -> set[str]:
    """Phases that are finished for *snapshot* within the ordered *phases*.

    A completed job has finished every phase. Otherwise every phase strictly
    before the current one is finished; a phase missing from *phases* finishes
    nothing.
    """
    if snapshot is None:
        return set()
    if snapshot.status == JobStatus.COMPLETED:
        return set(phases)
    if snapshot.phase and snapshot.phase in phases:
        return set(phases[: list(phases).index(snapshot.phase)])
    return set()


def phase_steps(
    phases: Sequence[str],
    snapshot: Optional[DocumentJob],
    labels: Optional[Mapping[str, str]] = None,
) -> list[PhaseStep]:
    """Render-ready done/current/pending state for every phase, in order."""
    labels = labels if labels is not None else PHASE_LABELS
    done = completed_phases(phases, snapshot)
    current = snapshot.phase if snapshot is not None else None

    steps = []
    for phase in phases:
        if phase in done:
            state = PhaseState.DONE
        elif phase == current:
            state = PhaseState.CURRENT
        else:
            state = PhaseState.PENDING

        detail = None
        if state == PhaseState.CURRENT and snapshot.progress not in (None, ""):
            detail = f"batch {snapshot.progress}"
        steps.append(PhaseStep(phase=phase, label=labels.get(phase, phase), state=state, detail=detail))
    return steps
