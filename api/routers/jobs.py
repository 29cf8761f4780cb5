"""
Document job endpoints: point reads, phase catalogs and the live progress stream.
"""

import asyncio
import contextlib
import logging

from fastapi import APIRouter, Depends, HTTPException, Path, Request
from fastapi.responses import StreamingResponse

from api.dependencies import get_job_store
from api.models.schemas import JobProgressEvent, PhaseInfo, PhaseListResponse
from common.config import settings
from common.job_catalog import PHASE_LABELS
from common.job_models import DocumentJob, JobType
from common.job_store import JobSnapshotStore, JobStoreError
from job_progress import JobTrackingSession, SessionState, phases_for

logger = logging.getLogger(__name__)

router = APIRouter()


def _is_final(state: SessionState) -> bool:
    if state.is_loading:
        return False
    if state.error is not None:
        return True
    return state.snapshot is not None and state.snapshot.is_terminal


@router.get("/phases/{job_type}", response_model=PhaseListResponse)
async def list_phases(job_type: JobType):
    """Ordered phases and their labels for a job type."""
    return PhaseListResponse(
        job_type=job_type.value,
        phases=[PhaseInfo(phase=p, label=PHASE_LABELS.get(p, p)) for p in phases_for(job_type)],
    )


@router.get("/{job_id}", response_model=DocumentJob)
async def get_job(
    job_id: str = Path(..., description="Document job ID"),
    store: JobSnapshotStore = Depends(get_job_store),
):
    """Current snapshot of a job."""
    try:
        job = await store.get_job(job_id)
    except JobStoreError as e:
        logger.warning("Failed to read job %s: %s", job_id, e)
        raise HTTPException(status_code=502, detail=f"Failed to read job: {str(e)}")
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found")
    return job


@router.get("/{job_id}/progress")
async def stream_job_progress(
    request: Request,
    job_id: str = Path(..., description="Document job ID"),
    store: JobSnapshotStore = Depends(get_job_store),
):
    """
    Stream job progress as Server-Sent Events.

    Each event carries the snapshot, loading flag, error, merged feed and phase
    steps. The stream ends after the job reaches a terminal status or the
    initial read fails; the tracking session is closed when the client leaves.
    """

    async def event_stream():
        queue: asyncio.Queue = asyncio.Queue()
        async with JobTrackingSession(store) as session:
            session.add_listener(queue.put_nowait)
            track_task = asyncio.create_task(session.track(job_id))
            try:
                while True:
                    try:
                        state = await asyncio.wait_for(queue.get(), timeout=settings.stream_heartbeat_seconds)
                    except asyncio.TimeoutError:
                        if await request.is_disconnected():
                            logger.info("Progress stream for job %s disconnected", job_id)
                            break
                        yield ": keep-alive\n\n"
                        continue

                    event = JobProgressEvent.from_state(job_id, state)
                    yield f"data: {event.model_dump_json(by_alias=True)}\n\n"
                    if _is_final(state):
                        break
            finally:
                if not track_task.done():
                    track_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await track_task

    return StreamingResponse(event_stream(), media_type="text/event-stream")
