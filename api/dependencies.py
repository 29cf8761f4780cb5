import logging
from functools import lru_cache

from common.config import settings
from common.job_store import FirestoreJobStore, InMemoryJobStore, JobSnapshotStore

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_job_store() -> JobSnapshotStore:
    """Shared job store for all requests, chosen by JOB_STORE_BACKEND."""
    if settings.job_store_backend == "memory":
        logger.info("Using in-memory job store")
        return InMemoryJobStore()
    return FirestoreJobStore()
