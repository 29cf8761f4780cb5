import sys
from pathlib import Path

import pytest

# Ensure repo root is on sys.path so `import common...` works in tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from common.job_store import InMemoryJobStore  # noqa: E402


@pytest.fixture
def store():
    """Empty in-memory job store."""
    return InMemoryJobStore()


@pytest.fixture
def catalog():
    """Small ticker catalog with two phases."""
    return {
        "extracting": ["reading your story...", "scanning achievements...", "finding skills..."],
        "classifying": ["sorting claims...", "grouping skills..."],
    }


@pytest.fixture
def make_row():
    """Build a raw ``document_jobs`` row with sensible defaults."""

    def _make(job_id="job-1", **fields):
        row = {
            "id": job_id,
            "status": "pending",
            "phase": None,
            "progress": None,
            "highlights": [],
            "warning": None,
            "error": None,
            "summary": None,
            "job_type": "resume",
        }
        row.update(fields)
        return row

    return _make
