"""Unit test for settings configuration."""
import pytest
from pydantic import ValidationError

from common.config import JobSyncSettings


def test_default_settings():
    """Defaults match the reference ticker and feed sizes."""
    settings = JobSyncSettings(_env_file=None)
    assert settings.jobs_collection == "document_jobs"
    assert settings.job_store_backend == "firestore"
    assert settings.ticker_interval_seconds == 4.0
    assert settings.ticker_max_messages == 5
    assert settings.feed_max_messages == 8
    assert settings.highlight_history_limit == 20


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("JOB_STORE_BACKEND", "memory")
    monkeypatch.setenv("TICKER_INTERVAL_SECONDS", "0.5")
    settings = JobSyncSettings(_env_file=None)
    assert settings.job_store_backend == "memory"
    assert settings.ticker_interval_seconds == 0.5


def test_non_positive_limits_rejected():
    with pytest.raises(ValidationError):
        JobSyncSettings(_env_file=None, feed_max_messages=0)
    with pytest.raises(ValidationError):
        JobSyncSettings(_env_file=None, ticker_interval_seconds=-1)
