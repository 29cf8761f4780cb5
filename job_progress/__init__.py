"""
Client-side progress tracking for document ingestion jobs.

Follows a job row through the store's change feed, fills quiet periods with
phase-appropriate ticker messages and merges both into one display feed.
"""

from .feed import DisplayMessage, FeedSource, merge_feed
from .phases import PhaseState, PhaseStep, completed_phases, phase_steps, phases_for
from .session import JobTrackingSession, SessionState
from .ticker import TickerGenerator, TickerMessage

__all__ = [
    "DisplayMessage",
    "FeedSource",
    "merge_feed",
    "PhaseState",
    "PhaseStep",
    "completed_phases",
    "phase_steps",
    "phases_for",
    "JobTrackingSession",
    "SessionState",
    "TickerGenerator",
    "TickerMessage",
]
