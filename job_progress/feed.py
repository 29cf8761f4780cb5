"""Merges real highlights and ticker messages into one display feed."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from common.config import settings
from common.job_catalog import format_highlight
from common.job_models import JobHighlight
from job_progress.ticker import TickerMessage


class FeedSource(str, Enum):
    HIGHLIGHT = "highlight"
    TICKER = "ticker"


@dataclass(frozen=True)
class DisplayMessage:
    """One feed entry.

    ``id`` is negative for real highlights (-1 is the newest) and the ticker's
    own positive id for synthetic messages; ``source`` says which it is.
    """

    id: int
    text: str
    source: FeedSource


def merge_feed(
    highlights: Sequence[JobHighlight],
    ticker_messages: Sequence[TickerMessage],
    limit: Optional[int] = None,
) -> list[DisplayMessage]:
    """Newest highlights first, then ticker messages (already newest first), capped at *limit*."""
    limit = limit if limit is not None else settings.feed_max_messages
    feed = [
        DisplayMessage(id=-(position + 1), text=format_highlight(highlight), source=FeedSource.HIGHLIGHT)
        for position, highlight in enumerate(reversed(highlights))
    ]
    feed.extend(
        DisplayMessage(id=message.id, text=message.text, source=FeedSource.TICKER)
        for message in ticker_messages
    )
    return feed[:limit]
