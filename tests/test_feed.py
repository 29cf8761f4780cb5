"""Unit tests for the message feed merger."""
from common.job_models import JobHighlight
from job_progress.feed import FeedSource, merge_feed
from job_progress.ticker import TickerMessage


def _highlights(*texts):
    return [JobHighlight(text=t) for t in texts]


def test_highlights_newest_first_then_ticker():
    highlights = _highlights("h1", "h2", "h3")
    ticker = [TickerMessage(id=5, text="t5", phase="x"), TickerMessage(id=4, text="t4", phase="x")]

    feed = merge_feed(highlights, ticker)

    assert [(m.id, m.text) for m in feed] == [
        (-1, "h3"),
        (-2, "h2"),
        (-3, "h1"),
        (5, "t5"),
        (4, "t4"),
    ]
    assert [m.source for m in feed] == [FeedSource.HIGHLIGHT] * 3 + [FeedSource.TICKER] * 2


def test_feed_is_capped_at_eight():
    highlights = _highlights(*[f"h{i}" for i in range(6)])
    ticker = [TickerMessage(id=i, text=f"t{i}", phase="x") for i in range(5, 0, -1)]

    feed = merge_feed(highlights, ticker)

    assert len(feed) == 8
    assert feed[0].text == "h5"
    assert [m.id for m in feed[-2:]] == [5, 4]


def test_highlights_alone_can_fill_the_feed():
    feed = merge_feed(_highlights(*[f"h{i}" for i in range(10)]), [TickerMessage(id=1, text="t", phase="x")])
    assert len(feed) == 8
    assert all(m.source is FeedSource.HIGHLIGHT for m in feed)
    assert feed[-1].id == -8


def test_highlights_are_formatted_by_type():
    highlights = [
        JobHighlight(text="5 evidence items", type="found"),
        JobHighlight(text="Led platform team", type="created"),
        JobHighlight(text="Python expertise", type="updated"),
        JobHighlight(text="React", type="skill"),
    ]
    assert [m.text for m in merge_feed(highlights, [])] == [
        "React",
        "~ Python expertise",
        "+ Led platform team",
        "Found: 5 evidence items",
    ]


def test_merge_is_pure():
    highlights = _highlights("a", "b")
    ticker = [TickerMessage(id=2, text="t2", phase="x")]

    first = merge_feed(highlights, ticker)
    second = merge_feed(highlights, ticker)

    assert first == second
    assert [h.text for h in highlights] == ["a", "b"]


def test_empty_inputs_and_custom_limit():
    assert merge_feed([], []) == []
    feed = merge_feed(_highlights("a", "b", "c"), [], limit=2)
    assert [m.text for m in feed] == ["c", "b"]
