"""Synthetic, phase-appropriate activity messages shown between real updates."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence

from common.config import settings
from common.job_catalog import TICKER_MESSAGES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickerMessage:
    id: int
    text: str
    phase: str


class TickerGenerator:
    """Round-robin ticker over a phase-keyed message catalog.

    ``start`` emits the first message immediately and then one more every
    ``interval`` seconds on the running event loop. At most one timer is ever
    scheduled; ``start`` and ``stop`` cancel it synchronously, so no tick of a
    replaced timer can fire afterwards. Message ids belong to this instance and
    are never reused.
    """

    def __init__(
        self,
        catalog: Optional[Mapping[str, Sequence[str]]] = None,
        *,
        interval: Optional[float] = None,
        max_messages: Optional[int] = None,
        on_tick: Optional[Callable[[TickerMessage], None]] = None,
    ):
        self._catalog = catalog if catalog is not None else TICKER_MESSAGES
        self._interval = interval if interval is not None else settings.ticker_interval_seconds
        self._max_messages = max_messages if max_messages is not None else settings.ticker_max_messages
        self._on_tick = on_tick

        self._messages: list[TickerMessage] = []
        self._last_id = 0
        self._handle: Optional[asyncio.TimerHandle] = None
        self._phase: Optional[str] = None
        self._candidates: tuple[str, ...] = ()
        self._index = 0

    @property
    def messages(self) -> list[TickerMessage]:
        """Stored messages, newest first."""
        return list(self._messages)

    @property
    def active(self) -> bool:
        return self._handle is not None

    @property
    def phase(self) -> Optional[str]:
        return self._phase

    def start(self, phase: Optional[str]) -> None:
        """Replace any running timer with one for *phase*.

        A phase with no catalog entry leaves the ticker stopped.
        """
        self.stop()
        if not phase:
            return
        candidates = tuple(self._catalog.get(phase) or ())
        if not candidates:
            logger.debug("No ticker messages for phase %s", phase)
            return

        loop = asyncio.get_running_loop()
        self._phase = phase
        self._candidates = candidates
        self._index = 0
        # on_tick may restart or stop the ticker; the handle must exist first
        self._handle = loop.call_later(self._interval, self._tick)
        self._emit_next()

    def stop(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.cancel()
        self._phase = None
        self._candidates = ()

    def clear(self) -> None:
        """Drop stored messages. Ids keep increasing."""
        self._messages = []

    def _tick(self) -> None:
        self._handle = None
        if not self._candidates:
            return
        self._handle = asyncio.get_running_loop().call_later(self._interval, self._tick)
        self._emit_next()

    def _emit_next(self) -> None:
        text = self._candidates[self._index % len(self._candidates)]
        self._index += 1
        self._last_id += 1
        message = TickerMessage(id=self._last_id, text=text, phase=self._phase)
        self._messages = [message, *self._messages][: self._max_messages]
        if self._on_tick is not None:
            self._on_tick(message)
