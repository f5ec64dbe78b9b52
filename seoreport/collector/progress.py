"""
Progress reporting.

A run reports ``(step, percent)`` at each phase boundary, either to a plain
callback or into a ``ProgressStream`` consumed by exactly one subscriber.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int], None]


@dataclass(frozen=True)
class ProgressEvent:
    step: str
    percent: int


class ProgressStream:
    """
    Single-producer, single-subscriber event sequence.

    Usage:
        stream = ProgressStream()
        task = asyncio.create_task(orchestrator_run(on_progress=stream.emit))
        async for event in stream:
            print(event.percent, event.step)

    Finite and not restartable: ``close()`` ends iteration, a second
    subscriber is rejected, and events emitted after the subscriber has
    detached are dropped.
    """

    def __init__(self):
        self._queue: "asyncio.Queue[Optional[ProgressEvent]]" = asyncio.Queue()
        self._subscribed = False
        self._detached = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, step: str, percent: int) -> None:
        if self._closed or self._detached:
            return
        self._queue.put_nowait(ProgressEvent(step, percent))

    __call__ = emit

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(None)

    def __aiter__(self) -> AsyncIterator[ProgressEvent]:
        if self._subscribed:
            raise RuntimeError("ProgressStream already has a subscriber")
        self._subscribed = True
        return self._events()

    async def _events(self) -> AsyncIterator[ProgressEvent]:
        try:
            while True:
                event = await self._queue.get()
                if event is None:
                    return
                yield event
        finally:
            self._detached = True
