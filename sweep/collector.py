#!/usr/bin/env python3
"""
PTR-Sweep - Collector
Fan-in of every lookup task's results into a single output stream.
"""
import asyncio
import logging
from typing import AsyncIterator, TextIO

from .models import LookupResult

logger = logging.getLogger(__name__)

_CLOSED = object()


class ResultChannel:
    """
    Unbounded multi-producer, single-consumer stream of LookupResults.

    Producers call `put`; the consumer iterates with `async for`. Iteration
    ends once `close` has been called and every queued result was consumed.
    """

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, result: LookupResult):
        if self._closed:
            raise RuntimeError("put() on a closed result channel")
        self._queue.put_nowait(result)

    def close(self):
        if self._closed:
            raise RuntimeError("Result channel closed twice")
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    async def __aiter__(self) -> AsyncIterator[LookupResult]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            yield item


async def collect(channel: ResultChannel, out: TextIO) -> int:
    """
    Writes each result to `out` as it arrives, one line each, in arrival
    order. Returns the number of lines written once the channel is closed
    and drained.
    """
    written = 0
    async for result in channel:
        out.write(result.to_line() + "\n")
        out.flush()
        written += 1
    logger.debug(f"Collector finished after {written} result line(s)")
    return written
