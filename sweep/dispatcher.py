#!/usr/bin/env python3
"""
PTR-Sweep - Dispatcher
Reads addresses one at a time and launches a concurrent lookup task for each.
"""
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import AsyncIterator, Iterable, List, Optional, Set, TextIO, Union

from .collector import ResultChannel
from .lookup import run_lookup
from .models import LookupOutcome, SweepSummary
from .resolver import ResolverHandle

logger = logging.getLogger(__name__)


async def read_addresses(stream: TextIO) -> AsyncIterator[str]:
    """
    Yields one address per input line with its line terminator removed.

    Blocking reads run on a single thread reserved for the input, so a
    backlog of lookups in any other executor never delays the next line.
    """
    loop = asyncio.get_running_loop()
    reader = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ptr-input")
    try:
        while True:
            line = await loop.run_in_executor(reader, stream.readline)
            if not line:
                return
            yield line.rstrip("\r\n")
    finally:
        reader.shutdown(wait=False)


class Dispatcher:
    """
    Launches one lookup task per address.

    `tasks` is the set of outstanding lookups: it grows on each launch and
    shrinks as each task completes, whatever its outcome. With `concurrency`
    left at 0 there is no limit on how many lookups run at once; a positive
    value makes the dispatch loop wait for a free slot before launching.
    """

    def __init__(
        self,
        handle: ResolverHandle,
        channel: ResultChannel,
        wait_ms: int = 0,
        concurrency: int = 0,
        summary: Optional[SweepSummary] = None,
    ):
        self.handle = handle
        self.channel = channel
        self.wait_ms = wait_ms
        self.summary = summary if summary is not None else SweepSummary()
        self.tasks: Set[asyncio.Task] = set()
        self.outcomes: List[LookupOutcome] = []
        self._slots = asyncio.Semaphore(concurrency) if concurrency > 0 else None
        self._finished = False

    @property
    def outstanding(self) -> int:
        return len(self.tasks)

    @property
    def finished(self) -> bool:
        """True once the input is exhausted and no further task will be launched."""
        return self._finished

    async def dispatch(self, addresses: Union[AsyncIterator[str], Iterable[str]]) -> int:
        """
        Launches a lookup for every address until the input ends, pausing
        `wait_ms` between launches. Does not wait for the launched lookups.
        An input error stops the loop but leaves running lookups untouched.
        Returns the number of tasks launched.
        """
        try:
            if hasattr(addresses, "__aiter__"):
                async for address in addresses:
                    await self._launch_and_pause(address)
            else:
                for address in addresses:
                    await self._launch_and_pause(address)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading input: {e}")
        finally:
            self._finished = True
        logger.debug(
            f"Dispatch finished: {self.summary.dispatched} launched, "
            f"{self.outstanding} still outstanding"
        )
        return self.summary.dispatched

    async def _launch_and_pause(self, address: str):
        if self._slots is not None:
            await self._slots.acquire()
        self._launch(address)
        if self.wait_ms > 0:
            await asyncio.sleep(self.wait_ms / 1000)

    def _launch(self, address: str) -> asyncio.Task:
        task = asyncio.create_task(run_lookup(self.handle, address, self.channel))
        self.tasks.add(task)
        self.summary.dispatched += 1
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task):
        self.tasks.discard(task)
        if self._slots is not None:
            self._slots.release()
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            # run_lookup handles lookup errors itself; anything here is a bug.
            logger.error(f"Lookup task crashed: {type(exc).__name__} - {exc}")
            self.summary.failed += 1
            return
        outcome = task.result()
        self.outcomes.append(outcome)
        self.summary.record(outcome)

    async def join(self):
        """Blocks until every launched task has completed."""
        if not self._finished:
            raise RuntimeError("join() called before dispatch finished")
        while self.tasks:
            await asyncio.gather(*list(self.tasks), return_exceptions=True)


async def close_when_done(dispatcher: Dispatcher, channel: ResultChannel):
    """Supervisory waiter: joins every lookup, then closes the result channel once."""
    await dispatcher.join()
    channel.close()
