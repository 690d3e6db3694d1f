#!/usr/bin/env python3
"""
PTR-Sweep - Orchestrator Module
Wires the resolver binding, dispatcher, supervisory waiter and collector
together for one run over an input stream.
"""
import asyncio
import logging
from typing import TextIO

from .collector import ResultChannel, collect
from .dispatcher import Dispatcher, close_when_done, read_addresses
from .models import SweepSettings, SweepSummary
from .resolver import bind

logger = logging.getLogger(__name__)


async def run_sweep(settings: SweepSettings, stream: TextIO, out: TextIO) -> SweepSummary:
    """
    Looks up every address in `stream` and writes result lines to `out` as
    they arrive. Returns once the input is exhausted, every lookup has
    completed and the last result line has been written.
    """
    handle = bind(settings.resolver, max_workers=settings.concurrency or None)
    channel = ResultChannel()
    summary = SweepSummary()
    dispatcher = Dispatcher(
        handle,
        channel,
        wait_ms=settings.wait_ms,
        concurrency=settings.concurrency,
        summary=summary,
    )

    # The collector drains while the dispatcher is still reading input.
    collector = asyncio.create_task(collect(channel, out))
    try:
        await dispatcher.dispatch(read_addresses(stream))
        await asyncio.gather(close_when_done(dispatcher, channel), collector)
    finally:
        handle.close()

    logger.debug(
        f"Sweep complete: {summary.dispatched} dispatched, {summary.succeeded} resolved, "
        f"{summary.failed} failed, {summary.results} result line(s)"
    )
    return summary
