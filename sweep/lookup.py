#!/usr/bin/env python3
"""
PTR-Sweep - Lookup Task
One reverse lookup for one address. Failures stay inside the task: they
produce no result lines and are only reported through the returned outcome.
"""
import logging
from typing import List

from .collector import ResultChannel
from .models import LookupOutcome, LookupResult
from .resolver import ResolverHandle, ReverseLookupError

logger = logging.getLogger(__name__)


async def lookup_address(handle: ResolverHandle, address: str) -> LookupOutcome:
    """Issues exactly one reverse query for `address`."""
    try:
        names = await handle.reverse(address)
    except ReverseLookupError as e:
        logger.debug(f"Lookup failed for {address!r}: {e.reason!r}")
        return LookupOutcome(address=address, error=e)
    return LookupOutcome(address=address, names=names)


async def resolve(handle: ResolverHandle, address: str) -> List[str]:
    """The resolved names for `address`; empty if the lookup failed."""
    outcome = await lookup_address(handle, address)
    return outcome.names


async def run_lookup(
    handle: ResolverHandle, address: str, channel: ResultChannel
) -> LookupOutcome:
    """Looks up `address` and pushes one LookupResult per name into `channel`."""
    outcome = await lookup_address(handle, address)
    for name in outcome.names:
        channel.put(LookupResult(queried_address=address, resolved_name=name))
    return outcome
