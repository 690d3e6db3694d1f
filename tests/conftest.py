"""
Pytest shared fixtures for PTR-Sweep.
"""
import asyncio

import pytest

from sweep.resolver import ResolverHandle, ReverseLookupError


class FakeResolverHandle(ResolverHandle):
    """
    An in-memory resolver. Addresses missing from `records` fail the way an
    NXDOMAIN would; `delays` holds per-address latency in seconds.
    """

    description = "fake resolver"

    def __init__(self, records=None, delays=None):
        self.records = records or {}
        self.delays = delays or {}
        self.calls = []
        self.call_times = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def reverse(self, address):
        self.calls.append(address)
        self.call_times.append(asyncio.get_running_loop().time())
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.delays.get(address, 0)
            if delay:
                await asyncio.sleep(delay)
            if address not in self.records:
                raise ReverseLookupError(address, OSError("no PTR record"))
            return list(self.records[address])
        finally:
            self.in_flight -= 1


# The resolver contents used by the end-to-end scenarios.
SAMPLE_RECORDS = {
    "8.8.8.8": ["dns.google."],
    "9.9.9.9": ["dns9.quad9.net."],
    "192.0.2.10": ["mail.example.com.", "www.example.com."],
}


@pytest.fixture
def fake_handle():
    return FakeResolverHandle(records=dict(SAMPLE_RECORDS))
