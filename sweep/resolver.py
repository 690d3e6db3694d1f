#!/usr/bin/env python3
"""
PTR-Sweep - Resolver Binding
Builds the name-resolution handle every lookup task shares. The handle is
either bound to the host's own resolution mechanism or to one explicitly
configured DNS server reached over TCP or UDP.
"""
import asyncio
import ipaddress
import logging
import socket
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

import dns.asyncresolver
import dns.exception
import dns.rdatatype

from .config import SYSTEM_RESOLVER_WORKERS
from .models import ResolverConfig, Transport

logger = logging.getLogger(__name__)


class ReverseLookupError(Exception):
    """A single reverse lookup failed. Never raised at bind time."""

    def __init__(self, address: str, reason: BaseException):
        super().__init__(f"{address}: {type(reason).__name__} - {reason}")
        self.address = address
        self.reason = reason


class ResolverHandle:
    """Common interface of the bound resolvers."""

    description = "resolver"

    async def reverse(self, address: str) -> List[str]:
        """
        Returns the names the resolver holds for `address`, in the order the
        resolver returned them. Raises ReverseLookupError on any failure.
        """
        raise NotImplementedError

    def close(self):
        """Releases whatever the handle holds. Safe to call more than once."""


class SystemResolverHandle(ResolverHandle):
    """
    Resolves through the platform resolver (hosts file, NSS, resolv.conf).

    The blocking calls run on a thread pool owned by this handle, so they
    never compete with the event loop's default executor.
    """

    description = "system default resolver"

    def __init__(self, max_workers: Optional[int] = None):
        self.max_workers = max_workers or SYSTEM_RESOLVER_WORKERS
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="ptr-lookup"
        )

    async def reverse(self, address: str) -> List[str]:
        # gethostbyaddr would happily forward-resolve a hostname first.
        try:
            ipaddress.ip_address(address)
        except ValueError as e:
            raise ReverseLookupError(address, e) from e

        loop = asyncio.get_running_loop()
        try:
            hostname, aliases, _ = await loop.run_in_executor(
                self._executor, socket.gethostbyaddr, address
            )
        except (OSError, UnicodeError, ValueError) as e:
            raise ReverseLookupError(address, e) from e
        return [_absolute(name) for name in (hostname, *aliases)]

    def close(self):
        """Shutdown thread pool"""
        self._executor.shutdown(wait=False)


def _absolute(name: str) -> str:
    """The platform returns relative names; DNS answers carry the root dot."""
    return name if name.endswith(".") else f"{name}."


class DnsResolverHandle(ResolverHandle):
    """Sends every PTR query to one explicit server, bypassing the system configuration."""

    def __init__(self, config: ResolverConfig):
        self.config = config
        self.tcp = config.transport is Transport.STREAM
        # configure=False keeps /etc/resolv.conf out of the picture entirely.
        self.resolver = dns.asyncresolver.Resolver(configure=False)
        # The port must be set first: nameservers pick it up on assignment.
        self.resolver.port = config.port
        self.resolver.nameservers = [config.resolver_host]
        if config.timeout is not None:
            self.resolver.timeout = config.timeout
            self.resolver.lifetime = config.timeout
        self.description = f"{config.resolver_host}:{config.port}/{config.transport.value}"

    async def reverse(self, address: str) -> List[str]:
        try:
            answer = await self.resolver.resolve_address(address, tcp=self.tcp)
        except (dns.exception.DNSException, OSError, ValueError) as e:
            raise ReverseLookupError(address, e) from e
        return [
            rdata.target.to_text()
            for rdata in answer
            if rdata.rdtype == dns.rdatatype.PTR
        ]


def bind(config: ResolverConfig, max_workers: Optional[int] = None) -> ResolverHandle:
    """
    Returns the handle described by `config`. Performs no network I/O; any
    connection is made lazily inside each lookup.

    `max_workers` sizes the system resolver's thread pool and is ignored
    for an explicit resolver, whose lookups need no threads.
    """
    if config.uses_system_resolver:
        handle: ResolverHandle = SystemResolverHandle(max_workers=max_workers)
    else:
        handle = DnsResolverHandle(config)
    logger.debug(f"Lookups will use the {handle.description}")
    return handle
