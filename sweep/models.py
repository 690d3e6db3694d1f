#!/usr/bin/env python3
"""
PTR-Sweep - Data Models
Immutable configuration values and the transient records that flow
between the dispatcher, the lookup tasks and the collector.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .config import DEFAULT_PORT, RESULT_SEPARATOR


class Transport(Enum):
    """Transport used to reach an explicitly configured resolver."""

    STREAM = "tcp"
    DATAGRAM = "udp"

    @classmethod
    def from_protocol(cls, protocol: str) -> "Transport":
        """Maps a `tcp`/`udp` protocol name onto a transport."""
        try:
            return cls(protocol.lower())
        except ValueError:
            raise ValueError(f"Unknown protocol '{protocol}' (expected tcp or udp)") from None


@dataclass(frozen=True)
class ResolverConfig:
    """Where and how lookups are sent. Shared read-only by every lookup task."""

    resolver_host: Optional[str] = None
    port: int = DEFAULT_PORT
    transport: Transport = Transport.DATAGRAM
    timeout: Optional[float] = None

    @property
    def uses_system_resolver(self) -> bool:
        return not self.resolver_host


@dataclass(frozen=True)
class LookupResult:
    queried_address: str
    resolved_name: str

    def to_line(self) -> str:
        return f"{self.queried_address}{RESULT_SEPARATOR}{self.resolved_name}"


@dataclass(frozen=True)
class LookupOutcome:
    """What a single lookup task ended with: its names, or the error it swallowed."""

    address: str
    names: List[str] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SweepSummary:
    dispatched: int = 0
    succeeded: int = 0
    failed: int = 0
    results: int = 0

    def record(self, outcome: LookupOutcome):
        if outcome.ok:
            self.succeeded += 1
            self.results += len(outcome.names)
        else:
            self.failed += 1


@dataclass(frozen=True)
class SweepSettings:
    """The final, validated configuration for one run."""

    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    wait_ms: int = 0
    concurrency: int = 0
    input_file: Optional[str] = None
    verbose: bool = False
    quiet: bool = False
    log_file: Optional[str] = None
