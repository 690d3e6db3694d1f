#!/usr/bin/env python3
from rich.console import Console

# Result lines own stdout, so every human-facing message goes to stderr.
console = Console(stderr=True)

# Resolver defaults
DEFAULT_PORT = 53
DEFAULT_PROTOCOL = "udp"
PROTOCOLS = ["tcp", "udp"]

# Separator between the queried address and a resolved name in output lines
RESULT_SEPARATOR = "\t"

# Threads available to the system resolver when no concurrency cap is set
SYSTEM_RESOLVER_WORKERS = 256
