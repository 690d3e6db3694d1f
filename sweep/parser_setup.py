import argparse

from . import __version__
from .config import DEFAULT_PORT, DEFAULT_PROTOCOL, PROTOCOLS


def setup_parser() -> argparse.ArgumentParser:
    """Creates and configures the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ptr-sweep",
        description=(
            "PTR-Sweep - Bulk reverse DNS lookups.\n"
            "Reads one IP address per line and prints '<address>\\t<name>' "
            "for every name found."
        ),
        epilog="""
Examples:
  cat ips.txt | ptr-sweep
  ptr-sweep -f ips.txt -r 8.8.8.8 -P tcp
  ptr-sweep -r 192.0.2.53 -p 5353 -w 20 < ips.txt
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # --- Input Configuration ---
    input_group = parser.add_argument_group('Input Configuration')
    input_group.add_argument(
        "-f", "--file",
        help="Read addresses from this file instead of standard input.")
    input_group.add_argument(
        "--config",
        help="Path to a JSON or YAML config file with sweep options.")

    # --- Resolver ---
    resolver_group = parser.add_argument_group('Resolver')
    resolver_group.add_argument(
        "-r", "--resolver",
        help="IP of the DNS resolver to use for lookups (default: system resolver).")
    resolver_group.add_argument(
        "-P", "--protocol",
        choices=PROTOCOLS,
        default=DEFAULT_PROTOCOL,
        help=f"Protocol used to reach the resolver (default: {DEFAULT_PROTOCOL}).")
    resolver_group.add_argument(
        "-p", "--port",
        type=int,
        default=DEFAULT_PORT,
        help=f"Port of the specified DNS resolver (default: {DEFAULT_PORT}).")
    resolver_group.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Lookup timeout in seconds for the specified resolver "
             "(default: the resolver library's own).")

    # --- Dispatch Control ---
    dispatch_group = parser.add_argument_group('Dispatch Control')
    dispatch_group.add_argument(
        "-w", "--wait",
        type=int,
        default=0,
        help="Wait n milliseconds between lookups (default: 0).")
    dispatch_group.add_argument(
        "-c", "--concurrency",
        type=int,
        default=0,
        help="Maximum number of lookups in flight, 0 for no limit (default: 0).")

    # --- Output Control ---
    output_group = parser.add_argument_group('Output Control')
    output_group.add_argument(
        "--log-file", help="Path to a file to save detailed, verbose logs.")
    output_group.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log failed lookups and a run summary to stderr."
    )
    output_group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log warnings and errors to stderr."
    )

    return parser
