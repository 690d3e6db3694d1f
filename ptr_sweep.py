#!/usr/bin/env python3
"""
PTR-Sweep
Bulk reverse DNS lookups: one IP address per input line in, one
'<address>\t<name>' line per resolved name out.
"""

import asyncio
import logging
import sys
from typing import List, Optional

from sweep.config import console
from sweep.config_manager import setup_configuration
from sweep.logger_config import setup_logging
from sweep.orchestrator import run_sweep
from sweep.parser_setup import setup_parser

logger = logging.getLogger(__name__)


async def main(argv: Optional[List[str]] = None) -> int:
    parser = setup_parser()

    settings = setup_configuration(parser, argv)
    if settings is None:  # An error occurred during config loading
        return 1

    setup_logging(settings)

    if settings.input_file:
        try:
            stream = open(settings.input_file, "r")
        except OSError as e:
            console.print(
                f"[bold red]Error: Could not open input file '{settings.input_file}'. {e}[/bold red]"
            )
            return 1
        with stream:
            await run_sweep(settings, stream, sys.stdout)
    else:
        await run_sweep(settings, sys.stdin, sys.stdout)
    return 0


def main_wrapper():
    """Synchronous wrapper to run the async main function."""
    try:
        exit_code = asyncio.run(main())
    except KeyboardInterrupt:
        console.print("\n[bold yellow]Sweep aborted by user.[/bold yellow]")
        exit_code = 130
    sys.exit(exit_code)


if __name__ == "__main__":
    main_wrapper()
