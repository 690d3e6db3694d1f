#!/usr/bin/env python3
"""
PTR-Sweep - Logger Configuration
Sets up the application-wide logger. Everything goes to stderr so that
stdout carries nothing but result lines.
"""
import logging

from rich.logging import RichHandler

from .config import console
from .models import SweepSettings


def setup_logging(settings: SweepSettings):
    """
    Configures the root logger from the final settings.

    - Console logging level is set based on verbosity flags.
    - File logging is enabled if a log_file path is provided.
    """
    if settings.quiet:
        console_level = logging.WARNING
    elif settings.verbose:
        console_level = logging.DEBUG
    else:
        console_level = logging.INFO

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = RichHandler(
        console=console,
        level=console_level,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        show_level=settings.verbose,
    )
    logger.addHandler(console_handler)

    if settings.log_file:
        file_handler = logging.FileHandler(settings.log_file, mode="w")
        # Always log DEBUG level to file
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # asyncio's own debug chatter is not useful here.
    logging.getLogger("asyncio").setLevel(logging.WARNING)
