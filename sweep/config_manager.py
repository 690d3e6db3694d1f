#!/usr/bin/env python3
"""
PTR-Sweep - Configuration Manager Module
Handles loading and merging of settings from command-line arguments and config files.
"""
import argparse
import ipaddress
import json
import logging
import os
from typing import Any, Dict, List, Optional

import yaml

from .config import PROTOCOLS, console
from .models import ResolverConfig, SweepSettings, Transport

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """The merged configuration is invalid; nothing has been started yet."""


def deep_merge_dicts(base: Dict[str, Any], new: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merges two dictionaries. 'new' values overwrite 'base' values.
    If both values for a key are dictionaries, it merges them recursively.
    """
    merged = base.copy()
    for key, value in new.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = deep_merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config_file(file_path: str) -> dict:
    """Loads a configuration file, supporting JSON and YAML."""
    _, ext = os.path.splitext(file_path)
    ext = ext.lower()

    with open(file_path, "r") as f:
        if ext == ".json":
            data = json.load(f)
        elif ext in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        else:
            raise ValueError(
                f"Unsupported config file extension: {ext}. Please use .json, .yaml, or .yml."
            )

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("The config file must contain a mapping of option names to values.")
    # Config files may spell options the way they appear on the command line.
    return {key.replace("-", "_"): value for key, value in data.items()}


def _as_int(config: Dict[str, Any], key: str) -> int:
    value = config.get(key)
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ConfigError(f"'{key}' must be an integer, got {value!r}.")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"'{key}' must be an integer, got {value!r}.") from None


def _as_bool(config: Dict[str, Any], key: str) -> bool:
    value = config.get(key, False)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' must be true or false, got {value!r}.")
    return value


def build_settings(config: Dict[str, Any]) -> SweepSettings:
    """
    Validates the merged option values and freezes them into SweepSettings.

    Raises:
        ConfigError: If any option is out of range or malformed.
    """
    resolver_host = config.get("resolver") or None
    if resolver_host is not None:
        resolver_host = str(resolver_host).strip()
        try:
            ipaddress.ip_address(resolver_host)
        except ValueError:
            raise ConfigError(f"Resolver '{resolver_host}' is not a valid IP address.") from None

    protocol = str(config.get("protocol", "udp")).lower()
    if protocol not in PROTOCOLS:
        raise ConfigError(f"Protocol must be one of {', '.join(PROTOCOLS)}, got '{protocol}'.")

    port = _as_int(config, "port")
    if not 1 <= port <= 65535:
        raise ConfigError(f"Port must be between 1 and 65535, got {port}.")

    wait_ms = _as_int(config, "wait")
    if wait_ms < 0:
        raise ConfigError(f"Wait must be a non-negative number of milliseconds, got {wait_ms}.")

    concurrency = _as_int(config, "concurrency")
    if concurrency < 0:
        raise ConfigError(f"Concurrency must be 0 (no limit) or positive, got {concurrency}.")

    timeout = config.get("timeout")
    if timeout is not None:
        try:
            timeout = float(timeout)
        except (TypeError, ValueError):
            raise ConfigError(f"Timeout must be a number of seconds, got {timeout!r}.") from None
        if timeout <= 0:
            raise ConfigError(f"Timeout must be positive, got {timeout}.")

    return SweepSettings(
        resolver=ResolverConfig(
            resolver_host=resolver_host,
            port=port,
            transport=Transport.from_protocol(protocol),
            timeout=timeout,
        ),
        wait_ms=wait_ms,
        concurrency=concurrency,
        input_file=config.get("file"),
        verbose=_as_bool(config, "verbose"),
        quiet=_as_bool(config, "quiet"),
        log_file=config.get("log_file"),
    )


def setup_configuration(
    parser: argparse.ArgumentParser, argv: Optional[List[str]] = None
) -> Optional[SweepSettings]:
    """
    Parses CLI args, loads config file, merges settings and validates them.
    This is the single source of truth for all configuration.

    The priority is:
    1. Parser defaults
    2. Values from the JSON/YAML config file (if provided, overrides defaults)
    3. Values explicitly set via command-line arguments (highest priority, overrides all)

    Returns:
        The final settings, or None if the configuration is unusable (the
        error has already been printed).
    """
    cli_args = parser.parse_args(argv)

    # 1. Establish base configuration: Start with parser defaults
    defaults = vars(parser.parse_args([]))

    # 2. Layer config file settings over defaults
    config_file_path = cli_args.config
    config_data = {}
    if config_file_path:
        try:
            config_data = load_config_file(config_file_path)
        except FileNotFoundError:
            console.print(
                f"[bold red]Error: Config file '{config_file_path}' not found.[/bold red]"
            )
            return None
        except (json.JSONDecodeError, yaml.YAMLError, ValueError) as e:
            console.print(
                f"[bold red]Error: Could not decode config file '{config_file_path}'. {e}[/bold red]"
            )
            return None

    # 3. Layer explicit CLI arguments over the top (highest priority)
    cli_overrides = {}
    for key, value in vars(cli_args).items():
        # An argument was explicitly provided by the user if its value is not the default.
        if value != defaults.get(key):
            cli_overrides[key] = value

    final_config = deep_merge_dicts(deep_merge_dicts(defaults, config_data), cli_overrides)

    try:
        return build_settings(final_config)
    except ConfigError as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        return None
