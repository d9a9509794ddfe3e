"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

Models (Config, ConversionPolicy) are defined in quake/core/config.py
to avoid information leakage between layers.
"""

import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Any

import yaml

from quake.core.config import Config, ConversionPolicy, validate_config


logger = logging.getLogger(__name__)


_TRUE_VALUES = {"1", "true", "yes", "on"}


def _parse_bool(value: Any) -> bool:
    """Parse a boolean from YAML or an environment string."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def _parse_policy(data: dict[str, Any]) -> ConversionPolicy:
    """Parse the conversion policy from config data."""
    return ConversionPolicy(
        force=_parse_bool(data.get("force", False)),
        ignore_warning=_parse_bool(data.get("ignore_warning", False)),
    )


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    Pure function. Missing keys fall back to Config defaults.

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    defaults = Config()

    tokens = data.get("report_tokens")
    report_tokens = tuple(str(t) for t in tokens) if tokens is not None else defaults.report_tokens

    return Config(
        realtime_feed_url=data.get("realtime_feed_url", defaults.realtime_feed_url),
        longterm_feed_url=data.get("longterm_feed_url", defaults.longterm_feed_url),
        data_base_url=data.get("data_base_url", defaults.data_base_url),
        debug_base_url=data.get("debug_base_url", defaults.debug_base_url),
        report_tokens=report_tokens,
        timeout_seconds=float(data.get("timeout_seconds", defaults.timeout_seconds)),
        max_response_bytes=int(data.get("max_response_bytes", defaults.max_response_bytes)),
        policy=_parse_policy(data.get("policy") or {}),
    )


def apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides on top of a config.

    Environment variables:
        QUAKE_FORCE: Serve records despite validation errors
        QUAKE_IGNORE_WARNING: Serve records despite validation warnings
        QUAKE_TIMEOUT: Upstream request timeout in seconds
        QUAKE_DATA_BASE_URL: Report base URL

    Returns:
        New Config with overrides applied
    """
    policy = config.policy
    if "QUAKE_FORCE" in os.environ:
        policy = replace(policy, force=_parse_bool(os.environ["QUAKE_FORCE"]))
    if "QUAKE_IGNORE_WARNING" in os.environ:
        policy = replace(policy, ignore_warning=_parse_bool(os.environ["QUAKE_IGNORE_WARNING"]))

    overrides: dict[str, Any] = {"policy": policy}

    timeout = os.environ.get("QUAKE_TIMEOUT")
    if timeout:
        try:
            overrides["timeout_seconds"] = float(timeout)
        except ValueError:
            logger.warning("Ignoring invalid QUAKE_TIMEOUT %r", timeout)

    base_url = os.environ.get("QUAKE_DATA_BASE_URL")
    if base_url:
        overrides["data_base_url"] = base_url

    return replace(config, **overrides)


def _log_issues(config: Config) -> None:
    for issue in validate_config(config):
        if issue.severity == "error":
            logger.error("Config %s: %s", issue.field, issue.message)
        else:
            logger.warning("Config %s: %s", issue.field, issue.message)


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object with environment overrides applied

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", "config/config.yaml")

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.info("Config file not found: %s, using defaults", path)
        config = Config()
    else:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if data is None:
            logger.warning("Config file is empty, using defaults")
            config = Config()
        else:
            config = load_config_from_dict(data)

    config = apply_env_overrides(config)
    _log_issues(config)

    logger.info(
        "Loaded config: %d report tokens, force=%s, ignore_warning=%s",
        len(config.report_tokens),
        config.policy.force,
        config.policy.ignore_warning,
    )

    return config
