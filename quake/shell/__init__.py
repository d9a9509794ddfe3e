"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- JMA data client (HTTP feeds and report documents)
- Configuration loading (environment/files)

Keep this layer thin and simple. All business logic should be in core.
"""

from quake.shell.jma_client import JMAClient
from quake.shell.config_loader import load_config

__all__ = [
    "JMAClient",
    "load_config",
]
