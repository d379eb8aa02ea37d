"""
Runtime configuration for relaytask.

Values are read from the environment once at import time:

- ``RELAYTASK_DEBUG``: log every control transfer between frames at DEBUG.
- ``RELAYTASK_STRICT_ENDPOINT_CLOSE``: raise when an endpoint is closed before
  it completed (default). When disabled the fault is only logged at ERROR.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any

_TRUTHY = ("1", "true", "yes")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.lower() in _TRUTHY


@dataclass(frozen=True)
class RuntimeConfig:
    trace_transfers: bool = False
    strict_endpoint_close: bool = True

    @classmethod
    def from_env(cls) -> RuntimeConfig:
        return cls(
            trace_transfers=_env_flag("RELAYTASK_DEBUG", False),
            strict_endpoint_close=_env_flag("RELAYTASK_STRICT_ENDPOINT_CLOSE", True),
        )


_config = RuntimeConfig.from_env()


def current_config() -> RuntimeConfig:
    return _config


def configure(**overrides: Any) -> RuntimeConfig:
    """Replace selected settings; returns the previous configuration."""
    global _config
    previous = _config
    _config = replace(_config, **overrides)
    return previous


def reset_config() -> RuntimeConfig:
    """Reload settings from the environment."""
    global _config
    _config = RuntimeConfig.from_env()
    return _config


__all__ = [
    "RuntimeConfig",
    "configure",
    "current_config",
    "reset_config",
]
