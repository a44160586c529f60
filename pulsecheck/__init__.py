"""Pluggable health check endpoint for FastAPI hosts.

Public API:

    - `StatusPlugin` / `new_plugin`: mount ``GET /{endpoint}`` on a host.
    - `evaluate`: one time-bounded dependency probe, as a `HealthReport`.
    - `resolve_config`: explicit > environment > default configuration.
"""

from pulsecheck.core.exceptions import PulsecheckError, RouteAlreadyBoundError
from pulsecheck.core.protocols import Database, Plugin
from pulsecheck.core.types import DatabaseHealth, HealthReport
from pulsecheck.evaluator import evaluate
from pulsecheck.plugin import StatusPlugin, new_plugin
from pulsecheck.resolver import (
    DEFAULT_CONFIG,
    DEFAULT_TIMEOUT,
    StatusConfig,
    StatusPluginOptions,
    StatusSettings,
    resolve_config,
)

__all__ = [
    # Plugin
    "StatusPlugin",
    "new_plugin",
    "Plugin",
    # Evaluation
    "evaluate",
    "Database",
    "HealthReport",
    "DatabaseHealth",
    # Configuration
    "resolve_config",
    "StatusConfig",
    "StatusPluginOptions",
    "StatusSettings",
    "DEFAULT_CONFIG",
    "DEFAULT_TIMEOUT",
    # Errors
    "PulsecheckError",
    "RouteAlreadyBoundError",
]
