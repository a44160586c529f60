"""Structured logging for pulsecheck.

The plugin only ever calls `get_logger`; everything else here is for hosts
that want the reference setup:

    - `get_logging_config`: pure builder of a `dictConfig` dictionary.
    - `configure_logging`: install the stdlib handlers and the structlog
      chain in one step, from the host lifespan.
    - `bind_contextvars` / `clear_contextvars`: request-scoped fields that
      the correlation middleware attaches to every health check log line.

Output is JSON lines outside development, so the "Health check available"
advisory and probe failures can be picked up by log aggregation.
"""

import logging.config
from typing import Any

import structlog
from structlog.types import Processor

from pulsecheck.config import Settings

# Environments whose logs are consumed by machines rather than people.
JSON_ENVIRONMENTS = frozenset({"production", "staging"})


def _wants_json(settings: Settings) -> bool:
    return settings.ENVIRONMENT.lower() in JSON_ENVIRONMENTS


def get_shared_processors(json_logs: bool = False) -> list[Processor]:
    """Return the processors run on both structlog and foreign log records.

    Args:
        json_logs: Render tracebacks as structured dicts for JSON output.
            The console renderer formats exceptions itself.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_logs:
        processors.append(structlog.processors.dict_tracebacks)
    processors.append(structlog.processors.UnicodeDecoder())
    return processors


def get_logging_config(settings: Settings) -> dict[str, Any]:
    """Build the `logging.config.dictConfig` dictionary for a host.

    Pure: nothing is installed until `configure_logging` runs.

    Args:
        settings: Host settings providing LOG_LEVEL, ENVIRONMENT and
            LOGGING_NOISY_MODULES.
    """
    json_logs = _wants_json(settings)
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=True)
    )
    level = settings.LOG_LEVEL.upper()

    loggers: dict[str, Any] = {
        "": {"handlers": ["stdout"], "level": level},
        # Probe outcomes and the advisory URL always follow the host level.
        "pulsecheck": {"level": level, "propagate": True},
    }
    for name in settings.LOGGING_NOISY_MODULES:
        loggers[name] = {"level": "WARNING", "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": "structlog.stdlib.ProcessorFormatter",
                "processor": renderer,
                "foreign_pre_chain": get_shared_processors(json_logs),
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": loggers,
    }


def configure_logging(settings: Settings) -> None:
    """Install stdlib handlers, then route structlog through them."""
    logging.config.dictConfig(get_logging_config(settings))
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *get_shared_processors(_wants_json(settings)),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger, named when ``name`` is given."""
    return structlog.get_logger(name) if name else structlog.get_logger()


bind_contextvars = structlog.contextvars.bind_contextvars
clear_contextvars = structlog.contextvars.clear_contextvars
