"""Time-bounded dependency probing.

`evaluate` runs at most one ``ping`` per call under a hard deadline and turns
the outcome into a :class:`HealthReport`. It never raises to its caller: a
failing or slow dependency is a reportable state, not a fault. Cancellation
of the calling task still propagates.
"""

import asyncio
import inspect
import time
from typing import Any, Optional

from pulsecheck.core.logging_config import get_logger
from pulsecheck.core.protocols import Database
from pulsecheck.core.types import HealthReport
from pulsecheck.resolver import DEFAULT_TIMEOUT

logger = get_logger(__name__)


async def _ping(database: Database) -> Any:
    """Run the handle's ``ping`` without blocking the event loop.

    Coroutine functions are awaited directly. Blocking callables run in a
    worker thread; on deadline the thread is abandoned, not interrupted.
    A plain callable that hands back an awaitable (decorated methods, sync
    wrappers around async drivers) has that awaitable awaited as well.
    """
    if inspect.iscoroutinefunction(database.ping):
        result = await database.ping()
    else:
        result = await asyncio.to_thread(database.ping)
    if inspect.isawaitable(result):
        result = await result
    return result


def _describe(exc: BaseException) -> str:
    return str(exc).strip() or type(exc).__name__


async def evaluate(
    database: Optional[Database], timeout: float = DEFAULT_TIMEOUT
) -> HealthReport:
    """Probe the dependency once and build the health report.

    Args:
        database: Handle to probe, or ``None`` when no dependency is configured.
        timeout: Hard deadline for the probe, in seconds.

    Returns:
        HealthReport: ``not_configured`` without a handle, ``up`` when the ping
        succeeds before the deadline, ``down`` with an error otherwise. A
        timed-out probe is reported in the same shape as a failed one.
    """
    if database is None:
        return HealthReport.not_configured()

    started = time.perf_counter()
    try:
        result = await asyncio.wait_for(_ping(database), timeout=timeout)
    except asyncio.TimeoutError:
        error = f"ping timed out after {timeout:g}s"
    except Exception as exc:
        error = _describe(exc)
    else:
        if result is not False:
            logger.debug(
                "Dependency probe succeeded",
                elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            return HealthReport.up()
        error = "ping reported failure"

    logger.warning(
        "Dependency probe failed",
        error=error,
        elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
    )
    return HealthReport.down(error)
