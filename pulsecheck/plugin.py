"""Status endpoint plugin for FastAPI hosts.

Mount it on any FastAPI application or `APIRouter`:

    >>> plugin = new_plugin()
    >>> plugin.initialize({"database": db, "endpoint": "health"})
    >>> plugin.setup_endpoints(app)

Every request to the bound path runs a fresh, independent evaluation. The
resolved configuration and the dependency handle are the only state shared
between requests, and both are read-only after `initialize`.
"""

from typing import Any, Mapping, Optional, Union

from fastapi import APIRouter, FastAPI
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

from pulsecheck.core.exceptions import RouteAlreadyBoundError
from pulsecheck.core.logging_config import get_logger
from pulsecheck.core.protocols import Database
from pulsecheck.core.types import HealthReport
from pulsecheck.evaluator import evaluate
from pulsecheck.resolver import StatusConfig, StatusPluginOptions, resolve_config

logger = get_logger(__name__)


class StatusPlugin:
    """Health check plugin exposing ``GET /{endpoint}``.

    Attributes:
        name: Identifier used by host plugin registries.
    """

    name = "status"

    def __init__(self) -> None:
        self._config: Optional[StatusConfig] = None
        self._database: Optional[Database] = None

    @property
    def config(self) -> StatusConfig:
        """Resolved configuration. Resolves defaults if not yet initialized."""
        if self._config is None:
            self.initialize()
        return self._config

    @property
    def database(self) -> Optional[Database]:
        return self._database

    def initialize(
        self,
        options: Union[StatusPluginOptions, Mapping[str, Any], None] = None,
        environment: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Parse explicit settings and resolve the effective configuration.

        Never fails: malformed settings fall back to the environment, then
        to defaults.

        Args:
            options: Explicit settings (``database``, ``endpoint``, ``scheme``,
                ``host``, ``port``, ``timeout``).
            environment: Environment to read instead of the process environment.
        """
        parsed = StatusPluginOptions.parse(options)
        self._database = parsed.database
        self._config = resolve_config(parsed, environment)
        logger.debug(
            "Status plugin initialized",
            endpoint=self._config.endpoint,
            database_configured=self._database is not None,
            timeout=self._config.timeout,
        )

    async def evaluate(self) -> HealthReport:
        return await evaluate(self._database, timeout=self.config.timeout)

    async def handle_request(self) -> JSONResponse:
        """Run one evaluation and render it: 200 when healthy, 503 otherwise."""
        report = await self.evaluate()
        return JSONResponse(status_code=report.http_status, content=report.to_payload())

    def setup_endpoints(self, router: Union[FastAPI, APIRouter]) -> None:
        """Bind the status route and advertise where it is reachable.

        Args:
            router: Host application or router to bind ``GET /{endpoint}`` on.

        Raises:
            RouteAlreadyBoundError: If a GET route already exists at that path.
        """
        config = self.config
        if _is_bound(router, config.path):
            raise RouteAlreadyBoundError(config.path)

        logger.debug("Registering status endpoint", path=config.path, port=config.port)
        router.add_api_route(
            config.path,
            self.handle_request,
            methods=["GET"],
            response_model=HealthReport,
            response_model_exclude_none=True,
            responses={503: {"model": HealthReport, "description": "Dependency is down"}},
            summary="Service health",
            tags=["health"],
        )
        logger.info("Health check available", url=config.url)


def _is_bound(router: Union[FastAPI, APIRouter], path: str) -> bool:
    # APIRouter stores routes with its prefix prepended.
    path = getattr(router, "prefix", "") + path
    for route in router.routes:
        if isinstance(route, APIRoute) and route.path == path and "GET" in route.methods:
            return True
    return False


def new_plugin() -> StatusPlugin:
    """Return a fresh, uninitialized status plugin."""
    return StatusPlugin()
