"""Reference FastAPI host for the status plugin.

Build an application that mounts the status endpoint the way any host
would: configure logging, initialize the plugin with explicit settings and
let it bind its route. All side effects live in the lifespan context
manager, so nothing is logged or bound until the server starts.

Run with ``uvicorn pulsecheck.main:app``.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Mapping, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from pulsecheck.api.middleware import REQUEST_ID_HEADER, RequestCorrelationMiddleware
from pulsecheck.config import Settings, get_settings
from pulsecheck.core.logging_config import configure_logging, get_logger
from pulsecheck.core.protocols import Database
from pulsecheck.plugin import new_plugin


def create_app(
    database: Optional[Database] = None,
    options: Optional[Mapping[str, Any]] = None,
    settings: Optional[Settings] = None,
    environment: Optional[Mapping[str, str]] = None,
) -> FastAPI:
    """Create a host application with the status plugin mounted at startup.

    Args:
        database: Dependency handle to probe. Overrides ``options["database"]``.
        options: Explicit plugin settings.
        settings: Host settings. Defaults to the cached `get_settings()`.
        environment: Environment for the plugin's resolver. ``None`` reads the
            process environment.

    Returns:
        FastAPI: The configured application.
    """
    if settings is None:
        settings = get_settings()
    plugin_options = dict(options or {})
    if database is not None:
        plugin_options["database"] = database

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # === STARTUP SEQUENCE ===
        configure_logging(settings)

        logger = get_logger("lifespan")
        logger.info("Pulsecheck host startup initiated", env=settings.ENVIRONMENT)

        # The route outlives the lifespan, so a restarted app keeps its plugin.
        if getattr(app.state, "status_plugin", None) is None:
            plugin = new_plugin()
            plugin.initialize(plugin_options, environment)
            # Route conflicts are startup faults: let them abort the lifespan.
            plugin.setup_endpoints(app)
            app.state.status_plugin = plugin

        yield

        # === SHUTDOWN SEQUENCE ===
        logger.info("Pulsecheck host shutdown initiated")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Pluggable health check endpoint",
        lifespan=lifespan,
    )

    app.add_middleware(RequestCorrelationMiddleware)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Log unhandled exceptions and return a generic 500 response."""
        get_logger("exception_handler").error(
            "Unhandled exception occurred",
            error=str(exc),
            path=request.url.path,
            method=request.method,
            exc_info=True,
        )
        request_id = getattr(request.state, "request_id", None)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal Server Error", "request_id": request_id},
            headers={REQUEST_ID_HEADER: request_id} if request_id else None,
        )

    return app


app = create_app()
