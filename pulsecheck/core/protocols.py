"""Structural interfaces shared between the plugin and its host.

The host server depends on :class:`Plugin` without knowing the concrete
type, and the plugin depends on :class:`Database` without knowing which
driver sits behind it.
"""

from typing import Any, Awaitable, Mapping, Optional, Protocol, Union, runtime_checkable

from fastapi import APIRouter, FastAPI
from fastapi.responses import JSONResponse


@runtime_checkable
class Database(Protocol):
    """Protocol for the single dependency probed by the status endpoint.

    ``ping`` may be a coroutine function or a plain blocking callable. It
    signals failure by raising; returning ``False`` is also treated as a
    failure. Any other return value means the dependency is reachable.

    The evaluator owns the deadline, so implementations can stay simple and
    do not need their own timeout handling.
    """

    def ping(self) -> Union[Awaitable[Any], Any]:
        ...


@runtime_checkable
class Plugin(Protocol):
    """Protocol a host server uses to mount a plugin.

    Lifecycle:
        1. ``initialize`` once with explicit settings.
        2. ``setup_endpoints`` once at startup to bind routes.
        3. ``handle_request`` per inbound request, possibly concurrently.
    """

    @property
    def name(self) -> str:
        """Identifier used by the host's plugin registry."""
        ...

    def initialize(
        self,
        options: Optional[Mapping[str, Any]] = None,
        environment: Optional[Mapping[str, str]] = None,
    ) -> None:
        ...

    async def handle_request(self) -> JSONResponse:
        ...

    def setup_endpoints(self, router: Union[FastAPI, APIRouter]) -> None:
        ...
