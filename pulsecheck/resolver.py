"""Configuration resolution for the status endpoint.

Derive the effective endpoint path, advertised base URL and probe timeout
from three tiers, applied per field and independently:

    1. Explicit settings handed to the plugin at initialization.
    2. Process environment variables (or a `.env` file).
    3. Hard-coded defaults.

A value only wins its tier when it is present and well formed. Blank,
non-numeric or non-positive values are treated as absent and the next tier
is consulted, so resolution never fails. Explicit settings and environment
values go through the same normalizers, which means a port given as
``"8080"`` and one given as ``8080`` are the same value.
"""

import math
from typing import Any, Callable, Literal, Mapping, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    computed_field,
    field_validator,
)
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from pulsecheck.core.logging_config import get_logger
from pulsecheck.core.protocols import Database

logger = get_logger(__name__)


# ==============================================================================
# DEFAULTS
# ==============================================================================

DEFAULT_ENDPOINT = "status"
DEFAULT_SCHEME = "http"
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8000
DEFAULT_TIMEOUT = 2.0  # seconds

# Port suffix is dropped from the advertised URL when it matches.
WELL_KNOWN_PORTS = {"http": 80, "https": 443}

RESOLVED_FIELDS = ("endpoint", "scheme", "host", "port", "timeout")


# ==============================================================================
# NORMALIZERS
# ==============================================================================
# Each returns the canonical value, or None when the input must be treated as
# absent. None of them raise.


def normalize_endpoint(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    endpoint = value.strip().strip("/")
    return endpoint or None


def normalize_scheme(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    scheme = value.strip().lower()
    return scheme if scheme in WELL_KNOWN_PORTS else None


def normalize_host(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def normalize_port(value: Any) -> Optional[int]:
    """Accept a native int or a numeric string in the TCP port range."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        port = value
    elif isinstance(value, str):
        text = value.strip()
        # Plain ASCII digits only: no sign, no underscores.
        if not (text.isascii() and text.isdigit()):
            return None
        port = int(text)
    else:
        return None
    return port if 0 < port <= 65535 else None


def normalize_timeout(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        timeout = float(value)
    elif isinstance(value, str):
        try:
            timeout = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return timeout if math.isfinite(timeout) and timeout > 0 else None


_NORMALIZERS: dict[str, Callable[[Any], Any]] = {
    "endpoint": normalize_endpoint,
    "scheme": normalize_scheme,
    "host": normalize_host,
    "port": normalize_port,
    "timeout": normalize_timeout,
}


def _normalize(field: str, value: Any, source: str) -> Any:
    result = _NORMALIZERS[field](value)
    if result is None and value not in (None, ""):
        logger.debug(
            "Ignoring malformed status setting",
            field=field,
            source=source,
            value=repr(value),
        )
    return result


# ==============================================================================
# RESOLVED CONFIGURATION
# ==============================================================================


class StatusConfig(BaseModel):
    """Immutable, fully resolved configuration of the status endpoint.

    Attributes:
        endpoint: URL path segment, stored without slashes.
        scheme: Advertised URL scheme.
        host: Advertised host name.
        port: Advertised TCP port.
        timeout: Hard deadline for one dependency probe, in seconds.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    endpoint: str = Field(default=DEFAULT_ENDPOINT, min_length=1)
    scheme: Literal["http", "https"] = DEFAULT_SCHEME
    host: str = Field(default=DEFAULT_HOST, min_length=1)
    port: int = Field(default=DEFAULT_PORT, gt=0, le=65535)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)

    @computed_field(return_type=str)
    @property
    def path(self) -> str:
        """Route path bound on the host router, e.g. ``/status``."""
        return f"/{self.endpoint}"

    @computed_field(return_type=str)
    @property
    def base_url(self) -> str:
        """Externally advertised base URL.

        The port is omitted only when it is the scheme's well-known port
        (80 for http, 443 for https).
        """
        if WELL_KNOWN_PORTS[self.scheme] == self.port:
            return f"{self.scheme}://{self.host}"
        return f"{self.scheme}://{self.host}:{self.port}"

    @computed_field(return_type=str)
    @property
    def url(self) -> str:
        """Fully qualified URL at which the health check is reachable."""
        return f"{self.base_url}{self.path}"


DEFAULT_CONFIG = StatusConfig()


# ==============================================================================
# TIER 1: EXPLICIT SETTINGS
# ==============================================================================


class StatusPluginOptions(BaseModel):
    """Explicit settings supplied to the plugin at initialization.

    Built once from the loose key/value mapping a host passes in. Values
    that are missing or malformed become ``None`` instead of failing
    validation. Unknown keys are ignored.

    Attributes:
        database: Dependency handle to probe; must satisfy ``Database``.
        endpoint: Endpoint path override.
        scheme: Advertised scheme override.
        host: Advertised host override.
        port: Advertised port override (int or numeric string).
        timeout: Probe deadline override, in seconds.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    database: Optional[Any] = None
    endpoint: Optional[str] = None
    scheme: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    timeout: Optional[float] = None

    @field_validator("database", mode="before")
    @classmethod
    def validate_database(cls, value: Any) -> Any:
        if value is None:
            return None
        if not isinstance(value, Database):
            logger.warning(
                "Ignoring database option without a ping method",
                type=type(value).__name__,
            )
            return None
        return value

    @field_validator(*RESOLVED_FIELDS, mode="before")
    @classmethod
    def normalize_setting(cls, value: Any, info: ValidationInfo) -> Any:
        return _normalize(info.field_name, value, source="explicit")

    @classmethod
    def parse(
        cls, options: Union["StatusPluginOptions", Mapping[str, Any], None]
    ) -> "StatusPluginOptions":
        """Build options from a mapping, passing through an existing instance."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        return cls.model_validate(dict(options))


# ==============================================================================
# TIER 2: ENVIRONMENT
# ==============================================================================


class StatusSettings(BaseSettings):
    """Environment variables consulted by the status endpoint.

    Attributes:
        STATUS_ENDPOINT: Endpoint path override.
        STATUS_SCHEME: Advertised scheme override.
        STATUS_HOST: Advertised host override.
        PORT: Advertised port override, checked first.
        STATUS_PORT: Advertised port override, used when PORT is unusable.
        STATUS_TIMEOUT: Probe deadline override, in seconds.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    STATUS_ENDPOINT: Optional[str] = None
    STATUS_SCHEME: Optional[str] = None
    STATUS_HOST: Optional[str] = None
    PORT: Optional[int] = None
    STATUS_PORT: Optional[int] = None
    STATUS_TIMEOUT: Optional[float] = None

    @field_validator("STATUS_ENDPOINT", "STATUS_SCHEME", "STATUS_HOST",
                     "PORT", "STATUS_PORT", "STATUS_TIMEOUT", mode="before")
    @classmethod
    def normalize_setting(cls, value: Any, info: ValidationInfo) -> Any:
        return _normalize(_ENV_FIELDS[info.field_name], value, source="environment")

    @classmethod
    def from_environment(
        cls, environment: Optional[Mapping[str, str]] = None
    ) -> "StatusSettings":
        """Read the given mapping, or the process environment when ``None``.

        An explicit mapping is the only source consulted: ``os.environ`` and
        `.env` are ignored, which keeps resolution pure in its inputs.
        """
        if environment is None:
            return cls()
        return _MappingSettings(_env_file=None, **dict(environment))

    def value_for(self, field: str) -> Any:
        """Return the first usable environment value for a resolved field."""
        for env_name in _ENV_NAMES[field]:
            value = getattr(self, env_name)
            if value is not None:
                return value
        return None


class _MappingSettings(StatusSettings):
    """StatusSettings fed only from init arguments."""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings,)


# Priority order per field within the environment tier.
_ENV_NAMES: dict[str, tuple[str, ...]] = {
    "endpoint": ("STATUS_ENDPOINT",),
    "scheme": ("STATUS_SCHEME",),
    "host": ("STATUS_HOST",),
    "port": ("PORT", "STATUS_PORT"),
    "timeout": ("STATUS_TIMEOUT",),
}
_ENV_FIELDS = {env: field for field, names in _ENV_NAMES.items() for env in names}


# ==============================================================================
# RESOLUTION
# ==============================================================================


def resolve_config(
    explicit: Union[StatusPluginOptions, Mapping[str, Any], None] = None,
    environment: Optional[Mapping[str, str]] = None,
    defaults: StatusConfig = DEFAULT_CONFIG,
) -> StatusConfig:
    """Merge the three configuration tiers into a `StatusConfig`.

    Args:
        explicit: Settings handed to the plugin, as a mapping or parsed options.
        environment: Environment variables to read. ``None`` reads the process
            environment.
        defaults: Lowest-precedence values.

    Returns:
        The resolved configuration. Never raises for malformed input.
    """
    options = StatusPluginOptions.parse(explicit)
    env = StatusSettings.from_environment(environment)

    values: dict[str, Any] = {}
    sources: dict[str, str] = {}
    for field in RESOLVED_FIELDS:
        explicit_value = getattr(options, field)
        env_value = env.value_for(field)
        if explicit_value is not None:
            values[field], sources[field] = explicit_value, "explicit"
        elif env_value is not None:
            values[field], sources[field] = env_value, "environment"
        else:
            values[field], sources[field] = getattr(defaults, field), "default"

    config = StatusConfig(**values)
    logger.debug("Status configuration resolved", url=config.url, sources=sources)
    return config
