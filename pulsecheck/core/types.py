"""Defines the canonical health report returned by the status endpoint.

The report is a transient value built once per request. Field names and
nesting (``status``, ``database.status``, ``database.error``) are part of the
wire contract and must not vary between releases.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ═══════════════════════════════════════════════════════════════════════════
# BASE CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════

class CanonicalModel(BaseModel):
    """A base model providing shared configuration for all report structures.

    Configuration:
        frozen: Prevents modification after creation.
        extra: Rejects unknown fields so the wire shape stays exact.
        str_strip_whitespace: Normalizes string inputs automatically.
    """
    model_config = ConfigDict(
        frozen=True,
        extra='forbid',
        str_strip_whitespace=True,
    )


# ═══════════════════════════════════════════════════════════════════════════
# STATUS LITERALS
# ═══════════════════════════════════════════════════════════════════════════
# External APIs use string literals for stability.

OverallStatus = Literal["healthy", "unhealthy"]
DependencyStatus = Literal["not_configured", "up", "down"]

HEALTHY: OverallStatus = "healthy"
UNHEALTHY: OverallStatus = "unhealthy"

NOT_CONFIGURED: DependencyStatus = "not_configured"
UP: DependencyStatus = "up"
DOWN: DependencyStatus = "down"


# ═══════════════════════════════════════════════════════════════════════════
# HEALTH REPORT
# ═══════════════════════════════════════════════════════════════════════════

class DatabaseHealth(CanonicalModel):
    """Status of the single probed dependency.

    Attributes:
        status: ``not_configured`` when no handle was supplied, otherwise the
            outcome of the probe.
        error: Human-readable failure description. Present only when down.
    """
    status: DependencyStatus
    error: Optional[str] = Field(
        default=None,
        description="Failure description, only set when the dependency is down."
    )

    @model_validator(mode='after')
    def validate_error_presence(self) -> 'DatabaseHealth':
        """Require a non-empty error exactly when the dependency is down.

        Raises:
            ValueError: If a down dependency has no error, or a healthy one has.
        """
        if self.status == DOWN and not self.error:
            raise ValueError("A down dependency must carry a non-empty error.")
        if self.status != DOWN and self.error is not None:
            raise ValueError(f"Dependency status '{self.status}' cannot carry an error.")
        return self


class HealthReport(CanonicalModel):
    """Structured result of one health evaluation.

    The overall status is derived from the dependency status: ``healthy``
    unless the dependency is ``down``. Use the ``not_configured``, ``up``
    and ``down`` constructors rather than assembling the fields by hand.

    Example:
        >>> HealthReport.down("connection failed").to_payload()
        {'status': 'unhealthy', 'database': {'status': 'down', 'error': 'connection failed'}}
    """
    status: OverallStatus
    database: DatabaseHealth

    @model_validator(mode='after')
    def validate_overall_status(self) -> 'HealthReport':
        """Ensure the overall status agrees with the dependency status.

        Raises:
            ValueError: If ``status`` contradicts ``database.status``.
        """
        expected = UNHEALTHY if self.database.status == DOWN else HEALTHY
        if self.status != expected:
            raise ValueError(
                f"Overall status '{self.status}' does not match "
                f"dependency status '{self.database.status}' (expected '{expected}')."
            )
        return self

    @classmethod
    def not_configured(cls) -> 'HealthReport':
        return cls(status=HEALTHY, database=DatabaseHealth(status=NOT_CONFIGURED))

    @classmethod
    def up(cls) -> 'HealthReport':
        return cls(status=HEALTHY, database=DatabaseHealth(status=UP))

    @classmethod
    def down(cls, error: str) -> 'HealthReport':
        return cls(status=UNHEALTHY, database=DatabaseHealth(status=DOWN, error=error))

    @property
    def is_healthy(self) -> bool:
        return self.status == HEALTHY

    @property
    def http_status(self) -> int:
        """HTTP status code for this report: 200 when healthy, 503 otherwise."""
        return 200 if self.is_healthy else 503

    def to_payload(self) -> dict:
        """Serialize to the JSON body, omitting ``database.error`` when unset."""
        return self.model_dump(mode="json", exclude_none=True)
