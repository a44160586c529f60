"""Exception hierarchy for pulsecheck.

Configuration defects and dependency failures are never raised: the former
fall back to defaults and the latter are reported inside the health report.
Only registration problems propagate, and hosts treat them as startup faults.
"""


class PulsecheckError(Exception):
    """Base class for all errors raised by pulsecheck."""


class RouteAlreadyBoundError(PulsecheckError):
    """Raised when the status path is already bound on the host router.

    Attributes:
        path: The conflicting route path, with its leading slash.
    """

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"A GET route is already bound at '{path}'.")
