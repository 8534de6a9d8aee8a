from __future__ import annotations


class QdebugError(Exception):
    pass


class InvalidCircuitError(QdebugError, ValueError):
    """
    Raised when a gate list cannot be executed as given.

    `issues` holds every error-level CircuitIssue found, so a caller can
    point at all of the offending gates at once.
    """

    def __init__(self, message: str, issues=()):
        super().__init__(message)
        self.issues = tuple(issues)


class SamplingError(QdebugError, ValueError):
    pass
