"""Request-level failures raised by the telemetry service."""

from __future__ import annotations


class TelemetryError(Exception):
    """Base error carrying a client-safe message and the HTTP status to use."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(TelemetryError):
    status_code = 404


class FetchFailed(TelemetryError):
    """The store call raised or returned data of an unexpected shape."""


class ComputeFailed(TelemetryError):
    """Parsing or arithmetic on fetched data failed."""
