from __future__ import annotations

from typing import Optional

from .enums import LocationErrorKind


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid (empty or unknown site token, bad form values)."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class GeofenceViolation(DomainError):
    """Raised when the device is farther from the site than its allowed radius."""

    def __init__(self, message: str, *, distance_meters: float, allowed_radius_meters: float):
        super().__init__(message)
        self.distance_meters = distance_meters
        self.allowed_radius_meters = allowed_radius_meters


_LOCATION_MESSAGES = {
    LocationErrorKind.PERMISSION_DENIED: "GPS permission denied.",
    LocationErrorKind.POSITION_UNAVAILABLE: "GPS position unavailable.",
    LocationErrorKind.TIMEOUT: "GPS request timed out.",
}


class LocationUnavailable(DomainError):
    """Raised when device coordinates could not be acquired."""

    def __init__(self, kind: LocationErrorKind, message: Optional[str] = None):
        super().__init__(message or _LOCATION_MESSAGES[kind])
        self.kind = kind


class OperationTimeout(DomainError):
    """Raised when the overall scan budget is exhausted."""


class StorageError(DomainError):
    """Raised when a log or session read/write fails."""


class ConfigError(DomainError):
    """Malformed buffer settings. Recovered with defaults, never surfaced to callers."""
