from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol

from ..common.geo import Coordinates
from ..common.validators import optional_float
from ..core.enums import LocationErrorKind
from ..core.exceptions import LocationUnavailable, ValidationError


class LocationProvider(Protocol):
    def locate(self, *, timeout: float) -> Coordinates:
        """Device position, or LocationUnavailable."""

        raise NotImplementedError


@dataclass(frozen=True)
class ReportedLocation:
    """Coordinates (or a geolocation error code) reported by the scanning device."""

    lat: Optional[float] = None
    lng: Optional[float] = None
    error_code: Any = None

    @classmethod
    def from_device(cls, lat: Any, lng: Any, error_code: Any = None) -> "ReportedLocation":
        """Unreadable coordinates are reported as an unavailable position."""
        try:
            return cls(lat=optional_float(lat, "lat"), lng=optional_float(lng, "lng"), error_code=error_code)
        except ValidationError:
            return cls(error_code=error_code or LocationErrorKind.POSITION_UNAVAILABLE.value)

    def locate(self, *, timeout: float) -> Coordinates:
        if self.error_code not in (None, ""):
            raise LocationUnavailable(LocationErrorKind.from_code(self.error_code))
        if timeout <= 0:
            raise LocationUnavailable(LocationErrorKind.TIMEOUT)
        if self.lat is None or self.lng is None:
            raise LocationUnavailable(LocationErrorKind.POSITION_UNAVAILABLE)
        if not (-90.0 <= self.lat <= 90.0) or not (-180.0 <= self.lng <= 180.0):
            raise LocationUnavailable(LocationErrorKind.POSITION_UNAVAILABLE)
        return Coordinates(lat=float(self.lat), lng=float(self.lng))
