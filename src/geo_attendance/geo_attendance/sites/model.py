from __future__ import annotations

from dataclasses import dataclass

from ..common.geo import Coordinates


@dataclass(frozen=True)
class Site:
    """Geofence definition. ``name_normalized`` is the lookup key printed in the site QR code."""

    site_id: int
    name: str
    name_normalized: str
    lat: float
    lng: float
    allowed_radius_meters: float

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(lat=self.lat, lng=self.lng)
