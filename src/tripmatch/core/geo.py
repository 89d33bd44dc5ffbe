"""
Great-circle distance between two coordinates.

Destinations are compared at country/continent scale (hundreds to thousands of km), so
a spherical earth is accurate enough and no GIS dependency is needed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lon: float

    def radians(self) -> tuple[float, float]:
        return math.radians(self.lat), math.radians(self.lon)


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine distance in kilometres."""
    (phi1, lam1), (phi2, lam2) = a.radians(), b.radians()
    h = math.sin((phi2 - phi1) / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin((lam2 - lam1) / 2) ** 2
    # h can drift a hair above 1 for antipodal points.
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, h)))
