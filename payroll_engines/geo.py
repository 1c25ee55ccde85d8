"""
Geo helpers (``payroll_engines.geo``).

Great-circle distance and implied travel speed between GPS fixes.
Coordinates are floats (physical measurements); nothing here touches money.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

EARTH_RADIUS_METERS = 6_371_000.0


@dataclass(frozen=True)
class GeoPoint:
    """A WGS-84 latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude must be within [-90, 90], got {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude must be within [-180, 180], got {self.longitude}")


def haversine_distance(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points, in meters."""
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Clamp against floating error just above 1.0 for antipodal points
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(h)))


def travel_speed_kmh(
    a: GeoPoint,
    a_time: datetime,
    b: GeoPoint,
    b_time: datetime,
) -> float | None:
    """Implied speed moving from ``a`` to ``b``, in km/h.

    Returns None when the elapsed time is zero or negative; a speed is
    undefined for simultaneous or out-of-order fixes.
    """
    elapsed_hours = (b_time - a_time).total_seconds() / 3600.0
    if elapsed_hours <= 0:
        return None
    return (haversine_distance(a, b) / 1000.0) / elapsed_hours
