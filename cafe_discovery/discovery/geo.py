from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

EARTH_RADIUS_MILES = 3959.0
MILES_PER_DEGREE_LAT = 69.0


@dataclass(frozen=True)
class BoundingBox:
    lat_min: float
    lat_max: float
    lng_min: float
    lng_max: float


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in statute miles between two points in degrees."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


def distances_from(
    latitude: float,
    longitude: float,
    lats: Sequence[float],
    lons: Sequence[float],
) -> np.ndarray:
    """Vectorised haversine from one origin to many points, in miles."""
    lat1 = np.radians(latitude)
    lat2 = np.radians(np.asarray(lats, dtype=float))
    d_lat = lat2 - lat1
    d_lon = np.radians(np.asarray(lons, dtype=float) - longitude)
    a = np.sin(d_lat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(d_lon / 2) ** 2
    # Clip guards sqrt(1 - a) against rounding just above 1.0 for antipodal points.
    a = np.clip(a, 0.0, 1.0)
    return EARTH_RADIUS_MILES * 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))


def bounding_box(
    latitude: float,
    longitude: float,
    radius_miles: float,
    safety: float = 1.5,
) -> BoundingBox:
    """Coarse lat/lng window that contains every point within ``radius_miles``.

    The box is padded by ``safety`` because a rectangle is only an
    approximation of the search circle; exact distances are checked after
    the store returns its rows.
    """
    lat_delta = (radius_miles / MILES_PER_DEGREE_LAT) * safety
    lng_delta = (radius_miles / (MILES_PER_DEGREE_LAT * math.cos(math.radians(latitude)))) * safety
    return BoundingBox(
        lat_min=latitude - lat_delta,
        lat_max=latitude + lat_delta,
        lng_min=longitude - lng_delta,
        lng_max=longitude + lng_delta,
    )


def radius_for_page(page: int, ladder: Sequence[float] = (5.0, 10.0, 15.0, 20.0, 30.0)) -> float:
    """Adaptive search radius: the radius widens as the caller pages deeper."""
    if page < 0:
        raise ValueError("page must be non-negative")
    return ladder[min(page, len(ladder) - 1)]


def format_distance(miles: float) -> str:
    """Human-readable distance: feet under a tenth of a mile, else miles."""
    if miles < 0.1:
        return f"{round(miles * 5280)} ft away"
    return f"{miles:.1f} mi away"
