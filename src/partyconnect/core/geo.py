"""
Geospatial helpers.

A tiny geometry layer so the stores can filter by distance without pulling in
heavier GIS dependencies. Coordinates are `(latitude, longitude)` pairs in decimal
degrees, the same order the persisted events use.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from math import asin, cos, radians, sin, sqrt
from typing import Any

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lon: float


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Compute great-circle distance in kilometers between two points."""
    lat1 = radians(a.lat)
    lon1 = radians(a.lon)
    lat2 = radians(b.lat)
    lon2 = radians(b.lon)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Rounding can push h a hair above 1 for antipodal points.
    return 2 * EARTH_RADIUS_KM * asin(sqrt(min(1.0, h)))


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in km between two coordinate pairs given in degrees."""
    return haversine_km(GeoPoint(lat=lat1, lon=lon1), GeoPoint(lat=lat2, lon=lon2))


def is_valid_coordinates(lat: float, lon: float) -> bool:
    """True for finite values inside the latitude/longitude ranges."""
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def _to_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def coerce_coordinates(value: Any) -> tuple[float, float] | None:
    """Turn a `[lat, lon]`-like value into a validated float pair.

    Numeric strings are accepted (form inputs arrive as text). Anything that is not a
    two-element sequence of finite, in-range numbers yields None.
    """
    if value is None or isinstance(value, (str, bytes)):
        return None
    if isinstance(value, GeoPoint):
        pair: tuple[Any, Any] = (value.lat, value.lon)
    elif isinstance(value, dict):
        pair = (value.get("lat"), value.get("lon"))
    else:
        try:
            items = list(value)
        except TypeError:
            return None
        if len(items) != 2:
            return None
        pair = (items[0], items[1])

    lat = _to_float(pair[0])
    lon = _to_float(pair[1])
    if lat is None or lon is None or not is_valid_coordinates(lat, lon):
        return None
    return lat, lon
