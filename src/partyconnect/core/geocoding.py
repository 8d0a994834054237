"""
Mock geocoding.

There is no geocoding provider behind the app; place names and coordinates are
resolved against two fixed tables. Forward lookups try an exact (lower-cased) match
first, then a partial match in either direction. Reverse lookups return the nearest
known place within a radius, or a generic "Location at ..." label.
"""

from __future__ import annotations

from partyconnect.core.geo import distance_km

_PLACES: dict[str, tuple[float, float]] = {
    "los angeles": (34.0522, -118.2437),
    "new york": (40.7128, -74.006),
    "chicago": (41.8781, -87.6298),
    "san francisco": (37.7749, -122.4194),
    "austin": (30.2672, -97.7431),
    "malibu": (34.0259, -118.7798),
    "london": (51.5074, -0.1278),
    "paris": (48.8566, 2.3522),
    "tokyo": (35.6762, 139.6503),
    "sydney": (-33.8688, 151.2093),
    "berlin": (52.52, 13.405),
    "rome": (41.9028, 12.4964),
    "madrid": (40.4168, -3.7038),
    "barcelona": (41.3851, 2.1734),
    "amsterdam": (52.3676, 4.9041),
    "dubai": (25.2048, 55.2708),
    "singapore": (1.3521, 103.8198),
    "hong kong": (22.3193, 114.1694),
    "toronto": (43.6532, -79.3832),
    "vancouver": (49.2827, -123.1207),
    "miami": (25.7617, -80.1918),
    "las vegas": (36.1699, -115.1398),
    "seattle": (47.6062, -122.3321),
    "boston": (42.3601, -71.0589),
    "denver": (39.7392, -104.9903),
    "mojacar": (37.139, -1.8513),
    "spain": (40.4637, -3.7492),
}

_LABELS: list[tuple[tuple[float, float], str]] = [
    ((34.0522, -118.2437), "Los Angeles, CA"),
    ((40.7128, -74.006), "New York, NY"),
    ((41.8781, -87.6298), "Chicago, IL"),
    ((37.7749, -122.4194), "San Francisco, CA"),
    ((30.2672, -97.7431), "Austin, TX"),
    ((34.0259, -118.7798), "Malibu Beach, CA"),
    ((37.139, -1.8513), "Mojácar, Spain"),
    ((40.4637, -3.7492), "Madrid, Spain"),
]


def search_location(name: str) -> tuple[float, float] | None:
    """Resolve a place name to `(lat, lon)`, or None if unknown."""
    normalized = (name or "").strip().lower()
    if not normalized:
        return None
    exact = _PLACES.get(normalized)
    if exact:
        return exact
    for place, coords in _PLACES.items():
        if place in normalized or normalized in place:
            return coords
    return None


def location_name(lat: float, lon: float, *, radius_km: float = 50.0) -> str:
    """Label for a coordinate pair: nearest known place, else the raw coordinates."""
    best_label: str | None = None
    best_km: float | None = None
    for (plat, plon), label in _LABELS:
        d = distance_km(lat, lon, plat, plon)
        if best_km is None or d < best_km:
            best_km, best_label = d, label
    if best_label is not None and best_km is not None and best_km < radius_km:
        return best_label
    return f"Location at {lat:.4f}, {lon:.4f}"
