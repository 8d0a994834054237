import math

import pytest

from partyconnect.core.geo import GeoPoint, coerce_coordinates, distance_km, haversine_km

LOS_ANGELES = (34.0522, -118.2437)
NEW_YORK = (40.7128, -74.006)


def test_distance_is_zero_for_identical_points():
    assert distance_km(*LOS_ANGELES, *LOS_ANGELES) == 0


def test_distance_is_symmetric():
    assert distance_km(*LOS_ANGELES, *NEW_YORK) == pytest.approx(distance_km(*NEW_YORK, *LOS_ANGELES))


def test_distance_los_angeles_to_new_york():
    # Haversine with R=6371 km gives roughly 3936 km for these two points.
    assert distance_km(*LOS_ANGELES, *NEW_YORK) == pytest.approx(3936, rel=0.01)


def test_haversine_matches_degree_form_and_handles_antipodes():
    a = GeoPoint(lat=0.0, lon=0.0)
    b = GeoPoint(lat=0.0, lon=180.0)
    assert haversine_km(a, b) == pytest.approx(math.pi * 6371, rel=1e-9)
    assert haversine_km(a, b) == distance_km(0.0, 0.0, 0.0, 180.0)


def test_coerce_coordinates_accepts_numbers_and_numeric_strings():
    assert coerce_coordinates([34.0522, -118.2437]) == LOS_ANGELES
    assert coerce_coordinates(("34.0522", " -118.2437 ")) == LOS_ANGELES
    assert coerce_coordinates({"lat": 1, "lon": 2}) == (1.0, 2.0)


@pytest.mark.parametrize(
    "value",
    [
        None,
        "34.0,-118.2",
        ["abc", -118.2],
        [34.0],
        [1, 2, 3],
        [91, 0],
        [0, -181],
        [float("nan"), 0],
        [True, False],
        42,
    ],
)
def test_coerce_coordinates_rejects_invalid_values(value):
    assert coerce_coordinates(value) is None
