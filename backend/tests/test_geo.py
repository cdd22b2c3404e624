"""Distance and visiting order helpers"""
import pytest

from routeboard.core.geo import haversine_km, nearest_neighbour_order


def test_haversine_one_degree_of_latitude():
    assert haversine_km(40.0, -74.0, 41.0, -74.0) == pytest.approx(111.19, abs=0.05)
    assert haversine_km(40.0, -74.0, 40.0, -74.0) == 0


def test_nearest_neighbour_starts_south_and_keeps_unlocated_last():
    points = [
        ("x", None, None),
        ("n", 40.3, -74.0),
        ("s", 40.0, -74.0),
        ("y", 40.1, None),
        ("m", 40.1, -74.0),
    ]
    assert nearest_neighbour_order(points) == ["s", "m", "n", "x", "y"]


def test_nearest_neighbour_without_coordinates_keeps_order():
    assert nearest_neighbour_order([("b", None, None), ("a", None, None)]) == ["b", "a"]
    assert nearest_neighbour_order([]) == []
