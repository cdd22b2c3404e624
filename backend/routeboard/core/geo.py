"""Great-circle distance and nearest-neighbour visiting order"""
import math
from collections.abc import Hashable

EARTH_RADIUS_KM = 6371

Point = tuple[Hashable, float | None, float | None]


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Distance in kilometres between two lat/lng points."""
    lat1, lng1, lat2, lng2 = map(math.radians, [lat1, lng1, lat2, lng2])
    dlat = lat2 - lat1
    dlng = lng2 - lng1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def has_coords(lat, lng) -> bool:
    return lat is not None and lng is not None and math.isfinite(lat) and math.isfinite(lng)


def nearest_neighbour_order(points: list[Point]) -> list[Hashable]:
    """
    Greedy visiting order: start at the southernmost point, then always go to the
    closest unvisited one. Points without coordinates keep their order at the end.
    Ties go to the earlier point in the input.
    """
    located = [p for p in points if has_coords(p[1], p[2])]
    unlocated = [p[0] for p in points if not has_coords(p[1], p[2])]
    if not located:
        return [p[0] for p in points]

    current = min(located, key=lambda p: p[1])
    remaining = list(located)
    remaining.remove(current)
    ordered = [current[0]]
    while remaining:
        nearest = min(remaining, key=lambda p: haversine_km(current[1], current[2], p[1], p[2]))
        remaining.remove(nearest)
        ordered.append(nearest[0])
        current = nearest
    return ordered + unlocated
