#!/usr/bin/env python3
"""
Geographic value types and great-circle distance for route analysis.
"""

from typing import NamedTuple
import math

# Mean Earth radius in kilometers (IUGG)
EARTH_RADIUS_KM = 6371.0


class Position(NamedTuple):
    """Represents a geographic position with latitude and longitude."""

    latitude: float
    longitude: float


class Waypoint(NamedTuple):
    """A single recorded sample along a route.

    Equality and hashing cover all three fields, so two samples taken at the
    same place but at different times are distinct waypoints.
    """

    timestamp: int
    latitude: float
    longitude: float

    @property
    def position(self) -> Position:
        return Position(self.latitude, self.longitude)


def haversine_distance(earth_radius: float, coord1, coord2) -> float:
    """
    Calculate the great-circle distance between two coordinates.

    Both coordinates only need ``latitude`` and ``longitude`` attributes in
    decimal degrees, so Positions and Waypoints can be mixed freely. No range
    checking is done; NaN inputs yield NaN.

    Args:
        earth_radius: Sphere radius; the result is in the same unit
        coord1: First coordinate
        coord2: Second coordinate

    Returns:
        Distance along the sphere surface
    """
    lat1 = math.radians(coord1.latitude)
    lat2 = math.radians(coord2.latitude)
    dlat = math.radians(coord2.latitude - coord1.latitude)
    dlon = math.radians(coord2.longitude - coord1.longitude)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    )

    return 2 * earth_radius * math.atan2(math.sqrt(a), math.sqrt(1 - a))
