#!/usr/bin/env python3
"""
Circular geofence checks.
"""

from typing import List, NamedTuple, Optional, Sequence
import logging

from .geometry import Position, Waypoint, haversine_distance

logger = logging.getLogger(__name__)


class Geofence(NamedTuple):
    """A circular region around a center position."""

    center: Position
    radius_km: float

    def distance_to(self, earth_radius: float, point) -> float:
        return haversine_distance(earth_radius, self.center, point)

    def contains(self, earth_radius: float, point) -> bool:
        """Points exactly on the boundary are inside."""
        return self.distance_to(earth_radius, point) <= self.radius_km

    def is_outside(self, earth_radius: float, point) -> bool:
        return self.distance_to(earth_radius, point) > self.radius_km


def waypoints_outside_geofence(
    route: Sequence[Waypoint],
    earth_radius: float,
    center_lat: float,
    center_lon: float,
    radius: float,
) -> List[Waypoint]:
    """
    Select the waypoints farther than ``radius`` from the geofence center.

    Args:
        route: Waypoints in recording order
        earth_radius: Sphere radius used for the haversine distance
        center_lat: Geofence center latitude in degrees
        center_lon: Geofence center longitude in degrees
        radius: Geofence radius, same unit as earth_radius

    Returns:
        Waypoints outside the geofence, in route order
    """
    geofence = Geofence(Position(center_lat, center_lon), radius)
    outside = [w for w in route if geofence.is_outside(earth_radius, w)]

    logger.debug(
        f"{len(outside)} of {len(route)} waypoints outside geofence "
        f"({center_lat:.5f}, {center_lon:.5f}) r={radius}"
    )
    return outside


def centroid_of(waypoints: Sequence[Waypoint]) -> Optional[Waypoint]:
    """
    Average position of a group of waypoints.

    This is the planar mean of latitudes and longitudes, not a spherical
    centroid, so it drifts for groups spread across the antimeridian or
    near a pole.

    Returns:
        Waypoint with timestamp 0 at the mean position, or None if
        ``waypoints`` is empty
    """
    if not waypoints:
        return None

    count = len(waypoints)
    return Waypoint(
        timestamp=0,
        latitude=sum(w.latitude for w in waypoints) / count,
        longitude=sum(w.longitude for w in waypoints) / count,
    )
