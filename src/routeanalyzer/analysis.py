#!/usr/bin/env python3
"""
Route analysis: combines the farthest-point, frequented-area and geofence
computations into a single result.
"""

from typing import Any, Dict, NamedTuple, Optional, Sequence, Tuple
import logging

from .clustering import ClusteringStrategy, most_frequented_area, resolve_radius
from .config import AnalysisConfig
from .geofence import centroid_of, waypoints_outside_geofence
from .geometry import Waypoint
from .route import farthest_from_start

logger = logging.getLogger(__name__)


class MaxDistanceFromStart(NamedTuple):
    waypoint: Waypoint
    distance_km: float


class MostFrequentedArea(NamedTuple):
    central_waypoint: Waypoint
    area_radius_km: float
    entries_count: int


class WaypointsOutsideGeofence(NamedTuple):
    central_waypoint: Optional[Waypoint]
    area_radius_km: float
    count: int
    waypoints: Tuple[Waypoint, ...]


class AnalysisResult(NamedTuple):
    """Everything derived from one route."""

    max_distance_from_start: MaxDistanceFromStart
    most_frequented_area: MostFrequentedArea
    waypoints_outside_geofence: WaypointsOutsideGeofence


def analyze(
    route: Sequence[Waypoint],
    config: AnalysisConfig,
    strategy: Optional[ClusteringStrategy] = None,
) -> AnalysisResult:
    """
    Analyze a route against the given configuration.

    The farthest distance from the start feeds the default cluster radius,
    so it is computed first.

    Args:
        route: Waypoints in recording order
        config: Analysis parameters
        strategy: Clustering policy for the most frequented area,
            RadiusStrategy when None

    Returns:
        AnalysisResult for the route

    Raises:
        EmptyInputError: If the route has no waypoints
    """
    earth_radius = config.earth_radius_km

    farthest, max_distance = farthest_from_start(route, earth_radius)

    area_radius = resolve_radius(config.most_frequented_area_radius_km, max_distance)
    if config.most_frequented_area_radius_km is None:
        logger.debug(f"No area radius configured, using {area_radius:.3f} km")

    center, entries = most_frequented_area(route, earth_radius, area_radius, strategy)

    outside = waypoints_outside_geofence(
        route,
        earth_radius,
        config.geofence_center_latitude,
        config.geofence_center_longitude,
        config.geofence_radius_km,
    )

    result = AnalysisResult(
        max_distance_from_start=MaxDistanceFromStart(
            waypoint=farthest, distance_km=max_distance
        ),
        most_frequented_area=MostFrequentedArea(
            central_waypoint=center,
            area_radius_km=area_radius,
            entries_count=entries,
        ),
        waypoints_outside_geofence=WaypointsOutsideGeofence(
            central_waypoint=centroid_of(outside),
            area_radius_km=config.geofence_radius_km,
            count=len(outside),
            waypoints=tuple(outside),
        ),
    )

    logger.info(
        f"Analyzed {len(route)} waypoints: max distance {max_distance:.2f} km, "
        f"{entries} entries in most frequented area, {len(outside)} outside geofence"
    )
    return result


def waypoint_to_dict(waypoint: Optional[Waypoint]) -> Optional[Dict[str, Any]]:
    if waypoint is None:
        return None
    return {
        "timestamp": waypoint.timestamp,
        "latitude": waypoint.latitude,
        "longitude": waypoint.longitude,
    }


def result_to_dict(result: AnalysisResult) -> Dict[str, Any]:
    """Convert a result to the JSON-ready layout of the output file."""
    farthest = result.max_distance_from_start
    area = result.most_frequented_area
    outside = result.waypoints_outside_geofence
    return {
        "maxDistanceFromStart": {
            "waypoint": waypoint_to_dict(farthest.waypoint),
            "distanceKm": farthest.distance_km,
        },
        "mostFrequentedArea": {
            "centralWaypoint": waypoint_to_dict(area.central_waypoint),
            "areaRadiusKm": area.area_radius_km,
            "entriesCount": area.entries_count,
        },
        "waypointsOutsideGeofence": {
            "centralWaypoint": waypoint_to_dict(outside.central_waypoint),
            "areaRadiusKm": outside.area_radius_km,
            "count": outside.count,
            "waypoints": [waypoint_to_dict(w) for w in outside.waypoints],
        },
    }
