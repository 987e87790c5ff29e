#!/usr/bin/env python3
"""
Most-frequented-area detection.

Every waypoint is a candidate cluster center. A candidate's score is the
number of waypoints (itself included) in its neighborhood, and the first
candidate in route order with the best score wins. How a neighborhood is
defined is delegated to a ClusteringStrategy, so the orchestrator does not
change when the policy does.

Scoring every candidate against every waypoint is O(n²) in the route
length. IndexedRadiusStrategy cuts the number of haversine evaluations for
long routes while returning the same counts as RadiusStrategy.
"""

from typing import Dict, List, Optional, Sequence, Tuple
import collections
import logging
import math

from shapely import STRtree
from shapely.geometry import Point, box

from .geometry import Waypoint, haversine_distance
from .route import EmptyInputError

logger = logging.getLogger(__name__)

# Default cluster radius for routes spanning less than 1 km
MIN_AREA_RADIUS_KM = 0.1
SHORT_ROUTE_KM = 1.0
AREA_RADIUS_FRACTION = 0.1

# Slack added to index query boxes; the haversine check decides membership
_BOX_MARGIN_DEG = 1e-6


def resolve_radius(
    configured_radius: Optional[float], max_distance_from_start: float
) -> float:
    """
    Choose the neighborhood radius for most-frequented-area detection.

    An explicitly configured radius is used as is. Otherwise the radius
    scales with the route: 10% of the farthest distance from the start, or
    0.1 km when the route stays within 1 km of its start.

    Args:
        configured_radius: Radius from configuration, or None
        max_distance_from_start: Result of farthest_from_start

    Returns:
        Radius in the same unit as the distances
    """
    if configured_radius is not None:
        return configured_radius
    if max_distance_from_start < SHORT_ROUTE_KM:
        return MIN_AREA_RADIUS_KM
    return max_distance_from_start * AREA_RADIUS_FRACTION


class ClusteringStrategy:
    """Policy deciding which waypoints count toward a candidate center."""

    name = ""

    def neighbor_counts(
        self, route: Sequence[Waypoint], earth_radius: float, radius: float
    ) -> List[int]:
        """
        Count the neighborhood of every waypoint.

        Returns:
            One count per waypoint, in route order
        """
        raise NotImplementedError


class RadiusStrategy(ClusteringStrategy):
    """Neighbors are all waypoints within ``radius`` of the candidate."""

    name = "radius"

    def neighbor_counts(
        self, route: Sequence[Waypoint], earth_radius: float, radius: float
    ) -> List[int]:
        return [
            sum(
                1
                for other in route
                if haversine_distance(earth_radius, center, other) <= radius
            )
            for center in route
        ]


class ExactMatchStrategy(ClusteringStrategy):
    """Neighbors are waypoints identical to the candidate in all fields.

    The radius is ignored.
    """

    name = "exact"

    def neighbor_counts(
        self, route: Sequence[Waypoint], earth_radius: float, radius: float
    ) -> List[int]:
        occurrences = collections.Counter(route)
        return [occurrences[waypoint] for waypoint in route]


class IndexedRadiusStrategy(ClusteringStrategy):
    """Radius neighborhoods found through an R-tree of the waypoints.

    Each candidate queries the tree with the lat/lon bounding box of its
    spherical cap and only runs the haversine check on the hits. Candidates
    whose cap reaches a pole or wraps across the antimeridian are checked
    against the whole route.
    """

    name = "indexed"

    def neighbor_counts(
        self, route: Sequence[Waypoint], earth_radius: float, radius: float
    ) -> List[int]:
        if not all(
            math.isfinite(w.latitude) and math.isfinite(w.longitude) for w in route
        ):
            logger.debug("Non-finite coordinates in route, using full scan")
            return RadiusStrategy().neighbor_counts(route, earth_radius, radius)

        tree = STRtree([Point(w.longitude, w.latitude) for w in route])

        counts = []
        full_scans = 0
        for center in route:
            bounds = cap_bounds(center, earth_radius, radius)
            if bounds is None:
                candidates: Sequence[Waypoint] = route
                full_scans += 1
            else:
                candidates = [route[i] for i in tree.query(box(*bounds))]
            counts.append(
                sum(
                    1
                    for other in candidates
                    if haversine_distance(earth_radius, center, other) <= radius
                )
            )

        if full_scans:
            logger.debug(f"{full_scans} of {len(route)} candidates needed a full scan")
        return counts


def cap_bounds(
    center: Waypoint, earth_radius: float, radius: float
) -> Optional[Tuple[float, float, float, float]]:
    """
    Bounding box of the spherical cap of ``radius`` around ``center``.

    Args:
        center: Cap center
        earth_radius: Sphere radius
        radius: Cap radius, same unit as earth_radius

    Returns:
        (west, south, east, north) in degrees, padded slightly, or None when
        the cap contains a pole, crosses the antimeridian, or the radius is
        not usable for a box
    """
    angular = radius / earth_radius
    if not (0.0 <= angular < math.pi / 2):
        return None

    lat = math.radians(center.latitude)
    lon = math.radians(center.longitude)
    south = lat - angular
    north = lat + angular
    if south <= -math.pi / 2 or north >= math.pi / 2:
        return None

    dlon = math.asin(min(1.0, math.sin(angular) / math.cos(lat)))
    west = lon - dlon
    east = lon + dlon
    if west < -math.pi or east > math.pi:
        return None

    return (
        math.degrees(west) - _BOX_MARGIN_DEG,
        math.degrees(south) - _BOX_MARGIN_DEG,
        math.degrees(east) + _BOX_MARGIN_DEG,
        math.degrees(north) + _BOX_MARGIN_DEG,
    )


STRATEGIES: Dict[str, type] = {
    strategy.name: strategy
    for strategy in (RadiusStrategy, IndexedRadiusStrategy, ExactMatchStrategy)
}


def get_strategy(name: str) -> ClusteringStrategy:
    """
    Look up a clustering strategy by name.

    Raises:
        ValueError: If no strategy has that name
    """
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown clustering strategy '{name}' (choose from {', '.join(STRATEGIES)})"
        )


def most_frequented_area(
    route: Sequence[Waypoint],
    earth_radius: float,
    radius: float,
    strategy: Optional[ClusteringStrategy] = None,
) -> Tuple[Waypoint, int]:
    """
    Find the waypoint whose neighborhood holds the most waypoints.

    Args:
        route: Waypoints in recording order
        earth_radius: Sphere radius used for the haversine distance
        radius: Neighborhood radius, same unit as earth_radius
        strategy: Neighborhood policy, RadiusStrategy when None

    Returns:
        Tuple of (central waypoint, number of waypoints in its neighborhood)

    Raises:
        EmptyInputError: If the route has no waypoints
    """
    if len(route) == 0:
        raise EmptyInputError("Cannot find most frequented area of an empty route")

    if strategy is None:
        strategy = RadiusStrategy()

    counts = strategy.neighbor_counts(route, earth_radius, radius)

    best_index = 0
    for i, count in enumerate(counts):
        if count > counts[best_index]:
            best_index = i

    logger.debug(
        f"Most frequented area ({strategy.name}, radius {radius:.3f}): "
        f"waypoint {best_index} with {counts[best_index]} entries"
    )
    return route[best_index], counts[best_index]
