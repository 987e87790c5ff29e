"""
Module for collecting and logging metrics related to a route analysis.
"""

import argparse
import logging
from typing import NamedTuple, Sequence

from .analysis import AnalysisResult
from .geometry import Waypoint

logger = logging.getLogger(__name__)


class AnalysisMetrics(NamedTuple):
    """Container for analysis metrics data."""

    total_waypoints: int
    max_distance_km: float
    area_radius_km: float
    area_entries: int
    outside_geofence: int

    @property
    def outside_share(self) -> float:
        if self.total_waypoints == 0:
            return 0.0
        return self.outside_geofence / self.total_waypoints


def collect_metrics(
    route: Sequence[Waypoint], result: AnalysisResult
) -> AnalysisMetrics:
    """
    Collect metrics from an analysis result.

    Args:
        route: The analyzed route
        result: Result of analyzing ``route``

    Returns:
        AnalysisMetrics containing all collected metrics
    """
    return AnalysisMetrics(
        total_waypoints=len(route),
        max_distance_km=result.max_distance_from_start.distance_km,
        area_radius_km=result.most_frequented_area.area_radius_km,
        area_entries=result.most_frequented_area.entries_count,
        outside_geofence=result.waypoints_outside_geofence.count,
    )


def log_metrics(metrics: AnalysisMetrics, args: argparse.Namespace) -> None:
    """
    Log detailed metrics after the analysis.

    Args:
        metrics: AnalysisMetrics containing collected metrics
        args: argparse.Namespace object containing settings like metrics flag
    """
    if not args.metrics:
        return

    logger.debug("=== ROUTEANALYZER_METRICS ===")
    logger.debug(f"total_waypoints={metrics.total_waypoints}")
    logger.debug(f"max_distance_km={metrics.max_distance_km:.6f}")
    logger.debug(f"area_radius_km={metrics.area_radius_km:.6f}")
    logger.debug(f"area_entries={metrics.area_entries}")
    logger.debug(f"outside_geofence={metrics.outside_geofence}")
    logger.debug(f"outside_share={metrics.outside_share:.4f}")
    logger.debug("=== END_ROUTEANALYZER_METRICS ===")
