#!/usr/bin/env python3
"""
Routeanalyzer - batch analysis of recorded vehicle routes.

This package finds the point farthest from a route's start, the most
frequently revisited area, and the waypoints that leave a circular geofence.
"""
import importlib.metadata

__version__ = importlib.metadata.version("routeanalyzer")

# Import main classes for public API
from .geometry import EARTH_RADIUS_KM, Position, Waypoint, haversine_distance
from .route import EmptyInputError, Route, RouteFormatError, farthest_from_start
from .clustering import (
    ClusteringStrategy,
    ExactMatchStrategy,
    IndexedRadiusStrategy,
    RadiusStrategy,
    most_frequented_area,
    resolve_radius,
)
from .geofence import Geofence, centroid_of, waypoints_outside_geofence
from .config import AnalysisConfig, ConfigError, load_config
from .analysis import AnalysisResult, analyze, result_to_dict

__all__ = [
    "EARTH_RADIUS_KM",
    "Position",
    "Waypoint",
    "haversine_distance",
    "EmptyInputError",
    "Route",
    "RouteFormatError",
    "farthest_from_start",
    "ClusteringStrategy",
    "ExactMatchStrategy",
    "IndexedRadiusStrategy",
    "RadiusStrategy",
    "most_frequented_area",
    "resolve_radius",
    "Geofence",
    "centroid_of",
    "waypoints_outside_geofence",
    "AnalysisConfig",
    "ConfigError",
    "load_config",
    "AnalysisResult",
    "analyze",
    "result_to_dict",
]
