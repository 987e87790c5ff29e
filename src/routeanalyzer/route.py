#!/usr/bin/env python3
"""
Route data model, route file loading, and the farthest-from-start scan.
"""

from datetime import timezone
from typing import Iterator, Sequence, TextIO, Tuple
import csv
import logging
import os

import gpxpy
import gpxpy.gpx

from .geometry import Waypoint, haversine_distance

logger = logging.getLogger(__name__)

CSV_DELIMITER = ";"


class EmptyInputError(ValueError):
    """Raised when an operation needing a start waypoint gets an empty route."""

    pass


class RouteFormatError(ValueError):
    """Raised when a route file row cannot be parsed into a waypoint."""

    pass


class Route:
    """An ordered, read-only sequence of waypoints in recording order."""

    def __init__(self, waypoints: Sequence[Waypoint]):
        """Initializes a Route object.

        Args:
            waypoints: Waypoints in recording order. May be empty; operations
                that need a start waypoint raise EmptyInputError instead.
        """
        self.waypoints: Tuple[Waypoint, ...] = tuple(waypoints)

    @classmethod
    def from_csv(cls, file_input: TextIO) -> "Route":
        """
        Parse semicolon-delimited waypoint records into a route.

        The first row is a header and is skipped. Columns are taken by
        position: timestamp (milliseconds, may be written as a float),
        latitude, longitude.

        Args:
            file_input: File-like object containing CSV data

        Returns:
            Route object in file order

        Raises:
            RouteFormatError: If a row is short or holds a non-numeric or
                out-of-range value
        """
        reader = csv.reader(file_input, delimiter=CSV_DELIMITER)
        next(reader, None)

        waypoints = []
        for row in reader:
            if not row or all(not field.strip() for field in row):
                continue
            if len(row) < 3:
                raise RouteFormatError(
                    f"Line {reader.line_num}: expected 3 columns, got {len(row)}"
                )
            try:
                waypoints.append(
                    Waypoint(
                        timestamp=int(float(row[0])),
                        latitude=float(row[1]),
                        longitude=float(row[2]),
                    )
                )
            except (ValueError, OverflowError) as e:
                # int() of an infinite timestamp overflows
                raise RouteFormatError(f"Line {reader.line_num}: {e}") from e

        route = cls(waypoints)
        logger.debug(f"Parsed {len(route)} waypoints from CSV data")
        return route

    @classmethod
    def from_gpx(cls, file_input: TextIO) -> "Route":
        """
        Parse GPX file and concatenate all tracks/segments into a single route.

        Track point times become millisecond timestamps; naive times are
        taken as UTC and points without a time get timestamp 0.

        Args:
            file_input: File-like object containing GPX data

        Returns:
            Route object representing the concatenated route

        Raises:
            gpxpy.gpx.GPXException: If GPX file is malformed.
        """
        gpx_data = gpxpy.parse(file_input)

        waypoints = []
        for track in gpx_data.tracks:
            for segment in track.segments:
                for point in segment.points:
                    waypoints.append(
                        Waypoint(
                            timestamp=_to_millis(point.time),
                            latitude=point.latitude,
                            longitude=point.longitude,
                        )
                    )

        route = cls(waypoints)
        logger.debug(f"Parsed {len(route)} track points from GPX file")
        return route

    @classmethod
    def from_file(cls, filename: str) -> "Route":
        """
        Load a route from a CSV or GPX file, chosen by extension.

        Args:
            filename: Path to a .gpx file or a semicolon-delimited CSV file

        Returns:
            Route object representing the route

        Raises:
            FileNotFoundError: If file doesn't exist.
            PermissionError: If file can't be read.
            IsADirectoryError: If filename names a directory.
            UnicodeDecodeError: If the file is not UTF-8 text.
            RouteFormatError: If a CSV row is malformed.
            gpxpy.gpx.GPXException: If GPX file is malformed.
        """
        _, ext = os.path.splitext(filename)
        logger.debug(f"Reading route file: {filename}")
        with open(filename, "r", encoding="utf-8", newline="") as f:
            if ext.lower() == ".gpx":
                route = cls.from_gpx(f)
            else:
                route = cls.from_csv(f)

        if not route:
            logger.warning(f"No waypoints found in {filename}")
        return route

    def __len__(self) -> int:
        """Return number of waypoints in route."""
        return len(self.waypoints)

    def __getitem__(self, index):
        """Allow indexing into waypoints."""
        return self.waypoints[index]

    def __iter__(self) -> Iterator[Waypoint]:
        """Allow iteration over waypoints."""
        return iter(self.waypoints)

    def __eq__(self, other) -> bool:
        if isinstance(other, Route):
            return self.waypoints == other.waypoints
        return NotImplemented

    def __repr__(self) -> str:
        return f"Route({len(self.waypoints)} waypoints)"


def _to_millis(time) -> int:
    if time is None:
        return 0
    if time.tzinfo is None:
        time = time.replace(tzinfo=timezone.utc)
    return int(time.timestamp() * 1000)


def farthest_from_start(
    route: Sequence[Waypoint], earth_radius: float
) -> Tuple[Waypoint, float]:
    """
    Find the waypoint farthest from the first waypoint of the route.

    The start itself takes part in the scan at distance 0, so a one-point
    route returns its only waypoint. On ties the earliest waypoint wins.
    NaN distances never compare greater, so waypoints with non-finite
    coordinates are skipped rather than reported.

    Args:
        route: Waypoints in recording order
        earth_radius: Sphere radius used for the haversine distance

    Returns:
        Tuple of (farthest waypoint, distance from start)

    Raises:
        EmptyInputError: If the route has no waypoints
    """
    if len(route) == 0:
        raise EmptyInputError("Cannot find farthest waypoint of an empty route")

    start = route[0]
    farthest = start
    max_distance = 0.0

    for waypoint in route:
        distance = haversine_distance(earth_radius, start, waypoint)
        if distance > max_distance:
            farthest = waypoint
            max_distance = distance

    logger.debug(
        f"Farthest waypoint from start: ({farthest.latitude:.5f}, {farthest.longitude:.5f}) at {max_distance:.3f}"
    )
    return farthest, max_distance
