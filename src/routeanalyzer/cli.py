#!/usr/bin/env python3
"""
Route analysis tool.
This script loads a recorded route (CSV or GPX), finds the point farthest
from the start, the most frequented area and the waypoints outside a
geofence, and writes the result as JSON.

Requirements:
    pip install gpxpy shapely pyyaml

"""

from typing import Optional
import argparse
import logging
import sys

from gpxpy import gpx

from . import __version__
from .analysis import AnalysisResult, analyze
from .clustering import STRATEGIES, get_strategy
from .config import AnalysisConfig, ConfigError, load_config
from .file_utils import generate_output_filename, result_to_json, save_result
from .geometry import EARTH_RADIUS_KM
from .metrics import collect_metrics, log_metrics
from .route import EmptyInputError, Route, RouteFormatError

# Configure logging
logger = logging.getLogger("routeanalyzer")


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command-line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Route analysis tool: farthest point, most frequented area, geofence exits",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "filename",
        type=str,
        nargs="?",
        help="Route file to process (semicolon-separated CSV or GPX)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML file with analysis parameters",
    )
    output_group = parser.add_mutually_exclusive_group()
    output_group.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output JSON file (default: auto-generated based on input filename)",
    )
    output_group.add_argument(
        "--stdout",
        action="store_true",
        help="Print only the JSON result to stdout instead of writing a file (no summary)",
    )
    parser.add_argument(
        "--earth-radius",
        type=float,
        default=None,
        help=f"Earth radius in km (default: config value or {EARTH_RADIUS_KM})",
    )
    parser.add_argument(
        "--geofence-lat",
        type=float,
        default=None,
        help="Geofence center latitude in degrees (overrides config)",
    )
    parser.add_argument(
        "--geofence-lon",
        type=float,
        default=None,
        help="Geofence center longitude in degrees (overrides config)",
    )
    parser.add_argument(
        "--geofence-radius",
        type=float,
        default=None,
        help="Geofence radius in km (overrides config)",
    )
    parser.add_argument(
        "--area-radius",
        type=float,
        default=None,
        help="Most frequented area radius in km (default: derived from route extent)",
    )
    parser.add_argument(
        "--clustering",
        type=str,
        default="radius",
        choices=list(STRATEGIES),
        help="Most frequented area strategy (default: radius)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging level (default: WARNING)",
    )
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Output structured metrics after processing",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"routeanalyzer {__version__}",
    )
    return parser


def determine_output_filename(input_filename: str, output_arg: Optional[str]) -> str:
    """
    Determine the output filename to use.

    Args:
        input_filename: Path to the input route file
        output_arg: Value from --output argument (None if not specified)

    Returns:
        Output filename to use

    Raises:
        RuntimeError: If auto-generation fails
        ValueError: If constructed filename would be illegal
    """
    if output_arg is not None:
        return output_arg

    try:
        return generate_output_filename(input_filename)
    except (RuntimeError, ValueError) as e:
        logger.error(f"Failed to generate output filename: {e}")
        raise


def build_config(args: argparse.Namespace) -> AnalysisConfig:
    """
    Build the analysis config from the config file and command-line overrides.

    Without --config, the geofence center and radius must all be given as
    flags; the earth radius falls back to the mean Earth radius.

    Raises:
        ConfigError: If a required value is missing or invalid
        OSError: If the config file can't be opened
        UnicodeDecodeError: If the config file is not UTF-8 text
    """
    overrides = {
        "earth_radius_km": args.earth_radius,
        "geofence_center_latitude": args.geofence_lat,
        "geofence_center_longitude": args.geofence_lon,
        "geofence_radius_km": args.geofence_radius,
        "most_frequented_area_radius_km": args.area_radius,
    }

    if args.config is not None:
        return load_config(args.config).with_overrides(**overrides)

    return AnalysisConfig.from_mapping(
        {
            "earthRadiusKm": (
                args.earth_radius if args.earth_radius is not None else EARTH_RADIUS_KM
            ),
            "geofenceCenterLatitude": args.geofence_lat,
            "geofenceCenterLongitude": args.geofence_lon,
            "geofenceRadiusKm": args.geofence_radius,
            "mostFrequentedAreaRadiusKm": args.area_radius,
        }
    )


def setup_logging(args: argparse.Namespace) -> None:
    """Setup logging configuration."""
    level = getattr(logging, args.log_level)

    # Create formatter
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"
    )

    # Create console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure the root logger so all modules inherit the configuration
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)


def print_summary(result: AnalysisResult, config: AnalysisConfig) -> None:
    """
    Print a short human-readable summary of the analysis.

    Args:
        result: Analysis result to describe
        config: Config the result was computed with
    """
    farthest = result.max_distance_from_start
    area = result.most_frequented_area
    outside = result.waypoints_outside_geofence
    geofence = config.geofence

    print(
        f"Farthest from start: {farthest.distance_km:.3f} km at "
        f"({farthest.waypoint.latitude:.6f}, {farthest.waypoint.longitude:.6f})"
    )
    print(
        f"Most frequented area: {area.entries_count} waypoints within "
        f"{area.area_radius_km:.3f} km of "
        f"({area.central_waypoint.latitude:.6f}, {area.central_waypoint.longitude:.6f})"
    )
    fence = (
        f"({geofence.center.latitude:.6f}, {geofence.center.longitude:.6f}) "
        f"r={geofence.radius_km:.3f} km"
    )
    if outside.central_waypoint is None:
        print(f"No waypoints outside geofence {fence}")
    else:
        print(
            f"Outside geofence {fence}: {outside.count} waypoints centered at "
            f"({outside.central_waypoint.latitude:.6f}, {outside.central_waypoint.longitude:.6f})"
        )


def main():
    """
    Parses command-line arguments, loads the route and config,
    analyzes the route, and writes the JSON result.
    """
    parser = create_argument_parser()
    args = parser.parse_args()

    if not args.filename:
        parser.print_help()
        sys.exit(1)

    # Setup logging
    setup_logging(args)

    try:
        config = build_config(args)
    except FileNotFoundError:
        logger.error(f"Config file not found: {args.config}")
        sys.exit(1)
    except (IsADirectoryError, PermissionError, UnicodeDecodeError) as e:
        logger.error(f"Cannot read config file {args.config}: {e}")
        sys.exit(1)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)
    logger.debug(f"Using {config}")

    # Load and parse the route file
    try:
        route = Route.from_file(args.filename)
    except FileNotFoundError:
        logger.error(f"Route file not found: {args.filename}")
        sys.exit(1)
    except PermissionError:
        logger.error(f"Cannot read route file (permission denied): {args.filename}")
        sys.exit(1)
    except IsADirectoryError:
        logger.error(f"Route file is a directory: {args.filename}")
        sys.exit(1)
    except UnicodeDecodeError as e:
        logger.error(f"Route file is not UTF-8 text: {args.filename} ({e})")
        sys.exit(1)
    except RouteFormatError as e:
        logger.error(f"Invalid route file: {e}")
        sys.exit(1)
    except gpx.GPXException as e:
        logger.error(f"Invalid GPX file: {e}")
        sys.exit(1)
    logger.info(f"Loaded route with {len(route)} waypoints")

    try:
        result = analyze(route, config, get_strategy(args.clustering))
    except EmptyInputError as e:
        logger.error(f"Cannot analyze route: {e}")
        sys.exit(1)

    metrics = collect_metrics(route, result)

    if args.stdout:
        print(result_to_json(result))
    else:
        try:
            output_filename = determine_output_filename(args.filename, args.output)
            logger.debug(f"Output filename: {output_filename}")
            save_result(result, output_filename)
        except (RuntimeError, ValueError):
            sys.exit(1)
        except OSError as e:
            logger.error(f"Failed to write result: {e}")
            sys.exit(1)
        print_summary(result, config)
        print(f"Results saved to {output_filename}")

    log_metrics(metrics, args)


if __name__ == "__main__":
    main()
