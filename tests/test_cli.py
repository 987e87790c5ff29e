import argparse
import json
import logging
import sys

import pytest

from routeanalyzer import cli
from routeanalyzer.analysis import analyze
from routeanalyzer.config import AnalysisConfig
from routeanalyzer.file_utils import generate_output_filename, save_result
from routeanalyzer.geometry import Waypoint
from routeanalyzer.metrics import collect_metrics, log_metrics
from routeanalyzer.route import Route

WAYPOINTS_CSV = """timestamp;latitude;longitude
0;0.0;0.0
1;0.0;0.01
2;10.0;10.0
"""

CONFIG_YAML = """\
earthRadiusKm: 6371.0
geofenceCenterLatitude: 0.0
geofenceCenterLongitude: 0.0
geofenceRadiusKm: 5.0
"""


@pytest.fixture
def route_file(tmp_path):
    path = tmp_path / "waypoints.csv"
    path.write_text(WAYPOINTS_CSV)
    return path


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "custom-parameters.yml"
    path.write_text(CONFIG_YAML)
    return path


def run_cli(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["routeanalyzer", *map(str, argv)])
    cli.main()


def test_cli_writes_json_result(monkeypatch, capsys, route_file, config_file):
    run_cli(monkeypatch, route_file, "--config", config_file)

    output = route_file.parent / "waypoints analysis.json"
    data = json.loads(output.read_text())
    assert data["maxDistanceFromStart"]["waypoint"]["timestamp"] == 2
    assert data["waypointsOutsideGeofence"]["count"] == 1
    assert data["waypointsOutsideGeofence"]["centralWaypoint"] == {
        "timestamp": 0,
        "latitude": 10.0,
        "longitude": 10.0,
    }

    stdout = capsys.readouterr().out
    assert "Farthest from start" in stdout
    assert f"Results saved to {output}" in stdout


def test_cli_explicit_output(monkeypatch, tmp_path, route_file, config_file):
    output = tmp_path / "result.json"
    run_cli(monkeypatch, route_file, "--config", config_file, "--output", output)
    assert json.loads(output.read_text())["mostFrequentedArea"]["entriesCount"] == 2


def test_cli_stdout_with_flag_config(monkeypatch, capsys, route_file):
    run_cli(
        monkeypatch,
        route_file,
        "--stdout",
        "--geofence-lat", "0",
        "--geofence-lon", "0",
        "--geofence-radius", "5000",
        "--area-radius", "0.5",
    )

    stdout = capsys.readouterr().out
    assert "Farthest from start" not in stdout
    data = json.loads(stdout)
    assert data["mostFrequentedArea"]["areaRadiusKm"] == 0.5
    assert data["mostFrequentedArea"]["entriesCount"] == 1
    assert data["waypointsOutsideGeofence"]["count"] == 0
    assert data["waypointsOutsideGeofence"]["centralWaypoint"] is None


def test_cli_flags_override_config(monkeypatch, capsys, route_file, config_file):
    run_cli(monkeypatch, route_file, "--config", config_file, "--stdout", "--geofence-radius", "5000")
    data = json.loads(capsys.readouterr().out)
    assert data["waypointsOutsideGeofence"]["areaRadiusKm"] == 5000.0
    assert data["waypointsOutsideGeofence"]["count"] == 0


def test_cli_exact_clustering(monkeypatch, capsys, tmp_path, config_file):
    route_file = tmp_path / "repeat.csv"
    route_file.write_text("timestamp;latitude;longitude\n0;0.0;0.0\n1;0.0;0.0\n1;0.0;0.0\n")
    run_cli(monkeypatch, route_file, "--config", config_file, "--stdout", "--clustering", "exact")
    data = json.loads(capsys.readouterr().out)
    assert data["mostFrequentedArea"]["centralWaypoint"]["timestamp"] == 1
    assert data["mostFrequentedArea"]["entriesCount"] == 2


def test_cli_without_filename_prints_help(monkeypatch, capsys):
    with pytest.raises(SystemExit) as excinfo:
        run_cli(monkeypatch)
    assert excinfo.value.code == 1
    assert "usage" in capsys.readouterr().out


@pytest.mark.parametrize(
    "extra_args",
    [
        [],  # no config and no geofence flags
        ["--config", "missing.yml"],
    ],
)
def test_cli_config_errors(monkeypatch, route_file, extra_args):
    with pytest.raises(SystemExit) as excinfo:
        run_cli(monkeypatch, route_file, *extra_args)
    assert excinfo.value.code == 1


def test_cli_missing_route_file(monkeypatch, tmp_path, config_file):
    with pytest.raises(SystemExit) as excinfo:
        run_cli(monkeypatch, tmp_path / "missing.csv", "--config", config_file)
    assert excinfo.value.code == 1


def test_cli_malformed_route_file(monkeypatch, tmp_path, config_file):
    route_file = tmp_path / "bad.csv"
    route_file.write_text("timestamp;latitude;longitude\n0;zero;0\n")
    with pytest.raises(SystemExit) as excinfo:
        run_cli(monkeypatch, route_file, "--config", config_file)
    assert excinfo.value.code == 1


GEOFENCE_FLAGS = ["--geofence-lat", "0", "--geofence-lon", "0", "--geofence-radius", "5"]


def test_cli_route_file_not_utf8(monkeypatch, tmp_path):
    route_file = tmp_path / "latin1.csv"
    route_file.write_bytes(b"timestamp;latitude;longitude\n0;0.0;0.0\xff\n")
    with pytest.raises(SystemExit) as excinfo:
        run_cli(monkeypatch, route_file, "--stdout", *GEOFENCE_FLAGS)
    assert excinfo.value.code == 1


def test_cli_route_file_is_directory(monkeypatch, tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        run_cli(monkeypatch, tmp_path, "--stdout", *GEOFENCE_FLAGS)
    assert excinfo.value.code == 1


def test_cli_config_file_is_directory(monkeypatch, tmp_path, route_file):
    config_dir = tmp_path / "params"
    config_dir.mkdir()
    with pytest.raises(SystemExit) as excinfo:
        run_cli(monkeypatch, route_file, "--config", config_dir, "--stdout")
    assert excinfo.value.code == 1


def test_cli_config_file_not_utf8(monkeypatch, tmp_path, route_file):
    config_file = tmp_path / "latin1.yml"
    config_file.write_bytes(CONFIG_YAML.encode() + b"# r\xe9glage\n")
    with pytest.raises(SystemExit) as excinfo:
        run_cli(monkeypatch, route_file, "--config", config_file, "--stdout")
    assert excinfo.value.code == 1


def test_cli_empty_route_file(monkeypatch, tmp_path, config_file):
    route_file = tmp_path / "empty.csv"
    route_file.write_text("timestamp;latitude;longitude\n")
    with pytest.raises(SystemExit) as excinfo:
        run_cli(monkeypatch, route_file, "--config", config_file, "--stdout")
    assert excinfo.value.code == 1


class TestOutputFilename:

    def test_generates_name_next_to_input(self, tmp_path):
        filename = generate_output_filename(str(tmp_path / "waypoints.csv"))
        assert filename == str(tmp_path / "waypoints analysis.json")
        assert (tmp_path / "waypoints analysis.json").exists()

    def test_numbers_existing_names(self, tmp_path):
        generate_output_filename(str(tmp_path / "trip.gpx"))
        second = generate_output_filename(str(tmp_path / "trip.gpx"))
        third = generate_output_filename(str(tmp_path / "trip.gpx"))
        assert second == str(tmp_path / "trip analysis (1).json")
        assert third == str(tmp_path / "trip analysis (2).json")

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ValueError):
            generate_output_filename(str(tmp_path / "no-such-dir" / "trip.csv"))

    def test_explicit_output_is_used(self):
        assert cli.determine_output_filename("trip.csv", "out.json") == "out.json"


def test_save_result(tmp_path):
    route = Route([Waypoint(0, 0.0, 0.0)])
    config = AnalysisConfig(geofence_radius_km=1.0)
    path = tmp_path / "result.json"
    save_result(analyze(route, config), str(path))

    data = json.loads(path.read_text())
    assert data["maxDistanceFromStart"] == {
        "waypoint": {"timestamp": 0, "latitude": 0.0, "longitude": 0.0},
        "distanceKm": 0.0,
    }


def test_log_metrics(caplog):
    route = Route([Waypoint(0, 0.0, 0.0), Waypoint(1, 0.0, 1.0)])
    config = AnalysisConfig(geofence_radius_km=50.0)
    metrics = collect_metrics(route, analyze(route, config))

    assert metrics.total_waypoints == 2
    assert metrics.outside_geofence == 1
    assert metrics.outside_share == 0.5

    with caplog.at_level(logging.DEBUG, logger="routeanalyzer.metrics"):
        log_metrics(metrics, argparse.Namespace(metrics=True))
    assert "=== ROUTEANALYZER_METRICS ===" in caplog.text
    assert "total_waypoints=2" in caplog.text
    assert "outside_geofence=1" in caplog.text


def test_log_metrics_disabled(caplog):
    route = Route([Waypoint(0, 0.0, 0.0)])
    metrics = collect_metrics(route, analyze(route, AnalysisConfig()))
    with caplog.at_level(logging.DEBUG, logger="routeanalyzer.metrics"):
        log_metrics(metrics, argparse.Namespace(metrics=False))
    assert "ROUTEANALYZER_METRICS" not in caplog.text
