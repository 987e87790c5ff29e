from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional
import logging

import yaml

from .geometry import EARTH_RADIUS_KM, Position
from .geofence import Geofence

logger = logging.getLogger(__name__)

# Config file key -> AnalysisConfig field
CONFIG_KEYS = {
    "earthRadiusKm": "earth_radius_km",
    "geofenceCenterLatitude": "geofence_center_latitude",
    "geofenceCenterLongitude": "geofence_center_longitude",
    "geofenceRadiusKm": "geofence_radius_km",
    "mostFrequentedAreaRadiusKm": "most_frequented_area_radius_km",
}
OPTIONAL_KEYS = {"mostFrequentedAreaRadiusKm"}


class ConfigError(ValueError):
    """Raised when configuration values are missing or not numeric."""

    pass


@dataclass(frozen=True)
class AnalysisConfig:
    """Parameters for a single route analysis run."""

    earth_radius_km: float = EARTH_RADIUS_KM
    geofence_center_latitude: float = 0.0
    geofence_center_longitude: float = 0.0
    geofence_radius_km: float = 0.0
    most_frequented_area_radius_km: Optional[float] = None

    @property
    def geofence(self) -> Geofence:
        return Geofence(
            Position(self.geofence_center_latitude, self.geofence_center_longitude),
            self.geofence_radius_km,
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AnalysisConfig":
        """
        Build a config from a mapping keyed like the YAML config file.

        Args:
            data: Mapping with camelCase keys such as ``earthRadiusKm``

        Returns:
            AnalysisConfig with every value converted to float

        Raises:
            ConfigError: If a mandatory key is missing or a value isn't numeric
        """
        values = {}
        for key, field_name in CONFIG_KEYS.items():
            value = data.get(key)
            if value is None:
                if key in OPTIONAL_KEYS:
                    continue
                raise ConfigError(f"Missing required config value '{key}'")
            values[field_name] = _to_float(key, value)

        unknown = set(data) - set(CONFIG_KEYS)
        if unknown:
            # YAML keys need not be strings
            names = sorted(map(str, unknown))
            logger.warning(f"Ignoring unknown config keys: {', '.join(names)}")

        return cls(**values)

    def with_overrides(self, **overrides: Optional[float]) -> "AnalysisConfig":
        """Return a copy with every non-None override applied."""
        names = {f.name for f in fields(self)}
        for name in overrides:
            if name not in names:
                raise TypeError(f"Unknown config field '{name}'")
        changes = {k: float(v) for k, v in overrides.items() if v is not None}
        return replace(self, **changes)


def _to_float(key: str, value: Any) -> float:
    # bool is an int subclass but never a sensible distance or coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"Config value '{key}' must be a number, got {value!r}")
    return float(value)


def load_config(filename: str) -> AnalysisConfig:
    """
    Load analysis parameters from a YAML file.

    Args:
        filename: Path to the YAML config file

    Returns:
        AnalysisConfig built from the file

    Raises:
        FileNotFoundError: If file doesn't exist.
        UnicodeDecodeError: If the file is not UTF-8 text.
        ConfigError: If the document is not a mapping or values are invalid.
    """
    logger.debug(f"Reading config file: {filename}")
    with open(filename, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {filename}: {e}") from e

    if not isinstance(data, Mapping):
        raise ConfigError(f"Config file {filename} must contain a mapping")

    return AnalysisConfig.from_mapping(data)
