import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class AngleRange:
    """Closed interval of whole degrees, both ends inclusive."""
    low: int
    high: int

    def __post_init__(self):
        if self.low > self.high:
            raise ValueError(f"Invalid angle range: low {self.low} > high {self.high}")

    def __contains__(self, angle) -> bool:
        return angle is not None and self.low <= angle <= self.high


def load_exercise_config(config_path: str = None) -> Dict[str, Any]:
    """Load exercise thresholds from JSON file."""
    if config_path is None:
        config_path = os.path.join(os.path.dirname(__file__), "exercise_config.json")
    with open(config_path, "r") as f:
        return json.load(f)


def parse_angle_ranges(raw_ranges: Dict[str, Any]) -> Dict[str, AngleRange]:
    ranges = {}
    for name, bounds in raw_ranges.items():
        if not isinstance(bounds, (list, tuple)) or len(bounds) != 2:
            raise ValueError(f"Angle range '{name}' must be a [low, high] pair, got {bounds!r}")
        ranges[name] = AngleRange(int(bounds[0]), int(bounds[1]))
    return ranges


def get_variant_config(config: Dict[str, Any], variant: str) -> Dict[str, Any]:
    try:
        return config["variants"][variant]
    except KeyError:
        raise ValueError(f"No configuration for exercise variant: {variant}") from None


def get_min_confidence(config: Dict[str, Any], override: Optional[float] = None) -> float:
    if override is not None:
        return override
    return float(config.get("min_confidence", 0.65))
