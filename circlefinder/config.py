"""
Configuration management for circlefinder
"""

import copy
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Tuple, Union

import yaml

from circlefinder.exceptions import InvalidArgumentError, MissingResourceError
from circlefinder.search.evaluator import radius_bounds
from circlefinder.search.scorer import normalize_weights


DEFAULT_CONFIG = {
    "search": {
        "diameter_tolerance": 0.0,
        "canny_start": 10,
        "canny_end": 200,
        "canny_step": 2,
        "accum_start": 10,
        "accum_end": 100,
        "accum_step": 2,
        "size_weight": 0.7,
        "center_weight": 0.3,
        "max_workers": 0
    },
    "hough": {
        "dp": 1.0,
        "blur_kernel": 5,
        "blur_sigma": 1.5
    },
    "contour": {
        "refine": True,
        "blur_kernel": 5
    },
    "artifacts": {
        "save_intermediate_results": False,
        "save_during_iteration": False,
        "max_intermediate_saved": 20
    }
}


@dataclass
class SearchConfig:
    """Everything a single parameter search needs besides the image."""

    target_diameter: float
    diameter_tolerance: float = 0.0
    canny_start: float = 10
    canny_end: float = 200
    canny_step: float = 2
    accum_start: float = 10
    accum_end: float = 100
    accum_step: float = 2
    size_weight: float = 0.7
    center_weight: float = 0.3
    max_workers: int = 0
    save_intermediate_results: bool = False
    save_during_iteration: bool = False
    max_intermediate_saved: int = 20

    def validate(self) -> "SearchConfig":
        """
        Check every field, raising InvalidArgumentError on the first problem.

        Returns:
            self, so calls can be chained
        """
        if self.target_diameter is None or self.target_diameter <= 0:
            raise InvalidArgumentError(
                f"Target diameter must be greater than 0, got {self.target_diameter}")
        if self.diameter_tolerance < 0:
            raise InvalidArgumentError(
                f"Diameter tolerance cannot be negative, got {self.diameter_tolerance}")

        min_radius, max_radius = radius_bounds(self.target_diameter)
        if max_radius <= min_radius:
            raise InvalidArgumentError(
                f"Target diameter {self.target_diameter} is too small to search, "
                f"radius window would be {min_radius}-{max_radius}")

        for axis in ("canny", "accum"):
            start = getattr(self, f"{axis}_start")
            end = getattr(self, f"{axis}_end")
            step = getattr(self, f"{axis}_step")
            if step <= 0:
                raise InvalidArgumentError(f"{axis}_step must be greater than 0, got {step}")
            if start <= 0 or end <= 0:
                raise InvalidArgumentError(
                    f"{axis} range bounds must be greater than 0, got {start}-{end}")

        # Raises on negative weights or a zero sum
        self.normalized_weights()

        if self.max_intermediate_saved < 0:
            raise InvalidArgumentError(
                f"max_intermediate_saved cannot be negative, got {self.max_intermediate_saved}")
        return self

    def normalized_weights(self) -> Tuple[float, float]:
        """Size and center weights rescaled so they sum to 1."""
        return normalize_weights(self.size_weight, self.center_weight)

    def resolve_workers(self) -> int:
        """Worker count for the pool; 0 or less means one per CPU."""
        if self.max_workers and self.max_workers > 0:
            return int(self.max_workers)
        return os.cpu_count() or 1

    @property
    def saves_intermediate(self) -> bool:
        """Intermediate export needs both flags switched on."""
        return bool(self.save_intermediate_results and self.save_during_iteration)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchConfig":
        """
        Build a config from a flat dict or a DEFAULT_CONFIG-shaped nested one.

        Unknown keys are ignored so one YAML file can also carry detector settings.
        """
        flat = {}
        for section in ("search", "artifacts"):
            if isinstance(data.get(section), dict):
                flat.update(data[section])
        flat.update({k: v for k, v in data.items() if not isinstance(v, dict)})

        if "target_diameter" not in flat:
            raise InvalidArgumentError("target_diameter is required")

        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in flat.items() if k in names})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if value is None and isinstance(merged.get(key), dict):
            # An empty section in YAML keeps the defaults
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load a YAML config file merged over DEFAULT_CONFIG."""
    path = Path(config_path)
    if not path.exists():
        raise MissingResourceError(f"Config file not found: {config_path}")

    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise InvalidArgumentError(f"Config file must contain a mapping: {config_path}")

    merged = merge_config(DEFAULT_CONFIG, data)
    for section in DEFAULT_CONFIG:
        if not isinstance(merged[section], dict):
            raise InvalidArgumentError(
                f"Config section '{section}' must be a mapping in {config_path}")
    return merged


def load_search_config(config_path: Union[str, Path], **overrides) -> SearchConfig:
    """Load a YAML file straight into a validated SearchConfig."""
    data = load_config(config_path)
    data["search"].update(overrides)
    return SearchConfig.from_dict(data).validate()
