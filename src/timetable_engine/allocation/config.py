"""Allocation configuration: scoring weights, thresholds and switches."""

import json
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from ..exceptions import ConfigurationError

WEIGHT_SUM_TOLERANCE = 1e-6


@dataclass(frozen=True)
class AllocationWeights:
    """Relative weights of the suitability axes.

    The utilization weight is reserved for the engine's balancing term
    and is not applied by the suitability analyzer.
    """

    capacity: float = 0.35
    room_type: float = 0.30
    facilities: float = 0.25
    utilization: float = 0.10


@dataclass(frozen=True)
class AllocationThresholds:
    """Health thresholds for utilization and allocation quality."""

    max_utilization_spread: float = 25.0
    min_capacity_efficiency: float = 0.5
    max_conflict_rate: float = 0.15


@dataclass(frozen=True)
class AllocationPreferences:
    """Behavioral switches for the allocation engine."""

    balance_utilization: bool = True
    strict_type_matching: bool = True
    allow_capacity_overflow: bool = False


@dataclass(frozen=True)
class AllocationConfig:
    """Complete configuration surface of the allocation engine."""

    weights: AllocationWeights = field(default_factory=AllocationWeights)
    thresholds: AllocationThresholds = field(default_factory=AllocationThresholds)
    preferences: AllocationPreferences = field(default_factory=AllocationPreferences)

    def validate(self) -> "AllocationConfig":
        """Check value ranges.

        Returns:
            The same config, for chaining.

        Raises:
            ConfigurationError: If any value is out of range.
        """
        for f in fields(self.weights):
            value = getattr(self.weights, f.name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"weights.{f.name}", value, "a number in [0, 1]")

        total = sum(getattr(self.weights, f.name) for f in fields(self.weights))
        if total > 1.0 + WEIGHT_SUM_TOLERANCE:
            raise ConfigurationError("weights", round(total, 4), "weights summing to at most 1.0")

        for f in fields(self.thresholds):
            value = getattr(self.thresholds, f.name)
            if value < 0:
                raise ConfigurationError(f"thresholds.{f.name}", value, "a non-negative number")

        return self

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AllocationConfig":
        """Create a config from a (possibly partial) dictionary.

        Keys may be given in snake_case or camelCase. Missing keys keep
        their defaults.
        """
        config = cls(
            weights=_merge(AllocationWeights(), data.get("weights", {})),
            thresholds=_merge(AllocationThresholds(), data.get("thresholds", {})),
            preferences=_merge(AllocationPreferences(), data.get("preferences", {})),
        )
        return config.validate()

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)


DEFAULT_CONFIG = AllocationConfig()


def _merge(base: Any, overrides: dict[str, Any]) -> Any:
    """Apply dictionary overrides to a frozen dataclass section."""
    if not isinstance(overrides, dict):
        raise ConfigurationError(type(base).__name__, overrides, "a mapping")

    known = {f.name: f for f in fields(base)}
    values: dict[str, Any] = {}
    for key, value in overrides.items():
        name = _to_snake_case(key)
        if name not in known:
            raise ConfigurationError(key, value, f"one of {', '.join(sorted(known))}")
        default = getattr(base, name)
        if isinstance(default, bool):
            if not isinstance(value, bool):
                raise ConfigurationError(key, value, "a boolean")
        elif not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ConfigurationError(key, value, "a number")
        values[name] = value
    return replace(base, **values)


def _to_snake_case(name: str) -> str:
    """Convert 'maxUtilizationSpread' to 'max_utilization_spread'."""
    out = []
    for char in name:
        if char.isupper():
            out.append("_")
            out.append(char.lower())
        else:
            out.append(char)
    return "".join(out)


def load_allocation_config(path: Path | str) -> AllocationConfig:
    """Load allocation configuration from a JSON file.

    Args:
        path: Path to JSON file.

    Returns:
        Validated AllocationConfig.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return AllocationConfig.from_dict(data)
