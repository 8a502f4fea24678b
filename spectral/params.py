"""
spectral/params.py

Filter parameter block and resolution validation.

Everything a pipeline run needs from the host is validated here, once, before
any stage touches a buffer:
- resolution N must be an exact power of two in [1, N_MAX]
- strength must lie in [0, 1]
- direction / radius must be finite
- filter_type must name one of the four transfer functions

Invalid input raises ConfigurationError (a ValueError, so callers that catch
ValueError keep working).
"""

import math
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Any, Dict, Mapping, Union

import numpy as np

N_MAX = 2048


class ConfigurationError(ValueError):
    """Raised for invalid resolutions or filter parameters."""


class FilterType(IntEnum):
    LOW_PASS = 0
    HIGH_PASS = 1
    BAND_PASS = 2
    DIRECTIONAL = 3


_FILTER_ALIASES = {
    "lp": FilterType.LOW_PASS,
    "lowpass": FilterType.LOW_PASS,
    "low_pass": FilterType.LOW_PASS,
    "hp": FilterType.HIGH_PASS,
    "highpass": FilterType.HIGH_PASS,
    "high_pass": FilterType.HIGH_PASS,
    "bp": FilterType.BAND_PASS,
    "bandpass": FilterType.BAND_PASS,
    "band_pass": FilterType.BAND_PASS,
    "dir": FilterType.DIRECTIONAL,
    "directional": FilterType.DIRECTIONAL,
}


def parse_filter_type(value: Union[FilterType, int, str]) -> FilterType:
    """Accept a FilterType, its integer code, or a (case-insensitive) name/alias."""
    if isinstance(value, FilterType):
        return value
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid filter type {value!r}.")
    if isinstance(value, (int, np.integer)):
        try:
            return FilterType(int(value))
        except ValueError:
            raise ConfigurationError(
                f"Unknown filter type code {value}. Choose 0 (LP), 1 (HP), 2 (BP) or 3 (Directional)."
            ) from None
    if isinstance(value, str):
        key = value.strip().lower().replace("-", "_")
        if key.isdigit():
            return parse_filter_type(int(key))
        if key in _FILTER_ALIASES:
            return _FILTER_ALIASES[key]
        if key.upper() in FilterType.__members__:
            return FilterType[key.upper()]
        raise ConfigurationError(
            f"Unknown filter type '{value}'. Choose 'lowpass', 'highpass', 'bandpass' or 'directional'."
        )
    raise ConfigurationError(f"Invalid filter type {value!r}.")


def validate_resolution(n: Any) -> int:
    """
    Return N as an int if it is a power of two in [1, N_MAX].
    Raises ConfigurationError otherwise.
    """
    if isinstance(n, str) and n.strip().isdigit():
        n = int(n.strip())
    if isinstance(n, bool) or not isinstance(n, (int, np.integer, float)):
        raise ConfigurationError(f"Resolution must be an integer, got {n!r}.")
    if isinstance(n, float) and not n.is_integer():
        raise ConfigurationError(f"Resolution must be an integer, got {n!r}.")
    n = int(n)
    if n < 1:
        raise ConfigurationError(f"Resolution must be positive, got {n}.")
    if n > N_MAX:
        raise ConfigurationError(f"Resolution {n} exceeds the supported maximum of {N_MAX}.")
    if n & (n - 1) != 0:
        raise ConfigurationError(f"Resolution {n} is not a power of two.")
    return n


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        v = value.strip().lower()
        if v in ("1", "true", "yes", "on"):
            return True
        if v in ("0", "false", "no", "off", ""):
            return False
        raise ConfigurationError(f"Cannot interpret {value!r} as a boolean.")
    return bool(value)


@dataclass(frozen=True)
class FilterParameters:
    """
    Immutable parameter block for one pipeline run.

    Defaults match the interactive host (high-pass, strength 0.3,
    band radius 3.0, 1024x1024 transform).
    """

    filter_type: FilterType = FilterType.HIGH_PASS
    strength: float = 0.3
    direction: float = 0.0
    radius: float = 3.0
    show_spectrum: bool = False
    resolution: int = 1024
    extras: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self):
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "filter_type", parse_filter_type(self.filter_type))
        object.__setattr__(self, "resolution", validate_resolution(self.resolution))
        object.__setattr__(self, "show_spectrum", _as_bool(self.show_spectrum))

        for name in ("strength", "direction", "radius"):
            raw = getattr(self, name)
            try:
                value = float(raw)
            except (TypeError, ValueError):
                raise ConfigurationError(f"{name} must be a number, got {raw!r}.") from None
            if not math.isfinite(value):
                raise ConfigurationError(f"{name} must be finite, got {value}.")
            object.__setattr__(self, name, value)

        if not 0.0 <= self.strength <= 1.0:
            raise ConfigurationError(f"strength must lie in [0, 1], got {self.strength}.")

    def with_changes(self, **changes) -> "FilterParameters":
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "filter_type": self.filter_type.name.lower(),
            "strength": self.strength,
            "direction": self.direction,
            "radius": self.radius,
            "show_spectrum": self.show_spectrum,
            "resolution": self.resolution,
        }

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "FilterParameters":
        """
        Build parameters from a mapping (e.g. a parsed parameters.txt).
        Unknown keys are kept in `extras` rather than rejected, so files written
        with additional bookkeeping entries can be read back.
        """
        known = {"filter_type", "strength", "direction", "radius", "show_spectrum", "resolution"}
        kwargs = {k: v for k, v in values.items() if k in known}
        extras = {k: v for k, v in values.items() if k not in known}
        return cls(extras=extras, **kwargs)
