"""
Param definition and lookup helpers.
Layer control ranges live here so the mix session and the evaluators agree on them.
"""
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

# Dev mode makes fail-closed evaluation paths log at WARNING instead of DEBUG.
DEV = os.environ.get("ENV", "development").lower() in ("development", "dev", "test")


# -----------------------------------------------------------------------------
# Param definition
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ParamDef:
    """Definition of a single control. Bounds/unit are optional."""
    name: str
    default: Any
    min: Optional[float] = None
    max: Optional[float] = None
    unit: Optional[str] = None

    def clamp(self, value: float) -> float:
        return clamp_if_bounds(value, self.min, self.max)


LAYER_RANGES: Dict[str, ParamDef] = {
    "volume": ParamDef("volume", 0.0, -60.0, 6.0, "dB"),
    "pan": ParamDef("pan", 0.0, -1.0, 1.0),
    "eq_low": ParamDef("eq_low", 0.0, -12.0, 12.0, "dB"),
    "eq_high": ParamDef("eq_high", 0.0, -12.0, 12.0, "dB"),
}


# -----------------------------------------------------------------------------
# Lookup helpers
# -----------------------------------------------------------------------------

def get_param(params: dict, name: str, default: Any = None) -> Any:
    """
    Read a value from params, supporting dotted keys for nested dicts.
    E.g. get_param(p, "filter.cutoff", 2000.0) -> p["filter"]["cutoff"] or default.
    If any intermediate key is missing or not a dict, returns default.
    """
    if not params or not name:
        return default
    keys = name.split(".")
    current = params
    for key in keys[:-1]:
        next_val = current.get(key)
        if next_val is None or not isinstance(next_val, dict):
            return default
        current = next_val
    return current.get(keys[-1], default)


def clamp_if_bounds(
    value: float,
    min: Optional[float] = None,
    max: Optional[float] = None,
) -> float:
    """
    Clamp value to [min, max] when bounds are not None.
    If both are None, returns value unchanged.
    """
    try:
        v = float(value)
    except (TypeError, ValueError):
        return value
    if min is not None and v < min:
        return min
    if max is not None and v > max:
        return max
    return v
