"""
Goal conditions for production challenges.
Each condition is checked independently against a snapshot of layer states.
A condition that names a missing layer, or that is not a known variant, is not met.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Sequence, Tuple, Union

from mixcraft.core.params import DEV
from mixcraft.mix.layers import LayerState, find_layer

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Condition variants
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class LevelOrder:
    """louder must be strictly louder than quieter; a muted layer has no level."""
    louder: str
    quieter: str
    type: str = field(default="level_order", init=False)


@dataclass(frozen=True)
class PanSpread:
    """Unmuted layers must span at least min_width of the stereo field."""
    min_width: float
    type: str = field(default="pan_spread", init=False)


@dataclass(frozen=True)
class LayerActive:
    layer_id: str
    active: bool
    type: str = field(default="layer_active", init=False)


@dataclass(frozen=True)
class LayerMuted:
    layer_id: str
    muted: bool
    type: str = field(default="layer_muted", init=False)


@dataclass(frozen=True)
class RelativeLevel:
    """layer1.volume - layer2.volume must lie in [min, max] (dB)."""
    layer1: str
    layer2: str
    difference: Tuple[float, float]
    type: str = field(default="relative_level", init=False)


@dataclass(frozen=True)
class PanPosition:
    layer_id: str
    position: Tuple[float, float]
    type: str = field(default="pan_position", init=False)


@dataclass(frozen=True)
class UnknownCondition:
    """Placeholder for an unrecognised condition type; never met."""
    type: str
    raw: Dict[str, Any] = field(default_factory=dict)


ProductionCondition = Union[
    LevelOrder, PanSpread, LayerActive, LayerMuted, RelativeLevel, PanPosition, UnknownCondition
]


# -----------------------------------------------------------------------------
# Evaluation
# -----------------------------------------------------------------------------

def _effective_level(state: LayerState) -> float:
    return -math.inf if state.muted else state.volume


def _missing(condition: ProductionCondition, layer_id: str) -> bool:
    log = logger.warning if DEV else logger.debug
    log("Condition %s references unknown layer %r; treating as not met", condition.type, layer_id)
    return False


def check_condition(condition: ProductionCondition, states: Sequence[LayerState]) -> bool:
    """Return True if the condition holds for the given layer states."""
    if isinstance(condition, LevelOrder):
        louder = find_layer(states, condition.louder)
        quieter = find_layer(states, condition.quieter)
        if louder is None:
            return _missing(condition, condition.louder)
        if quieter is None:
            return _missing(condition, condition.quieter)
        return _effective_level(louder) > _effective_level(quieter)

    if isinstance(condition, PanSpread):
        pans = [s.pan for s in states if not s.muted]
        if len(pans) < 2:
            return False
        return max(pans) - min(pans) >= condition.min_width

    if isinstance(condition, LayerActive):
        layer = find_layer(states, condition.layer_id)
        if layer is None:
            return _missing(condition, condition.layer_id)
        return (not layer.muted) == condition.active

    if isinstance(condition, LayerMuted):
        layer = find_layer(states, condition.layer_id)
        if layer is None:
            return _missing(condition, condition.layer_id)
        return layer.muted == condition.muted

    if isinstance(condition, RelativeLevel):
        layer1 = find_layer(states, condition.layer1)
        layer2 = find_layer(states, condition.layer2)
        if layer1 is None:
            return _missing(condition, condition.layer1)
        if layer2 is None:
            return _missing(condition, condition.layer2)
        low, high = condition.difference
        return low <= layer1.volume - layer2.volume <= high

    if isinstance(condition, PanPosition):
        layer = find_layer(states, condition.layer_id)
        if layer is None:
            return _missing(condition, condition.layer_id)
        low, high = condition.position
        return low <= layer.pan <= high

    log = logger.warning if DEV else logger.debug
    log("Unknown condition type %r; treating as not met", getattr(condition, "type", condition))
    return False


def describe_condition(condition: ProductionCondition) -> str:
    """Render a condition as a single human-readable sentence."""
    if isinstance(condition, LevelOrder):
        return f"{condition.louder} louder than {condition.quieter}"
    if isinstance(condition, PanSpread):
        return f"Stereo width at least {condition.min_width:g}"
    if isinstance(condition, LayerActive):
        if condition.active:
            return f"{condition.layer_id} is playing"
        return f"{condition.layer_id} is not playing"
    if isinstance(condition, LayerMuted):
        if condition.muted:
            return f"{condition.layer_id} is muted"
        return f"{condition.layer_id} is unmuted"
    if isinstance(condition, RelativeLevel):
        return f"{condition.layer1} level relative to {condition.layer2}"
    if isinstance(condition, PanPosition):
        return f"{condition.layer_id} panned correctly"
    return "Unknown condition"
