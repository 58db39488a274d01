"""
Mix layer state snapshots.
The mix session owns the live values; evaluators only read tuples of LayerState.
Setters return a new, clamped state.
"""
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple

from mixcraft.core.params import LAYER_RANGES


# -----------------------------------------------------------------------------
# Layer config (initial values when a challenge is loaded)
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class LayerConfig:
    """Challenge-defined layer. Initial values default to unity, centre, unmuted."""
    id: str
    name: str
    initial_volume: Optional[float] = None
    initial_pan: Optional[float] = None
    initial_muted: Optional[bool] = None


# -----------------------------------------------------------------------------
# Layer state
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class LayerState:
    id: str
    name: str
    volume: float = 0.0    # dB
    pan: float = 0.0       # -1 (left) .. 1 (right)
    muted: bool = False
    solo: bool = False
    eq_low: float = 0.0    # dB
    eq_high: float = 0.0   # dB

    def with_volume(self, db: float) -> "LayerState":
        return replace(self, volume=LAYER_RANGES["volume"].clamp(db))

    def with_pan(self, pan: float) -> "LayerState":
        return replace(self, pan=LAYER_RANGES["pan"].clamp(pan))

    def with_eq_low(self, db: float) -> "LayerState":
        return replace(self, eq_low=LAYER_RANGES["eq_low"].clamp(db))

    def with_eq_high(self, db: float) -> "LayerState":
        return replace(self, eq_high=LAYER_RANGES["eq_high"].clamp(db))

    def with_muted(self, muted: bool) -> "LayerState":
        return replace(self, muted=bool(muted))

    def with_solo(self, solo: bool) -> "LayerState":
        return replace(self, solo=bool(solo))


def create_layer_state(config: LayerConfig) -> LayerState:
    """Initial state for a configured layer, clamped to LAYER_RANGES."""
    volume = config.initial_volume if config.initial_volume is not None else LAYER_RANGES["volume"].default
    pan = config.initial_pan if config.initial_pan is not None else LAYER_RANGES["pan"].default
    return LayerState(
        id=config.id,
        name=config.name,
        volume=LAYER_RANGES["volume"].clamp(volume),
        pan=LAYER_RANGES["pan"].clamp(pan),
        muted=bool(config.initial_muted),
    )


def create_layer_states(configs: Iterable[LayerConfig]) -> Tuple[LayerState, ...]:
    return tuple(create_layer_state(c) for c in configs)


def find_layer(states: Iterable[LayerState], layer_id: str) -> Optional[LayerState]:
    """First state with the given id, or None."""
    for state in states:
        if state.id == layer_id:
            return state
    return None
