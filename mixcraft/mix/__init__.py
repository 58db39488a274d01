"""
Mix evaluation: production (reference / goal), mixing (EQ / compressor),
sampling and drum sequencing challenges.
"""
from mixcraft.mix.conditions import check_condition, describe_condition
from mixcraft.mix.drum_sequencing import evaluate_drum_sequencing_challenge
from mixcraft.mix.layers import LayerState, create_layer_state
from mixcraft.mix.mixing import evaluate_mixing_challenge
from mixcraft.mix.production import evaluate_production_challenge
from mixcraft.mix.sampling import evaluate_sampling_challenge

__all__ = [
    "LayerState",
    "create_layer_state",
    "check_condition",
    "describe_condition",
    "evaluate_production_challenge",
    "evaluate_mixing_challenge",
    "evaluate_sampling_challenge",
    "evaluate_drum_sequencing_challenge",
]
