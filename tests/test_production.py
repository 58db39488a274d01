"""
Tests for mixcraft/mix: layer state helpers, goal conditions, production evaluation.
Run from project root: python -m pytest tests/test_production.py -v
"""
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest

from mixcraft.mix.conditions import (
    LayerActive,
    LayerMuted,
    LevelOrder,
    PanPosition,
    PanSpread,
    RelativeLevel,
    UnknownCondition,
    check_condition,
    describe_condition,
)
from mixcraft.mix.layers import LayerConfig, LayerState, create_layer_state, create_layer_states
from mixcraft.mix.production import (
    AvailableControls,
    GoalTarget,
    ProductionChallenge,
    ReferenceLayer,
    ReferenceTarget,
    evaluate_production_challenge,
)

LAYERS = (LayerConfig("kick", "Kick"), LayerConfig("bass", "Bass"))


def _reference_challenge(pan=True):
    target = ReferenceTarget(layers=(
        ReferenceLayer(volume=-6.0, muted=False),
        ReferenceLayer(volume=0.0, pan=-0.3, muted=True),
    ))
    return ProductionChallenge(
        id="P1-01", title="Balance", module="P1", layers=LAYERS, target=target,
        available_controls=AvailableControls(pan=pan),
    )


def _goal_challenge(*conditions):
    return ProductionChallenge(
        id="P2-01", title="Goals", module="P2", layers=LAYERS,
        target=GoalTarget(conditions=tuple(conditions)),
    )


# -----------------------------------------------------------------------------
# Layer state
# -----------------------------------------------------------------------------

def test_create_layer_state_defaults():
    state = create_layer_state(LayerConfig("kick", "Kick"))
    assert state == LayerState("kick", "Kick", volume=0.0, pan=0.0, muted=False)


def test_create_layer_state_clamps_initial_values():
    state = create_layer_state(LayerConfig("pad", "Pad", initial_volume=20.0, initial_pan=-4.0, initial_muted=True))
    assert state.volume == 6.0
    assert state.pan == -1.0
    assert state.muted is True


def test_setters_clamp_and_do_not_mutate():
    state = LayerState("kick", "Kick")
    louder = state.with_volume(12.0).with_pan(2.0).with_eq_low(-30.0).with_eq_high(3.0)
    assert (louder.volume, louder.pan, louder.eq_low, louder.eq_high) == (6.0, 1.0, -12.0, 3.0)
    assert state.volume == 0.0
    assert state.with_muted(True).muted is True
    assert state.with_solo(True).solo is True


# -----------------------------------------------------------------------------
# Conditions
# -----------------------------------------------------------------------------

def test_level_order_muted_louder_layer_fails():
    states = [
        LayerState("kick", "Kick", volume=6.0, muted=True),
        LayerState("bass", "Bass", volume=-20.0),
    ]
    assert check_condition(LevelOrder("kick", "bass"), states) is False


def test_level_order_unmuted():
    states = [LayerState("kick", "Kick", volume=-3.0), LayerState("bass", "Bass", volume=-9.0)]
    assert check_condition(LevelOrder("kick", "bass"), states) is True
    assert check_condition(LevelOrder("bass", "kick"), states) is False


def test_missing_layer_is_not_met():
    states = [LayerState("kick", "Kick")]
    assert check_condition(LevelOrder("kick", "snare"), states) is False
    assert check_condition(LayerActive("snare", True), states) is False
    assert check_condition(PanPosition("snare", (-1.0, 1.0)), states) is False


def test_pan_spread_ignores_muted_layers():
    states = [
        LayerState("a", "A", pan=-0.5),
        LayerState("b", "B", pan=0.5),
        LayerState("c", "C", pan=0.9, muted=True),
    ]
    assert check_condition(PanSpread(0.8), states) is True
    assert check_condition(PanSpread(1.2), states) is False
    assert check_condition(PanSpread(0.1), states[:1] + states[2:]) is False


def test_active_and_muted():
    states = [LayerState("hat", "Hat", muted=True)]
    assert check_condition(LayerActive("hat", False), states) is True
    assert check_condition(LayerMuted("hat", True), states) is True
    assert check_condition(LayerMuted("hat", False), states) is False


def test_relative_level_and_pan_position():
    states = [LayerState("vox", "Vox", volume=-2.0, pan=0.1), LayerState("gtr", "Gtr", volume=-8.0, pan=-0.6)]
    assert check_condition(RelativeLevel("vox", "gtr", (4.0, 8.0)), states) is True
    assert check_condition(RelativeLevel("gtr", "vox", (4.0, 8.0)), states) is False
    assert check_condition(PanPosition("gtr", (-0.8, -0.4)), states) is True


def test_unknown_condition_fails_closed():
    condition = UnknownCondition(type="loudness_war", raw={"type": "loudness_war"})
    assert check_condition(condition, [LayerState("kick", "Kick")]) is False
    assert describe_condition(condition) == "Unknown condition"


def test_describe_condition():
    assert describe_condition(LevelOrder("kick", "bass")) == "kick louder than bass"
    assert describe_condition(LayerMuted("bass", True)) == "bass is muted"
    assert describe_condition(LayerActive("hat", False)) == "hat is not playing"
    assert describe_condition(PanSpread(0.5)) == "Stereo width at least 0.5"


# -----------------------------------------------------------------------------
# Reference mode
# -----------------------------------------------------------------------------

def test_reference_exact_match_three_stars():
    states = [
        LayerState("kick", "Kick", volume=-6.0),
        LayerState("bass", "Bass", volume=0.0, pan=-0.3, muted=True),
    ]
    result = evaluate_production_challenge(_reference_challenge(), states)
    assert result.breakdown.type == "reference"
    assert all(l.score >= 95 for l in result.breakdown.layer_scores)
    assert result.overall >= 95
    assert result.stars == 3
    assert result.passed is True
    assert result.feedback[0] == "Excellent balance!"


def test_reference_per_layer_feedback():
    states = [
        LayerState("kick", "Kick", volume=0.0),  # 6 dB off -> volume 42, layer 71
        LayerState("bass", "Bass", volume=0.0, pan=-0.3, muted=False),  # mute wrong
    ]
    result = evaluate_production_challenge(_reference_challenge(), states)
    kick, bass = result.breakdown.layer_scores
    assert kick.score == pytest.approx(71.0)
    assert bass.score == pytest.approx(200.0 / 3.0)
    assert "Kick is close, fine-tune it" in result.feedback
    assert "Bass is close, fine-tune it" in result.feedback
    assert 0 <= result.overall <= 100


def test_reference_pan_ignored_when_control_disabled():
    states = [
        LayerState("kick", "Kick", volume=-6.0),
        LayerState("bass", "Bass", volume=0.0, pan=1.0, muted=True),
    ]
    result = evaluate_production_challenge(_reference_challenge(pan=False), states)
    assert result.overall == 100


def test_reference_needs_adjustment():
    states = [
        LayerState("kick", "Kick", volume=-60.0, muted=True),
        LayerState("bass", "Bass", volume=0.0, pan=-0.3, muted=True),
    ]
    result = evaluate_production_challenge(_reference_challenge(), states)
    assert "Kick needs adjustment" in result.feedback


# -----------------------------------------------------------------------------
# Goal mode
# -----------------------------------------------------------------------------

def test_goal_half_met_fails_with_one_star():
    states = create_layer_states(LAYERS)
    states = (states[0].with_volume(-3.0), states[1].with_volume(-10.0))
    challenge = _goal_challenge(LevelOrder("kick", "bass"), LayerMuted("bass", True))
    result = evaluate_production_challenge(challenge, states)
    assert result.overall == 50
    assert result.passed is False
    assert result.stars == 1
    assert result.breakdown.type == "goal"
    assert [c.passed for c in result.breakdown.condition_results] == [True, False]
    assert "Not met: bass is muted" in result.feedback


def test_goal_all_met():
    states = [LayerState("kick", "Kick", volume=-3.0), LayerState("bass", "Bass", muted=True)]
    challenge = _goal_challenge(LevelOrder("kick", "bass"), LayerMuted("bass", True))
    result = evaluate_production_challenge(challenge, states)
    assert result.overall == 100
    assert result.stars == 3
    assert result.feedback == ("All goals met!",)


def test_goal_without_conditions_scores_zero():
    result = evaluate_production_challenge(_goal_challenge(), [LayerState("kick", "Kick")])
    assert result.overall == 0
    assert result.passed is False


def _single_layer_challenge(target_layer, controls=AvailableControls()):
    return ProductionChallenge(
        id="P1-02", title="Single", module="P1", layers=LAYERS[:1],
        target=ReferenceTarget(layers=(target_layer,)), available_controls=controls,
    )


def test_reference_stars_follow_rounded_overall():
    # volume 2.08 dB off -> volume score 79.2, layer mean 89.6 -> overall 90
    challenge = _single_layer_challenge(ReferenceLayer(volume=-6.0))
    result = evaluate_production_challenge(challenge, [LayerState("kick", "Kick", volume=-3.92)])
    assert result.breakdown.layer_scores[0].score == pytest.approx(89.6)
    assert result.overall == 90
    assert result.stars == 3
    assert result.feedback == ("Excellent balance!",)


def test_reference_passed_follows_rounded_overall():
    # volume 10.886 dB off -> volume score ~19.2, layer mean ~59.6 -> overall 60
    challenge = _single_layer_challenge(ReferenceLayer(volume=-6.0))
    result = evaluate_production_challenge(challenge, [LayerState("kick", "Kick", volume=4.886)])
    assert result.breakdown.layer_scores[0].score == pytest.approx(59.6, abs=0.01)
    assert result.overall == 60
    assert result.passed is True
    assert result.stars == 1
    assert result.feedback[0] == "Keep refining the balance"
    assert "Kick needs adjustment" in result.feedback


# -----------------------------------------------------------------------------
# Reference mode with EQ
# -----------------------------------------------------------------------------

def test_reference_eq_low_only():
    target = ReferenceLayer(volume=-6.0, eq_low=3.0)
    # eq_high is not part of the target, so its value does not count
    state = LayerState("kick", "Kick", volume=-6.0, eq_low=1.0, eq_high=9.0)

    result = evaluate_production_challenge(_single_layer_challenge(target, AvailableControls(eq=True)), [state])
    # volume 100, mute 100, eq_low 2 dB off -> 70
    assert result.breakdown.layer_scores[0].score == pytest.approx(90.0)
    assert result.overall == 90
    assert result.stars == 3

    without_eq = evaluate_production_challenge(_single_layer_challenge(target), [state])
    assert without_eq.overall == 100


def test_reference_eq_low_and_high():
    target = ReferenceLayer(volume=-6.0, eq_low=3.0, eq_high=-2.0)
    state = LayerState("kick", "Kick", volume=-6.0, eq_low=1.0, eq_high=0.0)

    result = evaluate_production_challenge(_single_layer_challenge(target, AvailableControls(eq=True)), [state])
    # volume 100, mute 100, eq_low 70, eq_high 70
    assert result.breakdown.layer_scores[0].score == pytest.approx(85.0)
    assert result.overall == 85
    assert result.stars == 2
    assert result.feedback == ("Good work, getting close!",)


def test_reference_eq_with_pan_averages_five_components():
    target = ReferenceLayer(volume=-6.0, pan=0.2, eq_low=3.0, eq_high=-2.0)
    state = LayerState("kick", "Kick", volume=-6.0, pan=0.2, eq_low=1.0, eq_high=0.0)
    controls = AvailableControls(pan=True, eq=True)

    result = evaluate_production_challenge(_single_layer_challenge(target, controls), [state])
    assert result.breakdown.layer_scores[0].score == pytest.approx(88.0)
    assert result.overall == 88
