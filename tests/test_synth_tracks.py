"""
Tests for mixcraft/scoring/synth_tracks: FM and additive parameter matching and blending.
"""
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest

from mixcraft.core.types import ADSREnvelope, AdditiveSynthParams, FMSynthParams, SoundFeatures
from mixcraft.scoring.synth_tracks import (
    compare_additive_params,
    compare_fm_params,
    score_additive_attempt,
    score_fm_attempt,
)


@pytest.fixture
def features():
    return SoundFeatures(
        spectral_centroid=2200.0,
        attack_time=2.0,
        rms_envelope=[0.9, 0.7, 0.4, 0.2],
        average_spectrum=[0.5, 0.8, 0.3, 0.3, 0.1],
    )


# -----------------------------------------------------------------------------
# FM
# -----------------------------------------------------------------------------

def test_fm_identical_params_score_100():
    fm = FMSynthParams(harmonicity=3.0, modulation_index=5.0)
    comparison = compare_fm_params(fm, fm)
    assert comparison.score == 100
    assert set(comparison.breakdown.values()) == {100}


def test_fm_harmonicity_one_octave_off_is_half():
    player = FMSynthParams(harmonicity=2.0)
    target = FMSynthParams(harmonicity=1.0)
    assert compare_fm_params(player, target).breakdown["harmonicity"] == 50


def test_fm_type_mismatch_gets_half_credit():
    player = FMSynthParams(carrier_type="square", modulator_type="triangle")
    target = FMSynthParams()
    breakdown = compare_fm_params(player, target).breakdown
    assert breakdown["carrier_type"] == 50
    assert breakdown["modulator_type"] == 50


def test_fm_modulation_index_linear():
    player = FMSynthParams(modulation_index=7.0)
    target = FMSynthParams(modulation_index=2.0)
    assert compare_fm_params(player, target).breakdown["modulation_index"] == 50


def test_fm_attempt_identical_is_three_stars(features):
    fm = FMSynthParams(harmonicity=1.5, modulation_index=4.0)
    result = score_fm_attempt(features, features, fm, fm)
    assert result.overall == 100
    assert result.stars == 3
    # attack slot carries harmonicity, filter slot carries modulation index
    assert result.breakdown.attack.score == 100
    assert result.breakdown.filter.score == 100


def test_fm_attempt_harmonicity_feedback(features):
    result = score_fm_attempt(features, features, FMSynthParams(harmonicity=4.0), FMSynthParams(harmonicity=1.0))
    assert result.breakdown.attack.score == 0
    assert "too high" in result.breakdown.attack.feedback


# -----------------------------------------------------------------------------
# Additive
# -----------------------------------------------------------------------------

def test_additive_missing_partials_count_as_silent():
    env = ADSREnvelope()
    player = AdditiveSynthParams(harmonics=(1.0, 0.5), amplitude_envelope=env)
    target = AdditiveSynthParams(harmonics=(1.0, 0.5, 0.5), amplitude_envelope=env)
    comparison = compare_additive_params(player, target)
    # mean diff 0.5 / 3 -> 83; total 0.7 * 0.833 + 0.3 -> 88
    assert comparison.breakdown["harmonics"] == 83
    assert comparison.score == 88


def test_additive_attempt_blend(features):
    additive = AdditiveSynthParams()
    result = score_additive_attempt(features, features, additive, additive)
    assert result.overall == 100
    assert result.passed is True
    assert result.breakdown.filter.score == 100


def test_additive_attempt_clamped(features):
    quiet = SoundFeatures(100.0, 40.0, [0.0, 0.0], [0.0, 0.0, 0.0])
    player = AdditiveSynthParams(harmonics=(0.0,) * 8, amplitude_envelope=ADSREnvelope(3.0, 3.0, 0.0, 3.0))
    result = score_additive_attempt(quiet, features, player, AdditiveSynthParams())
    assert 0 <= result.overall <= 100
    assert result.stars == 1
    assert result.passed is False
