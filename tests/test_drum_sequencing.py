"""
Tests for mixcraft/mix/drum_sequencing: step, velocity, swing and tempo scoring.
Run from project root: python -m pytest tests/test_drum_sequencing.py -v
"""
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest

from mixcraft.curriculum.breakdowns import extract_drum_breakdown
from mixcraft.mix.drum_sequencing import (
    DrumPattern,
    DrumSequencingChallenge,
    DrumStep,
    DrumTrack,
    compare_track_patterns,
    evaluate_drum_sequencing_challenge,
    score_pattern,
    score_swing,
    score_tempo,
    score_velocity,
)

KICK = "x...x...x...x..."
SNARE = "....x.......x..."


def _track(track_id, steps, velocity=0.8):
    return DrumTrack(track_id, track_id.title(), tuple(DrumStep(c == "x", velocity) for c in steps))


def _pattern(*tracks, tempo=120.0, swing=0.0):
    return DrumPattern(tracks=tuple(tracks), tempo=tempo, swing=swing)


def _challenge(target, *focus):
    return DrumSequencingChallenge(
        id="DS1-01", title="Four on the floor", module="DS1",
        target_pattern=target, evaluation_focus=focus,
    )


TARGET = _pattern(_track("kick", KICK), _track("snare", SNARE))


# -----------------------------------------------------------------------------
# Pattern
# -----------------------------------------------------------------------------

def test_compare_track_patterns():
    kick = _track("kick", KICK)
    assert compare_track_patterns(kick, kick) == 100.0
    assert compare_track_patterns(_track("kick", "." * 16), kick) == 75.0
    # Only the shorter track's steps are compared
    assert compare_track_patterns(_track("kick", "x..."), kick) == 100.0
    assert compare_track_patterns(_track("kick", ""), kick) == 100.0


def test_score_pattern_missing_track_counts_as_zero():
    player = _pattern(_track("kick", KICK))
    assert score_pattern(player, TARGET) == 50
    assert score_pattern(TARGET, TARGET) == 100
    assert score_pattern(player, _pattern()) == 100


def test_score_pattern_one_wrong_step():
    player = _pattern(_track("kick", "x...x...x......."), _track("snare", SNARE))
    # kick 15/16 = 93.75, snare 100 -> 96.875
    assert score_pattern(player, TARGET) == 97


# -----------------------------------------------------------------------------
# Velocity / swing / tempo
# -----------------------------------------------------------------------------

def test_score_velocity():
    assert score_velocity(TARGET, TARGET) == 100
    softer = _pattern(_track("kick", KICK, velocity=0.7), _track("snare", SNARE, velocity=0.7))
    assert score_velocity(softer, TARGET) == 80
    ghost = _pattern(_track("kick", KICK, velocity=0.2))
    assert score_velocity(ghost, TARGET) == 0


def test_score_velocity_without_shared_hits():
    silent = _pattern(_track("kick", "." * 16), _track("snare", "." * 16))
    assert score_velocity(silent, TARGET) == 100


@pytest.mark.parametrize("player, target, expected", [
    (0.0, 0.0, 100),
    (0.1, 0.0, 70),
    (0.25, 0.0, 35),
    (0.5, 0.0, 0),
])
def test_score_swing(player, target, expected):
    assert score_swing(player, target) == expected


@pytest.mark.parametrize("player, target, expected", [
    (120.0, 120.0, 100),
    (125.0, 120.0, 70),
    (130.0, 120.0, 47),
    (140.0, 120.0, 0),
])
def test_score_tempo(player, target, expected):
    assert score_tempo(player, target) == expected


# -----------------------------------------------------------------------------
# Evaluation
# -----------------------------------------------------------------------------

def test_exact_pattern_three_stars():
    result = evaluate_drum_sequencing_challenge(_challenge(TARGET, "pattern"), TARGET)
    assert result.overall == 100
    assert result.stars == 3
    assert result.passed is True
    assert result.breakdown.velocity_score is None
    assert result.feedback == ("Excellent drum pattern!",)


def test_only_focused_aspects_are_scored():
    player = _pattern(_track("kick", KICK), _track("snare", SNARE), tempo=130.0, swing=0.5)
    result = evaluate_drum_sequencing_challenge(_challenge(TARGET, "pattern", "tempo"), player)
    # pattern 100, tempo 47 -> 73.5
    assert result.overall == 74
    assert result.stars == 2
    assert result.passed is True
    assert result.breakdown.swing_score is None
    assert result.feedback == ("Good work, pattern is solid!", "Tempo is off - check the BPM")


def test_pass_boundary_at_seventy():
    player = _pattern(_track("kick", KICK), _track("snare", SNARE), tempo=125.0)
    result = evaluate_drum_sequencing_challenge(_challenge(TARGET, "tempo"), player)
    assert result.overall == 70
    assert result.passed is True
    assert result.stars == 2
    assert "Tempo is close, fine-tune the BPM" in result.feedback


def test_swing_miss_fails():
    player = _pattern(_track("kick", KICK), _track("snare", SNARE), swing=0.25)
    result = evaluate_drum_sequencing_challenge(_challenge(TARGET, "swing"), player)
    assert result.overall == 35
    assert result.passed is False
    assert result.stars == 1
    assert result.feedback == (
        "Keep practicing - listen to the target pattern",
        "Swing amount needs adjustment",
    )


def test_velocity_close_feedback():
    player = _pattern(_track("kick", KICK, velocity=0.7), _track("snare", SNARE, velocity=0.7))
    result = evaluate_drum_sequencing_challenge(_challenge(TARGET, "pattern", "velocity"), player)
    assert result.breakdown.velocity_score == 80
    assert result.overall == 90
    assert "Velocities are close, fine-tune the dynamics" in result.feedback


def test_empty_or_unknown_focus_scores_zero():
    assert evaluate_drum_sequencing_challenge(_challenge(TARGET), TARGET).overall == 0
    result = evaluate_drum_sequencing_challenge(_challenge(TARGET, "groove"), TARGET)
    assert result.overall == 0
    assert result.passed is False


def test_extract_from_evaluated_result():
    player = _pattern(_track("kick", KICK), _track("snare", SNARE), tempo=130.0)
    result = evaluate_drum_sequencing_challenge(_challenge(TARGET, "pattern", "tempo"), player)
    assert extract_drum_breakdown(result).to_dict() == {"pattern": 100, "tempo": 47}
