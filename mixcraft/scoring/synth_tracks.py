"""
FM and additive track scoring.
Both tracks reuse the audio half of compare_sounds and blend it with a
track-specific parameter comparison. The result keeps the generic four-slot
breakdown; see SoundBreakdown for which slot carries what.
"""
import logging
from dataclasses import dataclass
from itertools import zip_longest
from typing import Dict

from mixcraft.core.types import (
    AdditiveSynthParams,
    CategoryScore,
    FMSynthParams,
    ScoreResult,
    SoundBreakdown,
    SoundFeatures,
)
from mixcraft.scoring.similarity import clamp_score, log_ratio_score, passed_for, stars_for
from mixcraft.scoring.sound import compare_audio_features, compare_envelope_params
from mixcraft.scoring.thresholds import SOUND_STAR_THRESHOLDS, TRACK_BLEND

logger = logging.getLogger(__name__)

FM_WEIGHTS = {
    "harmonicity": 0.3,
    "modulation_index": 0.3,
    "carrier_type": 0.15,
    "modulator_type": 0.1,
    "envelope": 0.15,
}

ADDITIVE_WEIGHTS = {
    "harmonics": 0.7,
    "envelope": 0.3,
}

HARMONICITY_OCTAVES = 2.0
MODULATION_INDEX_RANGE = 10.0


@dataclass(frozen=True)
class ParamComparison:
    """Track parameter match: total score and per-field scores, all 0..100."""
    score: int
    breakdown: Dict[str, int]


# -----------------------------------------------------------------------------
# Parameter comparisons
# -----------------------------------------------------------------------------

def compare_fm_params(player: FMSynthParams, target: FMSynthParams) -> ParamComparison:
    fields = {
        "harmonicity": log_ratio_score(player.harmonicity, target.harmonicity, HARMONICITY_OCTAVES),
        "modulation_index": max(
            0.0, 1.0 - abs(player.modulation_index - target.modulation_index) / MODULATION_INDEX_RANGE
        ),
        "carrier_type": 1.0 if player.carrier_type == target.carrier_type else 0.5,
        "modulator_type": 1.0 if player.modulator_type == target.modulator_type else 0.5,
        "envelope": compare_envelope_params(player.amplitude_envelope, target.amplitude_envelope),
    }
    total = sum(fields[name] * weight for name, weight in FM_WEIGHTS.items())
    return ParamComparison(
        score=clamp_score(total * 100.0),
        breakdown={name: clamp_score(value * 100.0) for name, value in fields.items()},
    )


def compare_additive_params(player: AdditiveSynthParams, target: AdditiveSynthParams) -> ParamComparison:
    # Missing partials count as silent
    pairs = list(zip_longest(player.harmonics, target.harmonics, fillvalue=0.0))
    if pairs:
        mean_diff = sum(abs(p - t) for p, t in pairs) / len(pairs)
    else:
        mean_diff = 0.0
    fields = {
        "harmonics": max(0.0, 1.0 - mean_diff),
        "envelope": compare_envelope_params(player.amplitude_envelope, target.amplitude_envelope),
    }
    total = sum(fields[name] * weight for name, weight in ADDITIVE_WEIGHTS.items())
    return ParamComparison(
        score=clamp_score(total * 100.0),
        breakdown={name: clamp_score(value * 100.0) for name, value in fields.items()},
    )


# -----------------------------------------------------------------------------
# Feedback
# -----------------------------------------------------------------------------

def _harmonicity_feedback(player: FMSynthParams, target: FMSynthParams, score: int) -> str:
    if score >= 80:
        return "Harmonicity matches well"
    if player.harmonicity > target.harmonicity:
        return "Harmonicity is too high - try a lower modulator ratio"
    return "Harmonicity is too low - try a higher modulator ratio"


def _modulation_feedback(player: FMSynthParams, target: FMSynthParams, score: int) -> str:
    if score >= 80:
        return "Modulation depth is close"
    if player.modulation_index > target.modulation_index:
        return "Too much modulation - lower the modulation index"
    return "Not enough modulation - raise the modulation index"


def _harmonics_feedback(score: int) -> str:
    if score >= 80:
        return "Harmonic balance matches well"
    if score >= 50:
        return "Harmonics are close - compare the upper partials"
    return "Harmonic amplitudes need work - rebalance the partials"


def _blend(audio_score: float, param_score: int, track: str) -> int:
    blend = TRACK_BLEND[track]
    return clamp_score(audio_score * 100.0 * blend["audio"] + param_score * blend["params"])


def _result(overall: int, breakdown: SoundBreakdown) -> ScoreResult:
    return ScoreResult(
        overall=overall,
        stars=stars_for(overall, SOUND_STAR_THRESHOLDS),
        passed=passed_for(overall, SOUND_STAR_THRESHOLDS),
        breakdown=breakdown,
    )


# -----------------------------------------------------------------------------
# Track scoring
# -----------------------------------------------------------------------------

def score_fm_attempt(
    player_features: SoundFeatures,
    target_features: SoundFeatures,
    player_params: FMSynthParams,
    target_params: FMSynthParams,
) -> ScoreResult:
    """
    Score an FM attempt: audio 70%, FM params 30%.
    Breakdown slots: attack carries harmonicity, filter carries modulation index.
    """
    audio = compare_audio_features(player_features, target_features)
    params = compare_fm_params(player_params, target_params)
    overall = _blend(audio.score, params.score, "fm")

    harmonicity = params.breakdown["harmonicity"]
    modulation = params.breakdown["modulation_index"]
    breakdown = SoundBreakdown(
        brightness=audio.brightness,
        attack=CategoryScore(harmonicity, _harmonicity_feedback(player_params, target_params, harmonicity)),
        filter=CategoryScore(modulation, _modulation_feedback(player_params, target_params, modulation)),
        envelope=audio.envelope,
    )
    logger.debug("score_fm_attempt: audio=%.3f params=%d overall=%d", audio.score, params.score, overall)
    return _result(overall, breakdown)


def score_additive_attempt(
    player_features: SoundFeatures,
    target_features: SoundFeatures,
    player_params: AdditiveSynthParams,
    target_params: AdditiveSynthParams,
) -> ScoreResult:
    """
    Score an additive attempt: audio 60%, additive params 40%.
    Breakdown slots: attack carries the harmonic match, filter the total param score.
    """
    audio = compare_audio_features(player_features, target_features)
    params = compare_additive_params(player_params, target_params)
    overall = _blend(audio.score, params.score, "additive")

    harmonics = params.breakdown["harmonics"]
    breakdown = SoundBreakdown(
        brightness=audio.brightness,
        attack=CategoryScore(harmonics, _harmonics_feedback(harmonics)),
        filter=CategoryScore(
            params.score,
            "Partial settings are close" if params.score >= 80 else "Check partial levels and envelope",
        ),
        envelope=audio.envelope,
    )
    logger.debug("score_additive_attempt: audio=%.3f params=%d overall=%d", audio.score, params.score, overall)
    return _result(overall, breakdown)

