"""
Sound comparison scoring.
Hybrid score: measured audio features (70%) and synth parameter proximity (30%).
"""
import logging
from dataclasses import dataclass

from mixcraft.core.types import (
    CategoryScore,
    ScoreResult,
    SoundBreakdown,
    SoundFeatures,
    SynthParams,
    ADSREnvelope,
)
from mixcraft.scoring.similarity import (
    clamp_score,
    cosine_similarity,
    log_ratio_score,
    log_time_score,
    passed_for,
    round_half_up,
    stars_for,
)
from mixcraft.scoring.thresholds import SOUND_LIMITS, SOUND_STAR_THRESHOLDS, SOUND_WEIGHTS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AudioComparison:
    """Audio-feature half of a comparison. score is 0..1."""
    score: float
    brightness: CategoryScore
    attack: CategoryScore
    envelope: CategoryScore
    spectrum: int


# -----------------------------------------------------------------------------
# Audio features
# -----------------------------------------------------------------------------

def _compare_brightness(player: SoundFeatures, target: SoundFeatures) -> CategoryScore:
    max_centroid = max(target.spectral_centroid, 1.0)
    normalized_diff = abs(player.spectral_centroid - target.spectral_centroid) / max_centroid
    # 0 diff = 100, 50% diff = 0
    score = max(0, round_half_up((1.0 - normalized_diff * 2.0) * 100.0))

    if score >= 80:
        feedback = "Brightness matches well"
    elif player.spectral_centroid > target.spectral_centroid * 1.2:
        feedback = "Too bright - try lowering the filter cutoff"
    elif player.spectral_centroid < target.spectral_centroid * 0.8:
        feedback = "Too dark - try raising the filter cutoff"
    else:
        feedback = "Brightness is close, fine-tune the filter"
    return CategoryScore(score, feedback)


def _compare_attack(player: SoundFeatures, target: SoundFeatures) -> CategoryScore:
    window = SOUND_LIMITS["attack_window_frames"]
    diff = abs(player.attack_time - target.attack_time)
    score = max(0, round_half_up((1.0 - diff / window) * 100.0))

    if score >= 80:
        feedback = "Attack time is spot on"
    elif player.attack_time > target.attack_time + 3:
        feedback = "Attack is too slow - try a shorter attack time"
    elif player.attack_time < target.attack_time - 3:
        feedback = "Attack is too fast - try a longer attack time"
    else:
        feedback = "Attack is close, fine-tune the envelope"
    return CategoryScore(score, feedback)


def _compare_envelope(player: SoundFeatures, target: SoundFeatures) -> CategoryScore:
    n = min(len(player.rms_envelope), len(target.rms_envelope))
    if n > 0:
        total = sum(abs(p - t) for p, t in zip(player.rms_envelope[:n], target.rms_envelope[:n]))
        avg_diff = total / n
    else:
        avg_diff = 1.0
    # avg diff 0 = 100, avg diff 0.5 = 0
    score = max(0, round_half_up((1.0 - avg_diff * 2.0) * 100.0))

    if score >= 80:
        feedback = "Envelope shape matches well"
    elif score >= 50:
        feedback = "Envelope is close but could be tighter"
    else:
        feedback = "Envelope shape needs work - check attack, decay, and sustain"
    return CategoryScore(score, feedback)


def compare_audio_features(player: SoundFeatures, target: SoundFeatures) -> AudioComparison:
    """Audio-only comparison, weighted 0.3/0.25/0.25/0.2 into a 0..1 score."""
    brightness = _compare_brightness(player, target)
    attack = _compare_attack(player, target)
    envelope = _compare_envelope(player, target)
    spectrum = cosine_similarity(
        player.average_spectrum, target.average_spectrum, SOUND_LIMITS["spectrum_bins"]
    )

    score = (
        brightness.score * SOUND_WEIGHTS["brightness"]
        + attack.score * SOUND_WEIGHTS["attack"]
        + envelope.score * SOUND_WEIGHTS["envelope"]
        + spectrum * SOUND_WEIGHTS["spectrum"]
    ) / 100.0
    return AudioComparison(score, brightness, attack, envelope, spectrum)


# -----------------------------------------------------------------------------
# Parameter proximity
# -----------------------------------------------------------------------------

def compare_filter_params(player: SynthParams, target: SynthParams) -> float:
    """0..1: cutoff on a log scale (0.5), resonance (0.3), type match (0.2, half credit on mismatch)."""
    cutoff_score = log_ratio_score(
        player.filter.cutoff, target.filter.cutoff, SOUND_LIMITS["cutoff_octaves"]
    )
    res_diff = abs(player.filter.resonance - target.filter.resonance)
    res_score = max(0.0, 1.0 - res_diff / SOUND_LIMITS["resonance_range"])
    type_match = 1.0 if player.filter.type == target.filter.type else 0.5
    return cutoff_score * 0.5 + res_score * 0.3 + type_match * 0.2


def compare_oscillator_params(player: SynthParams, target: SynthParams) -> float:
    type_match = 1.0 if player.oscillator.type == target.oscillator.type else 0.0
    octave_diff = abs(player.oscillator.octave - target.oscillator.octave)
    octave_score = max(0.0, 1.0 - octave_diff / SOUND_LIMITS["octave_range"])
    detune_diff = abs(player.oscillator.detune - target.oscillator.detune)
    detune_score = max(0.0, 1.0 - detune_diff / SOUND_LIMITS["detune_range"])
    return type_match * 0.6 + octave_score * 0.3 + detune_score * 0.1


def compare_envelope_params(player: ADSREnvelope, target: ADSREnvelope) -> float:
    """ADSR proximity 0..1. Times compare on a log scale, sustain linearly."""
    attack = log_time_score(player.attack, target.attack)
    decay = log_time_score(player.decay, target.decay)
    sustain = max(0.0, 1.0 - abs(player.sustain - target.sustain))
    release = log_time_score(player.release, target.release)
    return attack * 0.3 + decay * 0.25 + sustain * 0.25 + release * 0.2


def _filter_feedback(player: SynthParams, target: SynthParams) -> str:
    if player.filter.type != target.filter.type:
        return f"Try a {target.filter.type} filter"

    if target.filter.cutoff > 0:
        cutoff_ratio = player.filter.cutoff / target.filter.cutoff
        if cutoff_ratio > 1.3:
            return "Filter cutoff is too high"
        if cutoff_ratio < 0.7:
            return "Filter cutoff is too low"

    if abs(player.filter.resonance - target.filter.resonance) > 3:
        if player.filter.resonance > target.filter.resonance:
            return "Resonance is too high"
        return "Resonance is too low"
    return "Filter settings are close"


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------

def compare_sounds(
    player_features: SoundFeatures,
    target_features: SoundFeatures,
    player_params: SynthParams,
    target_params: SynthParams,
) -> ScoreResult:
    """
    Score a subtractive-synth attempt against its target.

    Args:
        player_features: Analysis of the learner's rendered note
        target_features: Analysis of the target note
        player_params: Learner's synth state
        target_params: Target synth state

    Returns:
        ScoreResult with overall 0..100, stars on the 60/80/95 ladder and a
        brightness/attack/filter/envelope breakdown.
    """
    audio = compare_audio_features(player_features, target_features)

    filter_score = compare_filter_params(player_params, target_params)
    osc_score = compare_oscillator_params(player_params, target_params)
    env_score = compare_envelope_params(
        player_params.amplitude_envelope, target_params.amplitude_envelope
    )
    param_score = (
        filter_score * SOUND_WEIGHTS["filter_params"]
        + osc_score * SOUND_WEIGHTS["oscillator_params"]
        + env_score * SOUND_WEIGHTS["envelope_params"]
    )

    overall = clamp_score(
        audio.score * SOUND_WEIGHTS["audio_features"] * 100.0
        + param_score * SOUND_WEIGHTS["parameter_proximity"] * 100.0
    )

    breakdown = SoundBreakdown(
        brightness=audio.brightness,
        attack=audio.attack,
        filter=CategoryScore(
            clamp_score(filter_score * 100.0), _filter_feedback(player_params, target_params)
        ),
        envelope=audio.envelope,
    )
    logger.debug("compare_sounds: audio=%.3f params=%.3f overall=%d", audio.score, param_score, overall)

    return ScoreResult(
        overall=overall,
        stars=stars_for(overall, SOUND_STAR_THRESHOLDS),
        passed=passed_for(overall, SOUND_STAR_THRESHOLDS),
        breakdown=breakdown,
    )


def generate_summary(result: ScoreResult) -> str:
    """One-line summary; failing results point at the weakest category (first wins on ties)."""
    if result.stars == 3:
        return "Perfect! You nailed it!"
    if result.stars == 2:
        return "Great job! Just a few tweaks needed for perfection."
    if result.passed:
        return "Good start! Keep refining to improve your score."

    worst_name, worst = None, None
    for name, category in result.breakdown.items():
        if worst is None or category.score < worst.score:
            worst_name, worst = name, category
    return f"Focus on {worst_name}: {worst.feedback}"
