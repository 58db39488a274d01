"""
Breakdown extractors.
Each track's result has its own breakdown shape; these project them onto the flat
SkillBreakdown the player model aggregates. Unmeasured skills stay None.
"""
from typing import Sequence

from mixcraft.core.types import ScoreResult, SkillBreakdown
from mixcraft.mix.drum_sequencing import DrumSequencingScoreResult
from mixcraft.mix.mixing import MixingScoreResult
from mixcraft.mix.production import ProductionScoreResult
from mixcraft.mix.sampling import SamplingScoreResult
from mixcraft.scoring.similarity import round_half_up


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def _pass_percentage(results: Sequence) -> int:
    """Percent of results with passed=True; an empty list counts as fully met."""
    if not results:
        return 100
    passed = sum(1 for r in results if r.passed)
    return round_half_up(passed / len(results) * 100.0)


# -----------------------------------------------------------------------------
# Synthesis tracks
# -----------------------------------------------------------------------------

def extract_sd_breakdown(result: ScoreResult) -> SkillBreakdown:
    bd = result.breakdown
    return SkillBreakdown(
        brightness=bd.brightness.score,
        attack=bd.attack.score,
        filter=bd.filter.score,
        envelope=bd.envelope.score,
    )


def extract_fm_breakdown(result: ScoreResult) -> SkillBreakdown:
    """FM stores harmonicity in the attack slot and modulation index in the filter slot."""
    bd = result.breakdown
    return SkillBreakdown(
        brightness=bd.brightness.score,
        harmonicity=bd.attack.score,
        modulation_index=bd.filter.score,
        envelope=bd.envelope.score,
    )


def extract_additive_breakdown(result: ScoreResult) -> SkillBreakdown:
    """Additive stores the harmonic match in the attack slot; filter is kept as is."""
    bd = result.breakdown
    return SkillBreakdown(
        brightness=bd.brightness.score,
        harmonicity=bd.attack.score,
        filter=bd.filter.score,
        envelope=bd.envelope.score,
    )


# -----------------------------------------------------------------------------
# Mixing / production
# -----------------------------------------------------------------------------

def extract_mixing_breakdown(result: MixingScoreResult) -> SkillBreakdown:
    bd = result.breakdown
    values = {}
    if bd.eq is not None:
        values.update(eq_low=bd.eq.low, eq_mid=bd.eq.mid, eq_high=bd.eq.high)
    if bd.compressor is not None:
        values["compressor"] = bd.compressor.total
    if bd.conditions is not None:
        values["conditions"] = _pass_percentage(bd.conditions)
    return SkillBreakdown(**values)


def extract_production_breakdown(result: ProductionScoreResult) -> SkillBreakdown:
    """
    Production results feed two skills: the mean layer score is recorded as
    eq_low (level balance) and goal conditions as a pass percentage.
    """
    bd = result.breakdown
    values = {}
    if bd.layer_scores:
        mean = sum(l.score for l in bd.layer_scores) / len(bd.layer_scores)
        values["eq_low"] = round_half_up(mean)
    if bd.condition_results is not None:
        values["conditions"] = _pass_percentage(bd.condition_results)
    return SkillBreakdown(**values)


# -----------------------------------------------------------------------------
# Sampling / drum sequencing
# -----------------------------------------------------------------------------

def extract_sampling_breakdown(result: SamplingScoreResult) -> SkillBreakdown:
    bd = result.breakdown
    return SkillBreakdown(
        pitch=bd.pitch_score,
        slice=bd.slice_score,
        timing=bd.timing_score,
        creativity=bd.creativity_score,
    )


def extract_drum_breakdown(result: DrumSequencingScoreResult) -> SkillBreakdown:
    bd = result.breakdown
    return SkillBreakdown(
        pattern=bd.pattern_score,
        velocity=bd.velocity_score,
        swing=bd.swing_score,
        tempo=bd.tempo_score,
    )
