"""
Similarity primitives shared by every scorer.
Each returns a plain Python number; degenerate inputs get explicit neutral defaults.
"""
import math
from typing import Dict, Sequence

import numpy as np

from mixcraft.scoring.thresholds import SOUND_LIMITS, SOUND_STAR_THRESHOLDS

EPS = 1e-12


def round_half_up(x: float) -> int:
    """Round .5 away from zero for positive scores (Python's round() is banker's)."""
    return int(math.floor(x + 0.5))


def clamp_score(x: float) -> int:
    """Round and clamp to the 0..100 score range."""
    return max(0, min(100, round_half_up(x)))


def stars_for(overall: float, thresholds: Dict[str, int] = SOUND_STAR_THRESHOLDS) -> int:
    if overall >= thresholds["three"]:
        return 3
    if overall >= thresholds["two"]:
        return 2
    return 1


def passed_for(overall: float, thresholds: Dict[str, int] = SOUND_STAR_THRESHOLDS) -> bool:
    return overall >= thresholds["one"]


def tolerance_score(actual: float, target: float, tolerance: float) -> float:
    """
    Piecewise similarity 0..100.
    Within tolerance: 100 down to 70, linear in diff.
    Outside: 70 down to 0, reaching 0 at 5x tolerance.
    """
    diff = abs(actual - target)
    if diff <= tolerance:
        if tolerance <= 0:
            return 100.0
        return 100.0 - (diff / tolerance) * 30.0
    max_diff = tolerance * 5.0
    ratio = min(diff / max_diff, 1.0) if max_diff > 0 else 1.0
    return 70.0 * (1.0 - ratio)


def edge_tolerance_score(actual: float, target: float, tolerance: float, span: float = 3.0) -> float:
    """
    Same 100..70 band as tolerance_score, but the falloff starts at the tolerance
    edge: 70 there, 0 at tolerance * (1 + span).
    """
    diff = abs(actual - target)
    if diff <= tolerance:
        if tolerance <= 0:
            return 100.0
        return 100.0 - (diff / tolerance) * 30.0
    max_diff = tolerance * span
    ratio = min((diff - tolerance) / max_diff, 1.0) if max_diff > 0 else 1.0
    return 70.0 * (1.0 - ratio)


def band_score(actual: float, target: float, tolerance: float) -> int:
    """
    Stricter curve used by the EQ/compressor evaluator:
    100 within 10% of tolerance, 0 beyond tolerance, linear between.
    """
    diff = abs(actual - target)
    if diff <= tolerance * 0.1:
        return 100
    if diff > tolerance:
        return 0
    return round_half_up(100.0 * (1.0 - diff / tolerance))


def log_time_score(actual: float, target: float) -> float:
    """Similarity 0..1 of two times on a log2 scale; one octave off scores 0."""
    if target == 0:
        return 1.0 if actual == 0 else 0.0
    if actual <= 0:
        return 0.0
    return max(0.0, 1.0 - abs(math.log2(actual / target)))


def log_ratio_score(actual: float, target: float, octaves: float) -> float:
    """Similarity 0..1 on a log2 scale, reaching 0 at the given octave distance."""
    if target <= 0 or actual <= 0:
        return 1.0 if actual == target else 0.0
    return 1.0 - min(1.0, abs(math.log2(actual / target)) / octaves)


def cosine_similarity(
    vec_a: Sequence[float],
    vec_b: Sequence[float],
    compare_length: int = SOUND_LIMITS["spectrum_bins"],
) -> int:
    """
    Cosine similarity of the first min(compare_length, len(a), len(b)) elements, as 0..100.
    Returns 50 when either vector has zero magnitude.
    """
    n = min(int(compare_length), len(vec_a), len(vec_b))
    a = np.asarray(vec_a[:n], dtype=np.float64)
    b = np.asarray(vec_b[:n], dtype=np.float64)

    magnitude = float(np.linalg.norm(a)) * float(np.linalg.norm(b))
    if magnitude < EPS:
        return 50

    similarity = float(np.dot(a, b)) / magnitude
    return clamp_score(similarity * 100.0)
