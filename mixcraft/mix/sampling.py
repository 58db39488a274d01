"""
Sampling challenge evaluation.
Five challenge types, each with its own evaluator:
- recreate-kit: pitch, slice count and time stretch against a target
- chop-challenge: slice count and spacing
- tune-to-track: pitch and time stretch
- flip-this: creative manipulation of a loaded sample
- clean-sample: trim points and fades
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from mixcraft.core.params import DEV
from mixcraft.scoring.similarity import clamp_score, passed_for, stars_for, tolerance_score
from mixcraft.scoring.thresholds import COMPONENT_FEEDBACK, SAMPLING_STAR_THRESHOLDS, SAMPLING_TOLERANCES

logger = logging.getLogger(__name__)

DEFAULT_CHOP_SLICES = 4


# -----------------------------------------------------------------------------
# Sampler state
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SampleSlice:
    start: float   # seconds
    end: float
    id: str = ""
    pitch: float = 0.0
    velocity: float = 1.0


@dataclass(frozen=True)
class SamplerParams:
    sample_url: Optional[str] = None
    duration: float = 0.0       # seconds
    pitch: float = 0.0          # semitones
    time_stretch: float = 1.0
    start_point: float = 0.0    # 0..1 of sample length
    end_point: float = 1.0
    fade_in: float = 0.0        # seconds
    fade_out: float = 0.0
    reverse: bool = False
    slices: Tuple[SampleSlice, ...] = ()


# -----------------------------------------------------------------------------
# Challenge definition
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SamplingTarget:
    pitch: Optional[float] = None
    time_stretch: Optional[float] = None
    start_point: Optional[float] = None
    end_point: Optional[float] = None
    fade_in: Optional[float] = None
    fade_out: Optional[float] = None


@dataclass(frozen=True)
class SamplingChallenge:
    id: str
    title: str
    module: str
    challenge_type: str   # recreate-kit | chop-challenge | tune-to-track | flip-this | clean-sample
    target: SamplingTarget = field(default_factory=SamplingTarget)
    expected_slices: Optional[int] = None


# -----------------------------------------------------------------------------
# Result
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SamplingBreakdown:
    type: str
    pitch_score: Optional[float] = None
    slice_score: Optional[float] = None
    timing_score: Optional[float] = None
    creativity_score: Optional[float] = None


@dataclass(frozen=True)
class SamplingScoreResult:
    overall: int
    stars: int
    passed: bool
    breakdown: SamplingBreakdown
    feedback: Tuple[str, ...] = ()


# -----------------------------------------------------------------------------
# Scoring primitives
# -----------------------------------------------------------------------------

def score_pitch(actual: float, target: float) -> float:
    """100 on the note, 70 one semitone off, 0 at five semitones."""
    return tolerance_score(actual, target, SAMPLING_TOLERANCES["pitch"])


def score_time_stretch(actual: float, target: float) -> float:
    return tolerance_score(actual, target, SAMPLING_TOLERANCES["time_stretch"])


def score_slices(slices: Sequence[SampleSlice], expected_count: int, duration: float) -> int:
    """
    Up to 60 points for the slice count and 40 for even spacing of slice starts.
    With no slices expected: 100 for none, 50 otherwise.
    """
    if expected_count <= 0:
        return 100 if not slices else 50

    count = len(slices)
    if count == expected_count:
        count_score = 60.0
    else:
        count_score = max(0.0, 60.0 * (1.0 - abs(count - expected_count) / expected_count))

    distribution_score = 0.0
    if count >= 2 and duration > 0:
        ideal = duration / count
        starts = sorted(s.start for s in slices)
        deviation = sum(abs((b - a) - ideal) for a, b in zip(starts, starts[1:]))
        avg_deviation = deviation / (count - 1)
        distribution_score = max(0.0, 40.0 * (1.0 - avg_deviation / ideal))
    elif count == 1 and expected_count == 1:
        distribution_score = 40.0

    return clamp_score(count_score + distribution_score)


def score_trim_points(player: SamplerParams, target_start: float, target_end: float) -> float:
    start = tolerance_score(player.start_point, target_start, SAMPLING_TOLERANCES["start_point"])
    end = tolerance_score(player.end_point, target_end, SAMPLING_TOLERANCES["end_point"])
    return (start + end) / 2.0


def score_fades(player: SamplerParams, target_in: float, target_out: float) -> float:
    fade_in = tolerance_score(player.fade_in, target_in, SAMPLING_TOLERANCES["fade"])
    fade_out = tolerance_score(player.fade_out, target_out, SAMPLING_TOLERANCES["fade"])
    return (fade_in + fade_out) / 2.0


# -----------------------------------------------------------------------------
# Shared
# -----------------------------------------------------------------------------

def _component_feedback(score: float, off: str, close: str) -> List[str]:
    if score < COMPONENT_FEEDBACK["off_below"]:
        return [off]
    if score < COMPONENT_FEEDBACK["close_below"]:
        return [close]
    return []


def _mean(scores: Sequence[float]) -> float:
    """Mean of the measured components; nothing to match scores 100."""
    return sum(scores) / len(scores) if scores else 100.0


def _finish(
    overall: float,
    breakdown: SamplingBreakdown,
    feedback: List[str],
    ladder: Tuple[str, str, str, str],
) -> SamplingScoreResult:
    score = clamp_score(overall)
    if score >= SAMPLING_STAR_THRESHOLDS["three"]:
        summary = ladder[0]
    elif score >= SAMPLING_STAR_THRESHOLDS["two"]:
        summary = ladder[1]
    elif score >= SAMPLING_STAR_THRESHOLDS["one"]:
        summary = ladder[2]
    else:
        summary = ladder[3]
    return SamplingScoreResult(
        overall=score,
        stars=stars_for(score, SAMPLING_STAR_THRESHOLDS),
        passed=passed_for(score, SAMPLING_STAR_THRESHOLDS),
        breakdown=breakdown,
        feedback=(summary, *feedback),
    )


# -----------------------------------------------------------------------------
# Challenge types
# -----------------------------------------------------------------------------

def _evaluate_recreate_kit(challenge: SamplingChallenge, player: SamplerParams) -> SamplingScoreResult:
    target = challenge.target
    feedback: List[str] = []
    pitch = slices = timing = None

    if target.pitch is not None:
        pitch = score_pitch(player.pitch, target.pitch)
        feedback += _component_feedback(
            pitch,
            f"Pitch is off by {abs(player.pitch - target.pitch):g} semitones",
            "Pitch is close, fine-tune it",
        )
    if challenge.expected_slices is not None:
        slices = score_slices(player.slices, challenge.expected_slices, player.duration)
        feedback += _component_feedback(
            slices,
            f"Expected {challenge.expected_slices} slices, you have {len(player.slices)}",
            "Check your slice distribution",
        )
    if target.time_stretch is not None:
        timing = score_time_stretch(player.time_stretch, target.time_stretch)
        feedback += _component_feedback(timing, "Time stretch is off target", "Time stretch is close")

    overall = _mean([s for s in (pitch, slices, timing) if s is not None])
    breakdown = SamplingBreakdown(
        type="recreate-kit", pitch_score=pitch, slice_score=slices, timing_score=timing
    )
    return _finish(overall, breakdown, feedback, (
        "Excellent kit recreation!",
        "Good work, getting close!",
        "Keep refining your samples",
        "Listen to the reference again",
    ))


def _evaluate_chop(challenge: SamplingChallenge, player: SamplerParams) -> SamplingScoreResult:
    expected = challenge.expected_slices or DEFAULT_CHOP_SLICES
    slices = score_slices(player.slices, expected, player.duration)
    count = len(player.slices)

    feedback: List[str] = []
    if count == 0:
        feedback.append("No slices created - chop up the sample!")
    elif count != expected:
        feedback.append(f"Expected {expected} slices, you have {count}")

    if slices < SAMPLING_STAR_THRESHOLDS["one"]:
        if count > 0:
            feedback.append("Try spacing your chops more evenly")
    elif slices < COMPONENT_FEEDBACK["close_below"]:
        feedback.append("Good chopping, refine the spacing")

    breakdown = SamplingBreakdown(type="chop-challenge", slice_score=slices)
    return _finish(slices, breakdown, feedback, (
        "Perfect chops!",
        "Nice chopping!",
        "Chops are acceptable",
        "Keep practicing your chopping",
    ))


def _evaluate_tune_to_track(challenge: SamplingChallenge, player: SamplerParams) -> SamplingScoreResult:
    target = challenge.target
    feedback: List[str] = []
    pitch = timing = None

    if target.pitch is not None:
        pitch = score_pitch(player.pitch, target.pitch)
        direction = "sharp" if player.pitch > target.pitch else "flat"
        feedback += _component_feedback(
            pitch,
            f"Sample is {direction} - adjust pitch",
            "Almost in tune, small adjustment needed",
        )
    if target.time_stretch is not None:
        timing = score_time_stretch(player.time_stretch, target.time_stretch)
        feedback += _component_feedback(
            timing, "Tempo is off - adjust time stretch", "Tempo is close, fine-tune it"
        )

    overall = _mean([s for s in (pitch, timing) if s is not None])
    breakdown = SamplingBreakdown(type="tune-to-track", pitch_score=pitch, timing_score=timing)
    return _finish(overall, breakdown, feedback, (
        "Sample is perfectly tuned to the track!",
        "Good tuning, almost there!",
        "Getting closer, keep adjusting",
        "Listen to the reference and match pitch/tempo",
    ))


def count_manipulations(player: SamplerParams) -> int:
    """Distinct techniques applied: pitch, stretch, slicing, reverse, trimming."""
    return sum((
        player.pitch != 0,
        player.time_stretch != 1.0,
        len(player.slices) > 0,
        bool(player.reverse),
        player.start_point > 0 or player.end_point < 1,
    ))


def _evaluate_flip(challenge: SamplingChallenge, player: SamplerParams) -> SamplingScoreResult:
    feedback: List[str] = []
    manipulations = count_manipulations(player)

    if not player.sample_url:
        creativity = 0
        feedback.append("Load a sample to start your flip")
    elif manipulations == 0:
        creativity = 50
        feedback.append("Sample loaded - now get creative! Try pitching, chopping, or reversing")
    else:
        creativity = min(100, 60 + manipulations * 10)
        if manipulations == 1:
            feedback.append("Good start! Try combining more techniques")
        elif manipulations == 2:
            feedback.append("Nice! Keep experimenting")
        else:
            feedback.append("Creative flip! You're using multiple techniques")

    breakdown = SamplingBreakdown(type="flip-this", creativity_score=creativity)
    return _finish(creativity, breakdown, feedback, (
        "Impressive flip!",
        "Great creative work!",
        "Keep flipping!",
        "Load a sample and make it your own",
    ))


def _evaluate_clean(challenge: SamplingChallenge, player: SamplerParams) -> SamplingScoreResult:
    target = challenge.target
    feedback: List[str] = []
    scores: List[float] = []
    trim = None

    if target.start_point is not None or target.end_point is not None:
        trim = score_trim_points(
            player,
            target.start_point if target.start_point is not None else 0.0,
            target.end_point if target.end_point is not None else 1.0,
        )
        scores.append(trim)
        feedback += _component_feedback(
            trim, "Trim points need adjustment", "Trim is close, refine the start/end points"
        )
    if target.fade_in is not None or target.fade_out is not None:
        fades = score_fades(
            player,
            target.fade_in if target.fade_in is not None else 0.0,
            target.fade_out if target.fade_out is not None else 0.0,
        )
        scores.append(fades)
        feedback += _component_feedback(
            fades, "Adjust your fades to smooth the edges", "Fades are close, fine-tune them"
        )

    if not scores:
        # No explicit targets: reward any trimming and fading at all
        trimmed = player.start_point > 0 or player.end_point < 1
        faded = player.fade_in > 0 or player.fade_out > 0
        if trimmed and faded:
            trim = 100.0
        elif trimmed or faded:
            trim = 75.0
            feedback.append("Good start! Try trimming and adding fades")
        else:
            trim = 50.0
            feedback.append("Trim the sample and add fades to clean it up")
        scores.append(trim)

    breakdown = SamplingBreakdown(type="clean-sample", timing_score=trim)
    return _finish(_mean(scores), breakdown, feedback, (
        "Sample is clean and polished!",
        "Good cleanup work!",
        "Sample is usable, but could be cleaner",
        "Focus on trimming silence and smoothing edges",
    ))


EVALUATORS: Dict[str, Callable[[SamplingChallenge, SamplerParams], SamplingScoreResult]] = {
    "recreate-kit": _evaluate_recreate_kit,
    "chop-challenge": _evaluate_chop,
    "tune-to-track": _evaluate_tune_to_track,
    "flip-this": _evaluate_flip,
    "clean-sample": _evaluate_clean,
}


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------

def evaluate_sampling_challenge(
    challenge: SamplingChallenge,
    player: SamplerParams,
) -> SamplingScoreResult:
    """
    Evaluate sampler settings against a sampling challenge.
    Dispatches on challenge_type; an unknown type fails closed with overall 0.
    Stars on the 90/75 ladder, passed at 60.
    """
    evaluator = EVALUATORS.get(challenge.challenge_type)
    if evaluator is None:
        log = logger.warning if DEV else logger.debug
        log("Unknown sampling challenge type %r; scoring 0", challenge.challenge_type)
        return SamplingScoreResult(
            overall=0,
            stars=1,
            passed=False,
            breakdown=SamplingBreakdown(type=challenge.challenge_type),
            feedback=("Unknown challenge type",),
        )

    result = evaluator(challenge, player)
    logger.debug(
        "evaluate_sampling_challenge %s (%s): overall=%d",
        challenge.id, challenge.challenge_type, result.overall,
    )
    return result
