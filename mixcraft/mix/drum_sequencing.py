"""
Drum sequencing challenge evaluation.
A player pattern is compared with the challenge's target pattern on the aspects
listed in the challenge's evaluation focus: pattern, velocity, swing, tempo.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from mixcraft.core.params import DEV
from mixcraft.scoring.similarity import edge_tolerance_score, passed_for, round_half_up, stars_for
from mixcraft.scoring.thresholds import COMPONENT_FEEDBACK, DRUM_STAR_THRESHOLDS, DRUM_TOLERANCES

logger = logging.getLogger(__name__)

FOCUS_ASPECTS = ("pattern", "velocity", "swing", "tempo")


# -----------------------------------------------------------------------------
# Pattern
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class DrumStep:
    active: bool = False
    velocity: float = 0.8   # 0..1


@dataclass(frozen=True)
class DrumTrack:
    id: str
    name: str
    steps: Tuple[DrumStep, ...] = ()


@dataclass(frozen=True)
class DrumPattern:
    tracks: Tuple[DrumTrack, ...]
    tempo: float = 120.0   # BPM
    swing: float = 0.0     # 0..1
    step_count: int = 16
    name: str = ""


@dataclass(frozen=True)
class DrumSequencingChallenge:
    id: str
    title: str
    module: str
    target_pattern: DrumPattern
    evaluation_focus: Tuple[str, ...] = ("pattern",)


# -----------------------------------------------------------------------------
# Result
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class DrumSequencingBreakdown:
    pattern_score: Optional[float] = None
    velocity_score: Optional[float] = None
    swing_score: Optional[float] = None
    tempo_score: Optional[float] = None


@dataclass(frozen=True)
class DrumSequencingScoreResult:
    overall: int
    stars: int
    passed: bool
    breakdown: DrumSequencingBreakdown
    feedback: Tuple[str, ...] = ()


# -----------------------------------------------------------------------------
# Scoring
# -----------------------------------------------------------------------------

def _tracks_by_id(pattern: DrumPattern) -> Dict[str, DrumTrack]:
    by_id: Dict[str, DrumTrack] = {}
    for track in pattern.tracks:
        by_id.setdefault(track.id, track)
    return by_id


def compare_track_patterns(player: DrumTrack, target: DrumTrack) -> float:
    """Percent of steps whose on/off state matches, over the shorter of the two tracks."""
    step_count = min(len(player.steps), len(target.steps))
    if step_count == 0:
        return 100.0
    matching = sum(
        1 for i in range(step_count) if player.steps[i].active == target.steps[i].active
    )
    return matching / step_count * 100.0


def score_pattern(player: DrumPattern, target: DrumPattern) -> int:
    """
    Mean step match across the target's tracks.
    A target track the player does not have counts as a 0% match.
    """
    if not target.tracks:
        return 100
    player_tracks = _tracks_by_id(player)
    total = 0.0
    for target_track in target.tracks:
        player_track = player_tracks.get(target_track.id)
        if player_track is not None:
            total += compare_track_patterns(player_track, target_track)
    return round_half_up(total / len(target.tracks))


def score_velocity(player: DrumPattern, target: DrumPattern) -> int:
    """Mean velocity accuracy over steps active in both patterns; 100 when there are none."""
    player_tracks = _tracks_by_id(player)
    scores: List[float] = []
    for target_track in target.tracks:
        player_track = player_tracks.get(target_track.id)
        if player_track is None:
            continue
        for player_step, target_step in zip(player_track.steps, target_track.steps):
            if player_step.active and target_step.active:
                scores.append(edge_tolerance_score(
                    player_step.velocity, target_step.velocity, DRUM_TOLERANCES["velocity"]
                ))
    if not scores:
        return 100
    return round_half_up(sum(scores) / len(scores))


def score_swing(player_swing: float, target_swing: float) -> int:
    return round_half_up(edge_tolerance_score(player_swing, target_swing, DRUM_TOLERANCES["swing"]))


def score_tempo(player_tempo: float, target_tempo: float) -> int:
    return round_half_up(edge_tolerance_score(player_tempo, target_tempo, DRUM_TOLERANCES["tempo"]))


# -----------------------------------------------------------------------------
# Feedback
# -----------------------------------------------------------------------------

# aspect -> (off message, close message)
ASPECT_FEEDBACK = {
    "pattern": (
        "Some steps are in the wrong position - check the pattern",
        "Pattern is close, but a few steps need adjustment",
    ),
    "velocity": (
        "Velocity dynamics are off - adjust hit strengths",
        "Velocities are close, fine-tune the dynamics",
    ),
    "swing": (
        "Swing amount needs adjustment",
        "Swing is close, small adjustment needed",
    ),
    "tempo": (
        "Tempo is off - check the BPM",
        "Tempo is close, fine-tune the BPM",
    ),
}


def _summary_line(overall: int) -> str:
    if overall >= DRUM_STAR_THRESHOLDS["three"]:
        return "Excellent drum pattern!"
    if overall >= DRUM_STAR_THRESHOLDS["two"]:
        return "Good work, pattern is solid!"
    return "Keep practicing - listen to the target pattern"


def _aspect_feedback(scores: Dict[str, int]) -> List[str]:
    feedback = []
    for aspect in FOCUS_ASPECTS:
        score = scores.get(aspect)
        if score is None:
            continue
        off, close = ASPECT_FEEDBACK[aspect]
        if score < COMPONENT_FEEDBACK["off_below"]:
            feedback.append(off)
        elif score < COMPONENT_FEEDBACK["close_below"]:
            feedback.append(close)
    return feedback


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------

def evaluate_drum_sequencing_challenge(
    challenge: DrumSequencingChallenge,
    player: DrumPattern,
) -> DrumSequencingScoreResult:
    """
    Evaluate a player pattern against the challenge's target pattern.

    Only aspects in the evaluation focus are scored; overall is their rounded mean
    (0 when the focus names nothing scorable). Stars on the 90/70 ladder, passed at 70.
    """
    target = challenge.target_pattern
    focus = set(challenge.evaluation_focus)

    unknown = sorted(focus.difference(FOCUS_ASPECTS))
    if unknown:
        log = logger.warning if DEV else logger.debug
        log("Challenge %s: ignoring unknown evaluation focus %s", challenge.id, unknown)

    scores: Dict[str, int] = {}
    if "pattern" in focus:
        scores["pattern"] = score_pattern(player, target)
    if "velocity" in focus:
        scores["velocity"] = score_velocity(player, target)
    if "swing" in focus:
        scores["swing"] = score_swing(player.swing, target.swing)
    if "tempo" in focus:
        scores["tempo"] = score_tempo(player.tempo, target.tempo)

    overall = round_half_up(sum(scores.values()) / len(scores)) if scores else 0
    overall = max(0, min(100, overall))

    breakdown = DrumSequencingBreakdown(
        pattern_score=scores.get("pattern"),
        velocity_score=scores.get("velocity"),
        swing_score=scores.get("swing"),
        tempo_score=scores.get("tempo"),
    )
    logger.debug("evaluate_drum_sequencing_challenge %s: overall=%d", challenge.id, overall)
    return DrumSequencingScoreResult(
        overall=overall,
        stars=stars_for(overall, DRUM_STAR_THRESHOLDS),
        passed=passed_for(overall, DRUM_STAR_THRESHOLDS),
        breakdown=breakdown,
        feedback=(_summary_line(overall), *_aspect_feedback(scores)),
    )
