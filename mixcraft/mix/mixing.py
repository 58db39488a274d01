"""
Mixing challenge evaluation: EQ matching, compressor matching, and problem fixing.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from mixcraft.scoring.similarity import band_score, passed_for, round_half_up, stars_for
from mixcraft.scoring.thresholds import MIX_STAR_THRESHOLDS, MIXING_FEEDBACK_BELOW, MIXING_TOLERANCES

logger = logging.getLogger(__name__)

Range = Tuple[float, float]


# -----------------------------------------------------------------------------
# Player settings
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class EQParams:
    low: float = 0.0   # dB
    mid: float = 0.0
    high: float = 0.0


@dataclass(frozen=True)
class CompressorParams:
    threshold: float = 0.0   # dB
    amount: float = 0.0      # percent
    attack: float = 0.01     # seconds
    release: float = 0.1     # seconds


# -----------------------------------------------------------------------------
# Targets
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class EQTarget:
    low: float
    mid: float
    high: float
    type: str = field(default="eq", init=False)


@dataclass(frozen=True)
class CompressorTarget:
    threshold: float
    amount: float
    attack: Optional[float] = None
    release: Optional[float] = None
    type: str = field(default="compressor", init=False)


@dataclass(frozen=True)
class ProblemSolution:
    eq_low: Optional[Range] = None
    eq_mid: Optional[Range] = None
    eq_high: Optional[Range] = None
    threshold: Optional[Range] = None
    amount: Optional[Range] = None


@dataclass(frozen=True)
class MixingProblem:
    description: str
    solution: ProblemSolution
    type: str = field(default="problem", init=False)


MixingTarget = Union[EQTarget, CompressorTarget, MixingProblem]


@dataclass(frozen=True)
class MixingChallenge:
    id: str
    title: str
    module: str
    target: MixingTarget


# -----------------------------------------------------------------------------
# Result
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class EQScores:
    low: int
    mid: int
    high: int
    total: int


@dataclass(frozen=True)
class CompressorScores:
    threshold: int
    amount: int
    total: int
    attack: Optional[int] = None
    release: Optional[int] = None


@dataclass(frozen=True)
class MixingConditionResult:
    description: str
    passed: bool


@dataclass(frozen=True)
class MixingBreakdown:
    eq: Optional[EQScores] = None
    compressor: Optional[CompressorScores] = None
    conditions: Optional[Tuple[MixingConditionResult, ...]] = None


@dataclass(frozen=True)
class MixingScoreResult:
    overall: int
    stars: int
    passed: bool
    breakdown: MixingBreakdown
    feedback: Tuple[str, ...] = ()


# -----------------------------------------------------------------------------
# Scoring
# -----------------------------------------------------------------------------

def evaluate_eq(player: EQParams, target: EQTarget, tolerance: float = MIXING_TOLERANCES["eq"]) -> EQScores:
    low = band_score(player.low, target.low, tolerance)
    mid = band_score(player.mid, target.mid, tolerance)
    high = band_score(player.high, target.high, tolerance)
    return EQScores(low, mid, high, round_half_up((low + mid + high) / 3.0))


def evaluate_compressor(player: CompressorParams, target: CompressorTarget) -> CompressorScores:
    threshold = band_score(player.threshold, target.threshold, MIXING_TOLERANCES["compressor_threshold"])
    amount = band_score(player.amount, target.amount, MIXING_TOLERANCES["compressor_amount"])

    # Timing only counts when the target defines both attack and release
    if target.attack is None or target.release is None:
        return CompressorScores(threshold, amount, round_half_up((threshold + amount) / 2.0))

    attack = band_score(player.attack, target.attack, MIXING_TOLERANCES["compressor_attack"])
    release = band_score(player.release, target.release, MIXING_TOLERANCES["compressor_release"])
    total = round_half_up((threshold + amount + attack + release) / 4.0)
    return CompressorScores(threshold, amount, total, attack, release)


def _in_range(value: float, bounds: Range) -> bool:
    low, high = bounds
    return low <= value <= high


def evaluate_problem(
    player_eq: EQParams,
    player_comp: CompressorParams,
    problem: MixingProblem,
) -> Tuple[int, List[str]]:
    """Score each specified solution range 100 (inside) or 0 (outside). No ranges scores 0."""
    solution = problem.solution
    checks = [
        (solution.eq_low, player_eq.low, "Low EQ should be between {0:g} and {1:g} dB"),
        (solution.eq_mid, player_eq.mid, "Mid EQ should be between {0:g} and {1:g} dB"),
        (solution.eq_high, player_eq.high, "High EQ should be between {0:g} and {1:g} dB"),
        (solution.threshold, player_comp.threshold, "Threshold should be between {0:g} and {1:g} dB"),
        (solution.amount, player_comp.amount, "Compression amount should be between {0:g}% and {1:g}%"),
    ]

    scores: List[int] = []
    feedback: List[str] = []
    for bounds, value, message in checks:
        if bounds is None:
            continue
        if _in_range(value, bounds):
            scores.append(100)
        else:
            scores.append(0)
            feedback.append(message.format(*bounds))

    total = round_half_up(sum(scores) / len(scores)) if scores else 0
    return total, feedback


# -----------------------------------------------------------------------------
# Feedback
# -----------------------------------------------------------------------------

def _eq_feedback(scores: EQScores, player: EQParams, target: EQTarget) -> List[str]:
    feedback = []
    if scores.low < MIXING_FEEDBACK_BELOW:
        direction = "boost" if player.low < target.low else "cut"
        feedback.append(f"Try to {direction} the low frequencies more")
    if scores.mid < MIXING_FEEDBACK_BELOW:
        direction = "boost" if player.mid < target.mid else "cut"
        feedback.append(f"The mids need more {direction}")
    if scores.high < MIXING_FEEDBACK_BELOW:
        direction = "boost" if player.high < target.high else "cut"
        feedback.append(f"Adjust the highs - {direction} a bit more")
    if not feedback:
        feedback.append("Good EQ balance!")
    return feedback


def _compressor_feedback(
    scores: CompressorScores,
    player: CompressorParams,
    target: CompressorTarget,
) -> List[str]:
    feedback = []
    if scores.threshold < MIXING_FEEDBACK_BELOW:
        direction = "Raise" if player.threshold < target.threshold else "Lower"
        feedback.append(f"{direction} the threshold")
    if scores.amount < MIXING_FEEDBACK_BELOW:
        direction = "Increase" if player.amount < target.amount else "Decrease"
        feedback.append(f"{direction} the compression amount")
    if scores.attack is not None and scores.attack < MIXING_FEEDBACK_BELOW:
        direction = "slower" if player.attack < target.attack else "faster"
        feedback.append(f"Try a {direction} attack")
    if scores.release is not None and scores.release < MIXING_FEEDBACK_BELOW:
        direction = "slower" if player.release < target.release else "faster"
        feedback.append(f"Adjust for a {direction} release")
    if not feedback:
        feedback.append("Compression settings look good!")
    return feedback


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------

def evaluate_mixing_challenge(
    challenge: MixingChallenge,
    player_eq: EQParams,
    player_compressor: CompressorParams,
) -> MixingScoreResult:
    """
    Evaluate EQ / compressor settings against a mixing challenge target.
    Stars on the 90/75 ladder, passed at 60.
    """
    target = challenge.target
    feedback: List[str] = []

    if isinstance(target, EQTarget):
        eq_scores = evaluate_eq(player_eq, target)
        breakdown = MixingBreakdown(eq=eq_scores)
        overall = eq_scores.total
        feedback.extend(_eq_feedback(eq_scores, player_eq, target))
    elif isinstance(target, CompressorTarget):
        comp_scores = evaluate_compressor(player_compressor, target)
        breakdown = MixingBreakdown(compressor=comp_scores)
        overall = comp_scores.total
        feedback.extend(_compressor_feedback(comp_scores, player_compressor, target))
    else:
        overall, problems = evaluate_problem(player_eq, player_compressor, target)
        breakdown = MixingBreakdown()
        feedback.extend(problems or ["Problem solved correctly!"])

    overall = max(0, min(100, overall))
    logger.debug("evaluate_mixing_challenge %s: overall=%d", challenge.id, overall)
    return MixingScoreResult(
        overall=overall,
        stars=stars_for(overall, MIX_STAR_THRESHOLDS),
        passed=passed_for(overall, MIX_STAR_THRESHOLDS),
        breakdown=breakdown,
        feedback=tuple(feedback),
    )
