"""
Production challenge evaluation.
Two modes, chosen by the challenge target:
- reference: per-layer proximity to a reference mix
- goal: fraction of declarative goal conditions met
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from mixcraft.mix.conditions import ProductionCondition, check_condition, describe_condition
from mixcraft.mix.layers import LayerConfig, LayerState
from mixcraft.scoring.similarity import clamp_score, passed_for, stars_for, tolerance_score
from mixcraft.scoring.thresholds import (
    MIX_STAR_THRESHOLDS,
    PRODUCTION_LAYER_FEEDBACK,
    PRODUCTION_TOLERANCES,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Challenge definition
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ReferenceLayer:
    volume: float
    muted: bool = False
    pan: Optional[float] = None
    eq_low: Optional[float] = None
    eq_high: Optional[float] = None


@dataclass(frozen=True)
class ReferenceTarget:
    layers: Tuple[ReferenceLayer, ...]
    type: str = field(default="reference", init=False)


@dataclass(frozen=True)
class GoalTarget:
    conditions: Tuple[ProductionCondition, ...]
    type: str = field(default="goal", init=False)


ProductionTarget = Union[ReferenceTarget, GoalTarget]


@dataclass(frozen=True)
class AvailableControls:
    volume: bool = True
    mute: bool = True
    pan: bool = False
    eq: bool = False


@dataclass(frozen=True)
class ProductionChallenge:
    id: str
    title: str
    module: str
    layers: Tuple[LayerConfig, ...]
    target: ProductionTarget
    available_controls: AvailableControls = field(default_factory=AvailableControls)


# -----------------------------------------------------------------------------
# Result
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class LayerScore:
    id: str
    name: str
    score: float


@dataclass(frozen=True)
class ConditionResult:
    description: str
    passed: bool


@dataclass(frozen=True)
class ProductionBreakdown:
    type: str  # "reference" | "goal"
    layer_scores: Optional[Tuple[LayerScore, ...]] = None
    condition_results: Optional[Tuple[ConditionResult, ...]] = None


@dataclass(frozen=True)
class ProductionScoreResult:
    overall: int
    stars: int
    passed: bool
    breakdown: ProductionBreakdown
    feedback: Tuple[str, ...] = ()


# -----------------------------------------------------------------------------
# Shared
# -----------------------------------------------------------------------------

REFERENCE_SUMMARY = (
    "Excellent balance!",
    "Good work, getting close!",
    "Keep refining the balance",
    "Listen to the reference again",
)

GOAL_SUMMARY = (
    "All goals met!",
    "Almost there!",
    "Good start, keep going",
    "Review the goals and try again",
)


def _summary_line(overall: float, ladder: Tuple[str, str, str, str]) -> str:
    if overall >= MIX_STAR_THRESHOLDS["three"]:
        return ladder[0]
    if overall >= MIX_STAR_THRESHOLDS["two"]:
        return ladder[1]
    if overall >= MIX_STAR_THRESHOLDS["one"]:
        return ladder[2]
    return ladder[3]


def _finish(
    overall: float,
    breakdown: ProductionBreakdown,
    feedback: List[str],
    ladder: Tuple[str, str, str, str],
) -> ProductionScoreResult:
    score = clamp_score(overall)
    return ProductionScoreResult(
        overall=score,
        stars=stars_for(score, MIX_STAR_THRESHOLDS),
        passed=passed_for(score, MIX_STAR_THRESHOLDS),
        breakdown=breakdown,
        feedback=(_summary_line(score, ladder), *feedback),
    )


# -----------------------------------------------------------------------------
# Reference mode
# -----------------------------------------------------------------------------

def score_layer(
    state: LayerState,
    target: ReferenceLayer,
    controls: AvailableControls,
) -> float:
    """Unweighted mean of volume, mute and (when enabled and specified) pan / EQ scores."""
    scores = [
        tolerance_score(state.volume, target.volume, PRODUCTION_TOLERANCES["volume"]),
        100.0 if state.muted == target.muted else 0.0,
    ]
    if controls.pan and target.pan is not None:
        scores.append(tolerance_score(state.pan, target.pan, PRODUCTION_TOLERANCES["pan"]))
    if controls.eq:
        if target.eq_low is not None:
            scores.append(tolerance_score(state.eq_low, target.eq_low, PRODUCTION_TOLERANCES["eq"]))
        if target.eq_high is not None:
            scores.append(tolerance_score(state.eq_high, target.eq_high, PRODUCTION_TOLERANCES["eq"]))
    return sum(scores) / len(scores)


def _evaluate_reference(
    target: ReferenceTarget,
    states: Sequence[LayerState],
    controls: AvailableControls,
) -> ProductionScoreResult:
    layer_scores: List[LayerScore] = []
    feedback: List[str] = []

    # Layers are matched by position; extra states or targets are skipped.
    for state, target_layer in zip(states, target.layers):
        score = score_layer(state, target_layer, controls)
        layer_scores.append(LayerScore(state.id, state.name, score))

        if score < PRODUCTION_LAYER_FEEDBACK["needs_adjustment_below"]:
            feedback.append(f"{state.name} needs adjustment")
        elif score < PRODUCTION_LAYER_FEEDBACK["fine_tune_below"]:
            feedback.append(f"{state.name} is close, fine-tune it")

    if layer_scores:
        overall = sum(l.score for l in layer_scores) / len(layer_scores)
    else:
        overall = 0.0

    breakdown = ProductionBreakdown(type="reference", layer_scores=tuple(layer_scores))
    return _finish(overall, breakdown, feedback, REFERENCE_SUMMARY)


# -----------------------------------------------------------------------------
# Goal mode
# -----------------------------------------------------------------------------

def _evaluate_goal(target: GoalTarget, states: Sequence[LayerState]) -> ProductionScoreResult:
    results: List[ConditionResult] = []
    feedback: List[str] = []

    for condition in target.conditions:
        met = check_condition(condition, states)
        description = describe_condition(condition)
        results.append(ConditionResult(description, met))
        if not met:
            feedback.append(f"Not met: {description}")

    if results:
        overall = sum(1 for r in results if r.passed) / len(results) * 100.0
    else:
        overall = 0.0

    breakdown = ProductionBreakdown(type="goal", condition_results=tuple(results))
    return _finish(overall, breakdown, feedback, GOAL_SUMMARY)


def evaluate_production_challenge(
    challenge: ProductionChallenge,
    states: Sequence[LayerState],
) -> ProductionScoreResult:
    """
    Evaluate a production challenge against a snapshot of layer states.

    Args:
        challenge: Challenge definition (layers, target, available controls)
        states: Current layer states, in challenge layer order

    Returns:
        ProductionScoreResult; stars on the 90/75 ladder, passed at 60.
    """
    if isinstance(challenge.target, ReferenceTarget):
        result = _evaluate_reference(challenge.target, states, challenge.available_controls)
    else:
        result = _evaluate_goal(challenge.target, states)

    logger.debug(
        "evaluate_production_challenge %s (%s): overall=%d stars=%d",
        challenge.id, result.breakdown.type, result.overall, result.stars,
    )
    return result
