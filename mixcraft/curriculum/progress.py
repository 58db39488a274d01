"""
Progress bookkeeping: fold an attempt into a ChallengeProgress, merge two progress maps.
"Best wins, completion sticky." Inputs are never mutated.
"""
import logging
from typing import Dict, Mapping, Optional, Protocol

from mixcraft.core.types import ChallengeProgress, SkillBreakdown

logger = logging.getLogger(__name__)


class GradedResult(Protocol):
    """Anything with overall / stars / passed (every *ScoreResult)."""
    overall: int
    stars: int
    passed: bool


def record_attempt(
    existing: Optional[ChallengeProgress],
    challenge_id: str,
    result: GradedResult,
    breakdown: Optional[SkillBreakdown] = None,
) -> ChallengeProgress:
    """
    Return the progress record after one more attempt.

    Stars only count on a passing attempt. The stored breakdown is replaced when
    the attempt ties or beats the previous best, so it tracks the best attempt.
    """
    if existing is None:
        existing = ChallengeProgress(challenge_id=challenge_id)

    keep_new_breakdown = breakdown is not None and result.overall >= existing.best_score
    updated = ChallengeProgress(
        challenge_id=challenge_id,
        best_score=max(existing.best_score, result.overall),
        stars=max(existing.stars, result.stars if result.passed else 0),
        attempts=existing.attempts + 1,
        completed=existing.completed or result.passed,
        breakdown=breakdown if keep_new_breakdown else existing.breakdown,
    )
    logger.debug(
        "record_attempt %s: score=%d best=%d stars=%d attempts=%d",
        challenge_id, result.overall, updated.best_score, updated.stars, updated.attempts,
    )
    return updated


def _merge_one(local: ChallengeProgress, remote: ChallengeProgress) -> ChallengeProgress:
    breakdown = local.breakdown if local.best_score >= remote.best_score else remote.breakdown
    return ChallengeProgress(
        challenge_id=local.challenge_id,
        best_score=max(local.best_score, remote.best_score),
        stars=max(local.stars, remote.stars),
        attempts=max(local.attempts, remote.attempts),
        completed=local.completed or remote.completed,
        breakdown=breakdown,
    )


def merge_progress(
    local: Mapping[str, ChallengeProgress],
    remote: Mapping[str, ChallengeProgress],
) -> Dict[str, ChallengeProgress]:
    """
    Merge two progress maps keyed by challenge id.
    Idempotent, and commutative in every field except the breakdown on equal
    best scores, where local wins.
    """
    merged: Dict[str, ChallengeProgress] = {}
    for challenge_id in list(local) + [k for k in remote if k not in local]:
        mine = local.get(challenge_id)
        theirs = remote.get(challenge_id)
        if mine is None:
            merged[challenge_id] = theirs
        elif theirs is None:
            merged[challenge_id] = mine
        else:
            merged[challenge_id] = _merge_one(mine, theirs)
    return merged
