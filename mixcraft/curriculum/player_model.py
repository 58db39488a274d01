"""
Player skill model: aggregate per-skill competency from progress records,
pick weaknesses, and recommend challenges that train them.
All functions are pure; the skill table is passed in.
"""
import logging
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np

from mixcraft.core.types import (
    ChallengeEntry,
    ChallengeProgress,
    Recommendation,
    SKILL_KEYS,
    SkillBreakdown,
    SkillScore,
    Weakness,
)
from mixcraft.curriculum.skills import DEFAULT_SKILL_TABLE, SkillTable
from mixcraft.scoring.similarity import round_half_up

logger = logging.getLogger(__name__)

# Default cut-offs. The practice-more threshold is deliberately looser than the
# weakness threshold; they answer different questions and are not unified.
WEAKNESS_THRESHOLD = 80
WEAKNESS_MIN_SAMPLES = 2
WEAKNESS_MAX_RESULTS = 3
PRACTICE_MORE_THRESHOLD = 70

# Recommendation priority by current standing on a challenge.
PRIORITY_UNFINISHED = 3
PRIORITY_ONE_STAR = 2
PRIORITY_TWO_STARS = 1


# -----------------------------------------------------------------------------
# Skill scores
# -----------------------------------------------------------------------------

def compute_skill_scores(
    all_progress: Mapping[str, ChallengeProgress],
    table: SkillTable = DEFAULT_SKILL_TABLE,
) -> List[SkillScore]:
    """
    Mean score per skill over every progress entry that has a breakdown.
    Skills with no samples are omitted. Sorted weakest first; ties keep table order.
    """
    samples: Dict[str, List[float]] = {}
    for progress in all_progress.values():
        if progress.breakdown is None:
            continue
        for skill, value in progress.breakdown.measured():
            samples.setdefault(skill, []).append(float(value))

    scores = []
    for skill in SKILL_KEYS:
        values = samples.get(skill)
        if not values:
            continue
        if skill not in table:
            logger.debug("Skill %r not in table; using raw key as label", skill)
        scores.append(SkillScore(
            skill=skill,
            label=table.label(skill),
            score=round_half_up(float(np.mean(values))),
            sample_count=len(values),
            track=table.track(skill),
        ))

    # sorted() is stable
    return sorted(scores, key=lambda s: s.score)


def get_weaknesses(
    skills: Sequence[SkillScore],
    min_samples: int = WEAKNESS_MIN_SAMPLES,
    max_results: int = WEAKNESS_MAX_RESULTS,
    threshold: float = WEAKNESS_THRESHOLD,
) -> List[Weakness]:
    """Skills with enough samples scoring below threshold, in input order, truncated."""
    weak = [s for s in skills if s.sample_count >= min_samples and s.score < threshold]
    return [Weakness(s.skill, s.label, s.score, s.track) for s in weak[:max_results]]


# -----------------------------------------------------------------------------
# Recommendations
# -----------------------------------------------------------------------------

def _priority(progress: Optional[ChallengeProgress]) -> Optional[int]:
    """Recommendation priority, or None if the challenge is mastered."""
    if progress is None:
        return PRIORITY_UNFINISHED
    if progress.stars >= 3:
        return None
    if not progress.completed:
        return PRIORITY_UNFINISHED
    if progress.stars == 1:
        return PRIORITY_ONE_STAR
    if progress.stars == 2:
        return PRIORITY_TWO_STARS
    return None


def get_recommendations(
    weaknesses: Sequence[Weakness],
    all_progress: Mapping[str, ChallengeProgress],
    all_challenges: Sequence[ChallengeEntry],
    max_results: int = 5,
    table: SkillTable = DEFAULT_SKILL_TABLE,
) -> List[Recommendation]:
    """
    Walk weaknesses in order and collect challenges from the modules that train them.

    Priority: unfinished (3) > 1 star (2) > 2 stars (1); 3-star challenges are
    never recommended. Each challenge appears at most once. Collection stops at
    max_results, then results are sorted by priority (stable).
    """
    recommendations: List[Recommendation] = []
    seen = set()

    for weakness in weaknesses:
        if len(recommendations) >= max_results:
            break
        modules = table.modules(weakness.skill)
        for candidate in all_challenges:
            if len(recommendations) >= max_results:
                break
            if candidate.module not in modules or candidate.id in seen:
                continue

            priority = _priority(all_progress.get(candidate.id))
            if priority is None:
                continue

            seen.add(candidate.id)
            recommendations.append(Recommendation(
                challenge_id=candidate.id,
                title=candidate.title,
                module=candidate.module,
                reason=f"Improve {weakness.label.lower()}",
                priority=priority,
            ))

    recommendations.sort(key=lambda r: -r.priority)
    logger.debug("get_recommendations: %d weaknesses -> %d recommendations",
                 len(weaknesses), len(recommendations))
    return recommendations[:max_results]


def get_practice_more_suggestions(
    breakdown: Optional[SkillBreakdown],
    all_progress: Mapping[str, ChallengeProgress],
    all_challenges: Sequence[ChallengeEntry],
    max_results: int = 3,
    table: SkillTable = DEFAULT_SKILL_TABLE,
) -> List[Recommendation]:
    """Recommendations for every skill of a just-finished attempt scoring below 70."""
    if breakdown is None:
        return []

    weak = [
        Weakness(skill, table.label(skill), value, table.track(skill))
        for skill, value in breakdown.measured()
        if value < PRACTICE_MORE_THRESHOLD and skill in table
    ]
    if not weak:
        return []
    return get_recommendations(weak, all_progress, all_challenges, max_results, table=table)
