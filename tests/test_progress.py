"""
Tests for mixcraft/curriculum/progress: best-wins attempt recording and progress merge.
"""
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from dataclasses import dataclass

from mixcraft.core.types import ChallengeProgress, SkillBreakdown
from mixcraft.curriculum.progress import merge_progress, record_attempt


@dataclass(frozen=True)
class Result:
    overall: int
    stars: int
    passed: bool


# -----------------------------------------------------------------------------
# record_attempt
# -----------------------------------------------------------------------------

def test_first_attempt_creates_progress():
    bd = SkillBreakdown(attack=80)
    progress = record_attempt(None, "sd1-01", Result(82, 2, True), bd)
    assert progress == ChallengeProgress("sd1-01", best_score=82, stars=2, attempts=1, completed=True, breakdown=bd)


def test_failed_attempt_earns_no_stars():
    progress = record_attempt(None, "sd1-01", Result(40, 1, False))
    assert progress.stars == 0
    assert progress.completed is False
    assert progress.attempts == 1


def test_best_wins_and_completion_sticky():
    best = SkillBreakdown(attack=95)
    progress = record_attempt(None, "sd1-01", Result(96, 3, True), best)
    progress = record_attempt(progress, "sd1-01", Result(30, 1, False), SkillBreakdown(attack=10))
    assert progress.best_score == 96
    assert progress.stars == 3
    assert progress.completed is True
    assert progress.attempts == 2
    assert progress.breakdown == best


def test_equal_score_replaces_breakdown():
    first = record_attempt(None, "x", Result(70, 1, True), SkillBreakdown(filter=60))
    second = record_attempt(first, "x", Result(70, 1, True), SkillBreakdown(filter=75))
    assert second.breakdown.filter == 75
    # input is untouched
    assert first.breakdown.filter == 60
    assert first.attempts == 1


# -----------------------------------------------------------------------------
# merge_progress
# -----------------------------------------------------------------------------

def test_merge_takes_best_of_each_field():
    local = {"a": ChallengeProgress("a", 70, 1, 5, True, SkillBreakdown(attack=70))}
    remote = {
        "a": ChallengeProgress("a", 90, 2, 2, False, SkillBreakdown(attack=90)),
        "b": ChallengeProgress("b", 40, 0, 1, False),
    }
    merged = merge_progress(local, remote)
    assert merged["a"] == ChallengeProgress("a", 90, 2, 5, True, SkillBreakdown(attack=90))
    assert merged["b"] == remote["b"]


def test_merge_is_commutative_and_idempotent():
    local = {"a": ChallengeProgress("a", 70, 1, 5, True, SkillBreakdown(attack=70))}
    remote = {"a": ChallengeProgress("a", 90, 2, 2, False, SkillBreakdown(attack=90))}
    ab = merge_progress(local, remote)
    assert ab == merge_progress(remote, local)
    assert merge_progress(local, ab) == ab


def test_merge_tie_prefers_local_breakdown():
    local = {"a": ChallengeProgress("a", 80, 2, 1, True, SkillBreakdown(attack=1))}
    remote = {"a": ChallengeProgress("a", 80, 2, 1, True, SkillBreakdown(attack=2))}
    assert merge_progress(local, remote)["a"].breakdown.attack == 1
