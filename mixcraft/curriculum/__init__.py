"""
Player skill model, recommendations and progress bookkeeping.
"""
from mixcraft.curriculum.breakdowns import (
    extract_additive_breakdown,
    extract_drum_breakdown,
    extract_fm_breakdown,
    extract_mixing_breakdown,
    extract_production_breakdown,
    extract_sampling_breakdown,
    extract_sd_breakdown,
)
from mixcraft.curriculum.player_model import (
    compute_skill_scores,
    get_practice_more_suggestions,
    get_recommendations,
    get_weaknesses,
)
from mixcraft.curriculum.progress import merge_progress, record_attempt
from mixcraft.curriculum.skills import DEFAULT_SKILL_TABLE, SkillTable

__all__ = [
    "extract_sd_breakdown",
    "extract_fm_breakdown",
    "extract_additive_breakdown",
    "extract_mixing_breakdown",
    "extract_production_breakdown",
    "extract_sampling_breakdown",
    "extract_drum_breakdown",
    "compute_skill_scores",
    "get_weaknesses",
    "get_recommendations",
    "get_practice_more_suggestions",
    "record_attempt",
    "merge_progress",
    "SkillTable",
    "DEFAULT_SKILL_TABLE",
]
