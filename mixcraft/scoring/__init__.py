"""
Sound comparison scoring for the synthesis tracks.
"""
from mixcraft.scoring.similarity import cosine_similarity, log_time_score, tolerance_score
from mixcraft.scoring.sound import compare_sounds, generate_summary
from mixcraft.scoring.synth_tracks import score_additive_attempt, score_fm_attempt

__all__ = [
    "tolerance_score",
    "log_time_score",
    "cosine_similarity",
    "compare_sounds",
    "generate_summary",
    "score_fm_attempt",
    "score_additive_attempt",
]
