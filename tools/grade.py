#!/usr/bin/env python3
"""
Grading tool: run the evaluators on JSON files and print JSON results.

Usage:
    python tools/grade.py <subcommand> [options]

Subcommands:
    sound <submission_json>                  Score a synthesis attempt
    production <challenge_json> <layers_json> Evaluate a production mix
    mixing <submission_json>                 Evaluate EQ / compressor settings
    sampling <submission_json>               Evaluate sampler settings
    drums <submission_json>                  Evaluate a drum pattern
    recommend <progress_json> <catalog_json> Skill scores, weaknesses, recommendations

Options:
    --track <str>     Synthesis track for `sound`: subtractive, fm, additive (default: subtractive)
    --max <int>       Max recommendations for `recommend` (default: 5)
    --verbose         Debug logging

Sound submission format:
    {"player": {"features": {...}, "params": {...}},
     "target": {"features": {...}, "params": {...}}}

Mixing submission format:
    {"challenge": {...}, "eq": {...}, "compressor": {...}}

Sampling submission format:
    {"challenge": {...}, "sampler": {...}}

Drum submission format:
    {"challenge": {...}, "pattern": {...}}
"""
import sys
import os
import json
import argparse
import logging

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from mixcraft.core.io import (
    load_additive_params,
    load_catalog,
    load_compressor_params,
    load_drum_challenge,
    load_drum_pattern,
    load_eq_params,
    load_fm_params,
    load_layer_state,
    load_mixing_challenge,
    load_production_challenge,
    load_progress_map,
    load_sampler_params,
    load_sampling_challenge,
    load_sound_features,
    load_synth_params,
    to_jsonable,
)
from mixcraft.curriculum.breakdowns import (
    extract_additive_breakdown,
    extract_drum_breakdown,
    extract_fm_breakdown,
    extract_mixing_breakdown,
    extract_production_breakdown,
    extract_sampling_breakdown,
    extract_sd_breakdown,
)
from mixcraft.curriculum.player_model import compute_skill_scores, get_recommendations, get_weaknesses
from mixcraft.mix.drum_sequencing import evaluate_drum_sequencing_challenge
from mixcraft.mix.mixing import evaluate_mixing_challenge
from mixcraft.mix.production import evaluate_production_challenge
from mixcraft.mix.sampling import evaluate_sampling_challenge
from mixcraft.scoring.sound import compare_sounds, generate_summary
from mixcraft.scoring.synth_tracks import score_additive_attempt, score_fm_attempt

logger = logging.getLogger("mixcraft.grade")

# track -> (params loader, scorer, breakdown extractor)
TRACKS = {
    "subtractive": (load_synth_params, compare_sounds, extract_sd_breakdown),
    "fm": (load_fm_params, score_fm_attempt, extract_fm_breakdown),
    "additive": (load_additive_params, score_additive_attempt, extract_additive_breakdown),
}


def _load_json(path):
    try:
        with open(path, "r") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"{path}: {e}") from e


def _load_submission(path):
    submission = _load_json(path)
    if not isinstance(submission, dict) or "challenge" not in submission:
        raise ValueError(f"{path}: missing 'challenge'")
    return submission


def _emit(payload):
    print(json.dumps(to_jsonable(payload), indent=2))


def cmd_sound(args):
    """Score a synthesis attempt."""
    submission = _load_json(args.submission_json)
    load_params, score, extract = TRACKS[args.track]

    player = submission.get("player") or {}
    target = submission.get("target") or {}
    result = score(
        load_sound_features(player.get("features")),
        load_sound_features(target.get("features")),
        load_params(player.get("params") or {}),
        load_params(target.get("params") or {}),
    )
    _emit({
        "result": result,
        "summary": generate_summary(result),
        "skills": extract(result),
    })
    return 0


def cmd_production(args):
    """Evaluate a production mix."""
    challenge = load_production_challenge(_load_json(args.challenge_json))
    layers = _load_json(args.layers_json)
    if not isinstance(layers, list):
        raise ValueError(f"{args.layers_json}: expected a list of layer states")
    states = [load_layer_state(layer) for layer in layers]

    result = evaluate_production_challenge(challenge, states)
    _emit({"result": result, "skills": extract_production_breakdown(result)})
    return 0


def cmd_mixing(args):
    """Evaluate EQ / compressor settings."""
    submission = _load_submission(args.submission_json)
    challenge = load_mixing_challenge(submission["challenge"])

    result = evaluate_mixing_challenge(
        challenge,
        load_eq_params(submission.get("eq")),
        load_compressor_params(submission.get("compressor")),
    )
    _emit({"result": result, "skills": extract_mixing_breakdown(result)})
    return 0


def cmd_sampling(args):
    """Evaluate sampler settings."""
    submission = _load_submission(args.submission_json)
    challenge = load_sampling_challenge(submission["challenge"])

    result = evaluate_sampling_challenge(challenge, load_sampler_params(submission.get("sampler")))
    _emit({"result": result, "skills": extract_sampling_breakdown(result)})
    return 0


def cmd_drums(args):
    """Evaluate a drum pattern."""
    submission = _load_submission(args.submission_json)
    challenge = load_drum_challenge(submission["challenge"])
    if "pattern" not in submission:
        raise ValueError(f"{args.submission_json}: missing 'pattern'")

    result = evaluate_drum_sequencing_challenge(challenge, load_drum_pattern(submission["pattern"]))
    _emit({"result": result, "skills": extract_drum_breakdown(result)})
    return 0


def cmd_recommend(args):
    """Skill scores, weaknesses and recommended challenges."""
    progress = load_progress_map(_load_json(args.progress_json))
    catalog = load_catalog(_load_json(args.catalog_json))

    skills = compute_skill_scores(progress)
    weaknesses = get_weaknesses(skills)
    recommendations = get_recommendations(weaknesses, progress, catalog, args.max)
    _emit({
        "skills": skills,
        "weaknesses": weaknesses,
        "recommendations": recommendations,
    })
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        description="Grade challenge submissions and compute curriculum recommendations"
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Subcommand")

    # sound subcommand
    p_sound = subparsers.add_parser("sound", help="Score a synthesis attempt")
    p_sound.add_argument("submission_json")
    p_sound.add_argument("--track", choices=sorted(TRACKS), default="subtractive",
                         help="Synthesis track (default: subtractive)")

    # production subcommand
    p_prod = subparsers.add_parser("production", help="Evaluate a production mix")
    p_prod.add_argument("challenge_json")
    p_prod.add_argument("layers_json")

    # mixing subcommand
    p_mix = subparsers.add_parser("mixing", help="Evaluate EQ / compressor settings")
    p_mix.add_argument("submission_json")

    # sampling subcommand
    p_samp = subparsers.add_parser("sampling", help="Evaluate sampler settings")
    p_samp.add_argument("submission_json")

    # drums subcommand
    p_drum = subparsers.add_parser("drums", help="Evaluate a drum pattern")
    p_drum.add_argument("submission_json")

    # recommend subcommand
    p_rec = subparsers.add_parser("recommend", help="Recommend challenges from progress")
    p_rec.add_argument("progress_json")
    p_rec.add_argument("catalog_json")
    p_rec.add_argument("--max", type=int, default=5, help="Max recommendations (default: 5)")

    return parser


COMMANDS = {
    "sound": cmd_sound,
    "production": cmd_production,
    "mixing": cmd_mixing,
    "sampling": cmd_sampling,
    "drums": cmd_drums,
    "recommend": cmd_recommend,
}


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.command:
        parser.print_help()
        return 1

    try:
        return COMMANDS[args.command](args)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
