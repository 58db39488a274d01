"""
Tests for mixcraft/core/io loaders and the tools/grade.py CLI.
Run from project root: python -m pytest tests/test_io_cli.py -v
"""
import sys
import os
import json

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest

from mixcraft.core.io import (
    load_condition,
    load_production_challenge,
    load_progress_map,
    load_synth_params,
    to_jsonable,
)
from mixcraft.core.types import SkillBreakdown
from mixcraft.mix.conditions import LevelOrder, RelativeLevel, UnknownCondition
from mixcraft.mix.production import GoalTarget, ReferenceTarget
from tools.grade import main

FEATURES = {
    "spectral_centroid": 1800.0,
    "attack_time": 4.0,
    "rms_envelope": [0.2, 0.8, 0.5, 0.2],
    "average_spectrum": [0.1, 0.7, 0.5, 0.2],
}

REFERENCE_CHALLENGE = {
    "id": "P1-01",
    "title": "Kick and bass",
    "module": "P1",
    "layers": [{"id": "kick", "name": "Kick"}, {"id": "bass", "name": "Bass"}],
    "target": {
        "type": "reference",
        "layers": [{"volume": -6, "muted": False}, {"volume": 0, "pan": -0.3, "muted": True}],
    },
    "available_controls": {"pan": True},
}


def _write(tmp_path, name, payload):
    path = tmp_path / name
    path.write_text(json.dumps(payload))
    return str(path)


# -----------------------------------------------------------------------------
# Loaders
# -----------------------------------------------------------------------------

def test_load_condition_variants():
    assert load_condition({"type": "level_order", "louder": "kick", "quieter": "bass"}) == LevelOrder("kick", "bass")
    rel = load_condition({"type": "relative_level", "layer1": "a", "layer2": "b", "difference": [2, 6]})
    assert rel == RelativeLevel("a", "b", (2.0, 6.0))


def test_load_condition_unknown_type_fails_closed():
    condition = load_condition({"type": "sidechain", "layer_id": "kick"})
    assert isinstance(condition, UnknownCondition)
    assert condition.type == "sidechain"


def test_load_condition_missing_key_raises():
    with pytest.raises(ValueError, match="quieter"):
        load_condition({"type": "level_order", "louder": "kick"})


def test_load_condition_bad_range_raises():
    with pytest.raises(ValueError, match="position"):
        load_condition({"type": "pan_position", "layer_id": "kick", "position": [0.5]})


def test_load_production_challenge():
    challenge = load_production_challenge(REFERENCE_CHALLENGE)
    assert isinstance(challenge.target, ReferenceTarget)
    assert challenge.target.layers[1].pan == -0.3
    assert challenge.available_controls.pan is True
    assert challenge.available_controls.eq is False

    goal = dict(REFERENCE_CHALLENGE, target={"type": "goal", "conditions": [{"type": "pan_spread", "min_width": 1}]})
    assert isinstance(load_production_challenge(goal).target, GoalTarget)


def test_load_production_challenge_unknown_target():
    bad = dict(REFERENCE_CHALLENGE, target={"type": "vibes"})
    with pytest.raises(ValueError, match="vibes"):
        load_production_challenge(bad)


def test_load_synth_params_nested_defaults():
    params = load_synth_params({"filter": {"cutoff": 800}})
    assert params.filter.cutoff == 800.0
    assert params.filter.type == "lowpass"
    assert params.oscillator.type == "sawtooth"


def test_load_progress_skips_unknown_skills():
    progress = load_progress_map({"sd1": {"best_score": 80, "breakdown": {"attack": 50, "wobble": 3}}})
    assert progress["sd1"].breakdown == SkillBreakdown(attack=50)


def test_load_progress_rejects_null_counts():
    with pytest.raises(ValueError, match="best_score"):
        load_progress_map({"sd1": {"best_score": None, "stars": 1}})
    with pytest.raises(ValueError, match="sd1"):
        load_progress_map({"sd1": [80, 2]})


def test_to_jsonable_drops_unmeasured_skills():
    assert to_jsonable({"skills": SkillBreakdown(eq_low=10)}) == {"skills": {"eq_low": 10}}


# -----------------------------------------------------------------------------
# CLI
# -----------------------------------------------------------------------------

def test_cli_sound_identical(tmp_path, capsys):
    side = {"features": FEATURES, "params": {"filter": {"cutoff": 1500}}}
    path = _write(tmp_path, "sound.json", {"player": side, "target": side})
    assert main(["sound", path]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["result"]["overall"] == 100
    assert out["summary"].startswith("Perfect")
    assert set(out["skills"]) == {"brightness", "attack", "filter", "envelope"}


def test_cli_sound_fm_track(tmp_path, capsys):
    side = {"features": FEATURES, "params": {"harmonicity": 2, "modulation_index": 3}}
    path = _write(tmp_path, "fm.json", {"player": side, "target": side})
    assert main(["sound", path, "--track", "fm"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert set(out["skills"]) == {"brightness", "harmonicity", "modulation_index", "envelope"}


def test_cli_production(tmp_path, capsys):
    challenge = _write(tmp_path, "challenge.json", REFERENCE_CHALLENGE)
    layers = _write(tmp_path, "layers.json", [
        {"id": "kick", "name": "Kick", "volume": -6},
        {"id": "bass", "name": "Bass", "volume": 0, "pan": -0.3, "muted": True},
    ])
    assert main(["production", challenge, layers]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["result"]["stars"] == 3
    assert out["result"]["breakdown"]["type"] == "reference"
    assert out["skills"] == {"eq_low": 100}


def test_cli_mixing(tmp_path, capsys):
    path = _write(tmp_path, "mix.json", {
        "challenge": {"id": "F1-01", "target": {"type": "eq", "low": 3, "mid": 0, "high": -2}},
        "eq": {"low": 3, "mid": 0, "high": -2},
    })
    assert main(["mixing", path]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["result"]["overall"] == 100
    assert out["skills"] == {"eq_low": 100, "eq_mid": 100, "eq_high": 100}


def test_cli_recommend(tmp_path, capsys):
    progress = _write(tmp_path, "progress.json", {
        "sd3-01": {"best_score": 50, "stars": 0, "attempts": 2, "breakdown": {"attack": 40}},
        "sd3-02": {"best_score": 60, "stars": 1, "attempts": 1, "completed": True, "breakdown": {"attack": 50}},
    })
    catalog = _write(tmp_path, "catalog.json", [
        {"id": "sd3-01", "title": "Pluck", "module": "SD3"},
        {"id": "sd3-02", "title": "Swell", "module": "SD3"},
        {"id": "sd16-01", "title": "Transient", "module": "SD16"},
    ])
    assert main(["recommend", progress, catalog, "--max", "2"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["weaknesses"][0]["skill"] == "attack"
    assert len(out["recommendations"]) == 2
    assert [r["challenge_id"] for r in out["recommendations"]] == ["sd3-01", "sd3-02"]


def test_cli_malformed_input_exits_2(tmp_path, capsys):
    path = _write(tmp_path, "bad.json", {"id": "P1", "target": {"type": "goal"}})
    assert main(["production", path, path]) == 2
    assert "error:" in capsys.readouterr().err


def test_cli_unreadable_file_exits_2(tmp_path, capsys):
    bad = tmp_path / "broken.json"
    bad.write_text("{not json")
    assert main(["mixing", str(bad)]) == 2
    assert "broken.json" in capsys.readouterr().err


def test_cli_null_progress_field_exits_2(tmp_path, capsys):
    progress = _write(tmp_path, "progress.json", {"sd3-01": {"best_score": None, "stars": 0}})
    catalog = _write(tmp_path, "catalog.json", [{"id": "sd3-01", "title": "Pluck", "module": "SD3"}])
    assert main(["recommend", progress, catalog]) == 2
    assert "best_score" in capsys.readouterr().err


def test_cli_sampling(tmp_path, capsys):
    path = _write(tmp_path, "sampling.json", {
        "challenge": {"id": "SM2-01", "module": "SM2", "challenge_type": "chop-challenge", "expected_slices": 2},
        "sampler": {
            "sample_url": "break.wav",
            "duration": 2.0,
            "slices": [{"start": 0.0, "end": 1.0}, {"start": 1.0, "end": 2.0}],
        },
    })
    assert main(["sampling", path]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["result"]["overall"] == 100
    assert out["result"]["breakdown"]["type"] == "chop-challenge"
    assert out["skills"] == {"slice": 100}


def test_cli_drums(tmp_path, capsys):
    kick = [True, False, False, False] * 4
    path = _write(tmp_path, "drums.json", {
        "challenge": {
            "id": "DS1-01",
            "module": "DS1",
            "evaluation_focus": ["pattern", "tempo"],
            "target_pattern": {"tempo": 120, "tracks": [{"id": "kick", "steps": kick}]},
        },
        "pattern": {"tempo": 120, "tracks": [{"id": "kick", "steps": [{"active": s} for s in kick]}]},
    })
    assert main(["drums", path]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["result"]["overall"] == 100
    assert out["result"]["passed"] is True
    assert out["skills"] == {"pattern": 100, "tempo": 100}


def test_cli_drums_missing_pattern_exits_2(tmp_path, capsys):
    path = _write(tmp_path, "drums.json", {
        "challenge": {"id": "DS1-01", "target_pattern": {"tracks": []}},
    })
    assert main(["drums", path]) == 2
    assert "pattern" in capsys.readouterr().err
