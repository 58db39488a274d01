"""
JSON-dict loaders and result dumpers.
Loaders raise ValueError for structurally malformed input; the engine itself never does.
"""
import logging
from dataclasses import fields, is_dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from mixcraft.core.params import get_param
from mixcraft.core.types import (
    ADSREnvelope,
    AdditiveSynthParams,
    ChallengeEntry,
    ChallengeProgress,
    FilterParams,
    FMSynthParams,
    OscillatorParams,
    SKILL_KEYS,
    SkillBreakdown,
    SoundFeatures,
    SynthParams,
)
from mixcraft.mix.conditions import (
    LayerActive,
    LayerMuted,
    LevelOrder,
    PanPosition,
    PanSpread,
    ProductionCondition,
    RelativeLevel,
    UnknownCondition,
)
from mixcraft.mix.drum_sequencing import DrumPattern, DrumSequencingChallenge, DrumStep, DrumTrack
from mixcraft.mix.layers import LayerConfig, LayerState
from mixcraft.mix.mixing import (
    CompressorParams,
    CompressorTarget,
    EQParams,
    EQTarget,
    MixingChallenge,
    MixingProblem,
    ProblemSolution,
)
from mixcraft.mix.production import (
    AvailableControls,
    GoalTarget,
    ProductionChallenge,
    ReferenceLayer,
    ReferenceTarget,
)
from mixcraft.mix.sampling import SampleSlice, SamplerParams, SamplingChallenge, SamplingTarget

logger = logging.getLogger(__name__)

_MISSING = object()


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def _require(d: Mapping, key: str, where: str) -> Any:
    if not isinstance(d, Mapping):
        raise ValueError(f"{where}: expected an object, got {type(d).__name__}")
    value = get_param(d, key, _MISSING)
    if value is _MISSING:
        raise ValueError(f"{where}: missing required key '{key}'")
    return value


def _number(value: Any, key: str, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{where}: '{key}' must be a number, got {value!r}")
    return float(value)


def _range(value: Any, key: str, where: str) -> Tuple[float, float]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"{where}: '{key}' must be a [min, max] pair")
    return (_number(value[0], key, where), _number(value[1], key, where))


def _optional_number(d: Mapping, key: str, where: str) -> Optional[float]:
    value = d.get(key)
    return None if value is None else _number(value, key, where)


def _optional_range(d: Mapping, key: str, where: str) -> Optional[Tuple[float, float]]:
    value = d.get(key)
    return None if value is None else _range(value, key, where)


def _list(value: Any, key: str, where: str) -> list:
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{where}: '{key}' must be a list")
    return list(value)


# -----------------------------------------------------------------------------
# Sound
# -----------------------------------------------------------------------------

def load_sound_features(d: Mapping) -> SoundFeatures:
    where = "features"
    return SoundFeatures(
        spectral_centroid=_number(_require(d, "spectral_centroid", where), "spectral_centroid", where),
        attack_time=_number(_require(d, "attack_time", where), "attack_time", where),
        rms_envelope=d.get("rms_envelope") or (),
        average_spectrum=d.get("average_spectrum") or (),
    )


def load_envelope(d: Optional[Mapping]) -> ADSREnvelope:
    d = d or {}
    default = ADSREnvelope()
    return ADSREnvelope(
        attack=float(d.get("attack", default.attack)),
        decay=float(d.get("decay", default.decay)),
        sustain=float(d.get("sustain", default.sustain)),
        release=float(d.get("release", default.release)),
    )


def load_synth_params(d: Mapping) -> SynthParams:
    """Subtractive params. Nested keys fall back to the synth defaults."""
    osc, flt = OscillatorParams(), FilterParams()
    return SynthParams(
        oscillator=OscillatorParams(
            type=get_param(d, "oscillator.type", osc.type),
            octave=int(get_param(d, "oscillator.octave", osc.octave)),
            detune=float(get_param(d, "oscillator.detune", osc.detune)),
        ),
        filter=FilterParams(
            type=get_param(d, "filter.type", flt.type),
            cutoff=float(get_param(d, "filter.cutoff", flt.cutoff)),
            resonance=float(get_param(d, "filter.resonance", flt.resonance)),
        ),
        amplitude_envelope=load_envelope(d.get("amplitude_envelope")),
    )


def load_fm_params(d: Mapping) -> FMSynthParams:
    default = FMSynthParams()
    return FMSynthParams(
        harmonicity=float(d.get("harmonicity", default.harmonicity)),
        modulation_index=float(d.get("modulation_index", default.modulation_index)),
        carrier_type=d.get("carrier_type", default.carrier_type),
        modulator_type=d.get("modulator_type", default.modulator_type),
        amplitude_envelope=load_envelope(d.get("amplitude_envelope")),
    )


def load_additive_params(d: Mapping) -> AdditiveSynthParams:
    default = AdditiveSynthParams()
    return AdditiveSynthParams(
        harmonics=d.get("harmonics", default.harmonics),
        amplitude_envelope=load_envelope(d.get("amplitude_envelope")),
    )


# -----------------------------------------------------------------------------
# Layers / production
# -----------------------------------------------------------------------------

def load_layer_config(d: Mapping) -> LayerConfig:
    where = "layer"
    return LayerConfig(
        id=str(_require(d, "id", where)),
        name=str(d.get("name", d.get("id"))),
        initial_volume=_optional_number(d, "initial_volume", where),
        initial_pan=_optional_number(d, "initial_pan", where),
        initial_muted=d.get("initial_muted"),
    )


def load_layer_state(d: Mapping) -> LayerState:
    where = "layer state"
    return LayerState(
        id=str(_require(d, "id", where)),
        name=str(d.get("name", d.get("id"))),
        volume=_number(d.get("volume", 0.0), "volume", where),
        pan=_number(d.get("pan", 0.0), "pan", where),
        muted=bool(d.get("muted", False)),
        solo=bool(d.get("solo", False)),
        eq_low=_number(d.get("eq_low", 0.0), "eq_low", where),
        eq_high=_number(d.get("eq_high", 0.0), "eq_high", where),
    )


def load_condition(d: Mapping) -> ProductionCondition:
    """Unknown condition types load as UnknownCondition, which is never met."""
    where = "condition"
    kind = _require(d, "type", where)

    if kind == "level_order":
        return LevelOrder(louder=_require(d, "louder", where), quieter=_require(d, "quieter", where))
    if kind == "pan_spread":
        return PanSpread(min_width=_number(_require(d, "min_width", where), "min_width", where))
    if kind == "layer_active":
        return LayerActive(layer_id=_require(d, "layer_id", where), active=bool(_require(d, "active", where)))
    if kind == "layer_muted":
        return LayerMuted(layer_id=_require(d, "layer_id", where), muted=bool(_require(d, "muted", where)))
    if kind == "relative_level":
        return RelativeLevel(
            layer1=_require(d, "layer1", where),
            layer2=_require(d, "layer2", where),
            difference=_range(_require(d, "difference", where), "difference", where),
        )
    if kind == "pan_position":
        return PanPosition(
            layer_id=_require(d, "layer_id", where),
            position=_range(_require(d, "position", where), "position", where),
        )

    logger.warning("Unknown condition type %r; it will never be met", kind)
    return UnknownCondition(type=str(kind), raw=dict(d))


def load_production_challenge(d: Mapping) -> ProductionChallenge:
    where = "production challenge"
    target = _require(d, "target", where)
    kind = _require(target, "type", "target")

    if kind == "reference":
        layers = tuple(
            ReferenceLayer(
                volume=_number(_require(layer, "volume", "reference layer"), "volume", "reference layer"),
                muted=bool(layer.get("muted", False)),
                pan=_optional_number(layer, "pan", "reference layer"),
                eq_low=_optional_number(layer, "eq_low", "reference layer"),
                eq_high=_optional_number(layer, "eq_high", "reference layer"),
            )
            for layer in _list(_require(target, "layers", "target"), "layers", "target")
        )
        parsed_target = ReferenceTarget(layers=layers)
    elif kind == "goal":
        conditions = _list(_require(target, "conditions", "target"), "conditions", "target")
        parsed_target = GoalTarget(conditions=tuple(load_condition(c) for c in conditions))
    else:
        raise ValueError(f"target: unknown type {kind!r} (expected 'reference' or 'goal')")

    controls = d.get("available_controls") or {}
    default_controls = AvailableControls()
    return ProductionChallenge(
        id=str(_require(d, "id", where)),
        title=str(d.get("title", "")),
        module=str(d.get("module", "")),
        layers=tuple(load_layer_config(l) for l in _list(_require(d, "layers", where), "layers", where)),
        target=parsed_target,
        available_controls=AvailableControls(
            volume=bool(controls.get("volume", default_controls.volume)),
            mute=bool(controls.get("mute", default_controls.mute)),
            pan=bool(controls.get("pan", default_controls.pan)),
            eq=bool(controls.get("eq", default_controls.eq)),
        ),
    )


# -----------------------------------------------------------------------------
# Mixing
# -----------------------------------------------------------------------------

def load_eq_params(d: Optional[Mapping]) -> EQParams:
    d = d or {}
    return EQParams(
        low=float(d.get("low", 0.0)),
        mid=float(d.get("mid", 0.0)),
        high=float(d.get("high", 0.0)),
    )


def load_compressor_params(d: Optional[Mapping]) -> CompressorParams:
    d = d or {}
    default = CompressorParams()
    return CompressorParams(
        threshold=float(d.get("threshold", default.threshold)),
        amount=float(d.get("amount", default.amount)),
        attack=float(d.get("attack", default.attack)),
        release=float(d.get("release", default.release)),
    )


def load_mixing_challenge(d: Mapping) -> MixingChallenge:
    where = "mixing challenge"
    target = _require(d, "target", where)
    kind = _require(target, "type", "target")

    if kind == "eq":
        parsed_target = EQTarget(
            low=_number(_require(target, "low", "target"), "low", "target"),
            mid=_number(_require(target, "mid", "target"), "mid", "target"),
            high=_number(_require(target, "high", "target"), "high", "target"),
        )
    elif kind == "compressor":
        parsed_target = CompressorTarget(
            threshold=_number(_require(target, "threshold", "target"), "threshold", "target"),
            amount=_number(_require(target, "amount", "target"), "amount", "target"),
            attack=_optional_number(target, "attack", "target"),
            release=_optional_number(target, "release", "target"),
        )
    elif kind == "problem":
        solution = _require(target, "solution", "target")
        parsed_target = MixingProblem(
            description=str(target.get("description", "")),
            solution=ProblemSolution(
                eq_low=_optional_range(solution, "eq_low", "solution"),
                eq_mid=_optional_range(solution, "eq_mid", "solution"),
                eq_high=_optional_range(solution, "eq_high", "solution"),
                threshold=_optional_range(solution, "threshold", "solution"),
                amount=_optional_range(solution, "amount", "solution"),
            ),
        )
    else:
        raise ValueError(f"target: unknown type {kind!r} (expected 'eq', 'compressor' or 'problem')")

    return MixingChallenge(
        id=str(_require(d, "id", where)),
        title=str(d.get("title", "")),
        module=str(d.get("module", "")),
        target=parsed_target,
    )


# -----------------------------------------------------------------------------
# Sampling
# -----------------------------------------------------------------------------

def load_sample_slice(d: Mapping) -> SampleSlice:
    where = "slice"
    return SampleSlice(
        start=_number(_require(d, "start", where), "start", where),
        end=_number(_require(d, "end", where), "end", where),
        id=str(d.get("id", "")),
        pitch=_number(d.get("pitch", 0.0), "pitch", where),
        velocity=_number(d.get("velocity", 1.0), "velocity", where),
    )


def load_sampler_params(d: Optional[Mapping]) -> SamplerParams:
    where = "sampler"
    if d is None:
        return SamplerParams()
    if not isinstance(d, Mapping):
        raise ValueError(f"{where}: expected an object")
    sample_url = d.get("sample_url")
    return SamplerParams(
        sample_url=None if sample_url is None else str(sample_url),
        duration=_number(d.get("duration", 0.0), "duration", where),
        pitch=_number(d.get("pitch", 0.0), "pitch", where),
        time_stretch=_number(d.get("time_stretch", 1.0), "time_stretch", where),
        start_point=_number(d.get("start_point", 0.0), "start_point", where),
        end_point=_number(d.get("end_point", 1.0), "end_point", where),
        fade_in=_number(d.get("fade_in", 0.0), "fade_in", where),
        fade_out=_number(d.get("fade_out", 0.0), "fade_out", where),
        reverse=bool(d.get("reverse", False)),
        slices=tuple(load_sample_slice(s) for s in _list(d.get("slices", []), "slices", where)),
    )


def load_sampling_challenge(d: Mapping) -> SamplingChallenge:
    """Unknown challenge types load as-is; the evaluator scores them 0."""
    where = "sampling challenge"
    if not isinstance(d, Mapping):
        raise ValueError(f"{where}: expected an object")
    target = d.get("target") or {}
    if not isinstance(target, Mapping):
        raise ValueError(f"{where}: 'target' must be an object")
    expected = _optional_number(d, "expected_slices", where)
    return SamplingChallenge(
        id=str(_require(d, "id", where)),
        title=str(d.get("title", "")),
        module=str(d.get("module", "")),
        challenge_type=str(_require(d, "challenge_type", where)),
        target=SamplingTarget(
            pitch=_optional_number(target, "pitch", "target"),
            time_stretch=_optional_number(target, "time_stretch", "target"),
            start_point=_optional_number(target, "start_point", "target"),
            end_point=_optional_number(target, "end_point", "target"),
            fade_in=_optional_number(target, "fade_in", "target"),
            fade_out=_optional_number(target, "fade_out", "target"),
        ),
        expected_slices=None if expected is None else int(expected),
    )


# -----------------------------------------------------------------------------
# Drum sequencing
# -----------------------------------------------------------------------------

def load_drum_step(value: Any) -> DrumStep:
    """A step is either a bare on/off flag or {"active": ..., "velocity": ...}."""
    if isinstance(value, bool):
        return DrumStep(active=value)
    if not isinstance(value, Mapping):
        raise ValueError(f"step: expected a bool or an object, got {value!r}")
    return DrumStep(
        active=bool(value.get("active", False)),
        velocity=_number(value.get("velocity", 0.8), "velocity", "step"),
    )


def load_drum_pattern(d: Mapping) -> DrumPattern:
    where = "pattern"
    if not isinstance(d, Mapping):
        raise ValueError(f"{where}: expected an object")
    tracks = []
    for track in _list(_require(d, "tracks", where), "tracks", where):
        track_id = str(_require(track, "id", "track"))
        tracks.append(DrumTrack(
            id=track_id,
            name=str(track.get("name", track_id)),
            steps=tuple(load_drum_step(s) for s in _list(track.get("steps", []), "steps", "track")),
        ))
    return DrumPattern(
        tracks=tuple(tracks),
        tempo=_number(d.get("tempo", 120.0), "tempo", where),
        swing=_number(d.get("swing", 0.0), "swing", where),
        step_count=int(_number(d.get("step_count", 16), "step_count", where)),
        name=str(d.get("name", "")),
    )


def load_drum_challenge(d: Mapping) -> DrumSequencingChallenge:
    where = "drum challenge"
    if not isinstance(d, Mapping):
        raise ValueError(f"{where}: expected an object")
    focus = _list(d.get("evaluation_focus", ["pattern"]), "evaluation_focus", where)
    return DrumSequencingChallenge(
        id=str(_require(d, "id", where)),
        title=str(d.get("title", "")),
        module=str(d.get("module", "")),
        target_pattern=load_drum_pattern(_require(d, "target_pattern", where)),
        evaluation_focus=tuple(str(f) for f in focus),
    )


# -----------------------------------------------------------------------------
# Progress / catalog
# -----------------------------------------------------------------------------

def load_skill_breakdown(d: Optional[Mapping]) -> Optional[SkillBreakdown]:
    """Unknown skill keys are skipped with a warning; non-numeric values are rejected."""
    if d is None:
        return None
    if not isinstance(d, Mapping):
        raise ValueError("breakdown: expected an object keyed by skill")
    values = {}
    for key, value in d.items():
        if key not in SKILL_KEYS:
            logger.warning("Ignoring unknown skill %r in breakdown", key)
            continue
        if value is not None:
            values[key] = _number(value, key, "breakdown")
    return SkillBreakdown(**values)


def load_progress(challenge_id: str, d: Mapping) -> ChallengeProgress:
    where = f"progress[{challenge_id}]"
    if not isinstance(d, Mapping):
        raise ValueError(f"{where}: expected an object")

    def count(key: str) -> int:
        return int(_number(d.get(key, 0), key, where))

    return ChallengeProgress(
        challenge_id=str(d.get("challenge_id", challenge_id)),
        best_score=count("best_score"),
        stars=count("stars"),
        attempts=count("attempts"),
        completed=bool(d.get("completed", False)),
        breakdown=load_skill_breakdown(d.get("breakdown")),
    )


def load_progress_map(d: Mapping) -> Dict[str, ChallengeProgress]:
    if not isinstance(d, Mapping):
        raise ValueError("progress: expected an object keyed by challenge id")
    return {cid: load_progress(cid, entry) for cid, entry in d.items()}


def load_catalog(items: Sequence[Mapping]) -> List[ChallengeEntry]:
    where = "catalog entry"
    return [
        ChallengeEntry(
            id=str(_require(item, "id", where)),
            title=str(item.get("title", "")),
            module=str(_require(item, "module", where)),
        )
        for item in _list(items, "catalog", "catalog")
    ]


# -----------------------------------------------------------------------------
# Dumping
# -----------------------------------------------------------------------------

def to_jsonable(obj: Any) -> Any:
    """
    Convert results (nested frozen dataclasses, tuples) into JSON-ready values.
    SkillBreakdown drops unmeasured skills.
    """
    if isinstance(obj, SkillBreakdown):
        return obj.to_dict()
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, Mapping):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    return obj
