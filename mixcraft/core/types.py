"""
Shared value types for the grading engine.
All records are frozen: evaluators build fresh results and never mutate inputs.
"""
from dataclasses import dataclass, field
from typing import Iterator, Literal, Optional, Tuple

OscillatorType = Literal["sine", "sawtooth", "square", "triangle"]
FilterType = Literal["lowpass", "highpass", "bandpass"]
Stars = Literal[1, 2, 3]


def _as_floats(values) -> Tuple[float, ...]:
    return tuple(float(v) for v in (values or ()))


# -----------------------------------------------------------------------------
# Measured audio
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SoundFeatures:
    """Acoustic descriptors of one rendered note, produced by the analysis side."""
    spectral_centroid: float
    attack_time: float  # frames
    rms_envelope: Tuple[float, ...] = ()
    average_spectrum: Tuple[float, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "rms_envelope", _as_floats(self.rms_envelope))
        object.__setattr__(self, "average_spectrum", _as_floats(self.average_spectrum))


# -----------------------------------------------------------------------------
# Synth parameter snapshots (subtractive / FM / additive)
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class OscillatorParams:
    type: OscillatorType = "sawtooth"
    octave: int = 0       # -2..+2
    detune: float = 0.0   # cents, -100..+100


@dataclass(frozen=True)
class FilterParams:
    type: FilterType = "lowpass"
    cutoff: float = 2000.0   # Hz
    resonance: float = 1.0   # Q, 0.1..20


@dataclass(frozen=True)
class ADSREnvelope:
    attack: float = 0.01   # seconds
    decay: float = 0.2     # seconds
    sustain: float = 0.5   # level 0..1
    release: float = 0.3   # seconds


@dataclass(frozen=True)
class SynthParams:
    """Subtractive synth state."""
    oscillator: OscillatorParams = field(default_factory=OscillatorParams)
    filter: FilterParams = field(default_factory=FilterParams)
    amplitude_envelope: ADSREnvelope = field(default_factory=ADSREnvelope)


@dataclass(frozen=True)
class FMSynthParams:
    harmonicity: float = 1.0        # modulator : carrier frequency ratio
    modulation_index: float = 2.0   # depth of frequency modulation
    carrier_type: OscillatorType = "sine"
    modulator_type: OscillatorType = "sine"
    amplitude_envelope: ADSREnvelope = field(default_factory=ADSREnvelope)


@dataclass(frozen=True)
class AdditiveSynthParams:
    # Relative amplitude (0..1) of partials 1..N
    harmonics: Tuple[float, ...] = (1.0, 0.5, 0.33, 0.25, 0.2, 0.17, 0.14, 0.125)
    amplitude_envelope: ADSREnvelope = field(default_factory=ADSREnvelope)

    def __post_init__(self):
        object.__setattr__(self, "harmonics", _as_floats(self.harmonics))


# -----------------------------------------------------------------------------
# Score results
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class CategoryScore:
    score: int  # 0..100
    feedback: str = ""


# Fixed iteration order for the generic breakdown; first wins on ties.
CATEGORY_ORDER: Tuple[str, ...] = ("brightness", "attack", "filter", "envelope")


@dataclass(frozen=True)
class SoundBreakdown:
    """
    Generic four-slot breakdown shared by the synthesis tracks.
    FM and additive attempts store track-specific scores in the attack/filter
    slots; the curriculum extractors relabel them.
    """
    brightness: CategoryScore
    attack: CategoryScore
    filter: CategoryScore
    envelope: CategoryScore

    def items(self) -> Iterator[Tuple[str, CategoryScore]]:
        for name in CATEGORY_ORDER:
            yield name, getattr(self, name)


@dataclass(frozen=True)
class ScoreResult:
    overall: int
    stars: Stars
    passed: bool
    breakdown: SoundBreakdown
    feedback: Tuple[str, ...] = ()


# -----------------------------------------------------------------------------
# Skill breakdown snapshot (flat, common across tracks)
# -----------------------------------------------------------------------------

# Every skill key the curriculum knows about, in table order.
SKILL_KEYS: Tuple[str, ...] = (
    "brightness", "attack", "filter", "envelope", "harmonicity", "modulation_index",
    "eq_low", "eq_mid", "eq_high", "compressor", "conditions",
    "pitch", "slice", "timing", "creativity",
    "pattern", "velocity", "swing", "tempo",
)


@dataclass(frozen=True)
class SkillBreakdown:
    """
    Numeric per-skill scores of one attempt.
    None means the attempt did not measure that skill; 0 means it measured badly.
    """
    brightness: Optional[float] = None
    attack: Optional[float] = None
    filter: Optional[float] = None
    envelope: Optional[float] = None
    harmonicity: Optional[float] = None
    modulation_index: Optional[float] = None
    eq_low: Optional[float] = None
    eq_mid: Optional[float] = None
    eq_high: Optional[float] = None
    compressor: Optional[float] = None
    conditions: Optional[float] = None
    pitch: Optional[float] = None
    slice: Optional[float] = None
    timing: Optional[float] = None
    creativity: Optional[float] = None
    pattern: Optional[float] = None
    velocity: Optional[float] = None
    swing: Optional[float] = None
    tempo: Optional[float] = None

    def measured(self) -> Iterator[Tuple[str, float]]:
        """Yield (skill, value) for every measured skill in SKILL_KEYS order."""
        for key in SKILL_KEYS:
            value = getattr(self, key)
            if value is not None:
                yield key, value

    def to_dict(self) -> dict:
        return dict(self.measured())


# -----------------------------------------------------------------------------
# Progress and catalog
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ChallengeProgress:
    challenge_id: str
    best_score: int = 0
    stars: int = 0  # 0 = never passed
    attempts: int = 0
    completed: bool = False
    breakdown: Optional[SkillBreakdown] = None


@dataclass(frozen=True)
class ChallengeEntry:
    id: str
    title: str
    module: str


# -----------------------------------------------------------------------------
# Curriculum outputs
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SkillScore:
    skill: str
    label: str
    score: int
    sample_count: int
    track: str


@dataclass(frozen=True)
class Weakness:
    skill: str
    label: str
    score: float
    track: str


@dataclass(frozen=True)
class Recommendation:
    challenge_id: str
    title: str
    module: str
    reason: str
    priority: int
