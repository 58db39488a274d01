"""
Skill catalog: display label, owning track and training modules per skill key.
A SkillTable is immutable configuration; curriculum functions take it as an argument.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Literal, Mapping, Tuple

Track = Literal["sound-design", "mixing", "sampling", "drum-sequencing"]


@dataclass(frozen=True)
class SkillInfo:
    label: str
    track: Track
    modules: Tuple[str, ...]


def _make_skill(label: str, track: Track, *modules: str) -> SkillInfo:
    """Helper to create a table entry."""
    return SkillInfo(label=label, track=track, modules=tuple(modules))


@dataclass(frozen=True)
class SkillTable:
    skills: Mapping[str, SkillInfo]

    def __post_init__(self):
        object.__setattr__(self, "skills", MappingProxyType(dict(self.skills)))

    def __contains__(self, skill: str) -> bool:
        return skill in self.skills

    def label(self, skill: str) -> str:
        info = self.skills.get(skill)
        return info.label if info else skill

    def track(self, skill: str) -> str:
        info = self.skills.get(skill)
        return info.track if info else "sound-design"

    def modules(self, skill: str) -> Tuple[str, ...]:
        info = self.skills.get(skill)
        return info.modules if info else ()


# -----------------------------------------------------------------------------
# DEFAULT_SKILL_TABLE
# -----------------------------------------------------------------------------

_DEFAULT_SKILLS: Dict[str, SkillInfo] = {
    # Sound design
    "brightness": _make_skill("Brightness / Timbre", "sound-design", "SD1", "SD6", "SD7"),
    "attack": _make_skill("Attack Shaping", "sound-design", "SD3", "SD16"),
    "filter": _make_skill("Filter Control", "sound-design", "SD2", "SD14"),
    "envelope": _make_skill("Envelope Design", "sound-design", "SD3", "SD6"),
    "harmonicity": _make_skill("Harmonicity / FM", "sound-design", "SD8"),
    "modulation_index": _make_skill("Modulation Index", "sound-design", "SD8"),
    # Mixing
    "eq_low": _make_skill("Low-End EQ", "mixing", "F1", "F2", "I1", "A1"),
    "eq_mid": _make_skill("Mid-Range EQ", "mixing", "F1", "F3", "A1"),
    "eq_high": _make_skill("High-End EQ", "mixing", "F1", "F3", "A1"),
    "compressor": _make_skill("Compression", "mixing", "F4", "F5", "A4"),
    "conditions": _make_skill("Goal Conditions", "mixing", "I2", "I3", "I4", "A5", "M1"),
    # Sampling
    "pitch": _make_skill("Pitch Control", "sampling", "SM2", "SM3"),
    "slice": _make_skill("Slicing", "sampling", "SM1", "SM2"),
    "timing": _make_skill("Timing", "sampling", "SM4", "SM5"),
    "creativity": _make_skill("Creativity", "sampling", "SM5", "SM6"),
    # Drum sequencing
    "pattern": _make_skill("Pattern Accuracy", "drum-sequencing", "DS1", "DS2", "DS5"),
    "velocity": _make_skill("Velocity Control", "drum-sequencing", "DS4"),
    "swing": _make_skill("Swing / Groove", "drum-sequencing", "DS3"),
    "tempo": _make_skill("Tempo", "drum-sequencing", "DS1", "DS6"),
}

DEFAULT_SKILL_TABLE = SkillTable(_DEFAULT_SKILLS)
