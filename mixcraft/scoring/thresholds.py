"""
Scoring constants: star ladders, category weights, tolerances.
"""

# Synthesis tracks: pass at 60, two stars at 80, three at 95.
SOUND_STAR_THRESHOLDS = {
    "one": 60,
    "two": 80,
    "three": 95,
}

# Mix evaluators (production, mixing): pass at 60, two stars at 75, three at 90.
MIX_STAR_THRESHOLDS = {
    "one": 60,
    "two": 75,
    "three": 90,
}

SOUND_WEIGHTS = {
    "audio_features": 0.7,
    "parameter_proximity": 0.3,
    # Within the audio part
    "brightness": 0.3,
    "attack": 0.25,
    "envelope": 0.25,
    "spectrum": 0.2,
    # Within the parameter part
    "filter_params": 0.4,
    "oscillator_params": 0.3,
    "envelope_params": 0.3,
}

SOUND_LIMITS = {
    "attack_window_frames": 10.0,   # attack diff at which the attack score hits 0
    "spectrum_bins": 128,           # low bins compared by cosine similarity
    "cutoff_octaves": 2.0,          # cutoff distance at which the cutoff score hits 0
    "resonance_range": 10.0,
    "octave_range": 2.0,
    "detune_range": 100.0,          # cents
}

# Per-track blend of audio score vs. track-specific parameter score.
TRACK_BLEND = {
    "fm": {"audio": 0.7, "params": 0.3},
    "additive": {"audio": 0.6, "params": 0.4},
}

PRODUCTION_TOLERANCES = {
    "volume": 3.0,  # dB
    "pan": 0.2,
    "eq": 2.0,      # dB
}

PRODUCTION_LAYER_FEEDBACK = {
    "needs_adjustment_below": 60,
    "fine_tune_below": 85,
}

MIXING_TOLERANCES = {
    "eq": 3.0,                   # dB
    "compressor_threshold": 6.0, # dB
    "compressor_amount": 15.0,   # percent
    "compressor_attack": 0.05,   # seconds
    "compressor_release": 0.1,   # seconds
}

# Band / setting scores below this produce a corrective feedback line.
MIXING_FEEDBACK_BELOW = 70

# Sampling: same ladder as the mix evaluators.
SAMPLING_STAR_THRESHOLDS = {
    "one": 60,
    "two": 75,
    "three": 90,
}

SAMPLING_TOLERANCES = {
    "pitch": 1.0,          # semitones
    "time_stretch": 0.1,   # ratio
    "start_point": 0.02,   # fraction of sample length
    "end_point": 0.02,
    "fade": 0.05,          # seconds
}

# Drum sequencing: pass and two stars both at 70, three at 90.
DRUM_STAR_THRESHOLDS = {
    "one": 70,
    "two": 70,
    "three": 90,
}

DRUM_TOLERANCES = {
    "velocity": 0.15,   # out of 1.0
    "swing": 0.1,       # out of 1.0
    "tempo": 5.0,       # BPM
}

# Sampling / drum component scores: below "off" is corrective, below "close" is fine-tune.
COMPONENT_FEEDBACK = {
    "off_below": 70,
    "close_below": 90,
}
