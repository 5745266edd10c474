"""Global constants for pitchscope."""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Tuning reference
A4_FREQUENCY = 440.0
A4_MIDI = 69

# Musical validity range (C0 to B8)
MIN_MUSICAL_FREQUENCY = 16.35
MAX_MUSICAL_FREQUENCY = 7902.13

# Transform defaults
DEFAULT_TRANSFORM_SIZE = 2048
DEFAULT_HOP_SIZE = DEFAULT_TRANSFORM_SIZE // 4

# Pitch search band in Hz, [min, max)
PITCH_BAND_MIN = 80.0
PITCH_BAND_MAX = 2000.0

# Absolute magnitude floors (not normalized to signal level)
SINGLE_PITCH_MAGNITUDE_FLOOR = 0.1
MULTI_PITCH_PEAK_FLOOR = 0.05

# Harmonic support
HARMONICS = (2, 3, 4, 5)
HARMONIC_TOLERANCE_HZ = 20.0

# Guard for every ratio computation
EPSILON = 1e-10

# Single-pitch confidence: four sub-scores, each capped at 0.25
SINGLE_SCORE_CAP = 0.25
SINGLE_HARMONIC_DIVISOR = 4.0
SINGLE_SNR_DIVISOR = 2.0
SINGLE_NOISE_FRACTION = 0.2
NEUTRAL_TEMPORAL_SCORE = 0.25

# Multi-pitch confidence: 40 / 30 / 30 split
MULTI_ENERGY_SCALE = 10.0
MULTI_ENERGY_CAP = 0.4
MULTI_HARMONIC_DIVISOR = 3.0
MULTI_HARMONIC_CAP = 0.3
MULTI_SNR_DIVISOR = 3.0
MULTI_SNR_CAP = 0.3
MULTI_NOISE_FRACTION = 0.1
MIN_NOTE_CONFIDENCE = 0.1

# Overlap suppression radius (~1.67 semitones)
OVERLAP_RATIO = 1.1
DEFAULT_MAX_NOTES = 5

# MIDI ranges
MIDI_MIN = 0
MIDI_MAX = 127
