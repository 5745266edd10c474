"""Analysis layer - spectrogram and pitch estimation.

- Spectrogram framing (Hamming window + real FFT)
- Single-pitch fundamental tracking
- Multi-pitch note detection
- Time-averaged spectrum
"""

from .config import PitchConfig, SENSITIVITY_PRESETS, config_for_sensitivity
from .spectrogram import compute_spectrogram, magnitude_spectrum, hamming_window
from .fundamental import estimate_fundamental_track, estimate_frame_pitch
from .multipitch import detect_multi_note_track, detect_frame_notes
from .spectrum import aggregate_spectrum

__all__ = [
    "PitchConfig",
    "SENSITIVITY_PRESETS",
    "config_for_sensitivity",
    "compute_spectrogram",
    "magnitude_spectrum",
    "hamming_window",
    "estimate_fundamental_track",
    "estimate_frame_pitch",
    "detect_multi_note_track",
    "detect_frame_notes",
    "aggregate_spectrum",
]
