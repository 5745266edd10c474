"""pitchscope - Spectrogram and pitch analysis for decoded audio.

Architecture Layers:
    1. core/      - Result types, note naming and constants
    2. input/     - Audio loading (first channel, native rate)
    3. analysis/  - Spectrogram, single-pitch, multi-pitch, overall spectrum
    4. output/    - Note segmentation and MIDI export
"""

__version__ = "0.1.0"

# Core types
from .core import (
    Spectrogram,
    FundamentalTrack,
    DetectedNote,
    NoteFrame,
    NoteTrack,
    OverallSpectrum,
    Note,
    frequency_to_note,
    format_note,
)

# Input layer
from .input import AudioLoader

# Analysis layer
from .analysis import (
    PitchConfig,
    compute_spectrogram,
    estimate_fundamental_track,
    detect_multi_note_track,
    aggregate_spectrum,
)
from .analyzer import AudioAnalyzer, AnalysisResult

# Output layer
from .output import MIDIExporter

__all__ = [
    # Core
    "Spectrogram",
    "FundamentalTrack",
    "DetectedNote",
    "NoteFrame",
    "NoteTrack",
    "OverallSpectrum",
    "Note",
    "frequency_to_note",
    "format_note",
    # Input
    "AudioLoader",
    # Analysis
    "PitchConfig",
    "compute_spectrogram",
    "estimate_fundamental_track",
    "detect_multi_note_track",
    "aggregate_spectrum",
    "AudioAnalyzer",
    "AnalysisResult",
    # Output
    "MIDIExporter",
]
