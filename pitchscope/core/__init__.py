"""Core types and constants for pitchscope."""

from .note import (
    Note,
    MusicalNote,
    frequency_to_note,
    is_valid_musical_frequency,
    format_note,
    frequencies_to_notes,
    format_notes,
)
from .types import (
    Spectrogram,
    PitchCandidate,
    FundamentalTrack,
    DetectedNote,
    NoteFrame,
    NoteTrack,
    OverallSpectrum,
)
from .constants import (
    PITCH_NAMES,
    DEFAULT_TRANSFORM_SIZE,
    DEFAULT_HOP_SIZE,
    DEFAULT_MAX_NOTES,
)

__all__ = [
    "Note",
    "MusicalNote",
    "frequency_to_note",
    "is_valid_musical_frequency",
    "format_note",
    "frequencies_to_notes",
    "format_notes",
    "Spectrogram",
    "PitchCandidate",
    "FundamentalTrack",
    "DetectedNote",
    "NoteFrame",
    "NoteTrack",
    "OverallSpectrum",
    "PITCH_NAMES",
    "DEFAULT_TRANSFORM_SIZE",
    "DEFAULT_HOP_SIZE",
    "DEFAULT_MAX_NOTES",
]
