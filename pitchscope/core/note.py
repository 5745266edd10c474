"""Note types and equal-tempered note naming."""

from dataclasses import dataclass
from typing import List, Optional
import math

from .constants import (
    PITCH_NAMES,
    A4_FREQUENCY,
    A4_MIDI,
    MIN_MUSICAL_FREQUENCY,
    MAX_MUSICAL_FREQUENCY,
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass
class Note:
    """A note event segmented from a pitch track."""

    pitch: int  # MIDI pitch (0-127)
    onset: float  # Start time in seconds
    offset: float  # End time in seconds
    velocity: int = 64  # MIDI velocity (0-127)
    confidence: Optional[float] = None

    @property
    def duration(self) -> float:
        """Note duration in seconds."""
        return self.offset - self.onset

    @property
    def pitch_name(self) -> str:
        """Get note name (e.g., 'C4', 'A#3')."""
        octave = (self.pitch // 12) - 1
        name = PITCH_NAMES[self.pitch % 12]
        return f"{name}{octave}"

    @staticmethod
    def freq_to_midi(freq: float) -> int:
        """Convert frequency (Hz) to MIDI pitch."""
        if freq <= 0:
            return 0
        return _round_half_up(A4_MIDI + 12 * math.log2(freq / A4_FREQUENCY))

    @staticmethod
    def midi_to_freq(midi: int) -> float:
        """Convert MIDI pitch to frequency (Hz)."""
        return A4_FREQUENCY * (2 ** ((midi - A4_MIDI) / 12.0))


@dataclass(frozen=True)
class MusicalNote:
    """Nearest equal-tempered note for a frequency."""

    name: str
    octave: int
    frequency: float  # Reference frequency of the named note
    cents: int  # Deviation of the input from the reference

    @property
    def is_placeholder(self) -> bool:
        return self.name == "-"


NO_NOTE = MusicalNote(name="-", octave=0, frequency=0.0, cents=0)


def frequency_to_note(freq: float) -> MusicalNote:
    """
    Map a frequency to its nearest 12-TET note (A4 = 440 Hz).

    Args:
        freq: Frequency in Hz

    Returns:
        MusicalNote, or the "-" placeholder for non-positive input
    """
    if freq <= 0:
        return NO_NOTE

    midi = _round_half_up(A4_MIDI + 12 * math.log2(freq / A4_FREQUENCY))
    reference = A4_FREQUENCY * 2 ** ((midi - A4_MIDI) / 12)
    cents = _round_half_up(1200 * math.log2(freq / reference))

    return MusicalNote(
        name=PITCH_NAMES[midi % 12],
        octave=midi // 12 - 1,
        frequency=reference,
        cents=cents,
    )


def is_valid_musical_frequency(freq: float) -> bool:
    """True when freq lies in the C0-B8 range."""
    return MIN_MUSICAL_FREQUENCY <= freq <= MAX_MUSICAL_FREQUENCY


def format_note(note: MusicalNote) -> str:
    """Format as 'A4', or 'A4 (+12¢)' when more than 5 cents off."""
    if note.is_placeholder:
        return "-"

    formatted = f"{note.name}{note.octave}"
    if abs(note.cents) > 5:
        formatted += f" ({note.cents:+d}¢)"
    return formatted


def frequencies_to_notes(frequencies) -> List[MusicalNote]:
    """Map every frequency in a sequence to its note."""
    return [frequency_to_note(float(f)) for f in frequencies]


def format_notes(notes: List[MusicalNote]) -> str:
    return ", ".join(format_note(n) for n in notes)
