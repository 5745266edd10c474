"""Output layer - note segmentation and MIDI export."""

from .midi import MIDIExporter, track_to_notes, note_track_to_notes

__all__ = [
    "MIDIExporter",
    "track_to_notes",
    "note_track_to_notes",
]
