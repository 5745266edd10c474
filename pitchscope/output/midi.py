"""MIDI export of pitch tracks."""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
import pretty_midi

from ..core import FundamentalTrack, Note, NoteTrack
from ..core.constants import MIDI_MIN, MIDI_MAX


def _confidence_to_velocity(confidence: float) -> int:
    """Map a 0-1 confidence to MIDI velocity [20, 127]."""
    return int(np.clip(confidence * 127, 20, 127))


def _make_note(
    pitch: int, onset: float, offset: float, confidences: List[float]
) -> Note:
    confidence = float(np.mean(confidences))
    return Note(
        pitch=int(np.clip(pitch, MIDI_MIN, MIDI_MAX)),
        onset=onset,
        offset=offset,
        velocity=_confidence_to_velocity(confidence),
        confidence=confidence,
    )


def _infer_frame_duration(times: np.ndarray) -> float:
    if len(times) > 1:
        return float(times[1] - times[0])
    return 0.0


def track_to_notes(
    track: FundamentalTrack,
    frame_duration: Optional[float] = None,
    min_confidence: float = 0.5,
) -> List[Note]:
    """
    Segment a fundamental track into notes.

    Consecutive voiced frames that round to the same MIDI pitch form one
    note. Frames below ``min_confidence`` end the current note.

    Args:
        track: Fundamental track
        frame_duration: Seconds covered by one frame (default: inferred from times)
        min_confidence: Minimum frame confidence to count as voiced

    Returns:
        Notes ordered by onset
    """
    if frame_duration is None:
        frame_duration = _infer_frame_duration(track.times)

    notes = []
    pitch_run: Optional[int] = None
    start = 0
    confs: List[float] = []

    for i, (freq, conf) in enumerate(zip(track.frequencies, track.confidences)):
        voiced = freq > 0 and conf >= min_confidence
        pitch = Note.freq_to_midi(freq) if voiced else None

        if pitch_run is not None and pitch != pitch_run:
            offset = float(track.times[i - 1]) + frame_duration
            notes.append(_make_note(pitch_run, float(track.times[start]), offset, confs))
            pitch_run = None

        if pitch is not None:
            if pitch_run is None:
                pitch_run, start, confs = pitch, i, []
            confs.append(float(conf))

    if pitch_run is not None:
        offset = float(track.times[-1]) + frame_duration
        notes.append(_make_note(pitch_run, float(track.times[start]), offset, confs))

    return notes


def note_track_to_notes(
    note_track: NoteTrack,
    frame_duration: Optional[float] = None,
    min_confidence: float = 0.3,
) -> List[Note]:
    """
    Segment a polyphonic note track into notes, one run per MIDI pitch.

    Args:
        note_track: Multi-note track
        frame_duration: Seconds covered by one frame (default: inferred from times)
        min_confidence: Minimum note confidence to keep a detection

    Returns:
        Notes sorted by (onset, pitch)
    """
    if frame_duration is None:
        frame_duration = _infer_frame_duration(note_track.times)

    notes = []
    active: Dict[int, Tuple[float, List[float]]] = {}  # pitch -> (onset, confidences)
    last_time = 0.0

    for frame in note_track.frames:
        present: Dict[int, float] = {}
        for detected in frame.notes:
            if detected.confidence < min_confidence:
                continue
            pitch = Note.freq_to_midi(detected.frequency)
            present[pitch] = max(present.get(pitch, 0.0), detected.confidence)

        for pitch in [p for p in active if p not in present]:
            onset, confs = active.pop(pitch)
            notes.append(_make_note(pitch, onset, last_time + frame_duration, confs))

        for pitch, conf in present.items():
            if pitch not in active:
                active[pitch] = (float(frame.time), [])
            active[pitch][1].append(conf)

        last_time = float(frame.time)

    for pitch, (onset, confs) in active.items():
        notes.append(_make_note(pitch, onset, last_time + frame_duration, confs))

    notes.sort(key=lambda n: (n.onset, n.pitch))
    return notes


class MIDIExporter:
    """Export notes to MIDI format."""

    def __init__(
        self,
        tempo: float = 120.0,
        instrument_name: str = "Acoustic Grand Piano",
        instrument_program: int = 0,
    ):
        """
        Initialize MIDIExporter.

        Args:
            tempo: Tempo in BPM
            instrument_name: MIDI instrument name
            instrument_program: MIDI program number (0-127)
        """
        self.tempo = tempo
        self.instrument_name = instrument_name
        self.instrument_program = instrument_program

    def notes_to_pretty_midi(self, notes: List[Note]) -> pretty_midi.PrettyMIDI:
        """Convert notes to PrettyMIDI object without saving."""
        midi = pretty_midi.PrettyMIDI(initial_tempo=self.tempo)

        instrument = pretty_midi.Instrument(
            program=self.instrument_program,
            name=self.instrument_name,
        )

        for note in notes:
            instrument.notes.append(
                pretty_midi.Note(
                    velocity=note.velocity,
                    pitch=note.pitch,
                    start=note.onset,
                    end=note.offset,
                )
            )

        midi.instruments.append(instrument)
        return midi

    def export(self, notes: List[Note], output_path: str) -> None:
        """
        Export notes to MIDI file.

        Args:
            notes: List of Note objects
            output_path: Path to output MIDI file
        """
        midi = self.notes_to_pretty_midi(notes)

        # Ensure output directory exists
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        midi.write(str(output_path))
