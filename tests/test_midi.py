"""Tests for note segmentation and MIDI export."""

import numpy as np
import pretty_midi
import pytest

from pitchscope.core import DetectedNote, FundamentalTrack, Note, NoteFrame, NoteTrack
from pitchscope.output import MIDIExporter, note_track_to_notes, track_to_notes


def make_track(freqs, confs, step=0.1) -> FundamentalTrack:
    return FundamentalTrack(
        times=np.arange(len(freqs)) * step,
        frequencies=np.array(freqs, dtype=float),
        confidences=np.array(confs, dtype=float),
    )


class TestTrackToNotes:
    def test_runs_become_notes(self):
        track = make_track([440.0, 441.0, 0.0, 261.63, 261.63], [0.9, 0.7, 0.0, 0.8, 0.8])
        notes = track_to_notes(track, frame_duration=0.1)

        assert [n.pitch for n in notes] == [69, 60]
        assert notes[0].onset == pytest.approx(0.0)
        assert notes[0].offset == pytest.approx(0.2)
        assert notes[1].onset == pytest.approx(0.3)
        assert notes[1].offset == pytest.approx(0.5)

    def test_confidence_and_velocity(self):
        notes = track_to_notes(make_track([440.0, 440.0], [0.9, 0.7]), frame_duration=0.1)

        assert notes[0].confidence == pytest.approx(0.8)
        assert notes[0].velocity == int(0.8 * 127)

    def test_low_velocity_clamped(self):
        notes = track_to_notes(make_track([440.0], [0.1]), frame_duration=0.1, min_confidence=0.0)
        assert notes[0].velocity == 20

    def test_pitch_change_splits_note(self):
        notes = track_to_notes(make_track([440.0, 493.88], [0.9, 0.9]), frame_duration=0.1)

        assert [n.pitch for n in notes] == [69, 71]
        assert notes[0].offset == pytest.approx(notes[1].onset)

    def test_low_confidence_frame_ends_note(self):
        track = make_track([440.0, 440.0, 440.0], [0.9, 0.4, 0.9])
        notes = track_to_notes(track, frame_duration=0.1)

        assert len(notes) == 2

    def test_frame_duration_inferred(self):
        notes = track_to_notes(make_track([440.0, 440.0], [0.9, 0.9], step=0.05))
        assert notes[0].offset == pytest.approx(0.1)

    def test_empty_track(self):
        assert track_to_notes(make_track([], [])) == []


class TestNoteTrackToNotes:
    def make_note_track(self, frames, step=0.1) -> NoteTrack:
        times = np.arange(len(frames)) * step
        return NoteTrack(
            times=times,
            frames=tuple(
                NoteFrame(
                    time=float(t),
                    notes=tuple(DetectedNote(f, c, 1.0) for f, c in notes),
                )
                for t, notes in zip(times, frames)
            ),
        )

    def test_concurrent_pitches(self):
        track = self.make_note_track(
            [
                [(440.0, 0.9), (261.63, 0.8)],
                [(440.0, 0.5)],
                [],
            ]
        )
        notes = note_track_to_notes(track, frame_duration=0.1)

        assert [(n.pitch, n.onset) for n in notes] == [(60, 0.0), (69, 0.0)]
        assert notes[0].offset == pytest.approx(0.1)
        assert notes[1].offset == pytest.approx(0.2)
        assert notes[1].confidence == pytest.approx(0.7)

    def test_weak_detections_ignored(self):
        track = self.make_note_track([[(440.0, 0.2)], [(440.0, 0.2)]])
        assert note_track_to_notes(track, frame_duration=0.1) == []

    def test_open_notes_closed_at_end(self):
        track = self.make_note_track([[(330.0, 0.6)], [(330.0, 0.6)]])
        notes = note_track_to_notes(track, frame_duration=0.1)

        assert len(notes) == 1
        assert notes[0].offset == pytest.approx(0.2)


class TestMIDIExporter:
    @pytest.fixture
    def notes(self):
        return [
            Note(pitch=60, onset=0.0, offset=0.5, velocity=90),
            Note(pitch=64, onset=0.5, offset=1.0, velocity=70),
        ]

    def test_notes_to_pretty_midi(self, notes):
        midi = MIDIExporter(instrument_program=40).notes_to_pretty_midi(notes)

        assert len(midi.instruments) == 1
        assert midi.instruments[0].program == 40
        assert [n.pitch for n in midi.instruments[0].notes] == [60, 64]

    def test_export_reads_back(self, notes, tmp_path):
        output_path = tmp_path / "nested" / "out.mid"
        MIDIExporter().export(notes, str(output_path))

        assert output_path.exists()
        midi = pretty_midi.PrettyMIDI(str(output_path))
        read = midi.instruments[0].notes

        assert [n.pitch for n in read] == [60, 64]
        assert [n.velocity for n in read] == [90, 70]
        assert read[1].start == pytest.approx(0.5, abs=0.01)
        assert read[1].end == pytest.approx(1.0, abs=0.01)
