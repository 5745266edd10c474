"""Tests for multi-pitch note detection."""

import numpy as np
import pytest

from pitchscope.analysis import PitchConfig, compute_spectrogram
from pitchscope.analysis.multipitch import (
    detect_frame_notes,
    detect_multi_note_track,
    find_peaks,
    note_confidence,
)
from pitchscope.core import Spectrogram

# 10 Hz bins from 0 to 10230 Hz
FREQS = np.arange(1024) * 10.0


def spike_frame(bins_and_mags) -> np.ndarray:
    frame = np.zeros(len(FREQS))
    for b, m in bins_and_mags.items():
        frame[b] = m
    return frame


class TestPeakPicking:
    def test_isolated_spike_is_peak(self):
        np.testing.assert_array_equal(find_peaks(FREQS, spike_frame({50: 1.0})), [50])

    def test_five_point_test(self):
        # Bin 50 is a 3-point maximum but bin 52 two bins away is louder
        frame = spike_frame({50: 1.0, 52: 1.2})
        np.testing.assert_array_equal(find_peaks(FREQS, frame), [52])

    def test_peak_floor(self):
        assert len(find_peaks(FREQS, spike_frame({50: 0.05}))) == 0
        assert len(find_peaks(FREQS, spike_frame({50: 0.06}))) == 1

    def test_band_edges_excluded(self):
        # Band is bins 8..199; the two bins nearest each edge never peak
        for b in (8, 9, 198, 199):
            assert len(find_peaks(FREQS, spike_frame({b: 1.0}))) == 0
        for b in (10, 197):
            np.testing.assert_array_equal(find_peaks(FREQS, spike_frame({b: 1.0})), [b])

    def test_plateau_is_not_peak(self):
        assert len(find_peaks(FREQS, spike_frame({50: 1.0, 51: 1.0}))) == 0


class TestNoteConfidence:
    def test_components(self):
        frame = spike_frame({60: 5.0, 90: 4.0})

        # energy capped at 0.4, harmonic 0, SNR capped at 0.3
        assert note_confidence(5.0, 1.0, frame) == pytest.approx(0.7)
        # harmonic (1.6 - 1) / 3 = 0.2
        assert note_confidence(5.0, 1.6, frame) == pytest.approx(0.9)

    def test_clipped_to_one(self):
        frame = spike_frame({60: 5.0})
        assert note_confidence(5.0, 10.0, frame) == pytest.approx(1.0)

    def test_vectorized(self):
        frame = spike_frame({60: 5.0, 90: 4.0})
        np.testing.assert_allclose(
            note_confidence(np.array([5.0, 4.0]), np.array([1.0, 1.0]), frame), [0.7, 0.7]
        )


class TestOverlapSuppression:
    def test_close_peaks_collapse(self):
        # 600 Hz and 630 Hz: ratio 1.05
        notes = detect_frame_notes(FREQS, spike_frame({60: 5.0, 63: 4.0}))

        assert len(notes) == 1
        assert notes[0].frequency == 600.0
        assert notes[0].magnitude == pytest.approx(5.0)

    def test_stronger_peak_represents_group(self):
        notes = detect_frame_notes(FREQS, spike_frame({60: 4.0, 63: 5.0}))

        assert len(notes) == 1
        assert notes[0].frequency == 630.0

    def test_distant_peaks_stay_separate(self):
        # 600 Hz and 900 Hz: ratio 1.5
        notes = detect_frame_notes(FREQS, spike_frame({60: 5.0, 90: 6.0}))

        assert [n.frequency for n in notes] == [900.0, 600.0]

    def test_octave_stays_separate(self):
        # 300 Hz is boosted by its 600 Hz harmonic
        notes = detect_frame_notes(FREQS, spike_frame({30: 4.0, 60: 3.0}))

        assert [n.frequency for n in notes] == [300.0, 600.0]
        assert notes[0].magnitude == pytest.approx(4.0 * (1 + 3.0 / 2))


class TestFrameNotes:
    @pytest.fixture
    def many_peaks(self):
        # Frequencies at least 1.1x apart, no integer harmonic relations
        bins = [10, 15, 23, 35, 53, 80, 120, 180]
        return spike_frame({b: float(8 - i) for i, b in enumerate(bins)})

    def test_ordered_by_boosted_magnitude(self, many_peaks):
        notes = detect_frame_notes(FREQS, many_peaks, max_notes=8)

        magnitudes = [n.magnitude for n in notes]
        assert magnitudes == sorted(magnitudes, reverse=True)
        assert len(notes) == 8

    def test_max_notes_truncates(self, many_peaks):
        notes = detect_frame_notes(FREQS, many_peaks, max_notes=3)

        assert [n.frequency for n in notes] == [100.0, 150.0, 230.0]

    def test_default_max_notes_is_five(self, many_peaks):
        assert len(detect_frame_notes(FREQS, many_peaks)) == 5

    @pytest.mark.parametrize("max_notes", [0, -1])
    def test_max_notes_below_one_rejected(self, max_notes):
        frame = spike_frame({20: 5.0, 50: 4.0, 120: 3.0})

        with pytest.raises(ValueError, match="max_notes"):
            detect_frame_notes(FREQS, frame, max_notes=max_notes)

    def test_low_confidence_discarded(self):
        frame = spike_frame({60: 5.0})
        config = PitchConfig(min_note_confidence=0.95)

        assert len(detect_frame_notes(FREQS, frame)) == 1
        assert detect_frame_notes(FREQS, frame, config=config) == []

    def test_confidence_reported(self):
        notes = detect_frame_notes(FREQS, spike_frame({60: 5.0, 90: 4.0}))
        for note in notes:
            assert 0.1 < note.confidence <= 1.0

    def test_silent_frame(self):
        assert detect_frame_notes(FREQS, np.zeros(len(FREQS))) == []


class TestNoteTrack:
    @pytest.fixture
    def sample_rate(self):
        return 44100

    def generate_chord(self, frequencies, duration: float, sr: int) -> np.ndarray:
        t = np.arange(int(sr * duration)) / sr
        voices = [0.3 * np.sin(2 * np.pi * f * t) for f in frequencies]
        return np.sum(voices, axis=0).astype(np.float32)

    def test_silence_gives_empty_frames(self, sample_rate):
        spec = compute_spectrogram(np.zeros(sample_rate, dtype=np.float32), sample_rate, 2048, 512)
        track = detect_multi_note_track(spec)

        assert len(track) == spec.n_frames > 0
        assert all(len(frame) == 0 for frame in track)

    def test_times_match_spectrogram(self, sample_rate):
        spec = compute_spectrogram(self.generate_chord([440.0], 0.5, sample_rate), sample_rate)
        track = detect_multi_note_track(spec)

        np.testing.assert_array_equal(track.times, spec.times)
        assert [frame.time for frame in track] == list(spec.times)

    def test_chord_notes_detected(self, sample_rate):
        chord = [261.63, 392.0, 523.25]  # C4, G4, C5
        spec = compute_spectrogram(self.generate_chord(chord, 1.0, sample_rate), sample_rate, 2048, 512)
        track = detect_multi_note_track(spec, max_notes=5)

        bin_width = sample_rate / 2048
        frame = track.frames[spec.n_frames // 2]
        top = [n.frequency for n in frame.notes[:3]]

        assert len(frame.notes) <= 5
        for target in chord:
            assert any(abs(f - target) < bin_width for f in top), (target, top)

    def test_max_notes_respected(self, sample_rate):
        spec = compute_spectrogram(
            self.generate_chord([200.0, 310.0, 470.0, 700.0, 1050.0, 1580.0], 0.5, sample_rate),
            sample_rate,
        )
        track = detect_multi_note_track(spec, max_notes=2)

        assert all(len(frame) <= 2 for frame in track)

    @pytest.mark.parametrize("max_notes", [0, -1])
    def test_track_max_notes_below_one_rejected(self, sample_rate, max_notes):
        spec = compute_spectrogram(self.generate_chord([440.0], 0.2, sample_rate), sample_rate)

        with pytest.raises(ValueError, match="max_notes"):
            detect_multi_note_track(spec, max_notes=max_notes)

    def test_synthetic_spectrogram(self):
        spec = Spectrogram.from_arrays(
            frequencies=FREQS,
            times=[0.0, 0.01],
            magnitudes=[spike_frame({60: 5.0, 63: 4.0}), spike_frame({60: 5.0, 90: 6.0})],
        )
        track = detect_multi_note_track(spec)

        assert [len(frame) for frame in track] == [1, 2]

    def test_deterministic(self, sample_rate):
        rng = np.random.default_rng(5)
        audio = self.generate_chord([330.0, 495.0], 0.5, sample_rate)
        audio = audio + 0.05 * rng.standard_normal(len(audio)).astype(np.float32)
        spec = compute_spectrogram(audio, sample_rate)

        assert detect_multi_note_track(spec).frames == detect_multi_note_track(spec).frames
