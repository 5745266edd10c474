"""Tests for audio file loading."""

import numpy as np
import pytest
import soundfile as sf

from pitchscope.input import AudioLoader


@pytest.fixture
def stereo_file(tmp_path):
    sr = 16000
    t = np.arange(sr // 2) / sr
    left = 0.5 * np.sin(2 * np.pi * 440.0 * t)
    right = 0.25 * np.sin(2 * np.pi * 1000.0 * t)
    path = tmp_path / "stereo.wav"
    sf.write(str(path), np.stack([left, right], axis=1), sr, subtype="FLOAT")
    return path, left, sr


class TestAudioLoader:
    def test_first_channel_only(self, stereo_file):
        path, left, sr = stereo_file
        audio, loaded_sr = AudioLoader().load(str(path))

        assert loaded_sr == sr
        assert audio.dtype == np.float32
        assert audio.ndim == 1
        np.testing.assert_allclose(audio, left, atol=1e-6)

    def test_normalize(self, stereo_file):
        path, _, _ = stereo_file
        audio, _ = AudioLoader(normalize=True).load(str(path))

        assert np.abs(audio).max() == pytest.approx(1.0)

    def test_describe(self, stereo_file):
        path, left, sr = stereo_file
        details = AudioLoader().describe(str(path))

        assert details.channels == 2
        assert details.sample_rate == sr
        assert details.frames == len(left)
        assert details.duration == pytest.approx(0.5)

    def test_unsupported_format(self, tmp_path):
        dummy_file = tmp_path / "test.xyz"
        dummy_file.touch()

        with pytest.raises(ValueError, match="Unsupported format"):
            AudioLoader().load(str(dummy_file))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AudioLoader().load(str(tmp_path / "missing.wav"))

    def test_get_duration(self):
        loader = AudioLoader()
        audio = np.zeros(44100)

        assert loader.get_duration(audio, 22050) == pytest.approx(2.0)
        with pytest.raises(ValueError):
            loader.get_duration(audio)
