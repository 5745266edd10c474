"""Audio loading utilities."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import librosa
import soundfile as sf


@dataclass
class AudioInfo:
    """File-level metadata read without decoding the samples."""

    path: str
    sample_rate: int
    channels: int
    frames: int
    format: str

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        if self.sample_rate <= 0:
            return 0.0
        return self.frames / self.sample_rate


class AudioLoader:
    """Loads audio files as a single float32 channel at the native rate."""

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".aiff", ".aif"}

    def __init__(
        self,
        target_sr: Optional[int] = None,
        normalize: bool = False,
    ):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Resample to this rate; None keeps the file's rate
            normalize: Peak-normalize the samples if True. Off by default
                because the pitch floors are absolute magnitudes.
        """
        self.target_sr = target_sr
        self.normalize = normalize

    def _check_path(self, path: str) -> Path:
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}"
            )

        return path

    def load(self, path: str) -> Tuple[np.ndarray, int]:
        """
        Load an audio file, keeping only its first channel.

        Args:
            path: Path to audio file

        Returns:
            Tuple of (float32 samples, sample rate)

        Raises:
            ValueError: If file format not supported
            FileNotFoundError: If file doesn't exist
        """
        path = self._check_path(path)

        audio, sr = librosa.load(
            str(path),
            sr=self.target_sr,
            mono=False,
        )

        # librosa returns (channels, samples) for multi-channel files
        if audio.ndim > 1:
            audio = audio[0]

        audio = np.ascontiguousarray(audio, dtype=np.float32)

        if self.normalize:
            audio = self._normalize(audio)

        return audio, int(sr)

    def describe(self, path: str) -> AudioInfo:
        """Read sample rate, channel count and length from the file header."""
        path = self._check_path(path)
        info = sf.info(str(path))
        return AudioInfo(
            path=str(path),
            sample_rate=int(info.samplerate),
            channels=int(info.channels),
            frames=int(info.frames),
            format=info.format,
        )

    def _normalize(self, audio: np.ndarray) -> np.ndarray:
        """Normalize audio to [-1, 1] range using peak normalization."""
        peak = np.abs(audio).max() if len(audio) else 0.0
        if peak > 0:
            audio = audio / peak
        return audio

    def get_duration(self, audio: np.ndarray, sr: Optional[int] = None) -> float:
        """Get duration in seconds."""
        sr = sr or self.target_sr
        if not sr:
            raise ValueError("Sample rate required when target_sr is None")
        return len(audio) / sr
