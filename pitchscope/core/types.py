"""Result types produced by the analysis pipeline.

All containers are frozen dataclasses; the arrays they hold are marked
read-only when built by the pipeline. Each type can be flattened with
``to_dict()`` for JSON output.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple
import numpy as np


def readonly_array(values, dtype=np.float64) -> np.ndarray:
    array = np.array(values, dtype=dtype)
    array.setflags(write=False)
    return array


@dataclass(frozen=True)
class Spectrogram:
    """Magnitude spectrogram, frame-major."""

    frequencies: np.ndarray  # Bin centres in Hz [n_bins]
    times: np.ndarray  # Frame start times in seconds [n_frames]
    magnitudes: np.ndarray  # Non-negative magnitudes [n_frames, n_bins]
    sample_rate: float = 0.0
    transform_size: int = 0
    hop_size: int = 0

    @classmethod
    def from_arrays(
        cls,
        frequencies,
        times,
        magnitudes,
        sample_rate: float = 0.0,
        transform_size: int = 0,
        hop_size: int = 0,
    ) -> "Spectrogram":
        """Build a spectrogram from plain sequences, copying into read-only arrays."""
        frequencies = readonly_array(frequencies)
        magnitudes = np.array(magnitudes, dtype=np.float64)
        if magnitudes.size == 0:
            magnitudes = np.zeros((0, len(frequencies)))
        magnitudes.setflags(write=False)
        return cls(
            frequencies=frequencies,
            times=readonly_array(times),
            magnitudes=magnitudes,
            sample_rate=float(sample_rate),
            transform_size=int(transform_size),
            hop_size=int(hop_size),
        )

    @property
    def n_frames(self) -> int:
        return len(self.times)

    @property
    def n_bins(self) -> int:
        return len(self.frequencies)

    @property
    def bin_width(self) -> float:
        """Spacing between bin centres in Hz."""
        if self.n_bins < 2:
            return 0.0
        return float(self.frequencies[1] - self.frequencies[0])

    @property
    def frame_duration(self) -> float:
        """Seconds between consecutive frame starts."""
        if self.sample_rate > 0 and self.hop_size > 0:
            return self.hop_size / self.sample_rate
        if self.n_frames > 1:
            return float(self.times[1] - self.times[0])
        return 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sample_rate": self.sample_rate,
            "transform_size": self.transform_size,
            "hop_size": self.hop_size,
            "frequencies": self.frequencies.tolist(),
            "times": self.times.tolist(),
            "magnitudes": self.magnitudes.tolist(),
        }


@dataclass(frozen=True)
class PitchCandidate:
    """Best pitch found in a single frame."""

    frequency: float
    strength: float  # magnitude * harmonic strength
    confidence: float  # 0.0 - 1.0

    @classmethod
    def silent(cls) -> "PitchCandidate":
        return cls(frequency=0.0, strength=0.0, confidence=0.0)


@dataclass(frozen=True)
class FundamentalTrack:
    """One fundamental frequency per frame; 0 Hz means no pitch."""

    times: np.ndarray
    frequencies: np.ndarray
    confidences: np.ndarray

    def __len__(self) -> int:
        return len(self.times)

    @property
    def voiced(self) -> np.ndarray:
        """Boolean mask of frames with a detected pitch."""
        return self.frequencies > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "times": self.times.tolist(),
            "frequencies": self.frequencies.tolist(),
            "confidences": self.confidences.tolist(),
        }


@dataclass(frozen=True)
class DetectedNote:
    """One pitch detected in a polyphonic frame."""

    frequency: float
    confidence: float
    magnitude: float  # Boosted magnitude (magnitude * harmonic strength)

    def to_dict(self) -> Dict[str, float]:
        return {
            "frequency": self.frequency,
            "confidence": self.confidence,
            "magnitude": self.magnitude,
        }


@dataclass(frozen=True)
class NoteFrame:
    """Notes detected in one frame, strongest first."""

    time: float
    notes: Tuple[DetectedNote, ...] = ()

    def __len__(self) -> int:
        return len(self.notes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time,
            "notes": [note.to_dict() for note in self.notes],
        }


@dataclass(frozen=True)
class NoteTrack:
    """Polyphonic track: one NoteFrame per spectrogram frame."""

    times: np.ndarray
    frames: Tuple[NoteFrame, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.frames)

    def __iter__(self):
        return iter(self.frames)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "times": self.times.tolist(),
            "frames": [frame.to_dict() for frame in self.frames],
        }


@dataclass(frozen=True)
class OverallSpectrum:
    """Time-averaged magnitude per frequency bin."""

    frequencies: np.ndarray
    magnitudes: np.ndarray

    def strongest(self, count: int = 10) -> List[Tuple[float, float]]:
        """Return the (frequency, magnitude) pairs of the loudest bins."""
        if count <= 0 or len(self.magnitudes) == 0:
            return []
        order = np.argsort(-self.magnitudes, kind="stable")[:count]
        return [(float(self.frequencies[i]), float(self.magnitudes[i])) for i in order]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frequencies": self.frequencies.tolist(),
            "magnitudes": self.magnitudes.tolist(),
        }
