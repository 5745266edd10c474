"""AudioAnalyzer - the spectrogram-then-pitch pipeline behind one object."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from .core import (
    FundamentalTrack,
    NoteTrack,
    OverallSpectrum,
    Spectrogram,
)
from .core.constants import DEFAULT_TRANSFORM_SIZE
from .analysis import (
    PitchConfig,
    compute_spectrogram,
    estimate_fundamental_track,
    detect_multi_note_track,
    aggregate_spectrum,
)


@dataclass(frozen=True)
class AnalysisResult:
    """Everything the pipeline derives from one signal."""

    spectrogram: Spectrogram
    fundamental: FundamentalTrack
    notes: NoteTrack
    spectrum: OverallSpectrum

    def to_dict(self, include_spectrogram: bool = False) -> Dict[str, Any]:
        result = {
            "sample_rate": self.spectrogram.sample_rate,
            "transform_size": self.spectrogram.transform_size,
            "hop_size": self.spectrogram.hop_size,
            "fundamental": self.fundamental.to_dict(),
            "notes": self.notes.to_dict(),
            "spectrum": self.spectrum.to_dict(),
        }
        if include_spectrogram:
            result["spectrogram"] = self.spectrogram.to_dict()
        return result


class AudioAnalyzer:
    """
    Spectral analysis and pitch estimation for a decoded signal.

    The analyzer caches the sample rate of the most recent spectrogram it
    computed. That field is not synchronised: do not run two analyses on the
    same instance concurrently. Separate instances share no state.
    """

    def __init__(
        self,
        transform_size: int = DEFAULT_TRANSFORM_SIZE,
        hop_size: Optional[int] = None,
        config: Optional[PitchConfig] = None,
    ):
        """
        Initialize AudioAnalyzer.

        Args:
            transform_size: FFT size in samples, a power of two
            hop_size: Samples between frames (default: transform_size // 4)
            config: Pitch estimator settings
        """
        self.transform_size = transform_size
        self.hop_size = transform_size // 4 if hop_size is None else hop_size
        self.config = config or PitchConfig()
        self.sample_rate = 0.0

    def compute_spectrogram(self, samples: np.ndarray, sample_rate: float) -> Spectrogram:
        """Compute the magnitude spectrogram and remember the sample rate."""
        self.sample_rate = sample_rate
        return compute_spectrogram(
            samples,
            sample_rate,
            transform_size=self.transform_size,
            hop_size=self.hop_size,
        )

    def estimate_fundamental_track(self, spectrogram: Spectrogram) -> FundamentalTrack:
        return estimate_fundamental_track(spectrogram, self.config)

    def detect_multi_note_track(
        self,
        spectrogram: Spectrogram,
        max_notes: Optional[int] = None,
    ) -> NoteTrack:
        return detect_multi_note_track(spectrogram, max_notes, self.config)

    def aggregate_spectrum(self, spectrogram: Spectrogram) -> OverallSpectrum:
        return aggregate_spectrum(spectrogram)

    def analyze(
        self,
        samples: np.ndarray,
        sample_rate: float,
        max_notes: Optional[int] = None,
    ) -> AnalysisResult:
        """
        Run the whole pipeline on one signal.

        Args:
            samples: Decoded audio samples
            sample_rate: Sample rate in Hz
            max_notes: Notes kept per frame by the multi-pitch estimator

        Returns:
            AnalysisResult with spectrogram, fundamental track, note track
            and overall spectrum
        """
        spectrogram = self.compute_spectrogram(samples, sample_rate)
        return AnalysisResult(
            spectrogram=spectrogram,
            fundamental=self.estimate_fundamental_track(spectrogram),
            notes=self.detect_multi_note_track(spectrogram, max_notes),
            spectrum=self.aggregate_spectrum(spectrogram),
        )
