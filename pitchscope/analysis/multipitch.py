"""Multi-pitch detection: peak picking, harmonic scoring and overlap suppression.

Each frame is handled independently:

1. Local maxima inside the pitch band are picked with a 5-point test, which
   rejects spikes narrower than the window's main lobe.
2. Every peak gets a harmonic strength and a confidence combining energy,
   harmonic support and signal-to-noise ratio; weak peaks are dropped.
3. Survivors are ranked by boosted magnitude and peaks within
   ``overlap_ratio`` of a stronger one are merged into it.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from ..core import DetectedNote, NoteFrame, NoteTrack, Spectrogram
from ..core.types import readonly_array
from .config import PitchConfig
from .harmonics import band_indices, harmonic_strength, noise_floor, snr_score

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Peak:
    frequency: float
    magnitude: float
    harmonic: float
    confidence: float

    @property
    def boosted(self) -> float:
        return self.magnitude * self.harmonic


def find_peaks(
    frequencies: np.ndarray,
    magnitudes: np.ndarray,
    config: Optional[PitchConfig] = None,
) -> np.ndarray:
    """
    Bin indices of spectral peaks inside the pitch band.

    A bin is a peak when it exceeds ``config.peak_floor`` and both neighbours
    on each side. The two bins nearest each band edge are never peaks;
    neighbours outside the spectrum count as 0.

    Returns:
        Increasing array of bin indices
    """
    config = config or PitchConfig()
    band = band_indices(frequencies, config.min_frequency, config.max_frequency)
    idx = band[2:-2]
    if len(idx) == 0:
        return idx

    padded = np.pad(np.asarray(magnitudes, dtype=np.float64), 2)
    centre = padded[idx + 2]
    is_peak = (
        (centre > padded[idx + 1])
        & (centre > padded[idx + 3])
        & (centre > config.peak_floor)
        & (centre > padded[idx])
        & (centre > padded[idx + 4])
    )
    return idx[is_peak]


def note_confidence(
    magnitude,
    harmonic,
    magnitudes: np.ndarray,
    config: Optional[PitchConfig] = None,
):
    """
    Confidence of a polyphonic peak, 0-1.

    Sum of energy (<= 0.4), harmonic (<= 0.3) and SNR (<= 0.3) components.
    Accepts scalars or arrays for ``magnitude`` and ``harmonic``.
    """
    config = config or PitchConfig()
    eps = config.epsilon
    magnitude = np.asarray(magnitude, dtype=np.float64)
    harmonic = np.asarray(harmonic, dtype=np.float64)

    total = float(np.sum(magnitudes))
    energy = np.minimum(
        config.multi_energy_scale * magnitude / (total + eps), config.multi_energy_cap
    )
    harmonic_score = np.minimum(
        (harmonic - 1) / config.multi_harmonic_divisor, config.multi_harmonic_cap
    )
    noise = noise_floor(magnitudes, config.multi_noise_fraction)
    snr = snr_score(
        magnitude, noise, config.multi_snr_divisor, config.multi_snr_cap, eps
    )

    return np.clip(energy + harmonic_score + snr, 0.0, 1.0)


def suppress_overlaps(peaks: List[_Peak], ratio: float) -> List[_Peak]:
    """
    Merge peaks closer than ``ratio`` in frequency.

    ``peaks`` must be sorted by descending boosted magnitude. Each unconsumed
    peak absorbs every later unconsumed peak within ``ratio``; the group keeps
    its member with the largest boosted magnitude.
    """
    used = [False] * len(peaks)
    kept = []

    for i, peak in enumerate(peaks):
        if used[i]:
            continue
        used[i] = True
        best = peak

        for j in range(i + 1, len(peaks)):
            if used[j]:
                continue
            other = peaks[j]
            low = min(peak.frequency, other.frequency)
            high = max(peak.frequency, other.frequency)
            if low > 0 and high / low < ratio:
                used[j] = True
                if other.boosted > best.boosted:
                    best = other

        kept.append(best)

    return kept


def detect_frame_notes(
    frequencies: np.ndarray,
    magnitudes: np.ndarray,
    max_notes: Optional[int] = None,
    config: Optional[PitchConfig] = None,
) -> List[DetectedNote]:
    """
    Detect concurrent pitches in one frame.

    Args:
        frequencies: Bin centres in Hz
        magnitudes: Magnitudes of this frame
        max_notes: Maximum notes returned (default: config.max_notes)
        config: Estimator settings

    Returns:
        Notes ordered by descending boosted magnitude, at most max_notes long

    Raises:
        ValueError: If max_notes is below 1
    """
    config = config or PitchConfig()
    if max_notes is not None:
        config = config.with_max_notes(max_notes)
    frequencies = np.asarray(frequencies, dtype=np.float64)
    magnitudes = np.asarray(magnitudes, dtype=np.float64)

    peak_bins = find_peaks(frequencies, magnitudes, config)
    if len(peak_bins) == 0:
        return []

    peak_freqs = frequencies[peak_bins]
    peak_mags = magnitudes[peak_bins]
    harmonics = harmonic_strength(
        frequencies,
        magnitudes,
        peak_freqs,
        config.harmonics,
        config.harmonic_tolerance_hz,
    )
    confidences = note_confidence(peak_mags, harmonics, magnitudes, config)

    keep = confidences > config.min_note_confidence
    boosted = peak_mags * harmonics
    order = [i for i in np.argsort(-boosted, kind="stable") if keep[i]]

    peaks = [
        _Peak(
            frequency=float(peak_freqs[i]),
            magnitude=float(peak_mags[i]),
            harmonic=float(harmonics[i]),
            confidence=float(confidences[i]),
        )
        for i in order
    ]
    peaks = suppress_overlaps(peaks, config.overlap_ratio)

    return [
        DetectedNote(
            frequency=peak.frequency,
            confidence=peak.confidence,
            magnitude=peak.boosted,
        )
        for peak in peaks[: config.max_notes]
    ]


def detect_multi_note_track(
    spectrogram: Spectrogram,
    max_notes: Optional[int] = None,
    config: Optional[PitchConfig] = None,
) -> NoteTrack:
    """
    Detect up to ``max_notes`` concurrent pitches in every frame.

    Args:
        spectrogram: Input spectrogram
        max_notes: Notes kept per frame (default: config.max_notes, i.e. 5)
        config: Estimator settings

    Returns:
        NoteTrack with one NoteFrame per spectrogram frame

    Raises:
        ValueError: If max_notes is below 1
    """
    config = config or PitchConfig()
    if max_notes is not None:
        config = config.with_max_notes(max_notes)

    frames = tuple(
        NoteFrame(
            time=float(time),
            notes=tuple(
                detect_frame_notes(spectrogram.frequencies, frame, config=config)
            ),
        )
        for time, frame in zip(spectrogram.times, spectrogram.magnitudes)
    )

    logger.debug(
        "Multi-note track: %d frames, %d notes total (max %d per frame)",
        len(frames),
        sum(len(f) for f in frames),
        config.max_notes,
    )

    return NoteTrack(times=readonly_array(spectrogram.times), frames=frames)
