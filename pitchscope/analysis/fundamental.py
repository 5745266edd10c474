"""Single-pitch (fundamental frequency) estimation from a spectrogram."""

import logging
from typing import Optional

import numpy as np

from ..core import FundamentalTrack, PitchCandidate, Spectrogram
from ..core.types import readonly_array
from .config import PitchConfig
from .harmonics import band_indices, harmonic_strength, noise_floor, snr_score

logger = logging.getLogger(__name__)


def pitch_confidence(
    magnitude: float,
    harmonic: float,
    frequency: float,
    previous_frequency: float,
    magnitudes: np.ndarray,
    config: PitchConfig,
) -> float:
    """
    Confidence of a single-pitch estimate, 0-1.

    Average of four sub-scores (energy, harmonic, temporal continuity, SNR),
    each capped at ``single_score_cap`` and scaled to 0-1.
    """
    cap = config.single_score_cap
    eps = config.epsilon

    total_energy = float(np.sum(magnitudes ** 2))
    energy = min(magnitude ** 2 / (total_energy + eps), cap)

    harmonic_score = min((harmonic - 1) / config.single_harmonic_divisor, cap)

    if previous_frequency > 0:
        ratio = min(frequency, previous_frequency) / max(frequency, previous_frequency)
        temporal = min(ratio, cap)
    else:
        temporal = config.neutral_temporal_score

    noise = noise_floor(magnitudes, config.single_noise_fraction)
    snr = float(snr_score(magnitude, noise, config.single_snr_divisor, cap, eps))

    scores = np.clip([energy, harmonic_score, temporal, snr], 0.0, cap) / cap
    return float(np.mean(scores))


def estimate_frame_pitch(
    frequencies: np.ndarray,
    magnitudes: np.ndarray,
    previous_frequency: float = 0.0,
    config: Optional[PitchConfig] = None,
) -> PitchCandidate:
    """
    Pick the fundamental of one frame.

    Candidates are bins inside the pitch band whose magnitude exceeds
    ``config.magnitude_floor``; the one with the largest
    ``magnitude * harmonic_strength`` wins.

    Args:
        frequencies: Bin centres in Hz
        magnitudes: Magnitudes of this frame
        previous_frequency: Fundamental of the previous frame (0 if none)
        config: Estimator settings

    Returns:
        PitchCandidate; frequency 0 and confidence 0 when nothing passes the floor
    """
    config = config or PitchConfig()
    frequencies = np.asarray(frequencies, dtype=np.float64)
    magnitudes = np.asarray(magnitudes, dtype=np.float64)

    band = band_indices(frequencies, config.min_frequency, config.max_frequency)
    candidates = band[magnitudes[band] > config.magnitude_floor]
    if len(candidates) == 0:
        return PitchCandidate.silent()

    harmonics = harmonic_strength(
        frequencies,
        magnitudes,
        frequencies[candidates],
        config.harmonics,
        config.harmonic_tolerance_hz,
    )
    strengths = magnitudes[candidates] * harmonics
    best = int(np.argmax(strengths))

    frequency = float(frequencies[candidates[best]])
    confidence = pitch_confidence(
        magnitude=float(magnitudes[candidates[best]]),
        harmonic=float(harmonics[best]),
        frequency=frequency,
        previous_frequency=previous_frequency,
        magnitudes=magnitudes,
        config=config,
    )

    return PitchCandidate(
        frequency=frequency,
        strength=float(strengths[best]),
        confidence=confidence,
    )


def estimate_fundamental_track(
    spectrogram: Spectrogram,
    config: Optional[PitchConfig] = None,
) -> FundamentalTrack:
    """
    Estimate one fundamental frequency per frame.

    The previous frame's result feeds the temporal continuity score of the
    next one; frame 0 starts from 0 Hz.

    Returns:
        FundamentalTrack with times, frequencies (0 = unvoiced) and confidences
    """
    config = config or PitchConfig()

    frequencies = np.zeros(spectrogram.n_frames)
    confidences = np.zeros(spectrogram.n_frames)

    previous = 0.0
    for i, frame in enumerate(spectrogram.magnitudes):
        candidate = estimate_frame_pitch(
            spectrogram.frequencies, frame, previous, config
        )
        frequencies[i] = candidate.frequency
        confidences[i] = candidate.confidence
        previous = candidate.frequency

    logger.debug(
        "Fundamental track: %d/%d voiced frames",
        int(np.count_nonzero(frequencies)),
        spectrogram.n_frames,
    )

    return FundamentalTrack(
        times=readonly_array(spectrogram.times),
        frequencies=readonly_array(frequencies),
        confidences=readonly_array(confidences),
    )
