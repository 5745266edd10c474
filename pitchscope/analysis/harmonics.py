"""Helpers shared by the pitch estimators: band selection, harmonic support, noise."""

from typing import Sequence

import numpy as np


def band_indices(
    frequencies: np.ndarray, min_frequency: float, max_frequency: float
) -> np.ndarray:
    """Indices of bins with min_frequency <= f < max_frequency."""
    mask = (frequencies >= min_frequency) & (frequencies < max_frequency)
    return np.flatnonzero(mask)


def closest_bins(frequencies: np.ndarray, targets) -> np.ndarray:
    """
    Index of the bin centre nearest to each target frequency.

    ``frequencies`` must be increasing. Ties go to the lower bin.
    """
    targets = np.asarray(targets, dtype=np.float64)
    if len(frequencies) < 2:
        return np.zeros(targets.shape, dtype=np.intp)

    idx = np.searchsorted(frequencies, targets)
    idx = np.clip(idx, 1, len(frequencies) - 1)
    below = targets - frequencies[idx - 1]
    above = frequencies[idx] - targets
    return idx - (below <= above)


def harmonic_strength(
    frequencies: np.ndarray,
    magnitudes: np.ndarray,
    candidates,
    harmonics: Sequence[int],
    tolerance_hz: float,
) -> np.ndarray:
    """
    Harmonic support for each candidate fundamental.

    ``1 + sum(magnitude[closest(h * f)] / h)`` over the given harmonic
    numbers, counting a harmonic only when its closest bin centre lies within
    ``tolerance_hz`` of ``h * f``.

    Args:
        frequencies: Bin centres in Hz
        magnitudes: Magnitudes of one frame
        candidates: Candidate fundamentals in Hz
        harmonics: Harmonic numbers to check
        tolerance_hz: Maximum bin-to-harmonic distance

    Returns:
        Array of harmonic strengths, >= 1
    """
    candidates = np.asarray(candidates, dtype=np.float64)
    strength = np.ones(candidates.shape)

    for h in harmonics:
        targets = candidates * h
        idx = closest_bins(frequencies, targets)
        near = np.abs(frequencies[idx] - targets) < tolerance_hz
        strength += np.where(near, magnitudes[idx] / h, 0.0)

    return strength


def noise_floor(magnitudes: np.ndarray, fraction: float) -> float:
    """Mean of the lowest ``fraction`` of magnitudes, ranked by value."""
    if len(magnitudes) == 0:
        return 0.0
    count = max(1, int(len(magnitudes) * fraction))
    lowest = np.partition(magnitudes, count - 1)[:count]
    return float(np.mean(lowest))


def snr_score(
    magnitude, noise: float, divisor: float, cap: float, epsilon: float
):
    """``min(log10(magnitude / (noise + eps) + 1) / divisor, cap)``, floored at 0."""
    snr = np.asarray(magnitude) / (noise + epsilon)
    return np.clip(np.log10(snr + 1) / divisor, 0.0, cap)
