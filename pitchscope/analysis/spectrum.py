"""Time-averaged spectrum."""

import numpy as np

from ..core import OverallSpectrum, Spectrogram
from ..core.types import readonly_array


def aggregate_spectrum(spectrogram: Spectrogram) -> OverallSpectrum:
    """Average each frequency bin across all frames (zeros when there are none)."""
    if spectrogram.n_frames == 0:
        magnitudes = np.zeros(spectrogram.n_bins)
    else:
        magnitudes = np.sum(spectrogram.magnitudes, axis=0) / spectrogram.n_frames

    return OverallSpectrum(
        frequencies=readonly_array(spectrogram.frequencies),
        magnitudes=readonly_array(magnitudes),
    )
