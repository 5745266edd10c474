"""Short-time magnitude spectrogram with a Hamming window."""

import logging
from typing import Optional

import numpy as np
import librosa
import scipy.fft
import scipy.signal

from ..core import Spectrogram
from ..core.constants import DEFAULT_TRANSFORM_SIZE

logger = logging.getLogger(__name__)


def as_mono_signal(samples) -> np.ndarray:
    """
    Convert input audio to a 1-D float32 signal.

    Multi-channel input is channel-major ``(channels, samples)``, as returned by
    ``librosa.load(mono=False)``; only channel 0 is kept.
    """
    signal = np.asarray(samples, dtype=np.float32)
    if signal.ndim > 1:
        signal = signal[0]
    return np.ascontiguousarray(signal)


def hamming_window(size: int) -> np.ndarray:
    """Symmetric Hamming window: 0.54 - 0.46 cos(2 pi i / (size - 1))."""
    return scipy.signal.get_window("hamming", size, fftbins=False)


def frequency_bins(sample_rate: float, transform_size: int) -> np.ndarray:
    """Centre frequency of the first transform_size // 2 bins."""
    return np.arange(transform_size // 2) * sample_rate / transform_size


def magnitude_spectrum(block: np.ndarray) -> np.ndarray:
    """
    Magnitude of the real DFT of an already windowed block.

    The transform runs along the last axis, so a stack of frames
    ``[n_frames, transform_size]`` is handled in one call.

    Args:
        block: Windowed samples; last axis length must be a power of two

    Returns:
        ``sqrt(re^2 + im^2)`` of the first ``transform_size // 2`` bins
    """
    transform_size = block.shape[-1]
    spectrum = scipy.fft.rfft(block, axis=-1)
    return np.abs(spectrum[..., : transform_size // 2])


def frame_count(length: int, transform_size: int, hop_size: int) -> int:
    """Number of full frames that fit in a signal of the given length."""
    if length < transform_size:
        return 0
    return (length - transform_size) // hop_size + 1


def compute_spectrogram(
    samples,
    sample_rate: float,
    transform_size: int = DEFAULT_TRANSFORM_SIZE,
    hop_size: Optional[int] = None,
) -> Spectrogram:
    """
    Compute a frame-major magnitude spectrogram.

    Every frame is multiplied by a Hamming window before the transform.
    Trailing samples that do not fill a whole frame are dropped.

    Args:
        samples: Audio samples (mono, or channel-major multi-channel)
        sample_rate: Sample rate in Hz
        transform_size: Samples per frame, a power of two
        hop_size: Samples between frame starts (default: transform_size // 4)

    Returns:
        Spectrogram with frequencies [n_bins], times [n_frames] and
        magnitudes [n_frames, n_bins]
    """
    if hop_size is None:
        hop_size = transform_size // 4

    signal = as_mono_signal(samples)
    frequencies = frequency_bins(sample_rate, transform_size)
    n_frames = frame_count(len(signal), transform_size, hop_size)

    if n_frames == 0:
        logger.debug(
            "Signal of %d samples is shorter than one frame (%d)",
            len(signal),
            transform_size,
        )
        magnitudes = np.zeros((0, transform_size // 2))
    else:
        # [n_frames, transform_size]
        frames = librosa.util.frame(
            signal.astype(np.float64),
            frame_length=transform_size,
            hop_length=hop_size,
            axis=0,
        )
        magnitudes = magnitude_spectrum(frames * hamming_window(transform_size))

    times = librosa.frames_to_time(
        np.arange(n_frames), sr=sample_rate, hop_length=hop_size
    )

    logger.debug(
        "Spectrogram: %d frames x %d bins (n_fft=%d, hop=%d, sr=%s)",
        n_frames,
        len(frequencies),
        transform_size,
        hop_size,
        sample_rate,
    )

    return Spectrogram.from_arrays(
        frequencies=frequencies,
        times=times,
        magnitudes=magnitudes,
        sample_rate=sample_rate,
        transform_size=transform_size,
        hop_size=hop_size,
    )
