"""Tunable heuristics for the pitch estimators."""

from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple

from ..core import constants as C


@dataclass(frozen=True)
class PitchConfig:
    """Configuration shared by the single- and multi-pitch estimators.

    Attributes:
        min_frequency: Lower edge of the pitch band in Hz, inclusive (default: 80)
        max_frequency: Upper edge of the pitch band in Hz, exclusive (default: 2000)
        magnitude_floor: Minimum bin magnitude for a single-pitch candidate (default: 0.1)
        peak_floor: Minimum magnitude for a multi-pitch peak (default: 0.05)
        harmonics: Harmonic numbers checked for support (default: 2-5)
        harmonic_tolerance_hz: Max distance between a harmonic and its bin (default: 20)
        epsilon: Additive guard in every ratio (default: 1e-10)
        single_noise_fraction: Share of lowest bins averaged as noise, single-pitch (default: 0.2)
        multi_noise_fraction: Share of lowest bins averaged as noise, multi-pitch (default: 0.1)
        neutral_temporal_score: Temporal sub-score when there is no previous pitch (default: 0.25)
        min_note_confidence: Multi-pitch peaks at or below this are dropped (default: 0.1)
        overlap_ratio: Frequency ratio under which two peaks are merged (default: 1.1)
        max_notes: Notes kept per frame (default: 5)
    """

    min_frequency: float = C.PITCH_BAND_MIN
    max_frequency: float = C.PITCH_BAND_MAX
    magnitude_floor: float = C.SINGLE_PITCH_MAGNITUDE_FLOOR
    peak_floor: float = C.MULTI_PITCH_PEAK_FLOOR
    harmonics: Tuple[int, ...] = C.HARMONICS
    harmonic_tolerance_hz: float = C.HARMONIC_TOLERANCE_HZ
    epsilon: float = C.EPSILON

    # Single-pitch confidence
    single_score_cap: float = C.SINGLE_SCORE_CAP
    single_harmonic_divisor: float = C.SINGLE_HARMONIC_DIVISOR
    single_snr_divisor: float = C.SINGLE_SNR_DIVISOR
    single_noise_fraction: float = C.SINGLE_NOISE_FRACTION
    neutral_temporal_score: float = C.NEUTRAL_TEMPORAL_SCORE

    # Multi-pitch confidence
    multi_energy_scale: float = C.MULTI_ENERGY_SCALE
    multi_energy_cap: float = C.MULTI_ENERGY_CAP
    multi_harmonic_divisor: float = C.MULTI_HARMONIC_DIVISOR
    multi_harmonic_cap: float = C.MULTI_HARMONIC_CAP
    multi_snr_divisor: float = C.MULTI_SNR_DIVISOR
    multi_snr_cap: float = C.MULTI_SNR_CAP
    multi_noise_fraction: float = C.MULTI_NOISE_FRACTION
    min_note_confidence: float = C.MIN_NOTE_CONFIDENCE

    overlap_ratio: float = C.OVERLAP_RATIO
    max_notes: int = C.DEFAULT_MAX_NOTES

    def __post_init__(self):
        if self.min_frequency < 0 or self.max_frequency <= self.min_frequency:
            raise ValueError(
                f"Invalid pitch band: [{self.min_frequency}, {self.max_frequency})"
            )
        if self.magnitude_floor < 0 or self.peak_floor < 0:
            raise ValueError("Magnitude floors must be non-negative")
        if not self.harmonics or any(h < 2 for h in self.harmonics):
            raise ValueError(f"Harmonic numbers must be >= 2, got {self.harmonics}")
        for name in ("single_noise_fraction", "multi_noise_fraction"):
            value = getattr(self, name)
            if not 0 < value <= 1:
                raise ValueError(f"{name} must be in (0, 1], got {value}")
        if self.overlap_ratio < 1:
            raise ValueError(f"overlap_ratio must be >= 1, got {self.overlap_ratio}")
        if self.max_notes < 1:
            raise ValueError(f"max_notes must be >= 1, got {self.max_notes}")

    def scaled(self, factor: float) -> "PitchConfig":
        """Return a copy with both magnitude floors multiplied by factor."""
        return replace(
            self,
            magnitude_floor=self.magnitude_floor * factor,
            peak_floor=self.peak_floor * factor,
        )

    def with_max_notes(self, max_notes: int) -> "PitchConfig":
        return replace(self, max_notes=max_notes)


# Floor multipliers; higher sensitivity means lower floors
SENSITIVITY_PRESETS: Dict[str, float] = {
    "low": 2.0,
    "medium": 1.0,
    "high": 0.5,
    "ultra": 0.1,
}


def config_for_sensitivity(sensitivity: str, base: Optional[PitchConfig] = None) -> PitchConfig:
    """
    Build a PitchConfig from a named sensitivity preset.

    Args:
        sensitivity: One of 'low', 'medium', 'high', 'ultra'
        base: Config to scale (default: PitchConfig())

    Raises:
        ValueError: If the preset name is unknown
    """
    key = sensitivity.lower()
    if key not in SENSITIVITY_PRESETS:
        raise ValueError(
            f"Unknown sensitivity '{sensitivity}'. "
            f"Supported: {sorted(SENSITIVITY_PRESETS)}"
        )
    return (base or PitchConfig()).scaled(SENSITIVITY_PRESETS[key])
