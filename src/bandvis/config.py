from dataclasses import dataclass

import librosa

from bandvis.constants import (
    BANDS,
    DEFAULT_SAMPLE_RATE,
    HOP_LENGTH,
    LEVEL_CAP,
    LEVEL_MAX_FREQ,
    LEVEL_MIN_FREQ,
    LEVEL_NORMALISATION,
    LEVEL_SMOOTHING_RATE,
    N_FFT,
    SMOOTHING_RATE,
)
from bandvis.errors import ConfigurationError


def is_power_of_two(n):
    return isinstance(n, int) and n >= 2 and (n & (n - 1)) == 0


@dataclass(frozen=True)
class PipelineConfig:
    """
    Static settings for a spectrum pipeline. Set once at construction.
    """

    fft_size: int = N_FFT
    hop_size: int = HOP_LENGTH
    fallback_sample_rate: float = DEFAULT_SAMPLE_RATE
    smoothing_rate: float = SMOOTHING_RATE
    level_smoothing_rate: float = LEVEL_SMOOTHING_RATE
    level_min_hz: float = LEVEL_MIN_FREQ
    level_max_hz: float = LEVEL_MAX_FREQ
    level_normalisation: float = LEVEL_NORMALISATION
    level_cap: float = LEVEL_CAP
    window: str | None = None  # None = rectangular
    fixed_blend: float | None = None  # set to use the fixed-rate smoother
    bands: tuple = BANDS

    def validate(self):
        """
        Raise ConfigurationError if any setting is unusable.
        """
        if not is_power_of_two(self.fft_size):
            raise ConfigurationError(f"fft_size must be a power of two >= 2, got {self.fft_size!r}")

        if not isinstance(self.hop_size, int) or self.hop_size < 1:
            raise ConfigurationError(f"hop_size must be a positive integer, got {self.hop_size!r}")
        if self.hop_size >= self.fft_size:
            raise ConfigurationError(
                f"hop_size must be smaller than fft_size={self.fft_size}, got {self.hop_size}"
            )

        if self.fallback_sample_rate <= 0:
            raise ConfigurationError("fallback_sample_rate must be positive")
        if self.smoothing_rate <= 0 or self.level_smoothing_rate <= 0:
            raise ConfigurationError("smoothing rates must be positive")
        if self.fixed_blend is not None and not 0.0 <= self.fixed_blend <= 1.0:
            raise ConfigurationError(f"fixed_blend must be within [0, 1], got {self.fixed_blend}")

        if not 0 <= self.level_min_hz < self.level_max_hz:
            raise ConfigurationError("level range must satisfy 0 <= level_min_hz < level_max_hz")
        if self.level_normalisation <= 0 or self.level_cap <= 0:
            raise ConfigurationError("level_normalisation and level_cap must be positive")

        validate_bands(self.bands)

        if self.window is not None:
            try:
                librosa.filters.get_window(self.window, self.fft_size, fftbins=True)
            except Exception as e:
                raise ConfigurationError(f"Unknown window function {self.window!r}: {e}") from e


def validate_bands(bands):
    """Bands must be non-empty, ascending and non-overlapping."""
    if len(bands) == 0:
        raise ConfigurationError("At least one band is required")

    prev_upper = 0.0
    for lower, upper in bands:
        if not 0 <= lower < upper:
            raise ConfigurationError(f"Band ({lower}, {upper}) must satisfy 0 <= lower < upper")
        if lower < prev_upper:
            raise ConfigurationError(f"Band ({lower}, {upper}) overlaps or is out of order")
        prev_upper = upper
