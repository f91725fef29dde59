"""
Temporal smoothing of band energies and the overall level.

The smoothing is an exponential moving average whose blend factor is
derived from the real time elapsed since the previous tick:

    alpha = clamp(1 - exp(-rate * dt), 0, 1)
    smoothed = prev * (1 - alpha) + target * alpha

so the visual decay takes the same wall-clock time at 30 or 144 ticks per
second. `FixedBlendSmoother` keeps the older per-tick blend for hosts that
tick at a guaranteed constant rate.
"""

import math

import numpy as np

from bandvis.constants import (
    FIXED_BLEND,
    LEVEL_CAP,
    LEVEL_NORMALISATION,
    LEVEL_SMOOTHING_RATE,
    SMOOTHING_RATE,
)


def smoothing_alpha(rate, dt):
    """Blend factor for a time step of `dt` seconds."""
    alpha = 1.0 - math.exp(-rate * dt)
    return min(max(alpha, 0.0), 1.0)


def smooth(prev, target, dt, rate=SMOOTHING_RATE):
    """
    One EMA step from `prev` towards `target`. Works on floats and numpy arrays.
    """
    alpha = smoothing_alpha(rate, dt)
    return prev * (1.0 - alpha) + target * alpha


def level_target(energy, normalisation=LEVEL_NORMALISATION, cap=LEVEL_CAP):
    """
    Square-root compressed loudness target.
    Loud transients dominate less and quiet passages stay visible.
    """
    if energy <= 0:
        return 0.0
    return min(math.sqrt(energy / normalisation), cap)


class TemporalSmoother:
    """
    Owns the smoothed per-band intensities and the smoothed level.
    It is the only writer of that state.
    """

    def __init__(self, n_bands, rate=SMOOTHING_RATE, level_rate=LEVEL_SMOOTHING_RATE):
        self.rate = rate
        self.level_rate = level_rate
        self.bands = np.zeros(n_bands)
        self.level = 0.0

    def update(self, raw_bands, raw_level, dt):
        self.bands = smooth(self.bands, np.asarray(raw_bands, dtype=np.float64), dt, self.rate)
        self.level = float(smooth(self.level, raw_level, dt, self.level_rate))
        return self.bands, self.level

    def reset(self):
        self.bands = np.zeros_like(self.bands)
        self.level = 0.0


class FixedBlendSmoother(TemporalSmoother):
    """
    Per-tick blend `(1 - blend) * prev + blend * target`, ignoring elapsed time.
    """

    def __init__(self, n_bands, blend=FIXED_BLEND):
        super().__init__(n_bands)
        self.blend = blend

    def update(self, raw_bands, raw_level, dt):
        raw_bands = np.asarray(raw_bands, dtype=np.float64)
        self.bands = (1 - self.blend) * self.bands + self.blend * raw_bands
        self.level = float((1 - self.blend) * self.level + self.blend * raw_level)
        return self.bands, self.level
