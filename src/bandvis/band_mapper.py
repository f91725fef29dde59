import math

import numpy as np


def bin_range(lower_hz, upper_hz, sample_rate, fft_size, n_bins):
    """
    Inclusive (start, end) FFT bin indices covering [lower_hz, upper_hz].
    """
    bin_hz = sample_rate / fft_size
    start_bin = math.floor(lower_hz / bin_hz)
    end_bin = min(math.floor(upper_hz / bin_hz), n_bins - 1)
    return start_bin, end_bin


def is_degenerate(lower_hz, upper_hz, sample_rate, fft_size, n_bins=None):
    """
    True when a band cannot carry energy at this sample rate / FFT size:
    it starts at or above Nyquist, or covers fewer than two bins.
    """
    if n_bins is None:
        n_bins = fft_size
    if lower_hz >= sample_rate / 2:
        return True
    start_bin, end_bin = bin_range(lower_hz, upper_hz, sample_rate, fft_size, n_bins)
    return end_bin <= start_bin


def band_energy(frame, lower_hz, upper_hz, sample_rate, fft_size):
    """
    Mean magnitude of the bins in [lower_hz, upper_hz]. Degenerate bands are silent (0.0).
    """
    if is_degenerate(lower_hz, upper_hz, sample_rate, fft_size, len(frame)):
        return 0.0
    start_bin, end_bin = bin_range(lower_hz, upper_hz, sample_rate, fft_size, len(frame))
    return float(np.mean(frame[start_bin : end_bin + 1]))


def map_bands(frame, bands, sample_rate, fft_size):
    """
    Raw energy per band, in band order.
    """
    return np.array(
        [band_energy(frame, lower, upper, sample_rate, fft_size) for lower, upper in bands],
        dtype=np.float64,
    )
