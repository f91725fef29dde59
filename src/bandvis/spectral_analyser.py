import logging

import librosa
import numpy as np

from bandvis.constants import HOP_LENGTH, N_FFT

logger = logging.getLogger(__name__)


class SpectralAnalyser:
    """
    Sliding-window FFT over an AudioSignal.

    Each call to `analyse` takes `fft_size` samples at the signal cursor,
    advances the cursor by `hop_size` and returns the magnitude of every
    FFT bin. The cursor wraps back to the start (hard loop) when the next
    window would reach the end of the buffer.
    """

    def __init__(self, fft_size=N_FFT, hop_size=HOP_LENGTH, window=None):
        self.fft_size = fft_size
        self.hop_size = hop_size

        # Rectangular window unless a named window function is requested
        if window is None:
            self._window = None
        else:
            self._window = librosa.filters.get_window(window, fft_size, fftbins=True).astype(np.float32)

    def transform(self, window):
        """
        Magnitude of the forward DFT of one real-valued window.
        """
        if self._window is not None:
            window = window * self._window
        return np.abs(np.fft.fft(window))

    def analyse(self, signal):
        """
        Returns the SpectrumFrame for the window at the signal cursor,
        or None for an empty signal.
        """
        if signal.is_empty:
            return None

        if signal.cursor + self.fft_size >= len(signal.samples):
            logger.debug("[i] End of signal reached, looping to start")
            signal.cursor = 0

        start = signal.cursor
        window = signal.samples[start : start + self.fft_size]
        signal.cursor += self.hop_size

        return self.transform(window)
