import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import NamedTuple

from bandvis.audio_source import load_audio
from bandvis.band_mapper import band_energy, is_degenerate, map_bands
from bandvis.config import PipelineConfig
from bandvis.errors import ConfigurationError
from bandvis.smoother import FixedBlendSmoother, TemporalSmoother, level_target
from bandvis.spectral_analyser import SpectralAnalyser

logger = logging.getLogger(__name__)


class BandReading(NamedTuple):
    lower_hz: float
    upper_hz: float
    intensity: float


@dataclass(frozen=True)
class SpectrumSnapshot:
    """
    Everything a consumer may read after one completed tick.
    """

    bands: tuple
    level: float
    tick: int = 0

    @property
    def intensities(self):
        return tuple(reading.intensity for reading in self.bands)


class SpectrumPipeline:
    """
    Drives the analyser, band mapper and smoother once per tick.

    The pipeline exclusively owns the AudioSignal and the smoothed state.
    At the end of every tick a new immutable SpectrumSnapshot is published,
    so a consumer on another thread never sees a partially updated tick.
    """

    def __init__(self, signal, config=None):
        self.config = config or PipelineConfig()
        self.config.validate()

        if not signal.sample_rate:
            signal.sample_rate = float(self.config.fallback_sample_rate)
        if not math.isfinite(signal.sample_rate) or signal.sample_rate <= 0:
            raise ConfigurationError(f"sample_rate must be finite and positive, got {signal.sample_rate}")
        if not signal.is_empty and len(signal) < self.config.fft_size:
            raise ConfigurationError(
                f"Signal has {len(signal)} samples, fewer than fft_size={self.config.fft_size}"
            )
        self.signal = signal

        self.analyser = SpectralAnalyser(self.config.fft_size, self.config.hop_size, self.config.window)
        n_bands = len(self.config.bands)
        if self.config.fixed_blend is not None:
            self.smoother = FixedBlendSmoother(n_bands, self.config.fixed_blend)
        else:
            self.smoother = TemporalSmoother(
                n_bands, self.config.smoothing_rate, self.config.level_smoothing_rate
            )

        degenerate = [
            (lower, upper)
            for lower, upper in self.config.bands
            if is_degenerate(lower, upper, signal.sample_rate, self.config.fft_size)
        ]
        if degenerate:
            logger.debug(f"[i] Bands silent at {signal.sample_rate:g} Hz: {degenerate}")
        if signal.is_empty:
            logger.debug("[i] Empty signal, ticks will not update the spectrum")

        self._lock = threading.Lock()
        self._ticks = 0
        self._snapshot = self._make_snapshot()

    @classmethod
    def from_file(cls, source, config=None):
        """Decode `source` once and build a pipeline over it."""
        config = config or PipelineConfig()
        signal = load_audio(source, fallback_sample_rate=config.fallback_sample_rate)
        return cls(signal, config)

    def _make_snapshot(self):
        readings = tuple(
            BandReading(lower, upper, float(value))
            for (lower, upper), value in zip(self.config.bands, self.smoother.bands)
        )
        return SpectrumSnapshot(readings, self.smoother.level, self._ticks)

    @property
    def snapshot(self):
        with self._lock:
            return self._snapshot

    @property
    def bands(self):
        return self.snapshot.bands

    @property
    def level(self):
        return self.snapshot.level

    def tick(self, dt):
        """
        Analyse the next window and advance the smoothed state by `dt` seconds.
        """
        frame = self.analyser.analyse(self.signal)
        if frame is None:
            return self.snapshot

        sample_rate = self.signal.sample_rate
        fft_size = self.config.fft_size
        raw_bands = map_bands(frame, self.config.bands, sample_rate, fft_size)
        energy = band_energy(frame, self.config.level_min_hz, self.config.level_max_hz, sample_rate, fft_size)
        raw_level = level_target(energy, self.config.level_normalisation, self.config.level_cap)
        self.smoother.update(raw_bands, raw_level, dt)

        self._ticks += 1
        snapshot = self._make_snapshot()
        with self._lock:
            self._snapshot = snapshot
        return snapshot

    def reset(self):
        """Rewind the signal and clear the smoothed state."""
        self.signal.rewind()
        self.smoother.reset()
        self._ticks = 0
        snapshot = self._make_snapshot()
        with self._lock:
            self._snapshot = snapshot

    def run(self, fps, max_ticks=None, on_tick=None, clock=time.monotonic, sleep=time.sleep):
        """
        Steady-state loop: tick at `fps` until `max_ticks` (forever if None).
        Each tick is smoothed by the real time elapsed since the previous one.
        """
        frame_interval = 1.0 / fps
        count = 0
        last = clock()
        logger.info(f"[+] Running at {fps} FPS")

        while max_ticks is None or count < max_ticks:
            t0 = clock()
            dt = t0 - last if count else frame_interval
            last = t0

            snapshot = self.tick(dt)
            if on_tick is not None:
                on_tick(snapshot)
            count += 1

            # Sleep remainder of frame
            elapsed = clock() - t0
            if elapsed < frame_interval:
                sleep(frame_interval - elapsed)

        return count
