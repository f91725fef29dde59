"""
Tests for the per-tick pipeline driver and its configuration.
"""

import dataclasses
import itertools
import threading

import numpy as np
import pytest

from bandvis.audio_signal import AudioSignal
from bandvis.band_mapper import map_bands
from bandvis.config import PipelineConfig
from bandvis.constants import BANDS
from bandvis.errors import ConfigurationError
from bandvis.pipeline import BandReading, SpectrumPipeline, SpectrumSnapshot
from bandvis.smoother import FixedBlendSmoother, smoothing_alpha

from conftest import SAMPLE_RATE, sine


def tone_pipeline(freq=700.0, **config):
    signal = AudioSignal.from_samples(sine(freq), SAMPLE_RATE)
    return SpectrumPipeline(signal, PipelineConfig(**config))


class TestConfiguration:
    @pytest.mark.parametrize("fft_size", [0, 1, 3, 1000, 2048.0])
    def test_fft_size_must_be_power_of_two(self, fft_size):
        with pytest.raises(ConfigurationError):
            PipelineConfig(fft_size=fft_size).validate()

    def test_hop_size_must_be_positive(self):
        with pytest.raises(ConfigurationError):
            PipelineConfig(hop_size=0).validate()

    def test_bands_must_be_ascending(self):
        with pytest.raises(ConfigurationError):
            PipelineConfig(bands=((100.0, 200.0), (150.0, 300.0))).validate()
        with pytest.raises(ConfigurationError):
            PipelineConfig(bands=((200.0, 100.0),)).validate()

    def test_unknown_window(self):
        with pytest.raises(ConfigurationError):
            PipelineConfig(window="no-such-window").validate()

    def test_defaults_are_valid(self):
        config = PipelineConfig()
        config.validate()
        assert config.fft_size == 2048
        assert config.hop_size == 512
        assert config.bands == BANDS

    def test_configuration_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            PipelineConfig(fft_size=3).validate()

    @pytest.mark.parametrize("hop_size", [2048, 4096, 20000])
    def test_hop_size_must_be_smaller_than_fft_size(self, hop_size):
        with pytest.raises(ConfigurationError):
            PipelineConfig(fft_size=2048, hop_size=hop_size).validate()

    @pytest.mark.parametrize("sample_rate", [-44100.0, float("nan"), float("inf")])
    def test_sample_rate_must_be_finite_and_positive(self, sample_rate):
        signal = AudioSignal.from_samples(np.zeros(4096, dtype=np.float32), sample_rate)
        with pytest.raises(ConfigurationError):
            SpectrumPipeline(signal)

    def test_missing_sample_rate_uses_fallback(self):
        signal = AudioSignal.from_samples(np.zeros(4096, dtype=np.float32), None)
        pipeline = SpectrumPipeline(signal, PipelineConfig(fallback_sample_rate=22050.0))
        assert pipeline.signal.sample_rate == 22050.0

    def test_signal_shorter_than_fft_size(self):
        signal = AudioSignal.from_samples(np.zeros(100, dtype=np.float32), SAMPLE_RATE)
        with pytest.raises(ConfigurationError):
            SpectrumPipeline(signal)


class TestTick:
    def test_empty_signal_leaves_state_unchanged(self):
        signal = AudioSignal.from_samples(np.array([], dtype=np.float32), SAMPLE_RATE)
        pipeline = SpectrumPipeline(signal)

        snapshot = pipeline.tick(1 / 30)

        assert snapshot.tick == 0
        assert snapshot.level == 0.0
        assert all(value == 0.0 for value in snapshot.intensities)
        assert signal.cursor == 0

    def test_initial_snapshot(self):
        pipeline = tone_pipeline()

        snapshot = pipeline.snapshot

        assert len(snapshot.bands) == len(BANDS)
        assert [(r.lower_hz, r.upper_hz) for r in snapshot.bands] == list(BANDS)
        assert snapshot.intensities == (0.0,) * len(BANDS)
        assert snapshot.level == 0.0

    def test_tone_lights_its_band(self):
        pipeline = tone_pipeline(700.0)

        for _ in range(10):
            snapshot = pipeline.tick(1 / 30)

        # 700 Hz sits in the 500-1000 Hz band
        assert int(np.argmax(snapshot.intensities)) == 5
        assert 0.0 < snapshot.level <= pipeline.config.level_cap
        assert snapshot.tick == 10
        assert pipeline.signal.cursor == 10 * 512

    def test_first_tick_is_one_smoothing_step(self):
        pipeline = tone_pipeline(700.0)
        frame = pipeline.analyser.transform(pipeline.signal.samples[:2048])

        snapshot = pipeline.tick(0.05)

        expected = map_bands(frame, BANDS, SAMPLE_RATE, 2048) * smoothing_alpha(10.0, 0.05)
        assert np.allclose(snapshot.intensities, expected)

    def test_snapshot_is_immutable(self):
        pipeline = tone_pipeline()
        snapshot = pipeline.tick(1 / 30)

        assert isinstance(snapshot, SpectrumSnapshot)
        assert isinstance(snapshot.bands[0], BandReading)
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.level = 1.0

        pipeline.tick(1 / 30)
        assert pipeline.snapshot is not snapshot
        assert snapshot.tick == 1

    def test_accessors(self):
        pipeline = tone_pipeline()
        pipeline.tick(1 / 30)
        assert pipeline.bands == pipeline.snapshot.bands
        assert pipeline.level == pipeline.snapshot.level

    def test_fixed_blend(self):
        pipeline = tone_pipeline(fixed_blend=0.3)
        assert isinstance(pipeline.smoother, FixedBlendSmoother)

    def test_reset(self):
        pipeline = tone_pipeline()
        pipeline.tick(1 / 30)
        pipeline.tick(1 / 30)

        pipeline.reset()

        assert pipeline.signal.cursor == 0
        assert pipeline.snapshot.tick == 0
        assert pipeline.level == 0.0

    @pytest.mark.parametrize("length,hop_size", [(2048, 512), (10000, 2047), (44100, 512)])
    def test_cursor_stays_inside_signal(self, length, hop_size):
        signal = AudioSignal.from_samples(np.zeros(length, dtype=np.float32), SAMPLE_RATE)
        pipeline = SpectrumPipeline(signal, PipelineConfig(fft_size=2048, hop_size=hop_size))

        for _ in range(200):
            pipeline.tick(1 / 30)
            assert 0 <= signal.cursor < len(signal)

    def test_reader_thread_only_sees_complete_snapshots(self):
        pipeline = tone_pipeline()
        seen = []
        done = threading.Event()

        def reader():
            while not done.is_set():
                snapshot = pipeline.snapshot
                if not seen or seen[-1] is not snapshot:
                    seen.append(snapshot)

        thread = threading.Thread(target=reader)
        thread.start()
        try:
            expected = {0: pipeline.snapshot}
            for _ in range(200):
                snapshot = pipeline.tick(1 / 60)
                expected[snapshot.tick] = snapshot
        finally:
            done.set()
            thread.join(timeout=5.0)

        assert seen
        ticks = [s.tick for s in seen]
        assert ticks == sorted(ticks)
        for snapshot in seen:
            # Each observed snapshot is exactly one that a tick published
            assert snapshot is expected[snapshot.tick]
            assert len(snapshot.bands) == len(BANDS)
            assert [(r.lower_hz, r.upper_hz) for r in snapshot.bands] == list(BANDS)
            assert all(np.isfinite(snapshot.intensities))

class TestRun:
    def test_runs_requested_ticks(self):
        times = itertools.count(start=0.0, step=0.01)
        sleeps = []
        snapshots = []
        pipeline = tone_pipeline()

        count = pipeline.run(
            30,
            max_ticks=5,
            on_tick=snapshots.append,
            clock=lambda: next(times),
            sleep=sleeps.append,
        )

        assert count == 5
        assert [s.tick for s in snapshots] == [1, 2, 3, 4, 5]
        assert len(sleeps) == 5
        assert all(0.0 < s < 1 / 30 for s in sleeps)
