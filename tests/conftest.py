import numpy as np
import pytest
import soundfile as sf

SAMPLE_RATE = 44100


def sine(freq, duration=1.0, sample_rate=SAMPLE_RATE, amplitude=0.5):
    t = np.arange(int(duration * sample_rate)) / sample_rate
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


@pytest.fixture
def tone_wav(tmp_path):
    """A one second 700 Hz mono tone written as 32-bit float WAV."""
    path = tmp_path / "tone.wav"
    sf.write(path, sine(700.0), SAMPLE_RATE, subtype="FLOAT")
    return path
