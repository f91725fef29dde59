import numpy as np

from bandvis.errors import DecodeError


class AudioSignal:
    """
    Mono float PCM samples plus a read cursor, looped by the analyser.
    """

    def __init__(self, samples, sample_rate):
        self.samples = samples
        self.sample_rate = float(sample_rate) if sample_rate else 0.0
        self.cursor = 0

    @classmethod
    def from_samples(cls, samples, sample_rate):
        """
        Build a signal from in-memory samples. Only floating-point PCM is accepted.
        """
        samples = np.asarray(samples)
        if not np.issubdtype(samples.dtype, np.floating):
            raise DecodeError(f"Expected floating-point PCM samples, got {samples.dtype}")
        if samples.ndim != 1:
            raise DecodeError(f"Expected a mono (1-D) sample array, got shape {samples.shape}")
        return cls(samples.astype(np.float32, copy=False), sample_rate)

    def __len__(self):
        return len(self.samples)

    @property
    def is_empty(self):
        return len(self.samples) == 0

    @property
    def duration(self):
        """Length of the signal in seconds."""
        return len(self.samples) / self.sample_rate

    def rewind(self):
        self.cursor = 0

    def __repr__(self):
        return (
            f"AudioSignal(n_samples={len(self.samples)}, "
            f"sample_rate={self.sample_rate:g}, cursor={self.cursor})"
        )
