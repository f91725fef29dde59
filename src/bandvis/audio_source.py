import logging
import os

import librosa
import numpy as np

from bandvis.audio_signal import AudioSignal
from bandvis.constants import DEFAULT_SAMPLE_RATE
from bandvis.errors import DecodeError

logger = logging.getLogger(__name__)


def load_audio(source, fallback_sample_rate=DEFAULT_SAMPLE_RATE):
    """
    Decode an audio file (path or binary file-like object) into a mono AudioSignal.

    The native sample rate is kept (no resampling) and only the first channel
    of multi-channel audio is used. Decoding happens exactly once; any failure
    is raised as DecodeError.
    """
    if isinstance(source, (str, os.PathLike)):
        if not os.path.exists(source):
            raise DecodeError(f"Input file not found: {source}")
        name = os.fspath(source)
    else:
        name = getattr(source, "name", "<stream>")

    logger.info(f"[+] Loading audio: {name}...")
    try:
        # Load audio with original sampling rate, channels kept separate
        y, sr = librosa.load(source, sr=None, mono=False)
    except Exception as e:
        raise DecodeError(f"Error loading audio file {name}: {e}") from e

    y = np.asarray(y)
    if not np.issubdtype(y.dtype, np.floating):
        raise DecodeError(f"Decoder produced {y.dtype} samples, expected floating-point PCM")

    # librosa returns (channels, samples) for multi-channel input
    if y.ndim > 1:
        logger.info(f"[i] {y.shape[0]} channels decoded, keeping the first")
        y = y[0]

    if not sr:
        logger.warning(f"[!] No sample rate reported, assuming {fallback_sample_rate:g} Hz")
        sr = fallback_sample_rate

    signal = AudioSignal.from_samples(y, sr)
    logger.info(f"[+] Decoded {signal.duration:.2f} seconds at {signal.sample_rate:g} Hz")
    return signal
