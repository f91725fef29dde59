class BandVisError(Exception):
    """Base class for errors raised by bandvis."""


class ConfigurationError(BandVisError, ValueError):
    """The pipeline cannot be built with the given settings or signal."""


class DecodeError(BandVisError):
    """The audio source could not be decoded into float PCM."""
