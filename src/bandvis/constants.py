# --- Configuration Constants ---
DEFAULT_FPS = 30
N_FFT = 2048
HOP_LENGTH = 512  # 75% overlap at N_FFT = 2048
DEFAULT_SAMPLE_RATE = 44100.0  # used when the decoder reports no rate

# Smoothing: time-constant EMA rate in 1/s (higher = snappier)
SMOOTHING_RATE = 10.0
LEVEL_SMOOTHING_RATE = 10.0
FIXED_BLEND = 0.3  # fixed-rate variant: 0.7 * prev + 0.3 * new

# Level signal settings
LEVEL_MIN_FREQ = 20.0
LEVEL_MAX_FREQ = 8000.0  # most music energy is below 8kHz
LEVEL_NORMALISATION = 10.0
LEVEL_CAP = 5.0
LEVEL_DISPLAY_SCALE = 0.3  # applied by consumers, keeps level <= ~1

# Octave bands, ascending and non-overlapping (Hz)
BANDS = (
    (20.0, 31.0),
    (31.0, 63.0),
    (63.0, 125.0),
    (125.0, 250.0),
    (250.0, 500.0),
    (500.0, 1000.0),
    (1000.0, 2000.0),
    (2000.0, 4000.0),
    (4000.0, 8000.0),
    (8000.0, 16000.0),
)

# Console output settings
BAR_CHARS = " ▁▂▃▄▅▆▇█"
