#!/usr/bin/env python3
"""
Band Spectrum CLI Tool
======================

Decodes an audio file and continuously analyses it into ten smoothed
octave bands plus an overall loudness level, printed as a live bar chart
in the terminal. It utilizes Librosa for decoding and NumPy for the FFT.

Features:
- Sliding-window FFT (looped playback of the decoded signal).
- Octave band aggregation from 20 Hz to 16 kHz.
- Frame-rate independent temporal smoothing.

Usage:
    python -m bandvis input.wav
    python -m bandvis input.mp3 --fps 60 --window hann
    python -m bandvis -h (for help)
"""

import argparse
import dataclasses
import logging
import os
import sys

from bandvis.config import PipelineConfig
from bandvis.constants import (
    BAR_CHARS,
    DEFAULT_FPS,
    HOP_LENGTH,
    LEVEL_DISPLAY_SCALE,
    N_FFT,
    SMOOTHING_RATE,
)
from bandvis.errors import BandVisError
from bandvis.pipeline import SpectrumPipeline
from bandvis.smoother import level_target

logger = logging.getLogger(__name__)


def format_snapshot(snapshot):
    """
    One line of unicode bars followed by the display-scaled level.
    Bars use the same square-root compression as the level.
    """
    steps = len(BAR_CHARS) - 1
    bars = ""
    for reading in snapshot.bands:
        val = min(level_target(reading.intensity) * LEVEL_DISPLAY_SCALE, 1.0)
        bars += BAR_CHARS[int(round(val * steps))]
    level = min(snapshot.level * LEVEL_DISPLAY_SCALE, 1.0)
    return f"|{bars}| level {level:4.2f}"


def build_parser():
    parser = argparse.ArgumentParser(
        description="Analyse an audio file into smoothed frequency bands."
    )
    parser.add_argument("input", help="Path to input audio file (WAV/FLAC/MP3/OGG)")
    parser.add_argument("--fps", type=int, default=DEFAULT_FPS, help="Ticks per second")
    parser.add_argument("--fft-size", type=int, default=N_FFT, help="FFT window size (power of two)")
    parser.add_argument("--hop-size", type=int, default=HOP_LENGTH, help="Samples advanced per tick")
    parser.add_argument(
        "--smoothing", type=float, default=SMOOTHING_RATE, help="Smoothing rate in 1/s (higher = faster)"
    )
    parser.add_argument("--window", help="Window function applied before the FFT (e.g. hann)")
    parser.add_argument(
        "--fixed-blend", type=float, help="Use a fixed per-tick blend instead of time-based smoothing"
    )
    parser.add_argument("--ticks", type=int, help="Stop after this many ticks (optional)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(message)s")

    # 1. Validation
    if not os.path.exists(args.input):
        sys.exit(f"[!] Input file not found: {args.input}")
    if args.fps <= 0:
        sys.exit(f"[!] --fps must be positive, got {args.fps}")

    config = dataclasses.replace(
        PipelineConfig(),
        fft_size=args.fft_size,
        hop_size=args.hop_size,
        smoothing_rate=args.smoothing,
        window=args.window,
        fixed_blend=args.fixed_blend,
    )

    # 2. Decode once and build the pipeline
    try:
        pipeline = SpectrumPipeline.from_file(args.input, config)
    except BandVisError as e:
        sys.exit(f"[!] {e}")

    # 3. Steady-state loop
    def print_snapshot(snapshot):
        print(f"\r{format_snapshot(snapshot)}", end="", flush=True)

    try:
        pipeline.run(args.fps, max_ticks=args.ticks, on_tick=print_snapshot)
    except KeyboardInterrupt:
        pass
    finally:
        print()

    logger.info("[+] Done!")


if __name__ == "__main__":
    main()
