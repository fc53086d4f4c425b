"""CLI for the detector benchmark.

Usage:
    python -m benchmarks.detector samples.pcm --model silero_vad.onnx
    python -m benchmarks.detector samples.wav --iterations 20 --chunk 1600
"""

from __future__ import annotations

import argparse
import logging
import sys

from silero_segmenter import Detector, DetectorConfig, SegmenterError
from silero_segmenter.audio import load_audio

from .runner import DetectorBenchmarkRunner


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for CLI output."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Detector Benchmark - infer / detect / detect_stream throughput",
    )
    parser.add_argument("input_file", help="Input audio file (.pcm float32 LE or soundfile format)")
    parser.add_argument("--model", required=True, help="Path to silero_vad.onnx")
    parser.add_argument("--rate", type=int, choices=[8000, 16000], default=16000)
    parser.add_argument("--iterations", type=int, default=10, help="Iterations for detect benchmarks")
    parser.add_argument("--chunk", type=int, default=1000, help="Chunk size for detect_stream")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(args)


def main(args: list[str] | None = None) -> int:
    parsed = parse_args(args)
    setup_logging(parsed.verbose)

    try:
        samples = load_audio(parsed.input_file, sample_rate=parsed.rate)
        config = DetectorConfig(model_path=parsed.model, sample_rate=parsed.rate)
        with Detector(config) as detector:
            runner = DetectorBenchmarkRunner(detector, samples, chunk_size=parsed.chunk)
            results = runner.run(parsed.iterations)
    except (SegmenterError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"{'benchmark':<14} {'iters':>6} {'ms/iter':>10} {'RTF':>8} {'segments':>8}")
    for result in results:
        print(result.to_row())
    return 0
