"""Detector benchmark runner."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import numpy as np

from silero_segmenter import Detector
from silero_segmenter.audio import iter_chunks

logger = logging.getLogger(__name__)

__all__ = ["BenchmarkResult", "DetectorBenchmarkRunner"]


@dataclass
class BenchmarkResult:
    """Timing result for one benchmark."""

    name: str
    iterations: int
    elapsed_s: float
    audio_s: float
    segments_count: int | None = None

    @property
    def per_iteration_ms(self) -> float:
        if self.iterations == 0:
            return 0.0
        return self.elapsed_s * 1000 / self.iterations

    @property
    def rtf(self) -> float:
        """Real-time factor (processing time / audio time)."""
        if self.audio_s == 0:
            return 0.0
        return self.elapsed_s / self.audio_s

    def to_row(self) -> str:
        segments = "-" if self.segments_count is None else str(self.segments_count)
        return (
            f"{self.name:<14} {self.iterations:>6} {self.per_iteration_ms:>10.3f} "
            f"{self.rtf:>8.4f} {segments:>8}"
        )


class DetectorBenchmarkRunner:
    """Runs the detector benchmarks over one recording.

    Args:
        detector: Detector to benchmark (reset between iterations)
        samples: Audio samples at the detector's sample rate
        chunk_size: Chunk size for the streaming benchmark
    """

    def __init__(self, detector: Detector, samples: np.ndarray, chunk_size: int = 1000):
        if len(samples) < detector.window_size:
            raise ValueError("not enough samples for one window")
        self.detector = detector
        self.samples = np.asarray(samples, dtype=np.float32)
        self.chunk_size = chunk_size

    def bench_infer(self, iterations: int) -> BenchmarkResult:
        """Single-window inference, wrapping around the recording."""
        window_size = self.detector.window_size
        self.detector.reset()

        index = 0
        start = time.perf_counter()
        for _ in range(iterations):
            if index + window_size > len(self.samples):
                index = 0
                self.detector.reset()
            self.detector.infer(self.samples[index : index + window_size])
            index += window_size
        elapsed = time.perf_counter() - start

        return BenchmarkResult(
            name="infer",
            iterations=iterations,
            elapsed_s=elapsed,
            audio_s=iterations * window_size / self.detector.sample_rate,
        )

    def bench_detect(self, iterations: int) -> BenchmarkResult:
        """Batch detection over the whole recording."""
        segments_count = 0
        start = time.perf_counter()
        for _ in range(iterations):
            self.detector.reset()
            segments_count = len(self.detector.detect(self.samples))
        elapsed = time.perf_counter() - start

        return BenchmarkResult(
            name="detect",
            iterations=iterations,
            elapsed_s=elapsed,
            audio_s=iterations * len(self.samples) / self.detector.sample_rate,
            segments_count=segments_count,
        )

    def bench_detect_stream(self, iterations: int) -> BenchmarkResult:
        """Streaming detection in fixed-size chunks."""
        segments_count = 0
        start = time.perf_counter()
        for _ in range(iterations):
            self.detector.reset()
            segments_count = 0
            for chunk in iter_chunks(self.samples, self.chunk_size):
                segments_count += len(self.detector.detect_stream(chunk))
        elapsed = time.perf_counter() - start

        return BenchmarkResult(
            name="detect_stream",
            iterations=iterations,
            elapsed_s=elapsed,
            audio_s=iterations * len(self.samples) / self.detector.sample_rate,
            segments_count=segments_count,
        )

    def run(self, iterations: int, infer_iterations: int | None = None) -> list[BenchmarkResult]:
        """Run all benchmarks."""
        results = [
            self.bench_infer(infer_iterations or iterations * 100),
            self.bench_detect(iterations),
            self.bench_detect_stream(iterations),
        ]
        for result in results:
            logger.info(
                f"{result.name}: {result.per_iteration_ms:.3f} ms/iter "
                f"(RTF {result.rtf:.4f})"
            )
        return results
