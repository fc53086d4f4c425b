"""Detector throughput benchmark.

Measures infer / detect / detect_stream over a recording and reports the
real-time factor of each.
"""

from .runner import BenchmarkResult, DetectorBenchmarkRunner

__all__ = ["BenchmarkResult", "DetectorBenchmarkRunner"]
