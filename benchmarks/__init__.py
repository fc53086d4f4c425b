"""Benchmarks for silero-segmenter."""
