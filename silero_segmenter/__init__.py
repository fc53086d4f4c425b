"""Speech segment detection with Silero VAD.

Silero VAD のウィンドウごとの音声確率から、ヒステリシス・デバウンス・
パディングを適用して発話区間（開始・終了時刻）を検出する。
バッチとストリーミングのどちらで呼んでも同じ区間境界を返す。

Usage:
    from silero_segmenter import Detector, DetectorConfig

    config = DetectorConfig(model_path="silero_vad.onnx", sample_rate=16000)

    # バッチ
    with Detector(config) as detector:
        segments = detector.detect(samples)

    # ストリーミング
    with Detector(config) as detector:
        for chunk in audio_source:
            for segment in detector.detect_stream(chunk):
                ...

- SileroOnnxBackend: 遅延インポート（onnxruntime 依存）
"""

from typing import TYPE_CHECKING

from .backends import InferenceBackend
from .config import DetectorConfig, LogLevel
from .detector import Detector
from .exceptions import (
    ConfigurationError,
    DetectorClosedError,
    InferenceError,
    InsufficientInputError,
    InvariantViolationError,
    SegmenterError,
)
from .segments import Segment, pair_stream_segments
from .trigger import RELEASE_GAP, HysteresisTrigger, SpeechEvent, TriggerState
from .window import WindowAccumulator

# SileroOnnxBackend は遅延インポート（onnxruntime 依存）
if TYPE_CHECKING:
    from .backends.silero_onnx import SileroOnnxBackend

__version__ = "0.1.0"

__all__ = [
    "Detector",
    "DetectorConfig",
    "LogLevel",
    "Segment",
    "pair_stream_segments",
    "InferenceBackend",
    "SileroOnnxBackend",
    "WindowAccumulator",
    "HysteresisTrigger",
    "SpeechEvent",
    "TriggerState",
    "RELEASE_GAP",
    # Errors
    "SegmenterError",
    "ConfigurationError",
    "InsufficientInputError",
    "InferenceError",
    "InvariantViolationError",
    "DetectorClosedError",
]


def __getattr__(name: str):
    """遅延インポート for SileroOnnxBackend (onnxruntime dependency)."""
    if name == "SileroOnnxBackend":
        from .backends.silero_onnx import SileroOnnxBackend

        return SileroOnnxBackend
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
