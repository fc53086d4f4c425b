"""Detector 設定

時間パラメータはミリ秒で指定し、サンプル数への変換は整数演算で行う。
サンプリングレートからウィンドウサイズを決定する。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from .exceptions import ConfigurationError

SUPPORTED_SAMPLE_RATES = (8000, 16000)

# Silero VAD のリカレント状態 (2, 1, 128)
STATE_SHAPE = (2, 1, 128)


class LogLevel(IntEnum):
    """ONNX Runtime のログレベル（値は log_severity_level に対応）"""

    VERBOSE = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    FATAL = 4

    @classmethod
    def parse(cls, value: Any) -> "LogLevel":
        """名前または数値から LogLevel を取得（不明な値は WARN）"""
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, str):
            return cls.__members__.get(value.upper(), cls.WARN)
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.WARN


def window_size_for_sample_rate(sample_rate: int) -> int:
    """サンプリングレートに対応する推論ウィンドウ長（samples）"""
    if sample_rate == 8000:
        return 256
    return 512


@dataclass(frozen=True, slots=True)
class DetectorConfig:
    """
    Detector 設定

    Silero VAD のパラメータ対応:
    - threshold → threshold
    - min_silence_duration_ms → min_silence_duration_ms
    - speech_pad_ms → speech_pad_ms
    - neg_threshold → threshold - 0.15（固定、設定不可）

    Usage:
        config = DetectorConfig(model_path="silero_vad.onnx")

        config = DetectorConfig(
            model_path="silero_vad.onnx",
            sample_rate=8000,
            threshold=0.6,
            min_silence_duration_ms=100,
        )

        config = DetectorConfig.from_dict({"model_path": "silero_vad.onnx"})
    """

    # Silero VAD ONNX モデルのパス
    model_path: str = ""

    # 入力音声のサンプリングレート（8000 または 16000）
    sample_rate: int = 16000

    # 音声判定閾値
    threshold: float = 0.5

    # セグメントを分割するまでに待つ無音時間
    min_silence_duration_ms: int = 0

    # セグメント前後に付け足すパディング
    speech_pad_ms: int = 0

    # ONNX Runtime 環境のログレベル
    log_level: LogLevel = LogLevel.WARN

    def validate(self) -> None:
        """設定を検証し、最初に見つかった無効なフィールドで ConfigurationError を送出"""
        if not self.model_path:
            raise ConfigurationError(
                "invalid model_path: should not be empty", field="model_path"
            )

        if self.sample_rate not in SUPPORTED_SAMPLE_RATES:
            raise ConfigurationError(
                "invalid sample_rate: valid values are 8000 and 16000",
                field="sample_rate",
            )

        if not 0 < self.threshold < 1:
            raise ConfigurationError(
                "invalid threshold: should be in range (0, 1)", field="threshold"
            )

        if self.min_silence_duration_ms < 0:
            raise ConfigurationError(
                "invalid min_silence_duration_ms: should be a positive number",
                field="min_silence_duration_ms",
            )

        if self.speech_pad_ms < 0:
            raise ConfigurationError(
                "invalid speech_pad_ms: should be a positive number",
                field="speech_pad_ms",
            )

    @property
    def window_size(self) -> int:
        """推論ウィンドウ長（samples）"""
        return window_size_for_sample_rate(self.sample_rate)

    @property
    def min_silence_samples(self) -> int:
        return self.min_silence_duration_ms * self.sample_rate // 1000

    @property
    def speech_pad_samples(self) -> int:
        return self.speech_pad_ms * self.sample_rate // 1000

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> DetectorConfig:
        """辞書から設定を作成"""
        return cls(
            model_path=config.get("model_path", ""),
            sample_rate=config.get("sample_rate", 16000),
            threshold=config.get("threshold", 0.5),
            min_silence_duration_ms=config.get("min_silence_duration_ms", 0),
            speech_pad_ms=config.get("speech_pad_ms", 0),
            log_level=LogLevel.parse(config.get("log_level", LogLevel.WARN)),
        )

    def to_dict(self) -> dict[str, Any]:
        """辞書に変換"""
        return {
            "model_path": self.model_path,
            "sample_rate": self.sample_rate,
            "threshold": self.threshold,
            "min_silence_duration_ms": self.min_silence_duration_ms,
            "speech_pad_ms": self.speech_pad_ms,
            "log_level": self.log_level.name,
        }
