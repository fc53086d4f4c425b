"""Shared fixtures for silero_segmenter tests.

推論バックエンドをモックに差し替え、確率列を直接与えてステートマシンを検証する。
"""

from __future__ import annotations

from typing import Callable, Optional

import numpy as np
import pytest

from silero_segmenter import Detector, DetectorConfig


class ScriptedBackend:
    """呼び出し順に固定の確率を返すモックバックエンド"""

    def __init__(
        self,
        probabilities: Optional[list[float]] = None,
        fail_at: Optional[int] = None,
        name: str = "scripted",
    ):
        self._probabilities = probabilities or []
        self._fail_at = fail_at
        self._index = 0
        self._name = name
        self.windows: list[np.ndarray] = []
        self.reset_count = 0
        self.closed = False

    def infer(self, window: np.ndarray) -> float:
        if self._fail_at is not None and self._index == self._fail_at:
            raise RuntimeError("mock inference failure")
        self.windows.append(np.array(window, copy=True))
        if self._index < len(self._probabilities):
            prob = self._probabilities[self._index]
            self._index += 1
            return prob
        self._index += 1
        return 0.0

    def reset(self) -> None:
        self.reset_count += 1
        self._index = 0

    def close(self) -> None:
        self.closed = True

    @property
    def name(self) -> str:
        return self._name


class AmplitudeBackend:
    """ウィンドウの最大振幅をそのまま確率として返すモックバックエンド

    確率が呼び出し順ではなく音声データに依存するため、
    チャンク分割の違いによるウィンドウのずれを検出できる。
    """

    def __init__(self) -> None:
        self.calls = 0
        self.reset_count = 0
        self.closed = False

    def infer(self, window: np.ndarray) -> float:
        self.calls += 1
        return float(np.max(np.abs(window)))

    def reset(self) -> None:
        self.reset_count += 1

    def close(self) -> None:
        self.closed = True

    @property
    def name(self) -> str:
        return "amplitude"


def _make_samples(
    probabilities: list[float], window_size: int = 512, tail: int = 0
) -> np.ndarray:
    """各ウィンドウの振幅が確率になる音声を作成（AmplitudeBackend 用）"""
    samples = np.repeat(np.asarray(probabilities, dtype=np.float32), window_size)
    if tail:
        samples = np.concatenate([samples, np.zeros(tail, dtype=np.float32)])
    return samples


@pytest.fixture
def make_config() -> Callable[..., DetectorConfig]:
    """テスト用設定（model_path はダミー）"""

    def _make(**overrides) -> DetectorConfig:
        params = {
            "model_path": "silero_vad.onnx",
            "sample_rate": 16000,
            "threshold": 0.5,
            "min_silence_duration_ms": 0,
            "speech_pad_ms": 0,
        }
        params.update(overrides)
        return DetectorConfig(**params)

    return _make


@pytest.fixture
def scripted_detector(make_config) -> Callable[..., tuple[Detector, ScriptedBackend]]:
    """確率列を与えた Detector を作成"""

    def _make(probabilities: list[float], **overrides) -> tuple[Detector, ScriptedBackend]:
        backend = ScriptedBackend(probabilities)
        return Detector(make_config(**overrides), backend=backend), backend

    return _make


@pytest.fixture
def amplitude_detector(make_config) -> Callable[..., Detector]:
    """AmplitudeBackend を使う Detector を作成"""

    def _make(**overrides) -> Detector:
        return Detector(make_config(**overrides), backend=AmplitudeBackend())

    return _make


@pytest.fixture
def make_samples() -> Callable[..., np.ndarray]:
    return _make_samples
