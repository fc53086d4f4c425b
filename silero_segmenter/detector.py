"""音声区間検出器

推論バックエンド・ウィンドウ分割・トリガー・セグメント組み立てを束ね、
バッチ（detect）とストリーミング（detect_stream）の両方の入口を提供する。
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Optional

import numpy as np

from .backends import InferenceBackend
from .config import DetectorConfig
from .exceptions import DetectorClosedError, InferenceError, InsufficientInputError
from .segments import BatchAssembler, Segment, stream_segments
from .trigger import HysteresisTrigger, SpeechEvent, TriggerState
from .window import WindowAccumulator

logger = logging.getLogger(__name__)


class Detector:
    """
    音声区間検出器

    Args:
        config: Detector 設定
        backend: 推論バックエンド（None で Silero ONNX）

    Raises:
        ConfigurationError: 設定が無効な場合

    Usage:
        config = DetectorConfig(model_path="silero_vad.onnx")

        # バッチ
        with Detector(config) as detector:
            for segment in detector.detect(samples):
                print(segment.speech_start_at, segment.speech_end_at)

        # ストリーミング
        with Detector(config) as detector:
            for chunk in audio_source:
                for segment in detector.detect_stream(chunk):
                    if segment.is_open:
                        print("speech start", segment.speech_start_at)
                    else:
                        print("speech end", segment.speech_end_at)

    Note:
        スレッドセーフではない。ストリームごとに Detector を 1 つ使うこと。
        detect と detect_stream を切り替える前、および別の録音を処理する前に
        reset() を呼ぶこと。
    """

    def __init__(
        self,
        config: DetectorConfig,
        backend: Optional[InferenceBackend] = None,
    ):
        config.validate()

        self._config = config
        self._window_size = config.window_size
        self._trigger = HysteresisTrigger(config)
        self._state = TriggerState()
        self._accumulator = WindowAccumulator(self._window_size)
        self._closed = False

        if backend is None:
            backend = self._create_default_backend()
        self._backend = backend

        logger.debug(
            f"Detector initialized with {self._backend.name} "
            f"(sample_rate={config.sample_rate}, window_size={self._window_size})"
        )

    def _create_default_backend(self) -> InferenceBackend:
        """デフォルトの Silero ONNX バックエンドを作成"""
        from .backends.silero_onnx import SileroOnnxBackend

        return SileroOnnxBackend(self._config)

    def detect(self, samples: np.ndarray) -> list[Segment]:
        """
        音声全体から発話区間を検出（バッチ）

        末尾のウィンドウに満たないサンプルは捨てる。
        状態はリセットしないので、新しい録音の前には reset() を呼ぶ。

        Args:
            samples: 音声データ（float32, mono）

        Returns:
            セグメント一覧。入力終端で終わっていない発話は speech_end_at == 0

        Raises:
            InsufficientInputError: 1 ウィンドウ分に満たない場合
            InferenceError: 推論に失敗した場合
        """
        self._ensure_open("detect")

        samples = np.asarray(samples, dtype=np.float32)
        if len(samples) < self._window_size:
            raise InsufficientInputError(self._window_size, len(samples))

        logger.debug(f"starting speech detection (samples={len(samples)})")

        assembler = BatchAssembler()
        for window in self._accumulator.iter_batch(samples):
            event = self._process_window(window)

            if event.has_start:
                logger.debug(f"speech start: {event.start_at:.3f}s")
            if event.has_end:
                logger.debug(f"speech end: {event.end_at:.3f}s")

            assembler.add(event)

        segments = assembler.segments
        logger.debug(f"speech detection done (segments={len(segments)})")

        return segments

    def detect_stream(self, chunk: np.ndarray) -> list[Segment]:
        """
        ストリーミング音声のチャンクを処理

        この呼び出しで発生したイベントだけを返す。発話開始は
        speech_end_at == 0 の Segment、発話終了は開始時刻付きの Segment。

        Args:
            chunk: 音声データ（float32, 長さ任意、0 も可）

        Returns:
            新しいセグメントイベントのリスト

        Raises:
            InferenceError: 推論に失敗した場合
        """
        self._ensure_open("detect_stream")

        segments: list[Segment] = []
        for window in self._accumulator.feed(chunk):
            segments.extend(stream_segments(self._process_window(window)))

        return segments

    def infer(self, window: np.ndarray) -> float:
        """
        1 ウィンドウを推論して音声確率を返す（トリガー状態は変更しない）

        Raises:
            InferenceError: ウィンドウ長が不正、または推論に失敗した場合
        """
        self._ensure_open("infer")

        window = np.asarray(window, dtype=np.float32)
        if len(window) != self._window_size:
            raise InferenceError(
                f"invalid samples length: expected {self._window_size}, "
                f"got {len(window)}"
            )
        return self._infer(window)

    def _infer(self, window: np.ndarray) -> float:
        try:
            return float(self._backend.infer(window))
        except InferenceError:
            raise
        except Exception as e:
            raise InferenceError(f"infer failed: {e}") from e

    def _process_window(self, window: np.ndarray) -> SpeechEvent:
        probability = self._infer(window)
        return self._trigger.advance(self._state, probability)

    def reset(self) -> None:
        """リカレント状態・残余バッファ・トリガー状態をすべてリセット"""
        self._ensure_open("reset")

        self._state.reset()
        self._accumulator.clear()
        self._backend.reset()

    def set_threshold(self, value: float) -> None:
        """音声判定閾値を変更（他の状態は維持）"""
        self._config = dataclasses.replace(self._config, threshold=value)
        self._trigger.config = self._config

    def close(self) -> None:
        """推論バックエンドを解放（2 回目以降は何もしない）"""
        if self._closed:
            return
        self._closed = True
        self._backend.close()
        logger.debug("Detector closed")

    def _ensure_open(self, operation: str) -> None:
        if self._closed:
            raise DetectorClosedError(operation)

    def __enter__(self) -> "Detector":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def config(self) -> DetectorConfig:
        return self._config

    @property
    def window_size(self) -> int:
        """ウィンドウ長（samples）"""
        return self._window_size

    @property
    def sample_rate(self) -> int:
        return self._config.sample_rate

    @property
    def current_time(self) -> float:
        """処理済み時間（秒）"""
        return self._state.curr_sample / self._config.sample_rate

    @property
    def triggered(self) -> bool:
        """発話区間内かどうか"""
        return self._state.triggered

    @property
    def pending_samples(self) -> int:
        """次のウィンドウ待ちで保持しているサンプル数"""
        return self._accumulator.pending

    @property
    def backend_name(self) -> str:
        """使用中のバックエンド名"""
        return self._backend.name
