"""Silero VAD ONNX バックエンド

ONNX Runtime で Silero VAD v5 モデルを直接実行する。
InferenceBackend Protocol を実装。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import numpy as np

from ..config import STATE_SHAPE, DetectorConfig, LogLevel
from ..exceptions import ConfigurationError, InferenceError

logger = logging.getLogger(__name__)


class SileroOnnxBackend:
    """
    Silero VAD ONNX バックエンド

    InferenceBackend Protocol を実装。
    256 samples (8kHz) / 512 samples (16kHz) のウィンドウを処理して確率を返す。
    直前の入力の末尾（16kHz: 64, 8kHz: 32 samples）を次のウィンドウの先頭に付けて推論する。

    Args:
        config: Detector 設定（model_path, sample_rate, log_level を使用）

    Raises:
        ImportError: onnxruntime がインストールされていない場合
        ConfigurationError: モデルファイルが存在しない場合

    Usage:
        with SileroOnnxBackend(config) as backend:
            probability = backend.infer(window)

            # 新しいストリーム開始時
            backend.reset()
    """

    # 16kHz: 64 samples, 8kHz: 32 samples
    CONTEXT_SIZES = {8000: 32, 16000: 64}

    def __init__(self, config: DetectorConfig):
        self._model_path = Path(config.model_path)
        self._sample_rate = config.sample_rate
        self._window_size = config.window_size
        self._context_size = self.CONTEXT_SIZES[config.sample_rate]
        self._log_level = LogLevel.parse(config.log_level)
        self._session: Any = None

        self._state = np.zeros(STATE_SHAPE, dtype=np.float32)
        self._input = np.zeros(
            (1, self._context_size + self._window_size), dtype=np.float32
        )
        self._rate = np.array(self._sample_rate, dtype=np.int64)

        self._initialize()

    def _initialize(self) -> None:
        """セッションを初期化"""
        try:
            import onnxruntime as ort
        except ImportError as e:
            raise ImportError(
                "onnxruntime is required for Silero VAD. "
                "Install with: pip install silero-segmenter[silero]"
            ) from e

        if not self._model_path.is_file():
            raise ConfigurationError(
                f"invalid model_path: file not found: {self._model_path}",
                field="model_path",
            )

        options = ort.SessionOptions()
        options.intra_op_num_threads = 1
        options.inter_op_num_threads = 1
        options.graph_optimization_level = ort.GraphOptimizationLevel.ORT_ENABLE_ALL
        options.log_severity_level = int(self._log_level)

        try:
            self._session = ort.InferenceSession(
                str(self._model_path),
                sess_options=options,
                providers=["CPUExecutionProvider"],
            )
        except Exception as e:
            raise InferenceError(f"failed to create session: {e}") from e

        logger.info(
            f"Silero VAD loaded ({self._model_path.name}, "
            f"sample_rate={self._sample_rate})"
        )

    def infer(self, window: np.ndarray) -> float:
        """
        1 ウィンドウを推論して音声確率を返す

        Args:
            window: float32 形式の音声データ（window_size samples）

        Returns:
            probability (0.0-1.0)
        """
        if self._session is None:
            raise InferenceError("session is closed")

        if len(window) != self._window_size:
            raise InferenceError(
                f"invalid samples length: expected {self._window_size}, "
                f"got {len(window)}"
            )

        self._input[0, self._context_size :] = window

        try:
            prob, state = self._session.run(
                ["output", "stateN"],
                {"input": self._input, "state": self._state, "sr": self._rate},
            )
        except Exception as e:
            raise InferenceError(f"failed to run: {e}") from e

        self._state = np.asarray(state, dtype=np.float32).reshape(STATE_SHAPE)
        # 末尾を次のウィンドウのコンテキストとして保持
        self._input[0, : self._context_size] = self._input[0, -self._context_size :]

        return float(np.asarray(prob).reshape(-1)[0])

    def reset(self) -> None:
        """リカレント状態とコンテキストをゼロに戻す"""
        self._state.fill(0.0)
        self._input.fill(0.0)

    def close(self) -> None:
        """セッションを解放"""
        if self._session is not None:
            self._session = None
            logger.info("Silero VAD session released")

    def __enter__(self) -> "SileroOnnxBackend":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def state(self) -> np.ndarray:
        """現在のリカレント状態（コピー）"""
        return self._state.copy()

    @property
    def window_size(self) -> int:
        return self._window_size

    @property
    def name(self) -> str:
        """バックエンド識別子"""
        return "silero_onnx"

    @property
    def config(self) -> dict:
        """レポート用の設定パラメータを返す"""
        return {
            "model_path": str(self._model_path),
            "sample_rate": self._sample_rate,
            "log_level": self._log_level.name,
        }


def find_bundled_model() -> Optional[Path]:
    """silero-vad パッケージに同梱された ONNX モデルのパスを返す（なければ None）"""
    try:
        from importlib import resources

        candidate = resources.files("silero_vad") / "data" / "silero_vad.onnx"
    except ModuleNotFoundError:
        return None

    path = Path(str(candidate))
    return path if path.is_file() else None
