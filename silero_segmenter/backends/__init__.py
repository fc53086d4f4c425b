"""推論バックエンド

Detector が消費する推論ポートを定義する。
InferenceBackend Protocol を実装することで独自の推論エンジンを差し替え可能。
"""

from __future__ import annotations

from typing import Protocol

import numpy as np


class InferenceBackend(Protocol):
    """
    推論バックエンドのプロトコル

    1 ウィンドウごとに音声確率を返し、リカレント状態を内部で更新する。

    Usage:
        class MyBackend:
            def infer(self, window: np.ndarray) -> float:
                # 推論処理（状態を更新）
                return probability

            def reset(self) -> None:
                # 状態リセット
                pass

            def close(self) -> None:
                # ネイティブリソース解放
                pass

            @property
            def name(self) -> str:
                return "my_backend"

        # Detector に渡す
        detector = Detector(config, backend=MyBackend())
    """

    def infer(self, window: np.ndarray) -> float:
        """
        1 ウィンドウを推論して音声確率を返す

        Args:
            window: float32 形式の音声データ（window_size samples）

        Returns:
            probability (0.0-1.0)

        Raises:
            InferenceError: 推論に失敗した場合
        """
        ...

    def reset(self) -> None:
        """リカレント状態をゼロに戻す（新しい音声ストリーム開始時に呼ぶ）"""
        ...

    def close(self) -> None:
        """セッションなどのリソースを解放"""
        ...

    @property
    def name(self) -> str:
        """バックエンド識別子（例: "silero_onnx"）"""
        ...


# onnxruntime は遅延インポート
def __getattr__(name: str):
    """遅延インポート for SileroOnnxBackend."""
    if name == "SileroOnnxBackend":
        from .silero_onnx import SileroOnnxBackend

        return SileroOnnxBackend
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["InferenceBackend", "SileroOnnxBackend"]
