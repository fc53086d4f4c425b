"""
セグメンテーションエラーの例外クラス階層

設定・入力・推論・内部状態それぞれのエラーを分類するための例外クラスを定義。
"""

from __future__ import annotations

from typing import Optional


class SegmenterError(Exception):
    """silero_segmenter の基底例外クラス"""

    pass


class ConfigurationError(SegmenterError, ValueError):
    """無効な設定（モデルパス、サンプリングレート、閾値、時間パラメータ）"""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class InsufficientInputError(SegmenterError):
    """バッチ検出に 1 ウィンドウ分のサンプルが足りない"""

    def __init__(self, required: int, received: int):
        self.required = required
        self.received = received
        super().__init__(
            f"not enough samples: need at least {required}, got {received}"
        )


class InferenceError(SegmenterError):
    """推論バックエンドの失敗（モデル実行エラー、不正なウィンドウ長）"""

    pass


class InvariantViolationError(SegmenterError):
    """開始イベントのない終了イベントなど、内部状態の不整合"""

    pass


class DetectorClosedError(SegmenterError):
    """close() 済みの Detector に対する操作"""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"cannot {operation}: detector is closed")
