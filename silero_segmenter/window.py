"""ウィンドウ分割

任意長のチャンクを固定長・非オーバーラップのウィンドウ列に変換する。
ストリーミングではウィンドウに満たない残余を次の呼び出しへ持ち越す。
"""

from __future__ import annotations

from typing import Iterator

import numpy as np


class WindowAccumulator:
    """
    ウィンドウアキュムレータ

    Args:
        window_size: ウィンドウ長（samples）

    Usage:
        acc = WindowAccumulator(512)

        # バッチ: 末尾の端数は捨てる
        for window in acc.iter_batch(samples):
            ...

        # ストリーミング: 端数は次の feed() に持ち越す
        for chunk in chunks:
            for window in acc.feed(chunk):
                ...
    """

    def __init__(self, window_size: int):
        if window_size <= 0:
            raise ValueError(f"window_size must be positive, got {window_size}")
        self._window_size = window_size

        # 残余バッファ（常に window_size 未満）
        self._buffer = np.zeros(window_size, dtype=np.float32)
        self._pending = 0

    @property
    def window_size(self) -> int:
        return self._window_size

    @property
    def pending(self) -> int:
        """持ち越し中のサンプル数"""
        return self._pending

    def iter_batch(self, samples: np.ndarray) -> Iterator[np.ndarray]:
        """入力全体をウィンドウに分割（残余バッファは使わない）"""
        samples = _as_float32(samples)
        size = self._window_size
        for i in range(0, len(samples) - size + 1, size):
            yield samples[i : i + size]

    def feed(self, chunk: np.ndarray) -> Iterator[np.ndarray]:
        """
        チャンクを追加し、完成したウィンドウを到着順に返す

        Args:
            chunk: 音声データ（float32、長さ任意）

        Yields:
            window_size samples のウィンドウ
        """
        chunk = _as_float32(chunk)
        if len(chunk) == 0:
            return

        size = self._window_size
        index = 0

        if self._pending > 0:
            needed = size - self._pending
            if len(chunk) < needed:
                self._buffer[self._pending : self._pending + len(chunk)] = chunk
                self._pending += len(chunk)
                return

            self._buffer[self._pending :] = chunk[:needed]
            self._pending = 0
            index = needed
            yield self._buffer.copy()

        while index + size <= len(chunk):
            yield chunk[index : index + size]
            index += size

        # 残余を保存
        remainder = len(chunk) - index
        if remainder > 0:
            self._buffer[:remainder] = chunk[index:]
            self._pending = remainder

    def clear(self) -> None:
        """残余バッファを破棄"""
        self._buffer.fill(0.0)
        self._pending = 0


def _as_float32(samples) -> np.ndarray:
    array = np.asarray(samples, dtype=np.float32)
    if array.ndim != 1:
        array = array.reshape(-1)
    return array
