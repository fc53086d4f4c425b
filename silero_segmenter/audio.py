"""音声入力ヘルパー

float32 LE の生 PCM ファイルと、soundfile が読める音声ファイルを
Detector に渡せる mono float32 配列として読み込む。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Union

import numpy as np

logger = logging.getLogger(__name__)

# 生 PCM（float32 little-endian）として扱う拡張子
RAW_PCM_SUFFIXES = (".pcm", ".raw", ".f32")

BYTES_PER_SAMPLE = 4


def pcm_bytes_to_float32(data: bytes) -> np.ndarray:
    """float32 little-endian バイト列をサンプル配列に変換（端数バイトは捨てる）"""
    usable = len(data) - len(data) % BYTES_PER_SAMPLE
    return np.frombuffer(data[:usable], dtype="<f4").astype(np.float32)


def read_pcm_file(path: Union[Path, str]) -> np.ndarray:
    """float32 LE の生 PCM ファイルを読み込む"""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Audio file not found: {path}")
    return pcm_bytes_to_float32(path.read_bytes())


def iter_pcm_file(path: Union[Path, str], chunk_size: int) -> Iterator[np.ndarray]:
    """
    float32 LE の生 PCM ファイルを chunk_size samples ずつ読み込む

    ファイル全体をメモリに載せずに順次読み込む。最後のチャンクは短い場合がある。

    Raises:
        FileNotFoundError: ファイルが存在しない場合
        ValueError: chunk_size が 0 以下の場合
    """
    path = Path(path)
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if not path.exists():
        raise FileNotFoundError(f"Audio file not found: {path}")
    return _read_pcm_chunks(path, chunk_size * BYTES_PER_SAMPLE)


def _read_pcm_chunks(path: Path, chunk_bytes: int) -> Iterator[np.ndarray]:
    with open(path, "rb") as f:
        while True:
            data = f.read(chunk_bytes)
            if not data:
                break
            yield pcm_bytes_to_float32(data)


def load_audio(path: Union[Path, str], sample_rate: int = 16000) -> np.ndarray:
    """
    音声ファイルを読み込む

    生 PCM はそのまま（sample_rate で録音済みとみなす）、それ以外は soundfile で
    読み込み、モノラル化とリサンプリングを行う。

    Args:
        path: 音声ファイルパス
        sample_rate: 出力サンプリングレート

    Returns:
        音声データ（float32, mono）
    """
    path = Path(path)
    if path.suffix.lower() in RAW_PCM_SUFFIXES:
        audio = read_pcm_file(path)
        logger.info(f"Loaded raw PCM: {path.name} ({len(audio)} samples)")
        return audio

    import soundfile as sf

    if not path.exists():
        raise FileNotFoundError(f"Audio file not found: {path}")

    audio, file_sample_rate = sf.read(path, dtype="float32")

    # モノラル化（ステレオの場合は平均）
    if len(audio.shape) > 1:
        audio = np.mean(audio, axis=1).astype(np.float32)

    if file_sample_rate != sample_rate:
        audio = resample(audio, file_sample_rate, sample_rate)

    logger.info(
        f"Loaded audio: {path.name} "
        f"({len(audio) / sample_rate:.2f}s, {sample_rate}Hz)"
    )
    return audio


def resample(audio: np.ndarray, orig_sr: int, target_sr: int) -> np.ndarray:
    """
    リサンプリング

    効率的な整数比リサンプリングを使用。
    """
    from math import gcd

    from scipy import signal

    g = gcd(orig_sr, target_sr)
    up = target_sr // g
    down = orig_sr // g

    resampled = signal.resample_poly(audio, up, down)
    return resampled.astype(np.float32)


def iter_chunks(samples: np.ndarray, chunk_size: int) -> Iterator[np.ndarray]:
    """chunk_size ごとに分割（最後のチャンクは短い場合がある）"""
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    for offset in range(0, len(samples), chunk_size):
        yield samples[offset : offset + chunk_size]


def stream_audio(
    path: Union[Path, str], chunk_size: int, sample_rate: int = 16000
) -> Iterator[np.ndarray]:
    """
    音声ファイルをチャンク単位で返す

    生 PCM はディスクから順次読み込み、それ以外は load_audio() で読み込んでから分割する。
    """
    path = Path(path)
    if path.suffix.lower() in RAW_PCM_SUFFIXES:
        return iter_pcm_file(path, chunk_size)
    return iter_chunks(load_audio(path, sample_rate=sample_rate), chunk_size)
