#!/usr/bin/env python3
"""ストリーミング検出の例.

float32 LE の生 PCM ファイルをチャンクごとに Detector.detect_stream() へ渡し、
発話の開始・終了イベントを表示します。

使用方法:
    python examples/stream_file.py path/to/samples.pcm

環境変数:
    SILERO_MODEL: silero_vad.onnx のパス（未指定なら silero-vad 同梱モデル）
    SILERO_SAMPLE_RATE: サンプリングレート（8000/16000）、デフォルト: 16000
    SILERO_THRESHOLD: 音声判定閾値、デフォルト: 0.5
    SILERO_CHUNK: チャンクサイズ（samples）、デフォルト: 1600
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

# プロジェクトルートをパスに追加
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def main() -> None:
    """メイン処理."""
    from silero_segmenter import Detector, DetectorConfig
    from silero_segmenter.audio import iter_pcm_file
    from silero_segmenter.backends.silero_onnx import find_bundled_model

    if len(sys.argv) < 2:
        print("Usage: python examples/stream_file.py <samples.pcm>")
        sys.exit(1)

    pcm_path = Path(sys.argv[1])
    if not pcm_path.exists():
        print(f"Error: PCM file not found: {pcm_path}")
        sys.exit(1)

    model_path = os.getenv("SILERO_MODEL") or find_bundled_model()
    if model_path is None:
        print("Error: set SILERO_MODEL or install silero-vad")
        sys.exit(1)

    config = DetectorConfig(
        model_path=str(model_path),
        sample_rate=int(os.getenv("SILERO_SAMPLE_RATE", "16000")),
        threshold=float(os.getenv("SILERO_THRESHOLD", "0.5")),
    )
    chunk_size = int(os.getenv("SILERO_CHUNK", "1600"))

    with Detector(config) as detector:
        for chunk in iter_pcm_file(pcm_path, chunk_size):
            for segment in detector.detect_stream(chunk):
                if segment.is_open:
                    print(f"speech start: {segment.speech_start_at:.3f}s")
                    continue
                print(
                    f"speech end: {segment.speech_end_at:.3f}s "
                    f"(start {segment.speech_start_at:.3f}s)"
                )


if __name__ == "__main__":
    main()
