"""音声セグメント

トリガーイベントを Segment に変換する。
バッチでは 1 回の呼び出し全体のセグメント一覧を組み立て、
ストリーミングでは呼び出しごとの開始・終了イベントだけを返す。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .trigger import SpeechEvent


@dataclass(frozen=True, slots=True)
class Segment:
    """検出された音声セグメント（秒、ストリーム先頭からの相対時刻）"""

    speech_start_at: float
    # 0 の場合は終了未確定（ストリーミングの開始イベント）
    speech_end_at: float = 0.0

    @property
    def is_open(self) -> bool:
        return self.speech_end_at == 0

    @property
    def duration(self) -> float:
        """セグメント長（秒）。未確定の場合は 0"""
        if self.is_open:
            return 0.0
        return self.speech_end_at - self.speech_start_at

    def to_dict(self) -> dict[str, float]:
        return {
            "speech_start_at": self.speech_start_at,
            "speech_end_at": self.speech_end_at,
        }


class BatchAssembler:
    """
    バッチ用セグメント組み立て

    開始イベントで未確定セグメントを追加し、終了イベントで直前の
    未確定セグメント（開始時刻が一致するもの）を確定する。
    """

    def __init__(self) -> None:
        self._segments: list[Segment] = []

    def add(self, event: SpeechEvent) -> None:
        if event.has_start:
            self._segments.append(Segment(speech_start_at=event.start_at))

        if event.has_end:
            last = self._segments[-1] if self._segments else None
            if (
                last is not None
                and last.is_open
                and last.speech_start_at == event.end_start_at
            ):
                self._segments[-1] = Segment(
                    speech_start_at=last.speech_start_at,
                    speech_end_at=event.end_at,
                )
            else:
                self._segments.append(
                    Segment(
                        speech_start_at=event.end_start_at,
                        speech_end_at=event.end_at,
                    )
                )

    @property
    def segments(self) -> list[Segment]:
        return list(self._segments)


def stream_segments(event: SpeechEvent) -> list[Segment]:
    """1 イベントをストリーミング用の Segment（0〜2 個）に変換"""
    segments: list[Segment] = []
    if event.has_start:
        segments.append(Segment(speech_start_at=event.start_at))
    if event.has_end:
        segments.append(
            Segment(speech_start_at=event.end_start_at, speech_end_at=event.end_at)
        )
    return segments


def pair_stream_segments(segments: Iterable[Segment]) -> list[Segment]:
    """
    ストリーミング出力を発話区間の一覧に再構成

    終了イベントを同じ開始時刻を持つ直近の未確定セグメントと対応付ける。
    対応する終了がないセグメントは未確定のまま残す。

    Args:
        segments: detect_stream() の戻り値を順に連結したもの

    Returns:
        detect() と同じ形式のセグメント一覧
    """
    assembler = BatchAssembler()
    for segment in segments:
        if segment.is_open:
            assembler.add(SpeechEvent(has_start=True, start_at=segment.speech_start_at))
        else:
            assembler.add(
                SpeechEvent(
                    has_end=True,
                    end_at=segment.speech_end_at,
                    end_start_at=segment.speech_start_at,
                )
            )
    return assembler.segments
