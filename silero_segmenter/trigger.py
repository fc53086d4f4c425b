"""ヒステリシストリガー

ウィンドウごとの音声確率から発話の開始・継続・終了を判定する。
開始は threshold、終了判定は threshold - RELEASE_GAP を使い、
min_silence_duration_ms のデバウンスとパディングを適用する。
"""

from __future__ import annotations

from dataclasses import dataclass

from .config import DetectorConfig
from .exceptions import InvariantViolationError

# 終了判定に使う閾値の下げ幅（Silero: neg_threshold = threshold - 0.15）
RELEASE_GAP: float = 0.15


@dataclass(slots=True)
class TriggerState:
    """Detector ごとに 1 つ持つトリガー状態"""

    # 処理済みサンプル数（タイムスタンプ計算に使用）
    curr_sample: int = 0
    triggered: bool = False
    # 発話中に最初に閾値を下回ったサンプル位置（0 = 保留なし）
    temp_end: int = 0
    pending_start: float = 0.0
    pending_start_valid: bool = False

    def reset(self) -> None:
        self.curr_sample = 0
        self.triggered = False
        self.temp_end = 0
        self.pending_start = 0.0
        self.pending_start_valid = False


@dataclass(slots=True)
class SpeechEvent:
    """1 ウィンドウの処理結果"""

    has_start: bool = False
    start_at: float = 0.0
    has_end: bool = False
    end_at: float = 0.0
    end_start_at: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not (self.has_start or self.has_end)


class HysteresisTrigger:
    """
    ヒステリシス付きトリガー

    Args:
        config: Detector 設定

    Usage:
        trigger = HysteresisTrigger(config)
        state = TriggerState()

        for probability in probabilities:
            event = trigger.advance(state, probability)
            if event.has_start:
                ...
            if event.has_end:
                ...
    """

    def __init__(self, config: DetectorConfig):
        self.config = config

    @property
    def release_threshold(self) -> float:
        return self.config.threshold - RELEASE_GAP

    def advance(self, state: TriggerState, probability: float) -> SpeechEvent:
        """
        1 ウィンドウ分だけ状態を進める

        Args:
            state: トリガー状態（その場で更新）
            probability: このウィンドウの音声確率

        Returns:
            開始・終了イベント

        Raises:
            InvariantViolationError: 開始していない発話の終了を検出した場合
        """
        config = self.config
        window_size = config.window_size
        sample_rate = config.sample_rate
        speech_pad_samples = config.speech_pad_samples
        threshold = config.threshold

        event = SpeechEvent()
        state.curr_sample += window_size

        if probability >= threshold and state.temp_end != 0:
            state.temp_end = 0

        if probability >= threshold and not state.triggered:
            state.triggered = True
            # パディングで負になる場合は 0 にクランプ
            start_at = max(
                0.0,
                (state.curr_sample - window_size - speech_pad_samples) / sample_rate,
            )
            state.pending_start = start_at
            state.pending_start_valid = True

            event.has_start = True
            event.start_at = start_at

        if probability < threshold - RELEASE_GAP and state.triggered:
            if state.temp_end == 0:
                state.temp_end = state.curr_sample

            # 無音がまだ短い
            if state.curr_sample - state.temp_end < config.min_silence_samples:
                return event

            end_at = (state.temp_end + speech_pad_samples) / sample_rate
            state.temp_end = 0
            state.triggered = False

            if not state.pending_start_valid:
                raise InvariantViolationError("unexpected speech end")

            event.has_end = True
            event.end_at = end_at
            event.end_start_at = state.pending_start
            state.pending_start_valid = False

        return event
