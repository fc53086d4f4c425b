"""Tests for the silero-segmenter CLI."""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest

from silero_segmenter import Detector, cli

from conftest import AmplitudeBackend


@pytest.fixture
def pcm_file(tmp_path: Path, make_samples) -> Path:
    """[0.1, 0.1, 0.6, 0.6, 0.1, 0.1] の確率になる生 PCM ファイル"""
    path = tmp_path / "samples.pcm"
    samples = make_samples([0.1, 0.1, 0.6, 0.6, 0.1, 0.1])
    path.write_bytes(samples.astype("<f4").tobytes())
    return path


@pytest.fixture
def mock_detector(monkeypatch: pytest.MonkeyPatch) -> None:
    """CLI が作る Detector のバックエンドをモックに差し替え"""
    monkeypatch.setattr(
        cli, "_create_detector", lambda config: Detector(config, backend=AmplitudeBackend())
    )


class TestCLISubcommands:
    """CLI サブコマンドテスト"""

    def test_cli_no_command_shows_help(self, capsys: pytest.CaptureFixture) -> None:
        """No command shows help and returns 0."""
        result = cli.main([])
        captured = capsys.readouterr()
        assert result == 0
        assert "silero-segmenter" in captured.out
        assert "detect" in captured.out
        assert "stream" in captured.out

    def test_detect(self, pcm_file, mock_detector, capsys) -> None:
        """detect はセグメント一覧を表示"""
        result = cli.main(["detect", str(pcm_file), "--model", "model.onnx"])
        captured = capsys.readouterr()
        assert result == 0
        assert "[0.064s - 0.160s]" in captured.out

    def test_detect_as_json(self, pcm_file, mock_detector, capsys) -> None:
        """--as-json で JSON 出力"""
        result = cli.main(["detect", str(pcm_file), "--model", "model.onnx", "--as-json"])
        captured = capsys.readouterr()
        assert result == 0
        data = json.loads(captured.out)
        assert len(data) == 1
        assert data[0]["speech_start_at"] == pytest.approx(0.064)
        assert data[0]["speech_end_at"] == pytest.approx(0.16)

    def test_detect_no_speech(self, tmp_path, mock_detector, capsys) -> None:
        """音声がなければメッセージを表示"""
        path = tmp_path / "silence.pcm"
        path.write_bytes(np.zeros(2048, dtype="<f4").tobytes())
        result = cli.main(["detect", str(path), "--model", "model.onnx"])
        assert result == 0
        assert "No speech detected." in capsys.readouterr().out

    def test_detect_too_short(self, tmp_path, mock_detector, capsys) -> None:
        """1 ウィンドウ未満はエラー"""
        path = tmp_path / "short.pcm"
        path.write_bytes(np.zeros(100, dtype="<f4").tobytes())
        result = cli.main(["detect", str(path), "--model", "model.onnx"])
        assert result == 1
        assert "not enough samples" in capsys.readouterr().err

    @pytest.mark.parametrize("chunk", ["100", "1600"])
    def test_stream(self, pcm_file, mock_detector, capsys, chunk) -> None:
        """stream は開始・終了イベントを表示"""
        result = cli.main(
            ["stream", str(pcm_file), "--model", "model.onnx", "--chunk", chunk]
        )
        captured = capsys.readouterr()
        assert result == 0
        lines = captured.out.strip().splitlines()
        assert lines == [
            "speech start: 0.064s",
            "speech end: 0.160s (start 0.064s)",
        ]

    def test_stream_invalid_chunk(self, pcm_file, capsys) -> None:
        """--chunk は正の値"""
        result = cli.main(["stream", str(pcm_file), "--model", "m.onnx", "--chunk", "0"])
        assert result == 1
        assert "--chunk must be positive" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, mock_detector, capsys) -> None:
        """存在しないファイル"""
        result = cli.main(["detect", str(tmp_path / "missing.pcm"), "--model", "m.onnx"])
        assert result == 1
        assert "File not found" in capsys.readouterr().err

    def test_invalid_threshold(self, pcm_file, mock_detector, capsys) -> None:
        """無効な閾値は設定エラー"""
        result = cli.main(
            ["detect", str(pcm_file), "--model", "m.onnx", "--threshold", "1.5"]
        )
        assert result == 1
        assert "invalid threshold" in capsys.readouterr().err

    def test_missing_model(self, pcm_file, monkeypatch, capsys) -> None:
        """モデルが見つからない場合は設定エラー"""
        monkeypatch.setattr(cli, "_resolve_model_path", lambda model: None)
        result = cli.main(["detect", str(pcm_file)])
        assert result == 1
        assert "model_path" in capsys.readouterr().err

    @pytest.mark.parametrize("command", ["detect", "stream"])
    def test_unreadable_audio_file(self, tmp_path, mock_detector, capsys, command) -> None:
        """読み込めない音声ファイルはエラー終了（トレースバックを出さない）"""
        pytest.importorskip("soundfile")
        path = tmp_path / "broken.wav"
        path.write_bytes(b"not a wav file at all")
        result = cli.main([command, str(path), "--model", "m.onnx"])
        captured = capsys.readouterr()
        assert result == 1
        assert "Error:" in captured.err
        assert captured.out == ""

    def test_stream_missing_file(self, tmp_path, mock_detector, capsys) -> None:
        """stream でも存在しないファイルはエラー"""
        result = cli.main(["stream", str(tmp_path / "missing.pcm"), "--model", "m.onnx"])
        assert result == 1
        assert "File not found" in capsys.readouterr().err
