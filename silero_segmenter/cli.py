"""CLI for silero-segmenter - Speech segment detection with Silero VAD."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from .audio import load_audio, stream_audio
from .config import DetectorConfig, LogLevel
from .detector import Detector
from .exceptions import SegmenterError

__all__ = ["main"]


def _resolve_model_path(model: str | None) -> str | None:
    """--model 未指定の場合は silero-vad 同梱モデルを探す"""
    if model:
        return model

    from .backends.silero_onnx import find_bundled_model

    bundled = find_bundled_model()
    return str(bundled) if bundled is not None else None


def _build_config(args: argparse.Namespace) -> DetectorConfig:
    return DetectorConfig(
        model_path=_resolve_model_path(args.model) or "",
        sample_rate=args.rate,
        threshold=args.threshold,
        min_silence_duration_ms=args.min_silence_ms,
        speech_pad_ms=args.speech_pad_ms,
        log_level=LogLevel.parse(args.ort_log_level),
    )


def _create_detector(config: DetectorConfig) -> Detector:
    return Detector(config)


# =============================================================================
# Subcommand: detect
# =============================================================================

def cmd_detect(args: argparse.Namespace) -> int:
    """Detect speech segments over a whole file."""
    try:
        config = _build_config(args)
        samples = load_audio(args.input_file, sample_rate=config.sample_rate)

        with _create_detector(config) as detector:
            segments = detector.detect(samples)

        if args.as_json:
            print(json.dumps([s.to_dict() for s in segments], indent=2))
            return 0

        if not segments:
            print("No speech detected.")
            return 0

        for segment in segments:
            end = "open" if segment.is_open else f"{segment.speech_end_at:.3f}s"
            print(f"[{segment.speech_start_at:.3f}s - {end}]")

        return 0
    except ImportError as e:
        print(f"Error: Missing dependency: {e}", file=sys.stderr)
        return 1
    except FileNotFoundError:
        print(f"Error: File not found: {args.input_file}", file=sys.stderr)
        return 1
    except SegmenterError as e:
        print(f"Error during detection: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


# =============================================================================
# Subcommand: stream
# =============================================================================

def cmd_stream(args: argparse.Namespace) -> int:
    """Feed a file through the streaming detector chunk by chunk."""
    if args.chunk <= 0:
        print("Error: --chunk must be positive", file=sys.stderr)
        return 1

    try:
        config = _build_config(args)
        chunks = stream_audio(
            args.input_file, args.chunk, sample_rate=config.sample_rate
        )

        with _create_detector(config) as detector:
            for chunk in chunks:
                for segment in detector.detect_stream(chunk):
                    if segment.is_open:
                        print(f"speech start: {segment.speech_start_at:.3f}s")
                        continue
                    print(
                        f"speech end: {segment.speech_end_at:.3f}s "
                        f"(start {segment.speech_start_at:.3f}s)"
                    )

        return 0
    except ImportError as e:
        print(f"Error: Missing dependency: {e}", file=sys.stderr)
        return 1
    except FileNotFoundError:
        print(f"Error: File not found: {args.input_file}", file=sys.stderr)
        return 1
    except SegmenterError as e:
        print(f"Error during detection: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


# =============================================================================
# Main entry point
# =============================================================================

def _add_detector_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "input_file",
        help="Input audio file (float32 LE .pcm/.raw/.f32, or any soundfile format)",
    )
    parser.add_argument(
        "--model",
        help="Path to silero_vad.onnx (default: model bundled with silero-vad)",
    )
    parser.add_argument(
        "--rate",
        type=int,
        choices=[8000, 16000],
        default=16000,
        help="Sample rate (default: 16000)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=0.5,
        help="Speech probability threshold (default: 0.5)",
    )
    parser.add_argument(
        "--min-silence-ms",
        type=int,
        default=0,
        help="Silence duration before a segment is closed (default: 0)",
    )
    parser.add_argument(
        "--speech-pad-ms",
        type=int,
        default=0,
        help="Padding added to both ends of each segment (default: 0)",
    )
    parser.add_argument(
        "--ort-log-level",
        choices=[level.name for level in LogLevel],
        default=LogLevel.WARN.name,
        help="ONNX Runtime log level (default: WARN)",
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="silero-segmenter",
        description="Speech segment detection with Silero VAD.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # detect command
    detect_parser = subparsers.add_parser("detect", help="Detect segments in a whole file")
    _add_detector_arguments(detect_parser)
    detect_parser.add_argument(
        "--as-json",
        action="store_true",
        help="Output as JSON",
    )
    detect_parser.set_defaults(func=cmd_detect)

    # stream command
    stream_parser = subparsers.add_parser("stream", help="Stream a file in chunks")
    _add_detector_arguments(stream_parser)
    stream_parser.add_argument(
        "--chunk",
        type=int,
        default=1600,
        help="Chunk size in samples (default: 1600)",
    )
    stream_parser.set_defaults(func=cmd_stream)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    # No command specified - show help
    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
