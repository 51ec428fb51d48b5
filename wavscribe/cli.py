from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from wavscribe.config import AppConfig, load_config
from wavscribe.errors import ConfigError, WavscribeError
from wavscribe.logging_config import setup_logging
from wavscribe.pipeline import transcribe_file
from wavscribe.reports import format_transcript, write_json_report, write_text_report
from wavscribe.types import TranscriptionResult

logger = logging.getLogger("wavscribe")

DEFAULT_CONFIG = Path(__file__).resolve().parents[1] / "config.yaml"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wavscribe",
        description="Repair, normalize and transcribe a PCM WAV file with a Whisper model.",
    )
    parser.add_argument("input", nargs="?", default="audio.wav", help="WAV file to transcribe (default: audio.wav)")
    parser.add_argument("--config", default=str(DEFAULT_CONFIG), help="Path to config.yaml")
    parser.add_argument("--model", default=None, help="Model path or faster-whisper size name")
    parser.add_argument("--backend", choices=("auto", "faster_whisper", "hf"), default=None)
    parser.add_argument("--language", default=None, help="Language hint, e.g. en (use 'auto' to detect)")
    parser.add_argument("--strategy", choices=("beam_search", "greedy"), default=None)
    parser.add_argument("--beam-size", type=int, default=None)
    parser.add_argument(
        "--repair",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Repair unreadable containers in place with ffmpeg (default: from config)",
    )
    parser.add_argument("--json-out", default=None, help="Also write a JSON report to this path")
    parser.add_argument("--text-out", default=None, help="Also write the transcript to this path")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
    return parser


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    engine = config.engine
    if args.model:
        engine = replace(engine, model_path=str(args.model))
    if args.backend:
        engine = replace(engine, backend=str(args.backend))
    if args.language:
        lang = str(args.language).strip().lower()
        engine = replace(engine, language=None if lang == "auto" else lang)
    if args.strategy:
        engine = replace(engine, strategy=str(args.strategy))
    if args.beam_size is not None:
        engine = replace(engine, beam_size=int(args.beam_size))

    audio = config.audio
    if args.repair is not None:
        audio = replace(audio, repair_enabled=bool(args.repair))

    logging_cfg = config.logging
    if args.log_level:
        logging_cfg = replace(logging_cfg, level=str(args.log_level).upper())

    return replace(config, audio=audio, engine=engine, logging=logging_cfg)


def print_result(result: TranscriptionResult, *, timestamps: bool = True) -> None:
    print(result.format.describe())
    print(f"Loaded {result.sample_count} audio samples")
    print(f"Transcription completed in {result.elapsed_sec:.2f}s")
    print()
    print("Transcription results:")
    if timestamps:
        body = format_transcript(result.segments)
    else:
        body = "\n".join(seg.text for seg in result.segments)
    if body:
        print(body)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = apply_overrides(load_config(Path(args.config)), args)
    except ConfigError as exc:
        setup_logging("INFO")
        logger.error("%s", exc)
        return 2

    setup_logging(config.logging.level, config.logging.file or None)

    try:
        result = transcribe_file(Path(args.input), config=config)
    except WavscribeError as exc:
        logger.error("%s", exc)
        return 1

    print_result(result, timestamps=bool(config.engine.print_timestamps))

    if args.json_out:
        write_json_report(result, Path(args.json_out))
        logger.info("JSON report written to %s", args.json_out)
    if args.text_out:
        write_text_report(result, Path(args.text_out))
        logger.info("Transcript written to %s", args.text_out)
    return 0
