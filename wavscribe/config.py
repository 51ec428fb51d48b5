from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from wavscribe.errors import ConfigError


@dataclass(frozen=True)
class AudioConfig:
    expected_sample_rate: int = 16000
    repair_enabled: bool = True
    repair_tool: str = "ffmpeg"
    repair_timeout_sec: float = 120.0


@dataclass(frozen=True)
class EngineConfig:
    backend: str = "auto"  # auto | faster_whisper | hf
    model_path: str = "models/whisper-base.en"
    language: Optional[str] = "en"
    strategy: str = "beam_search"  # beam_search | greedy
    beam_size: int = 1
    patience: float = -1.0  # <= 0 -> engine default
    best_of: int = 5
    print_progress: bool = False
    print_timestamps: bool = True
    device: str = "cpu"  # cpu | cuda | auto
    compute_type: str = "int8"
    sample_rate: int = 16000


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    file: str = ""


@dataclass(frozen=True)
class AppConfig:
    audio: AudioConfig = field(default_factory=AudioConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _get(d: dict[str, Any], key: str, default: Any) -> Any:
    value = d.get(key, default)
    return default if value is None else value


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key, {}) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Config section '{key}' must be a mapping, got {type(value).__name__}")
    return value


def _resolve_model_path(value: str, base_dir: Path) -> str:
    # Bare names ("base.en") are model sizes for faster-whisper, not paths.
    p = Path(value).expanduser()
    if p.is_absolute():
        return p.as_posix()
    if len(p.parts) == 1:
        return value
    return (base_dir / p).resolve().as_posix()


def load_config(path: Path) -> AppConfig:
    path = Path(path)
    if not path.exists():
        return AppConfig()

    try:
        import yaml  # type: ignore
    except Exception as exc:  # pragma: no cover
        raise RuntimeError("PyYAML is required to read config.yaml") from exc

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Config root in {path} must be a mapping")

    audio_raw = _section(raw, "audio")
    engine_raw = _section(raw, "engine")
    logging_raw = _section(raw, "logging")

    defaults = EngineConfig()
    language = str(_get(engine_raw, "language", defaults.language or "")).strip()
    model_path = str(_get(engine_raw, "model_path", defaults.model_path))

    try:
        return AppConfig(
            audio=AudioConfig(
                expected_sample_rate=int(_get(audio_raw, "expected_sample_rate", 16000)),
                repair_enabled=bool(_get(audio_raw, "repair_enabled", True)),
                repair_tool=str(_get(audio_raw, "repair_tool", "ffmpeg")),
                repair_timeout_sec=float(_get(audio_raw, "repair_timeout_sec", 120.0)),
            ),
            engine=EngineConfig(
                backend=str(_get(engine_raw, "backend", "auto")).lower(),
                model_path=_resolve_model_path(model_path, path.resolve().parent),
                language=language or None,
                strategy=str(_get(engine_raw, "strategy", "beam_search")).lower(),
                beam_size=int(_get(engine_raw, "beam_size", 1)),
                patience=float(_get(engine_raw, "patience", -1.0)),
                best_of=int(_get(engine_raw, "best_of", 5)),
                print_progress=bool(_get(engine_raw, "print_progress", False)),
                print_timestamps=bool(_get(engine_raw, "print_timestamps", True)),
                device=str(_get(engine_raw, "device", "cpu")).lower(),
                compute_type=str(_get(engine_raw, "compute_type", "int8")),
                sample_rate=int(_get(audio_raw, "expected_sample_rate", 16000)),
            ),
            logging=LoggingConfig(
                level=str(_get(logging_raw, "level", "INFO")).upper(),
                file=str(_get(logging_raw, "file", "")),
            ),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid value in {path}: {exc}") from exc
