from __future__ import annotations

from typing import Any

import numpy as np

from wavscribe.config import EngineConfig
from wavscribe.errors import InferenceError, ModelLoadError
from wavscribe.types import TranscriptSegment


def decode_options(config: EngineConfig) -> dict[str, Any]:
    beam_size = 1 if config.strategy == "greedy" else max(1, int(config.beam_size))
    opts: dict[str, Any] = {
        "language": config.language or None,
        "beam_size": beam_size,
        "best_of": max(1, int(config.best_of)),
        "log_progress": bool(config.print_progress),
    }
    # whisper.cpp style: non-positive patience means "use the decoder default".
    if float(config.patience) > 0:
        opts["patience"] = float(config.patience)
    return opts


class FasterWhisperBackend:
    name = "faster_whisper"

    def __init__(self, config: EngineConfig) -> None:
        try:
            from faster_whisper import WhisperModel  # type: ignore
        except Exception as exc:
            raise ModelLoadError(
                "faster-whisper is not installed; install the `ml` extra (pip install -e .[ml])."
            ) from exc

        self._model_path = str(config.model_path)
        try:
            self._model = WhisperModel(
                self._model_path,
                device=str(config.device),
                compute_type=str(config.compute_type),
            )
        except Exception as exc:
            raise ModelLoadError(f"failed to load model '{self._model_path}': {exc}") from exc

    @property
    def model_path(self) -> str:
        return self._model_path

    def transcribe(self, audio: np.ndarray, config: EngineConfig) -> list[TranscriptSegment]:
        x = audio.astype(np.float32, copy=False).reshape(-1)
        if x.size == 0:
            return []

        try:
            segments, _info = self._model.transcribe(x, **decode_options(config))
            out = [
                TranscriptSegment(start_s=float(seg.start), end_s=float(seg.end), text=str(seg.text).strip())
                for seg in segments
            ]
        except Exception as exc:
            raise InferenceError(f"failed to run model: {exc}") from exc

        return sorted(out, key=lambda s: s.start_s)
