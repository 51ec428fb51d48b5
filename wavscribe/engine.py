from __future__ import annotations

import logging
from typing import Optional, Protocol

import numpy as np

from wavscribe.config import EngineConfig
from wavscribe.errors import ModelLoadError
from wavscribe.inference import FasterWhisperBackend, HfWhisperBackend
from wavscribe.types import TranscriptSegment

logger = logging.getLogger(__name__)

BACKENDS = {
    "faster_whisper": FasterWhisperBackend,
    "hf": HfWhisperBackend,
}

AUTO_ORDER = ("faster_whisper", "hf")


class Transcriber(Protocol):
    @property
    def backend(self) -> str: ...

    def transcribe(
        self, audio: np.ndarray, config: Optional[EngineConfig] = None
    ) -> list[TranscriptSegment]: ...


class TranscriptionEngine:
    """Loads one recognition backend and runs it on normalized buffers.

    The model is loaded once, in the constructor. ``backend="auto"`` tries
    faster-whisper first and falls back to the transformers pipeline.
    """

    def __init__(self, config: EngineConfig) -> None:
        self._config = config
        self._requested_backend = str(config.backend).lower()
        self._backend_note = ""

        if self._requested_backend == "auto":
            candidates = AUTO_ORDER
        elif self._requested_backend in BACKENDS:
            candidates = (self._requested_backend,)
        else:
            raise ModelLoadError(
                f"Unknown backend '{self._requested_backend}' (expected auto, {', '.join(BACKENDS)})"
            )

        errors: list[str] = []
        self._impl = None
        for name in candidates:
            try:
                self._impl = BACKENDS[name](config)
                self._backend_in_use = name
                break
            except ModelLoadError as exc:
                errors.append(f"{name}: {exc}")
                logger.debug("Backend %s unavailable: %s", name, exc)

        if self._impl is None:
            raise ModelLoadError("failed to load model; " + "; ".join(errors))

        if errors:
            self._backend_note = "; ".join(errors)
            logger.warning("Using %s backend (%s)", self._backend_in_use, self._backend_note)
        logger.info("Loaded %s model from %s", self._backend_in_use, config.model_path)

    @property
    def backend(self) -> str:
        return str(self._backend_in_use)

    @property
    def requested_backend(self) -> str:
        return str(self._requested_backend)

    @property
    def backend_note(self) -> str:
        return str(self._backend_note)

    @property
    def config(self) -> EngineConfig:
        return self._config

    def transcribe(
        self, audio: np.ndarray, config: Optional[EngineConfig] = None
    ) -> list[TranscriptSegment]:
        return self._impl.transcribe(audio, config if config is not None else self._config)
