from __future__ import annotations

from typing import Any, Optional

import numpy as np

from wavscribe.config import EngineConfig
from wavscribe.errors import InferenceError, ModelLoadError
from wavscribe.types import TranscriptSegment


def _resolve_device(device: str) -> str:
    if device != "auto":
        return device
    import torch  # type: ignore

    return "cuda:0" if torch.cuda.is_available() else "cpu"


def _chunk_bounds(chunk: dict[str, Any], duration: float) -> tuple[float, float]:
    start, end = chunk.get("timestamp") or (None, None)
    start_s = float(start) if start is not None else 0.0
    # The final chunk may come back open-ended.
    end_s = float(end) if end is not None else max(duration, start_s)
    return start_s, end_s


class HfWhisperBackend:
    name = "hf"

    def __init__(self, config: EngineConfig) -> None:
        try:
            from transformers import pipeline  # type: ignore
        except Exception as exc:
            raise ModelLoadError(
                "HF backend requires `torch` + `transformers`. Install the `ml` extra."
            ) from exc

        self._model_path = str(config.model_path)
        try:
            self._pipe = pipeline(
                "automatic-speech-recognition",
                model=self._model_path,
                device=_resolve_device(str(config.device)),
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

        sample_rate = int(config.sample_rate)
        generate_kwargs: dict[str, Any] = {}
        if config.language:
            generate_kwargs["language"] = config.language
        if config.strategy != "greedy":
            generate_kwargs["num_beams"] = max(1, int(config.beam_size))

        try:
            out = self._pipe(
                {"raw": x, "sampling_rate": sample_rate},
                return_timestamps=True,
                generate_kwargs=generate_kwargs,
            )
        except Exception as exc:
            raise InferenceError(f"failed to run model: {exc}") from exc

        duration = float(x.size) / float(sample_rate)
        chunks: Optional[list[dict[str, Any]]] = out.get("chunks")
        if not chunks:
            text = str(out.get("text", "")).strip()
            return [TranscriptSegment(start_s=0.0, end_s=duration, text=text)] if text else []

        segments = []
        for chunk in chunks:
            start_s, end_s = _chunk_bounds(chunk, duration)
            segments.append(TranscriptSegment(start_s=start_s, end_s=end_s, text=str(chunk.get("text", "")).strip()))
        return sorted(segments, key=lambda s: s.start_s)
