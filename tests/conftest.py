from __future__ import annotations

from pathlib import Path
from typing import Optional

import numpy as np
import pytest
import soundfile as sf

from wavscribe.config import AppConfig
from wavscribe.errors import WavscribeError
from wavscribe.types import TranscriptSegment


def write_wav(path: Path, frames: np.ndarray, sample_rate: int = 16000, subtype: str = "PCM_16") -> Path:
    sf.write(Path(path).as_posix(), frames, sample_rate, subtype=subtype)
    return Path(path)


class FakeRemuxer:
    """Stands in for ffmpeg: writes `payload` to dst, or fails with `error`."""

    def __init__(self, payload: bytes = b"", error: Optional[WavscribeError] = None) -> None:
        self.payload = payload
        self.error = error
        self.calls: list[tuple[Path, Path]] = []

    def repair(self, src: Path, dst: Path) -> None:
        self.calls.append((Path(src), Path(dst)))
        if self.error is not None:
            Path(dst).write_bytes(b"partial output")
            raise self.error
        Path(dst).write_bytes(self.payload)


class FakeEngine:
    def __init__(self, segments: Optional[list[TranscriptSegment]] = None) -> None:
        self.segments = list(segments or [])
        self.buffers: list[np.ndarray] = []

    @property
    def backend(self) -> str:
        return "fake"

    def transcribe(self, audio, config=None):
        self.buffers.append(audio)
        return list(self.segments)


@pytest.fixture
def config() -> AppConfig:
    return AppConfig()


@pytest.fixture
def mono16_path(tmp_path: Path) -> Path:
    frames = np.array([16384, -16384, 0, 32767], dtype=np.int16)
    return write_wav(tmp_path / "mono16.wav", frames)


@pytest.fixture
def good_wav_bytes(tmp_path: Path) -> bytes:
    frames = np.array([[1000, -1000], [2000, -2000], [0, 0]], dtype=np.int16)
    path = write_wav(tmp_path / "repaired_source.wav", frames)
    return path.read_bytes()


@pytest.fixture
def garbage_path(tmp_path: Path) -> Path:
    path = tmp_path / "audio.wav"
    path.write_bytes(b"this is definitely not a RIFF/WAVE container\n" * 8)
    return path
