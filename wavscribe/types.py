from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path

import numpy as np


@dataclass(frozen=True)
class AudioFormatDescriptor:
    sample_rate: int
    channel_count: int
    bit_depth: int  # 16 (int PCM) | 32 (float)

    def describe(self) -> str:
        return (
            f"Sample rate: {self.sample_rate}, Channels: {self.channel_count}, "
            f"Bits per sample: {self.bit_depth}"
        )


@dataclass(frozen=True)
class TranscriptSegment:
    start_s: float
    end_s: float
    text: str


class RepairOutcome(str, enum.Enum):
    SUCCESS = "success"
    TOOL_FAILURE = "tool_failure"
    IO_FAILURE = "io_failure"


@dataclass(frozen=True)
class RepairAttempt:
    original_path: Path
    temporary_path: Path
    outcome: RepairOutcome
    message: str = ""


@dataclass(frozen=True)
class IngestResult:
    source: str
    format: AudioFormatDescriptor
    samples: np.ndarray  # float32 mono
    repaired: bool
    warnings: list[str]


@dataclass(frozen=True)
class TranscriptionResult:
    source: str
    created_at: str
    format: AudioFormatDescriptor
    sample_count: int
    duration_sec: float
    elapsed_sec: float
    backend: str
    repaired: bool
    warnings: list[str]
    segments: list[TranscriptSegment]
