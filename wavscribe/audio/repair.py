from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Callable, Optional, Protocol, Tuple

import numpy as np

from wavscribe.audio.file_reader import open_wav
from wavscribe.errors import (
    ContainerUnreadable,
    RepairIoError,
    RepairToolFailed,
    RepairToolUnavailable,
    StillUnreadableAfterRepair,
)
from wavscribe.types import AudioFormatDescriptor, RepairAttempt, RepairOutcome

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".repaired.tmp.wav"

Reader = Callable[[Path], Tuple[AudioFormatDescriptor, np.ndarray]]


class Remuxer(Protocol):
    def repair(self, src: Path, dst: Path) -> None:
        """Copy the audio stream of `src` into a fresh container at `dst`.

        Raises RepairToolUnavailable or RepairToolFailed.
        """
        ...


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def temporary_path_for(path: Path) -> Path:
    path = Path(path)
    return path.with_name(path.stem + TEMP_SUFFIX)


class FfmpegRemuxer:
    def __init__(self, executable: str = "ffmpeg", *, timeout_sec: Optional[float] = 120.0) -> None:
        self._executable = str(executable)
        self._timeout = float(timeout_sec) if timeout_sec and float(timeout_sec) > 0 else None

    @property
    def executable(self) -> str:
        return self._executable

    def command(self, src: Path, dst: Path) -> list[str]:
        return [
            self._executable,
            "-nostdin",
            "-hide_banner",
            "-loglevel",
            "error",
            "-i",
            Path(src).as_posix(),
            "-c:a",
            "copy",
            "-y",
            Path(dst).as_posix(),
        ]

    def repair(self, src: Path, dst: Path) -> None:
        dst = Path(dst)
        cmd = self.command(src, dst)
        logger.debug("Running %s", " ".join(cmd))
        try:
            proc = subprocess.run(cmd, capture_output=True, timeout=self._timeout, check=False)
        except OSError as exc:
            _discard(dst)
            raise RepairToolUnavailable(
                f"Could not launch '{self._executable}' ({exc}). Is ffmpeg installed and in your PATH?"
            ) from exc
        except subprocess.TimeoutExpired as exc:
            _discard(dst)
            raise RepairToolFailed(
                f"{self._executable} did not finish within {self._timeout:g}s",
                diagnostic=(exc.stderr or b"").decode("utf-8", errors="replace").strip(),
            ) from exc

        if proc.returncode != 0:
            _discard(dst)
            raise RepairToolFailed(
                f"{self._executable} failed to repair the file (exit status {proc.returncode}).",
                diagnostic=(proc.stderr or b"").decode("utf-8", errors="replace").strip(),
            )


class RepairCoordinator:
    def __init__(self, remuxer: Remuxer, *, reader: Reader = open_wav) -> None:
        self._remuxer = remuxer
        self._reader = reader
        self._attempts: list[RepairAttempt] = []

    @property
    def attempts(self) -> list[RepairAttempt]:
        return list(self._attempts)

    @property
    def repaired(self) -> bool:
        return any(a.outcome is RepairOutcome.SUCCESS for a in self._attempts)

    def open(self, path: Path) -> Tuple[AudioFormatDescriptor, np.ndarray]:
        path = Path(path)
        try:
            return self._reader(path)
        except ContainerUnreadable as exc:
            logger.warning("Cannot read '%s' (%s); attempting in-place repair", path, exc)

        self._repair_in_place(path)

        try:
            return self._reader(path)
        except ContainerUnreadable as exc:
            raise StillUnreadableAfterRepair(
                f"Failed to open the now-repaired file '{path}': {exc}"
            ) from exc

    def _repair_in_place(self, path: Path) -> None:
        tmp = temporary_path_for(path)
        replaced = False
        try:
            try:
                self._remuxer.repair(path, tmp)
            except (RepairToolUnavailable, RepairToolFailed) as exc:
                self._record(path, tmp, RepairOutcome.TOOL_FAILURE, str(exc))
                raise
            except OSError as exc:
                self._record(path, tmp, RepairOutcome.IO_FAILURE, str(exc))
                raise RepairIoError(f"Repair of '{path}' failed: {exc}") from exc

            try:
                os.replace(tmp, path)
            except OSError as exc:
                self._record(path, tmp, RepairOutcome.IO_FAILURE, str(exc))
                raise RepairIoError(f"Could not replace '{path}' with the repaired copy: {exc}") from exc
            replaced = True
        finally:
            # The original is only ever replaced by a complete copy.
            if not replaced:
                _discard(tmp)

        self._record(path, tmp, RepairOutcome.SUCCESS)
        logger.info("Successfully repaired and replaced '%s'", path)

    def _record(self, path: Path, tmp: Path, outcome: RepairOutcome, message: str = "") -> None:
        self._attempts.append(
            RepairAttempt(original_path=path, temporary_path=tmp, outcome=outcome, message=message)
        )
        if outcome is not RepairOutcome.SUCCESS:
            logger.error("Repair of '%s' failed (%s): %s", path, outcome.value, message)


def open_with_repair(
    path: Path,
    remuxer: Optional[Remuxer] = None,
    *,
    reader: Reader = open_wav,
) -> Tuple[AudioFormatDescriptor, np.ndarray]:
    coordinator = RepairCoordinator(remuxer if remuxer is not None else FfmpegRemuxer(), reader=reader)
    return coordinator.open(path)
