from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from wavscribe.audio.file_reader import open_wav
from wavscribe.audio.repair import FfmpegRemuxer, Remuxer, RepairCoordinator
from wavscribe.config import AppConfig, AudioConfig
from wavscribe.engine import TranscriptionEngine, Transcriber
from wavscribe.preprocess import normalize, sample_rate_warning
from wavscribe.types import IngestResult, TranscriptionResult

logger = logging.getLogger(__name__)


def build_remuxer(config: AudioConfig) -> FfmpegRemuxer:
    return FfmpegRemuxer(config.repair_tool, timeout_sec=float(config.repair_timeout_sec))


def ingest_audio(
    path: Path,
    *,
    config: AppConfig,
    repair: bool = True,
    remuxer: Optional[Remuxer] = None,
) -> IngestResult:
    path = Path(path)
    repaired = False
    if repair:
        coordinator = RepairCoordinator(remuxer if remuxer is not None else build_remuxer(config.audio))
        fmt, raw = coordinator.open(path)
        repaired = coordinator.repaired
    else:
        fmt, raw = open_wav(path)

    logger.debug(fmt.describe())

    warnings: list[str] = []
    warning = sample_rate_warning(fmt, int(config.audio.expected_sample_rate))
    if warning is not None:
        logger.warning(warning)
        warnings.append(warning)

    samples = normalize(fmt, raw)
    del raw
    logger.debug("Loaded %d audio samples", samples.size)

    return IngestResult(
        source=str(path),
        format=fmt,
        samples=samples,
        repaired=repaired,
        warnings=warnings,
    )


def transcribe_file(
    path: Path,
    *,
    config: AppConfig,
    repair: Optional[bool] = None,
    engine: Optional[Transcriber] = None,
    remuxer: Optional[Remuxer] = None,
) -> TranscriptionResult:
    """Read (repairing if needed), normalize and transcribe one WAV file.

    ``repair=None`` follows ``config.audio.repair_enabled``. An ``engine`` may
    be passed in to reuse a loaded model across files.
    """
    created_at = datetime.now(timezone.utc).isoformat()
    do_repair = bool(config.audio.repair_enabled) if repair is None else bool(repair)

    ingest = ingest_audio(path, config=config, repair=do_repair, remuxer=remuxer)

    if engine is None:
        engine = TranscriptionEngine(config.engine)

    start = time.perf_counter()
    segments = engine.transcribe(ingest.samples, config.engine)
    elapsed = time.perf_counter() - start
    logger.debug("Transcription completed in %.2fs (%d segments)", elapsed, len(segments))

    sample_count = int(ingest.samples.size)
    sr = int(ingest.format.sample_rate)
    return TranscriptionResult(
        source=ingest.source,
        created_at=created_at,
        format=ingest.format,
        sample_count=sample_count,
        duration_sec=float(sample_count) / float(sr) if sr > 0 else 0.0,
        elapsed_sec=float(elapsed),
        backend=str(engine.backend),
        repaired=ingest.repaired,
        warnings=list(ingest.warnings),
        segments=list(segments),
    )
