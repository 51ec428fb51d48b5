from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

from wavscribe.types import TranscriptionResult, TranscriptSegment


def _dt_slug() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%SZ")


def default_report_stem(*, prefix: str = "wavscribe") -> str:
    return f"{prefix}_{_dt_slug()}"


def format_segment(segment: TranscriptSegment) -> str:
    return f"[{segment.start_s:.2f}s - {segment.end_s:.2f}s]: {segment.text}"


def format_transcript(segments: Iterable[TranscriptSegment]) -> str:
    return "\n".join(format_segment(seg) for seg in segments)


def result_to_dict(result: TranscriptionResult) -> dict[str, Any]:
    d = asdict(result)
    d["text"] = " ".join(seg.text for seg in result.segments if seg.text).strip()
    return d


def write_json_report(result: TranscriptionResult, path: Path) -> None:
    path = Path(path)
    payload = result_to_dict(result)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def write_text_report(result: TranscriptionResult, path: Path) -> None:
    path = Path(path)
    body = format_transcript(result.segments)
    path.write_text(body + "\n" if body else "", encoding="utf-8")
