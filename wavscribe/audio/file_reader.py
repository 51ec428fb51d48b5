from __future__ import annotations

from pathlib import Path
from typing import Tuple

import numpy as np
import soundfile as sf

from wavscribe.errors import ContainerUnreadable, ContainerUnsupportedFormat
from wavscribe.types import AudioFormatDescriptor

WAV_FORMATS = frozenset({"WAV", "WAVEX"})

# libsndfile subtype -> (bit depth, dtype to decode into)
_DECODE_PATHS = {
    "PCM_16": (16, "int16"),
    "FLOAT": (32, "float32"),
}

_UNSUPPORTED_DEPTHS = {
    "PCM_S8": 8,
    "PCM_U8": 8,
    "PCM_24": 24,
    "PCM_32": 32,
    "DOUBLE": 64,
}

SUPPORTED_CHANNELS = (1, 2)


def _unsupported_subtype(subtype: str) -> ContainerUnsupportedFormat:
    depth = _UNSUPPORTED_DEPTHS.get(subtype)
    if subtype == "PCM_32":
        msg = "Unsupported sample format: 32-bit integer PCM (only 16-bit PCM and 32-bit float are supported)"
    elif depth is not None:
        msg = f"Unsupported bit depth: {depth}"
    else:
        msg = f"Unsupported WAV encoding '{subtype}' (PCM only)"
    return ContainerUnsupportedFormat(msg, bit_depth=depth)


def read_format(path: Path) -> Tuple[AudioFormatDescriptor, str]:
    path = Path(path)
    if not path.is_file():
        raise ContainerUnreadable(f"File not found: {path}")

    try:
        info = sf.info(path.as_posix())
    except (RuntimeError, OSError) as exc:
        raise ContainerUnreadable(f"Failed to open '{path}': {exc}") from exc

    if str(info.format).upper() not in WAV_FORMATS:
        raise ContainerUnreadable(f"'{path}' is not a WAV container (detected {info.format})")

    subtype = str(info.subtype).upper()
    if subtype not in _DECODE_PATHS:
        raise _unsupported_subtype(subtype)

    channels = int(info.channels)
    if channels not in SUPPORTED_CHANNELS:
        raise ContainerUnsupportedFormat(
            f"Unsupported channel count: {channels}", channel_count=channels
        )

    bit_depth, dtype = _DECODE_PATHS[subtype]
    fmt = AudioFormatDescriptor(
        sample_rate=int(info.samplerate),
        channel_count=channels,
        bit_depth=bit_depth,
    )
    return fmt, dtype


def open_wav(path: Path) -> Tuple[AudioFormatDescriptor, np.ndarray]:
    """Read a PCM WAV file eagerly.

    Returns the format descriptor and the interleaved raw samples
    (int16 for 16-bit files, float32 for 32-bit float files).
    """
    path = Path(path)
    fmt, dtype = read_format(path)

    try:
        frames, _ = sf.read(path.as_posix(), dtype=dtype, always_2d=True)
    except (RuntimeError, OSError) as exc:
        raise ContainerUnreadable(f"Failed to decode '{path}': {exc}") from exc

    # (frames, channels) in C order flattens to interleaved L, R, L, R...
    raw = np.ascontiguousarray(frames).reshape(-1)
    return fmt, raw
