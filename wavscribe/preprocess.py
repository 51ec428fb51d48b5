from __future__ import annotations

from typing import Optional

import numpy as np

from wavscribe.errors import UnsupportedBitDepth, UnsupportedChannelCount
from wavscribe.types import AudioFormatDescriptor

INT16_SCALE = 32768.0


def to_float(raw: np.ndarray, bit_depth: int) -> np.ndarray:
    if bit_depth == 16:
        return raw.astype(np.float32) / np.float32(INT16_SCALE)
    if bit_depth == 32:
        return raw.astype(np.float32, copy=False)
    raise UnsupportedBitDepth(bit_depth)


def to_mono(audio: np.ndarray, channel_count: int) -> np.ndarray:
    if channel_count == 1:
        return audio
    if channel_count != 2:
        raise UnsupportedChannelCount(channel_count)
    frames = audio.reshape((-1, 2))
    return (frames[:, 0] + frames[:, 1]) / np.float32(2.0)


def normalize(fmt: AudioFormatDescriptor, raw: np.ndarray) -> np.ndarray:
    """Convert interleaved raw samples into a mono float32 buffer.

    16-bit samples are scaled by 1/32768; 32-bit float samples pass through.
    Stereo is downmixed by the arithmetic mean of left and right. A trailing
    partial frame is dropped.
    """
    bit_depth = int(fmt.bit_depth)
    channels = int(fmt.channel_count)
    if bit_depth not in (16, 32):
        raise UnsupportedBitDepth(bit_depth)
    if channels not in (1, 2):
        raise UnsupportedChannelCount(channels)

    raw = np.asarray(raw).reshape(-1)
    frame_count = raw.size // channels
    audio = to_float(raw[: frame_count * channels], bit_depth)
    mono = to_mono(audio, channels)
    return np.array(mono, dtype=np.float32)


def sample_rate_warning(fmt: AudioFormatDescriptor, expected_rate: int = 16000) -> Optional[str]:
    if int(fmt.sample_rate) == int(expected_rate):
        return None
    return f"Whisper works best with {int(expected_rate)}Hz audio. Current: {int(fmt.sample_rate)}Hz"
