__all__ = [
    "decode_options",
    "FasterWhisperBackend",
    "HfWhisperBackend",
]

from wavscribe.inference.faster_whisper_backend import FasterWhisperBackend, decode_options
from wavscribe.inference.hf_backend import HfWhisperBackend
