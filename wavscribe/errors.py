from __future__ import annotations

from typing import Optional


class WavscribeError(Exception):
    pass


class ConfigError(WavscribeError):
    pass


# Container Reader


class ContainerError(WavscribeError):
    pass


class ContainerUnreadable(ContainerError):
    pass


class ContainerUnsupportedFormat(ContainerError):
    def __init__(
        self,
        message: str,
        *,
        bit_depth: Optional[int] = None,
        channel_count: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.bit_depth = bit_depth
        self.channel_count = channel_count


# Repair Coordinator


class PipelineError(WavscribeError):
    pass


class RepairToolUnavailable(PipelineError):
    pass


class RepairToolFailed(PipelineError):
    def __init__(self, message: str, *, diagnostic: str = "") -> None:
        super().__init__(f"{message}\n{diagnostic}".rstrip() if diagnostic else message)
        self.diagnostic = diagnostic


class StillUnreadableAfterRepair(PipelineError):
    pass


class RepairIoError(PipelineError):
    pass


# Sample Normalizer


class FormatError(WavscribeError):
    pass


class UnsupportedBitDepth(FormatError):
    def __init__(self, bit_depth: int) -> None:
        super().__init__(f"Unsupported bit depth: {bit_depth}")
        self.bit_depth = int(bit_depth)


class UnsupportedChannelCount(FormatError):
    def __init__(self, channel_count: int) -> None:
        super().__init__(f"Unsupported channel count: {channel_count}")
        self.channel_count = int(channel_count)


# Recognition engine


class EngineError(WavscribeError):
    pass


class ModelLoadError(EngineError):
    pass


class InferenceError(EngineError):
    pass
