"""Errors raised while decoding documents and importing clips."""

from typing import Optional


class VrmaError(Exception):
    """Base class for vrmalib errors."""


class DocumentLoadError(VrmaError):
    """The file could not be read or is not a glTF document."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to load '{path}': {reason}")
        self.path = path
        self.reason = reason


class ClipImportError(VrmaError):
    """A decoded document could not be turned into an animation clip."""


class NoAnimationError(ClipImportError):
    """The document defines no animations."""

    def __init__(self):
        super().__init__("Document defines no animations")


class MalformedChannelError(ClipImportError):
    """An animation channel has inconsistent keyframe data."""

    def __init__(self, channel_index: int, node_name: Optional[str], reason: str):
        super().__init__(f"Channel {channel_index} ({node_name or 'unnamed'}): {reason}")
        self.channel_index = channel_index
        self.node_name = node_name
        self.reason = reason


class MissingKeyframeInputsError(MalformedChannelError):
    """An animation channel has no keyframe time data."""
