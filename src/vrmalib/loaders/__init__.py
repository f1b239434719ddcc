"""Loaders for VRMA animation documents and VRM model skeletons."""

from .errors import (
    ClipImportError, DocumentLoadError, MalformedChannelError,
    MissingKeyframeInputsError, NoAnimationError, VrmaError,
)
from .vrma_loader import VrmaDocument, import_clip, load_vrma_document, read_accessor
from .vrm_loader import load_vrm_skeleton, skeleton_from_gltf

__all__ = [
    'VrmaError',
    'DocumentLoadError',
    'ClipImportError',
    'NoAnimationError',
    'MalformedChannelError',
    'MissingKeyframeInputsError',
    'VrmaDocument',
    'import_clip',
    'load_vrma_document',
    'read_accessor',
    'load_vrm_skeleton',
    'skeleton_from_gltf',
]
