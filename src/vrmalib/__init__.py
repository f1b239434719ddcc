"""
vrmalib - VRMA Animation Playback

Imports VRM animation clips (glTF 2.0), maps their nodes onto the VRM
humanoid skeleton and plays them back on a rigged character.
"""

# Configuration
from .config.settings import *

# Animation
from .animation import (
    AnimationClip,
    AnimationContext,
    AnimationController,
    CanonicalBone,
    Interpolation,
    Joint,
    PlaybackState,
    Skeleton,
    Track,
    TrackProperty,
    Transform,
    map_bone_name,
)

# Loaders
from .loaders import (
    ClipImportError,
    DocumentLoadError,
    MalformedChannelError,
    MissingKeyframeInputsError,
    NoAnimationError,
    VrmaDocument,
    VrmaError,
    import_clip,
    load_vrm_skeleton,
    load_vrma_document,
)

# Assets
from .core import AssetHandle, AssetManager

__version__ = "0.1.0"
__all__ = [
    # Config (exported via *)
    "PlaybackSettings",
    # Animation
    "AnimationClip",
    "AnimationContext",
    "AnimationController",
    "CanonicalBone",
    "Interpolation",
    "Joint",
    "PlaybackState",
    "Skeleton",
    "Track",
    "TrackProperty",
    "Transform",
    "map_bone_name",
    # Loaders
    "ClipImportError",
    "DocumentLoadError",
    "MalformedChannelError",
    "MissingKeyframeInputsError",
    "NoAnimationError",
    "VrmaDocument",
    "VrmaError",
    "import_clip",
    "load_vrm_skeleton",
    "load_vrma_document",
    # Assets
    "AssetHandle",
    "AssetManager",
]
