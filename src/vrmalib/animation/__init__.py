"""
Animation System

Humanoid bone mapping, VRMA clip tracks, sampling and playback control.
"""

from .bone_names import BONE_ALIASES, CanonicalBone, bone_from_vrm_name, map_bone_name
from .animation import (
    AnimationClip, Interpolation, Track, TrackProperty,
    interpolate, keyframe_interval, sample, wrap_time,
)
from .skeleton import Joint, Skeleton, Transform
from .pose import RestPoseSnapshot, apply_pose, capture_rest_pose, restore_rest_pose
# Imported last: the controller pulls in the loaders, which need the names above
from .animation_controller import AnimationContext, AnimationController, PlaybackState

__all__ = [
    'BONE_ALIASES',
    'CanonicalBone',
    'bone_from_vrm_name',
    'map_bone_name',
    'AnimationClip',
    'Interpolation',
    'Track',
    'TrackProperty',
    'interpolate',
    'keyframe_interval',
    'sample',
    'wrap_time',
    'Joint',
    'Skeleton',
    'Transform',
    'RestPoseSnapshot',
    'apply_pose',
    'capture_rest_pose',
    'restore_rest_pose',
    'AnimationContext',
    'AnimationController',
    'PlaybackState',
]
