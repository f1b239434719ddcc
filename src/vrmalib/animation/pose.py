"""
Pose

Rest-pose snapshots and writing sampled clip values onto skeleton joints.
"""

from typing import Dict

from pyrr import Quaternion, Vector3

from .animation import AnimationClip, TrackProperty, sample
from .bone_names import CanonicalBone
from .skeleton import Skeleton, Transform

RestPoseSnapshot = Dict[CanonicalBone, Transform]


def capture_rest_pose(skeleton: Skeleton, clip: AnimationClip) -> RestPoseSnapshot:
    """
    Record the current transform of every bone the clip animates.

    Args:
        skeleton: Live skeleton
        clip: Clip whose tracks decide which bones are recorded

    Returns:
        Mapping of bone -> copy of its transform
    """
    animated = clip.bones
    rest_pose: RestPoseSnapshot = {}
    for joint, bone in skeleton.humanoid_joints():
        if bone in animated and bone not in rest_pose:
            rest_pose[bone] = joint.transform.copy()
    return rest_pose


def restore_rest_pose(skeleton: Skeleton, rest_pose: RestPoseSnapshot):
    """Reset every joint with rest-pose data to its recorded transform."""
    for joint, bone in skeleton.humanoid_joints():
        rest = rest_pose.get(bone)
        if rest is not None:
            joint.transform = rest.copy()
    skeleton.update_world_transforms()


def apply_pose(skeleton: Skeleton, clip: AnimationClip, rest_pose: RestPoseSnapshot, time: float):
    """
    Pose the skeleton from the clip at ``time``.

    Each joint with rest-pose data is reset to rest, then every track of its
    bone overwrites the matching channel. Channels without a track keep the
    rest value.

    Args:
        skeleton: Live skeleton to mutate
        clip: Clip to sample
        rest_pose: Snapshot captured when the clip was loaded
        time: Playback time, already wrapped into the clip range
    """
    for joint, bone in skeleton.humanoid_joints():
        rest = rest_pose.get(bone)
        if rest is None:
            continue

        transform = rest.copy()
        for track in clip.tracks_for(bone):
            value = sample(track, time)
            if track.target_property is TrackProperty.TRANSLATION:
                transform.translation = Vector3(value)
            elif track.target_property is TrackProperty.ROTATION:
                transform.rotation = Quaternion(value)
            elif track.target_property is TrackProperty.SCALE:
                transform.scale = Vector3(value)
        joint.transform = transform

    skeleton.update_world_transforms()
