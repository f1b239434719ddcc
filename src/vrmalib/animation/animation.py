"""
Animation

Keyframe tracks, imported clips and playback sampling.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Optional, Tuple

import numpy as np
from pyrr import Quaternion, Vector3

from ..config.settings import ROTATION_CORRECTION_ANGLE, ROTATION_CORRECTION_ENABLED
from .bone_names import CanonicalBone


class Interpolation(Enum):
    """Sampler interpolation modes."""
    STEP = "STEP"
    LINEAR = "LINEAR"
    CUBICSPLINE = "CUBICSPLINE"


class TrackProperty(Enum):
    """Bone transform channel animated by a track."""
    TRANSLATION = "translation"
    ROTATION = "rotation"
    SCALE = "scale"

    @property
    def width(self) -> int:
        """Number of components per keyframe value."""
        return 4 if self is TrackProperty.ROTATION else 3


# 180 degree turn about +Y; see ROTATION_CORRECTION_ANGLE
ROTATION_CORRECTION = Quaternion.from_y_rotation(ROTATION_CORRECTION_ANGLE)


@dataclass(frozen=True, eq=False)
class Track:
    """
    One animated property of one bone.

    ``times`` holds keyframe times in seconds and ``values`` one row per
    keyframe: ``(x, y, z)`` for translation/scale, ``(x, y, z, w)`` for
    rotation. Both arrays are made read-only on construction.
    """

    bone: CanonicalBone
    target_property: TrackProperty
    times: np.ndarray
    values: np.ndarray
    interpolation: Interpolation = Interpolation.LINEAR

    def __post_init__(self):
        times = np.array(self.times, dtype='f4').reshape(-1)
        values = np.array(self.values, dtype='f4').reshape(-1, self.target_property.width)

        if len(times) == 0:
            raise ValueError(f"Track for {self.bone.value}.{self.target_property.value} has no keyframes")
        if len(values) != len(times):
            raise ValueError(
                f"Track for {self.bone.value}.{self.target_property.value} has "
                f"{len(times)} times but {len(values)} values"
            )
        if np.any(np.diff(times) < 0.0):
            raise ValueError(f"Track for {self.bone.value}.{self.target_property.value} has decreasing times")

        times.setflags(write=False)
        values.setflags(write=False)
        object.__setattr__(self, 'times', times)
        object.__setattr__(self, 'values', values)

    @property
    def end_time(self) -> float:
        """Time of the last keyframe."""
        return float(self.times[-1])

    def sample(self, time: float):
        """Sample this track at ``time`` (see :func:`sample`)."""
        return sample(self, time)

    def __repr__(self):
        return (f"Track(bone={self.bone.value}, property={self.target_property.value}, "
                f"keyframes={len(self.times)}, interpolation={self.interpolation.value})")


class AnimationClip:
    """
    Imported animation: a duration plus per-bone tracks.

    Clips are immutable once built; reloading produces a new clip.
    """

    def __init__(self, name: str, tracks: Iterable[Track] = (), duration: float = 0.0):
        """
        Initialize clip.

        Args:
            name: Clip name
            tracks: Tracks, at most one per (bone, property) pair
            duration: Minimum loop length; the last keyframe of any track
                extends it
        """
        self._name = name
        self._tracks: Tuple[Track, ...] = tuple(tracks)
        self._duration = max([track.end_time for track in self._tracks] + [float(duration)])

        by_bone: Dict[CanonicalBone, Tuple[Track, ...]] = {}
        for track in self._tracks:
            by_bone[track.bone] = by_bone.get(track.bone, ()) + (track,)
        self._tracks_by_bone = by_bone

    @property
    def name(self) -> str:
        return self._name

    @property
    def duration(self) -> float:
        """Loop length in seconds: the latest keyframe time seen on import."""
        return self._duration

    @property
    def tracks(self) -> Tuple[Track, ...]:
        return self._tracks

    @property
    def bones(self) -> FrozenSet[CanonicalBone]:
        """Bones referenced by at least one track."""
        return frozenset(self._tracks_by_bone)

    def tracks_for(self, bone: CanonicalBone) -> Tuple[Track, ...]:
        """Get all tracks animating ``bone``."""
        return self._tracks_by_bone.get(bone, ())

    def sample_all(self, time: float) -> dict:
        """
        Sample all tracks at a given time.

        Args:
            time: Time in seconds (already wrapped into the clip range)

        Returns:
            Dictionary mapping (bone, property) -> value
        """
        return {(track.bone, track.target_property): sample(track, time) for track in self._tracks}

    def __repr__(self):
        return f"AnimationClip(name='{self._name}', duration={self._duration:.2f}s, tracks={len(self._tracks)})"


def wrap_time(elapsed: float, duration: float) -> float:
    """
    Wrap elapsed playback time into ``[0, duration)``.

    A zero-length clip holds its first keyframe.
    """
    if duration <= 0.0:
        return 0.0
    return elapsed % duration


def keyframe_interval(times: np.ndarray, time: float) -> Tuple[int, int, float]:
    """
    Find the keyframes bracketing ``time``.

    Args:
        times: Non-decreasing keyframe times
        time: Sample time

    Returns:
        (index, next_index, factor) where ``index`` is the largest keyframe
        with ``times[index] <= time``. Times before the first keyframe and at
        or after the last one clamp both ends to that keyframe.
    """
    last = len(times) - 1
    idx = int(np.searchsorted(times, time, side='right')) - 1
    if idx < 0:
        return 0, 0, 0.0
    if idx >= last:
        return last, last, 0.0

    nxt = idx + 1
    t0 = float(times[idx])
    t1 = float(times[nxt])
    factor = (time - t0) / (t1 - t0) if t1 > t0 else 0.0
    return idx, nxt, factor


def slerp(q0: np.ndarray, q1: np.ndarray, t: float) -> Quaternion:
    """Shortest-path spherical interpolation between two (x, y, z, w) quaternions."""
    q0 = np.asarray(q0, dtype='f8')
    q1 = np.asarray(q1, dtype='f8')

    dot = float(np.dot(q0, q1))
    if dot < 0.0:
        q1 = -q1
        dot = -dot

    if dot > 0.9995:
        # Nearly parallel: normalized lerp avoids dividing by sin(~0)
        result = q0 + (q1 - q0) * t
    else:
        angle = np.arccos(min(dot, 1.0))
        sin_angle = np.sin(angle)
        result = (q0 * np.sin((1.0 - t) * angle) + q1 * np.sin(t * angle)) / sin_angle

    return Quaternion(result / np.linalg.norm(result))


def interpolate(track: Track, time: float):
    """
    Interpolate a track's value at ``time`` without rig corrections.

    CUBICSPLINE tracks are evaluated like LINEAR ones; tangents are not used.

    Returns:
        Vector3 for translation/scale, Quaternion for rotation
    """
    idx, nxt, factor = keyframe_interval(track.times, time)
    v0 = track.values[idx]
    v1 = track.values[nxt]
    is_rotation = track.target_property is TrackProperty.ROTATION

    if track.interpolation is Interpolation.STEP or factor == 0.0:
        return Quaternion(v0) if is_rotation else Vector3(v0)

    if is_rotation:
        return slerp(v0, v1, factor)

    return Vector3(v0 * (1.0 - factor) + v1 * factor)


def correct_rotation(rotation: Quaternion, correction: Optional[Quaternion] = None) -> Quaternion:
    """Apply the rig orientation fix-up ``C * q * C``."""
    c = ROTATION_CORRECTION if correction is None else correction
    return c * Quaternion(rotation) * c


def sample(track: Track, time: float):
    """
    Sample a track at ``time`` for posing.

    Rotation tracks get the rig orientation correction applied.

    Args:
        track: Track to sample
        time: Time in seconds, wrapped into the clip range by the caller

    Returns:
        Vector3 for translation/scale, Quaternion for rotation
    """
    value = interpolate(track, time)
    if track.target_property is TrackProperty.ROTATION and ROTATION_CORRECTION_ENABLED:
        return correct_rotation(value)
    return value
