"""
VRMA Loader

Decodes VRMA (glTF 2.0) animation documents and imports their first
animation as an AnimationClip of humanoid bone tracks.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
import pygltflib

from ..animation import AnimationClip, CanonicalBone, Interpolation, Track, TrackProperty, map_bone_name
from .errors import DocumentLoadError, MalformedChannelError, MissingKeyframeInputsError, NoAnimationError

logger = logging.getLogger(__name__)

GLB_MAGIC = b"glTF"

COMPONENT_DTYPES = {
    5120: np.int8,     # BYTE
    5121: np.uint8,    # UNSIGNED_BYTE
    5122: np.int16,    # SHORT
    5123: np.uint16,   # UNSIGNED_SHORT
    5125: np.uint32,   # UNSIGNED_INT
    5126: np.float32,  # FLOAT
}

COMPONENT_COUNTS = {
    'SCALAR': 1,
    'VEC2': 2,
    'VEC3': 3,
    'VEC4': 4,
    'MAT2': 4,
    'MAT3': 9,
    'MAT4': 16,
}

TARGET_PROPERTIES = {prop.value: prop for prop in TrackProperty}


class VrmaDocument:
    """
    Decoded glTF document plus the raw bytes of each of its buffers.
    """

    def __init__(self, gltf: pygltflib.GLTF2, buffers: List[bytes], path: Optional[str] = None):
        """
        Initialize document.

        Args:
            gltf: Parsed glTF JSON structure
            buffers: Raw data for each entry in ``gltf.buffers``
            path: Source file path, if loaded from disk
        """
        self.gltf = gltf
        self.buffers = buffers
        self.path = path

    @classmethod
    def from_gltf(cls, gltf: pygltflib.GLTF2, base_dir: Optional[Path] = None,
                  path: Optional[str] = None) -> 'VrmaDocument':
        """
        Resolve every buffer of a parsed document.

        Buffers without a URI use the GLB binary chunk, ``data:`` URIs are
        decoded inline and other URIs are read relative to ``base_dir``.
        """
        buffers = []
        for index, buffer in enumerate(gltf.buffers):
            if not buffer.uri:
                data = gltf.binary_blob()
            elif buffer.uri.startswith("data:"):
                try:
                    data = gltf.get_data_from_buffer_uri(buffer.uri)
                except Exception as exc:
                    raise DocumentLoadError(path or "<memory>", f"cannot decode buffer {index}: {exc}") from exc
            else:
                if base_dir is None:
                    raise DocumentLoadError(path or "<memory>", f"buffer {index} references external file '{buffer.uri}'")
                buffer_path = base_dir / buffer.uri
                try:
                    data = buffer_path.read_bytes()
                except OSError as exc:
                    raise DocumentLoadError(path or str(buffer_path), f"cannot read buffer {index}: {exc}") from exc
            buffers.append(bytes(data or b""))
        return cls(gltf, buffers, path=path)

    @property
    def animation_count(self) -> int:
        return len(self.gltf.animations or [])

    def buffer_data(self, index: int) -> bytes:
        return self.buffers[index]

    def __repr__(self):
        return f"VrmaDocument(path='{self.path}', animations={self.animation_count}, buffers={len(self.buffers)})"


def load_vrma_document(filepath) -> VrmaDocument:
    """
    Load and decode a .vrma/.gltf/.glb file.

    Args:
        filepath: Path to the document

    Returns:
        Decoded document with resolved buffers

    Raises:
        DocumentLoadError: If the file is missing or cannot be parsed
    """
    filepath = Path(filepath)
    logger.info("Loading animation document: %s", filepath)

    try:
        with open(filepath, "rb") as f:
            magic = f.read(4)
    except OSError as exc:
        raise DocumentLoadError(str(filepath), str(exc)) from exc

    try:
        if magic == GLB_MAGIC:
            gltf = pygltflib.GLTF2.load_binary(str(filepath))
        else:
            gltf = pygltflib.GLTF2.load_json(str(filepath))
    except Exception as exc:
        raise DocumentLoadError(str(filepath), f"invalid glTF: {exc}") from exc

    if gltf is None:
        raise DocumentLoadError(str(filepath), "invalid glTF")

    document = VrmaDocument.from_gltf(gltf, base_dir=filepath.parent, path=str(filepath))
    logger.info("  %d animations, %d buffers", document.animation_count, len(document.buffers))
    return document


def read_accessor(document: VrmaDocument, accessor_idx: Optional[int]) -> Optional[np.ndarray]:
    """
    Read an accessor's elements.

    Args:
        document: Decoded document
        accessor_idx: Accessor index

    Returns:
        float32 array of shape (count, components), or None when the accessor
        does not exist or has no buffer data
    """
    gltf = document.gltf
    if accessor_idx is None or not 0 <= accessor_idx < len(gltf.accessors):
        return None

    accessor = gltf.accessors[accessor_idx]
    if accessor.componentType not in COMPONENT_DTYPES or accessor.type not in COMPONENT_COUNTS:
        return None
    if accessor.bufferView is None or not 0 <= accessor.bufferView < len(gltf.bufferViews):
        return None

    buffer_view = gltf.bufferViews[accessor.bufferView]
    if buffer_view.buffer is None or not 0 <= buffer_view.buffer < len(document.buffers):
        return None
    buffer_data = document.buffer_data(buffer_view.buffer)

    # Calculate offset and stride
    offset = (buffer_view.byteOffset or 0) + (accessor.byteOffset or 0)
    stride = buffer_view.byteStride or 0
    count = accessor.count or 0

    dtype = np.dtype(COMPONENT_DTYPES[accessor.componentType])
    component_count = COMPONENT_COUNTS[accessor.type]
    element_size = dtype.itemsize * component_count

    if offset < 0 or stride < 0:
        return None

    if stride == 0 or stride == element_size:
        # Tightly packed
        data = buffer_data[offset:offset + count * element_size]
    else:
        # Strided data
        data = bytearray()
        for i in range(count):
            element_offset = offset + i * stride
            data.extend(buffer_data[element_offset:element_offset + element_size])

    if len(data) < count * element_size:
        return None

    array = np.frombuffer(bytes(data), dtype=dtype).reshape(-1, component_count)

    if accessor.normalized and dtype.kind in "iu":
        # glTF normalized integers: unsigned c / max, signed max(c / max, -1)
        max_value = float(np.iinfo(dtype).max)
        return np.maximum(array.astype('f4') / max_value, -1.0)

    return array.astype('f4')


def _node_name(gltf: pygltflib.GLTF2, node_idx: Optional[int]) -> Optional[str]:
    if node_idx is None or not 0 <= node_idx < len(gltf.nodes):
        return None
    return gltf.nodes[node_idx].name or None


def _interpolation(sampler) -> Interpolation:
    interp_str = sampler.interpolation if sampler.interpolation else "LINEAR"
    try:
        return Interpolation(interp_str)
    except ValueError:
        logger.warning("Unknown interpolation '%s', using LINEAR", interp_str)
        return Interpolation.LINEAR


def import_clip(document: VrmaDocument, name: Optional[str] = None) -> AnimationClip:
    """
    Import the first animation of a document.

    Channels whose node is unnamed or not a humanoid bone, and channels
    animating anything other than translation/rotation/scale are skipped.
    When several channels animate the same (bone, property) pair the last
    one wins. The clip duration covers the keyframe times of every channel
    on a humanoid bone, including skipped ones.

    Args:
        document: Decoded document
        name: Clip name (defaults to the animation or file name)

    Returns:
        Imported clip; it may have no tracks

    Raises:
        NoAnimationError: If the document has no animations
        MissingKeyframeInputsError: If a mapped channel has no keyframe times
        MalformedChannelError: If a kept channel's keyframe data is inconsistent
    """
    gltf = document.gltf
    if not gltf.animations:
        raise NoAnimationError()

    gltf_anim = gltf.animations[0]
    if name is None:
        name = gltf_anim.name or (Path(document.path).stem if document.path else "Animation_0")

    tracks: Dict[Tuple[CanonicalBone, TrackProperty], Track] = {}
    duration = 0.0

    for channel_idx, channel in enumerate(gltf_anim.channels):
        target = channel.target
        raw_name = _node_name(gltf, target.node if target else None)
        if raw_name is None:
            continue

        bone = map_bone_name(raw_name)
        if bone is None:
            logger.info("  Skipping unknown bone '%s'", raw_name)
            continue

        if channel.sampler is None or not 0 <= channel.sampler < len(gltf_anim.samplers):
            raise MissingKeyframeInputsError(channel_idx, raw_name, "channel has no sampler")
        sampler = gltf_anim.samplers[channel.sampler]

        times = read_accessor(document, sampler.input)
        if times is None or len(times) == 0:
            raise MissingKeyframeInputsError(channel_idx, raw_name, "missing keyframe inputs")
        times = times.reshape(-1)
        duration = max(duration, float(times[-1]))

        target_property = TARGET_PROPERTIES.get(target.path)
        if target_property is None:
            logger.info("  Skipping %s.%s: unsupported target path", raw_name, target.path)
            continue

        values = read_accessor(document, sampler.output)
        if values is None:
            logger.warning("  Skipping %s.%s: missing keyframe outputs", raw_name, target.path)
            continue

        interpolation = _interpolation(sampler)
        width = target_property.width
        if values.shape[1] != width:
            raise MalformedChannelError(
                channel_idx, raw_name,
                f"expected {width} components for {target.path}, got {values.shape[1]}"
            )

        if interpolation is Interpolation.CUBICSPLINE:
            # (in-tangent, value, out-tangent) per keyframe; keep the values
            if len(values) != 3 * len(times):
                raise MalformedChannelError(
                    channel_idx, raw_name,
                    f"{len(times)} keyframes need {3 * len(times)} cubic spline outputs, got {len(values)}"
                )
            values = values[1::3]

        try:
            track = Track(
                bone=bone,
                target_property=target_property,
                times=times,
                values=values,
                interpolation=interpolation,
            )
        except ValueError as exc:
            raise MalformedChannelError(channel_idx, raw_name, str(exc)) from exc

        key = (bone, target_property)
        if key in tracks:
            logger.debug("  %s.%s replaces the earlier %s track", raw_name, target.path, bone.value)
        tracks[key] = track

    clip = AnimationClip(name, tracks.values(), duration=duration)
    logger.info("Found %d animation tracks, duration = %.3f", len(clip.tracks), clip.duration)
    return clip
