"""Shared fixtures: in-memory glTF animation documents and skeletons."""

import numpy as np
import pygltflib
import pytest
from pyrr import Quaternion, Vector3

from vrmalib.animation import CanonicalBone, Joint, Skeleton, Transform
from vrmalib.loaders.vrma_loader import VrmaDocument

FLOAT = 5126
COMPONENT_NUMPY = {
    5120: np.int8,
    5121: np.uint8,
    5122: np.int16,
    5123: np.uint16,
    5126: np.float32,
}


class DocumentBuilder:
    """Builds a glTF animation document with one binary buffer."""

    def __init__(self):
        self.gltf = pygltflib.GLTF2()
        self.blob = bytearray()

    def add_node(self, name=None) -> int:
        self.gltf.nodes.append(pygltflib.Node(name=name))
        return len(self.gltf.nodes) - 1

    def add_accessor(self, array, accessor_type, component_type=FLOAT, normalized=False) -> int:
        data = np.ascontiguousarray(array, dtype=COMPONENT_NUMPY[component_type])
        raw = data.tobytes()
        while len(self.blob) % 4:
            self.blob.append(0)
        offset = len(self.blob)
        self.blob.extend(raw)

        self.gltf.bufferViews.append(pygltflib.BufferView(buffer=0, byteOffset=offset, byteLength=len(raw)))
        self.gltf.accessors.append(pygltflib.Accessor(
            bufferView=len(self.gltf.bufferViews) - 1,
            componentType=component_type,
            count=len(data),
            type=accessor_type,
            normalized=normalized,
        ))
        return len(self.gltf.accessors) - 1

    def add_animation(self, channels, name=None):
        """
        Add an animation.

        ``channels`` holds (node_index, path, times, values, interpolation)
        tuples; ``values`` may be an accessor index instead of an array.
        """
        animation = pygltflib.Animation(name=name, channels=[], samplers=[])
        for node, path, times, values, interpolation in channels:
            input_idx = self.add_accessor(np.array(times, dtype='f4'), "SCALAR")
            if isinstance(values, int) or values is None:
                output_idx = values
            else:
                values = np.array(values, dtype='f4')
                output_idx = self.add_accessor(values, {3: "VEC3", 4: "VEC4", 1: "SCALAR"}[values.shape[-1]])
            animation.samplers.append(pygltflib.AnimationSampler(
                input=input_idx, output=output_idx, interpolation=interpolation,
            ))
            animation.channels.append(pygltflib.AnimationChannel(
                sampler=len(animation.samplers) - 1,
                target=pygltflib.AnimationChannelTarget(node=node, path=path),
            ))
        self.gltf.animations.append(animation)
        return animation

    def build(self, path=None) -> VrmaDocument:
        blob = bytes(self.blob)
        self.gltf.buffers = [pygltflib.Buffer(byteLength=len(blob))]
        self.gltf.set_binary_blob(blob)
        return VrmaDocument(self.gltf, [blob], path=path)


@pytest.fixture
def builder():
    return DocumentBuilder()


@pytest.fixture
def hips_document(builder):
    """One linear translation track on Hips: (0,0,0) at t=0 -> (0,1,0) at t=1."""
    hips = builder.add_node("Hips")
    builder.add_animation(
        [(hips, "translation", [0.0, 1.0], [[0.0, 0.0, 0.0], [0.0, 1.0, 0.0]], "LINEAR")],
        name="walk",
    )
    return builder.build()


@pytest.fixture
def clip_document_factory():
    """Build a document with one animation of one channel."""
    def factory(name, node_name="Hips", path="translation", times=(0.0, 1.0),
                values=((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)), interpolation="LINEAR"):
        builder = DocumentBuilder()
        node = builder.add_node(node_name)
        builder.add_animation([(node, path, list(times), values, interpolation)], name=name)
        return builder.build()
    return factory


@pytest.fixture
def empty_document():
    """A document with a node but no animations."""
    builder = DocumentBuilder()
    builder.add_node("Hips")
    builder.add_accessor(np.zeros(1, dtype='f4'), "SCALAR")
    return builder.build()


def make_skeleton() -> Skeleton:
    """Hips -> Spine -> Head, Hips -> LeftUpperLeg, plus an untagged helper node."""
    skeleton = Skeleton("Test")
    hips = Joint("J_Hips", 0, CanonicalBone.HIPS, Transform(translation=Vector3([0.0, 0.9, 0.0])))
    spine = Joint("J_Spine", 1, CanonicalBone.SPINE, Transform(translation=Vector3([0.0, 0.1, 0.0])))
    head = Joint("J_Head", 2, CanonicalBone.HEAD, Transform(
        translation=Vector3([0.0, 0.5, 0.0]),
        rotation=Quaternion.from_x_rotation(0.2),
    ))
    leg = Joint("J_LeftUpperLeg", 3, CanonicalBone.LEFT_UPPER_LEG, Transform(translation=Vector3([0.1, -0.05, 0.0])))
    helper = Joint("Root", 4)

    skeleton.add_joint(helper)
    for joint in (hips, spine, head, leg):
        skeleton.add_joint(joint)
    helper.add_child(hips)
    hips.add_child(spine)
    spine.add_child(head)
    hips.add_child(leg)
    skeleton.rebuild_roots()
    skeleton.update_world_transforms()
    return skeleton


@pytest.fixture
def skeleton():
    return make_skeleton()


@pytest.fixture
def skeleton_factory():
    return make_skeleton


def quat_close(a, b, atol=1e-5) -> bool:
    """Quaternions q and -q are the same rotation."""
    a = np.asarray(a, dtype='f8')
    b = np.asarray(b, dtype='f8')
    return np.allclose(a, b, atol=atol) or np.allclose(a, -b, atol=atol)


@pytest.fixture
def assert_quat_close():
    def check(a, b, atol=1e-5):
        assert quat_close(a, b, atol), f"{a} != {b}"
    return check
