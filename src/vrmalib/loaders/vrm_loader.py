"""
VRM Loader

Builds a humanoid Skeleton from a VRM (glTF) model's node hierarchy.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import numpy as np
import pygltflib
from pyrr import Quaternion, Vector3

from ..animation import CanonicalBone, Joint, Skeleton, Transform, bone_from_vrm_name, map_bone_name
from .vrma_loader import load_vrma_document

logger = logging.getLogger(__name__)


def humanoid_bone_map(gltf: pygltflib.GLTF2) -> Dict[int, CanonicalBone]:
    """
    Read the humanoid bone assignment from a VRM extension.

    Supports VRM 1.0 (``VRMC_vrm``) and VRM 0.x (``VRM``).

    Returns:
        Mapping of node index -> bone (empty when the model has no extension)
    """
    extensions = gltf.extensions or {}
    bone_map: Dict[int, CanonicalBone] = {}

    vrm1 = extensions.get("VRMC_vrm")
    if vrm1:
        human_bones = vrm1.get("humanoid", {}).get("humanBones", {})
        for bone_name, info in human_bones.items():
            bone = bone_from_vrm_name(bone_name, vrm1=True)
            if bone is not None and info.get("node") is not None:
                bone_map[info["node"]] = bone
        return bone_map

    vrm0 = extensions.get("VRM")
    if vrm0:
        for info in vrm0.get("humanoid", {}).get("humanBones", []):
            bone = bone_from_vrm_name(info.get("bone", ""))
            if bone is not None and info.get("node") is not None:
                bone_map[info["node"]] = bone

    return bone_map


def node_transform(node) -> Transform:
    """
    Extract a node's local TRS.

    Nodes with a ``matrix`` are decomposed (no shear supported).
    """
    if node.matrix is not None and len(node.matrix) == 16:
        # Column-major: row i of the reshaped array is column i of the matrix
        mat = np.array(node.matrix, dtype='f4').reshape(4, 4)
        translation = Vector3(mat[3, :3])
        scale = np.linalg.norm(mat[:3, :3], axis=1)
        basis = mat[:3, :3] / np.where(scale == 0.0, 1.0, scale)[:, None]
        # pyrr reads the rotation in column-vector layout
        rotation = Quaternion.from_matrix(basis.T)
        return Transform(translation=translation, rotation=rotation, scale=Vector3(scale))

    transform = Transform()
    if node.translation is not None:
        transform.translation = Vector3(node.translation)
    if node.rotation is not None:
        transform.rotation = Quaternion(node.rotation)  # glTF and pyrr are both (x, y, z, w)
    if node.scale is not None:
        transform.scale = Vector3(node.scale)
    return transform


def skeleton_from_gltf(gltf: pygltflib.GLTF2, name: str = "Skeleton") -> Skeleton:
    """
    Build a skeleton from every node of a model.

    Humanoid tags come from the VRM extension; models without one fall
    back to the node-name alias table.

    Args:
        gltf: Parsed model
        name: Skeleton name

    Returns:
        Skeleton with hierarchy, local transforms and bone tags
    """
    skeleton = Skeleton(name)
    bone_map = humanoid_bone_map(gltf)
    if not bone_map:
        logger.info("  No VRM humanoid extension, mapping bones by node name")

    joint_map: Dict[int, Joint] = {}
    for node_idx, node in enumerate(gltf.nodes):
        bone: Optional[CanonicalBone] = bone_map.get(node_idx) if bone_map else map_bone_name(node.name)
        joint = Joint(
            name=node.name if node.name else f"Node_{node_idx}",
            index=node_idx,
            bone=bone,
            transform=node_transform(node),
        )
        joint_map[node_idx] = joint
        skeleton.add_joint(joint)

    # Build parent-child relationships
    for node_idx, node in enumerate(gltf.nodes):
        for child_idx in node.children or []:
            if child_idx in joint_map:
                joint_map[node_idx].add_child(joint_map[child_idx])

    skeleton.rebuild_roots()
    skeleton.update_world_transforms()

    bones = sum(1 for _ in skeleton.humanoid_joints())
    logger.info("  Loaded skeleton with %d joints, %d humanoid bones", len(skeleton.joints), bones)
    return skeleton


def load_vrm_skeleton(filepath) -> Skeleton:
    """
    Load a VRM model file and build its skeleton.

    Raises:
        DocumentLoadError: If the file is missing or cannot be parsed
    """
    document = load_vrma_document(filepath)
    return skeleton_from_gltf(document.gltf, name=Path(filepath).stem)
