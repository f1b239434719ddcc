"""
Skeleton

Represents a hierarchical humanoid skeleton whose joints carry
local TRS transforms.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from pyrr import Matrix44, Quaternion, Vector3

from .bone_names import CanonicalBone


@dataclass
class Transform:
    """Local translation/rotation/scale of a joint. Rotation is (x, y, z, w)."""

    translation: Vector3 = field(default_factory=lambda: Vector3([0.0, 0.0, 0.0]))
    rotation: Quaternion = field(default_factory=lambda: Quaternion([0.0, 0.0, 0.0, 1.0]))
    scale: Vector3 = field(default_factory=lambda: Vector3([1.0, 1.0, 1.0]))

    def copy(self) -> 'Transform':
        return Transform(
            translation=Vector3(self.translation),
            rotation=Quaternion(self.rotation),
            scale=Vector3(self.scale),
        )

    def matrix(self) -> Matrix44:
        """
        Compose the local matrix.

        Row-major pyrr convention: scale, then rotation, then translation.
        """
        mat = Matrix44.from_scale(self.scale)
        mat = mat @ Matrix44.from_quaternion(self.rotation)
        mat = mat @ Matrix44.from_translation(self.translation)
        return mat


class Joint:
    """
    Represents a single joint (bone) in a skeleton hierarchy.

    Each joint has:
    - Local transform (relative to parent), mutated by pose application
    - World transform (absolute, computed from hierarchy)
    - Optional canonical humanoid bone tag
    """

    def __init__(
        self,
        name: str,
        index: int,
        bone: Optional[CanonicalBone] = None,
        transform: Optional[Transform] = None,
        parent: Optional['Joint'] = None
    ):
        """
        Initialize a joint.

        Args:
            name: Node name
            index: Node index in the source document
            bone: Humanoid bone this joint drives (None for helper nodes)
            transform: Local transform (identity if omitted)
            parent: Parent joint (None for root)
        """
        self.name = name
        self.index = index
        self.bone = bone
        self.transform = transform if transform is not None else Transform()
        self.parent = parent
        self.children: List['Joint'] = []

        # World transform (absolute, computed from hierarchy)
        self.world_transform = Matrix44.identity()

    def add_child(self, child: 'Joint'):
        """Add a child joint to this joint's hierarchy."""
        self.children.append(child)
        child.parent = self

    def __repr__(self):
        bone = self.bone.value if self.bone else None
        return f"Joint(name='{self.name}', bone={bone}, children={len(self.children)})"


class Skeleton:
    """
    Hierarchical skeleton structure.

    Manages the joint hierarchy and provides utilities for:
    - Enumerating humanoid (joint, bone) pairs for pose application
    - Updating world transforms from local transforms
    - Finding joints by name or bone
    """

    def __init__(self, name: str = "Skeleton"):
        """
        Initialize skeleton.

        Args:
            name: Skeleton name for debugging
        """
        self.name = name
        self.joints: List[Joint] = []
        self.root_joints: List[Joint] = []
        self.joint_by_name: Dict[str, Joint] = {}

    def add_joint(self, joint: Joint):
        """
        Add a joint to the skeleton.

        Args:
            joint: Joint to add
        """
        self.joints.append(joint)
        self.joint_by_name[joint.name] = joint

        # If joint has no parent, it's a root joint
        if joint.parent is None:
            self.root_joints.append(joint)

    def get_joint(self, name: str) -> Optional[Joint]:
        """Find a joint by name."""
        return self.joint_by_name.get(name)

    def get_bone(self, bone: CanonicalBone) -> Optional[Joint]:
        """Find the first joint tagged with ``bone``."""
        for joint in self.joints:
            if joint.bone is bone:
                return joint
        return None

    def humanoid_joints(self) -> Iterator[Tuple[Joint, CanonicalBone]]:
        """Yield (joint, bone) for every joint tagged with a humanoid bone."""
        for joint in self.joints:
            if joint.bone is not None:
                yield joint, joint.bone

    def has_bones(self) -> bool:
        """True once at least one humanoid bone exists."""
        return next(self.humanoid_joints(), None) is not None

    def rebuild_roots(self):
        """Recompute root joints after parent links change."""
        self.root_joints = [j for j in self.joints if j.parent is None]

    def update_world_transforms(self):
        """
        Update all world transforms from local transforms.

        Walks the hierarchy from the root joints and computes
        world_transform = local @ parent_world (row-major form).

        Call this after applying a pose.
        """
        for root in self.root_joints:
            self._update_joint_recursive(root, Matrix44.identity())

    def _update_joint_recursive(self, joint: Joint, parent_world: Matrix44):
        joint.world_transform = joint.transform.matrix() @ parent_world
        for child in joint.children:
            self._update_joint_recursive(child, joint.world_transform)

    def __repr__(self):
        return f"Skeleton(name='{self.name}', joints={len(self.joints)}, roots={len(self.root_joints)})"
