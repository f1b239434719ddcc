"""
Bone Names

Canonical VRM humanoid bones and the alias table that maps scene-graph
node names onto them.
"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional


class CanonicalBone(Enum):
    """VRM humanoid bones. Values are the VRM humanoid bone names."""

    # Torso
    HIPS = "hips"
    SPINE = "spine"
    CHEST = "chest"
    UPPER_CHEST = "upperChest"
    NECK = "neck"

    # Head
    HEAD = "head"
    LEFT_EYE = "leftEye"
    RIGHT_EYE = "rightEye"
    JAW = "jaw"

    # Legs
    LEFT_UPPER_LEG = "leftUpperLeg"
    LEFT_LOWER_LEG = "leftLowerLeg"
    LEFT_FOOT = "leftFoot"
    LEFT_TOES = "leftToes"
    RIGHT_UPPER_LEG = "rightUpperLeg"
    RIGHT_LOWER_LEG = "rightLowerLeg"
    RIGHT_FOOT = "rightFoot"
    RIGHT_TOES = "rightToes"

    # Arms
    LEFT_SHOULDER = "leftShoulder"
    LEFT_UPPER_ARM = "leftUpperArm"
    LEFT_LOWER_ARM = "leftLowerArm"
    LEFT_HAND = "leftHand"
    RIGHT_SHOULDER = "rightShoulder"
    RIGHT_UPPER_ARM = "rightUpperArm"
    RIGHT_LOWER_ARM = "rightLowerArm"
    RIGHT_HAND = "rightHand"

    # Left fingers
    LEFT_THUMB_PROXIMAL = "leftThumbProximal"
    LEFT_THUMB_INTERMEDIATE = "leftThumbIntermediate"
    LEFT_THUMB_DISTAL = "leftThumbDistal"
    LEFT_INDEX_PROXIMAL = "leftIndexProximal"
    LEFT_INDEX_INTERMEDIATE = "leftIndexIntermediate"
    LEFT_INDEX_DISTAL = "leftIndexDistal"
    LEFT_MIDDLE_PROXIMAL = "leftMiddleProximal"
    LEFT_MIDDLE_INTERMEDIATE = "leftMiddleIntermediate"
    LEFT_MIDDLE_DISTAL = "leftMiddleDistal"
    LEFT_RING_PROXIMAL = "leftRingProximal"
    LEFT_RING_INTERMEDIATE = "leftRingIntermediate"
    LEFT_RING_DISTAL = "leftRingDistal"
    LEFT_LITTLE_PROXIMAL = "leftLittleProximal"
    LEFT_LITTLE_INTERMEDIATE = "leftLittleIntermediate"
    LEFT_LITTLE_DISTAL = "leftLittleDistal"

    # Right fingers
    RIGHT_THUMB_PROXIMAL = "rightThumbProximal"
    RIGHT_THUMB_INTERMEDIATE = "rightThumbIntermediate"
    RIGHT_THUMB_DISTAL = "rightThumbDistal"
    RIGHT_INDEX_PROXIMAL = "rightIndexProximal"
    RIGHT_INDEX_INTERMEDIATE = "rightIndexIntermediate"
    RIGHT_INDEX_DISTAL = "rightIndexDistal"
    RIGHT_MIDDLE_PROXIMAL = "rightMiddleProximal"
    RIGHT_MIDDLE_INTERMEDIATE = "rightMiddleIntermediate"
    RIGHT_MIDDLE_DISTAL = "rightMiddleDistal"
    RIGHT_RING_PROXIMAL = "rightRingProximal"
    RIGHT_RING_INTERMEDIATE = "rightRingIntermediate"
    RIGHT_RING_DISTAL = "rightRingDistal"
    RIGHT_LITTLE_PROXIMAL = "rightLittleProximal"
    RIGHT_LITTLE_INTERMEDIATE = "rightLittleIntermediate"
    RIGHT_LITTLE_DISTAL = "rightLittleDistal"

    @property
    def display_name(self) -> str:
        """PascalCase spelling used by VRMA exporters, e.g. ``LeftUpperLeg``."""
        return self.value[0].upper() + self.value[1:]


_FINGER_SEGMENTS = ("Proximal", "Intermediate", "Distal")


def _build_alias_table() -> Dict[str, CanonicalBone]:
    """Build the node-name alias table."""
    table = {bone.display_name: bone for bone in CanonicalBone}

    for side in ("Left", "Right"):
        def bone(suffix: str) -> CanonicalBone:
            return CanonicalBone(side.lower() + suffix)

        # Mixamo-style limb names
        table[f"{side}UpLeg"] = bone("UpperLeg")
        table[f"{side}Leg"] = bone("LowerLeg")
        table[f"{side}ToeBase"] = bone("Foot")
        table[f"{side}ToeBase_end"] = bone("Toes")
        table[f"{side}Arm"] = bone("UpperArm")
        table[f"{side}ForeArm"] = bone("LowerArm")

        # Numbered finger segments: LeftHandIndex1 -> leftIndexProximal
        for finger in ("Thumb", "Index", "Middle", "Ring", "Little"):
            for number, segment in enumerate(_FINGER_SEGMENTS, start=1):
                table[f"{side}Hand{finger}{number}"] = bone(finger + segment)
        for number, segment in enumerate(_FINGER_SEGMENTS, start=1):
            table[f"{side}HandPinky{number}"] = bone("Little" + segment)

    return table


BONE_ALIASES: Mapping[str, CanonicalBone] = MappingProxyType(_build_alias_table())

# VRM 1.0 renamed the thumb chain (metacarpal/proximal/distal)
_VRM1_THUMB_NAMES = {
    "leftThumbMetacarpal": CanonicalBone.LEFT_THUMB_PROXIMAL,
    "leftThumbProximal": CanonicalBone.LEFT_THUMB_INTERMEDIATE,
    "leftThumbDistal": CanonicalBone.LEFT_THUMB_DISTAL,
    "rightThumbMetacarpal": CanonicalBone.RIGHT_THUMB_PROXIMAL,
    "rightThumbProximal": CanonicalBone.RIGHT_THUMB_INTERMEDIATE,
    "rightThumbDistal": CanonicalBone.RIGHT_THUMB_DISTAL,
}


def map_bone_name(raw_name: Optional[str]) -> Optional[CanonicalBone]:
    """
    Map a scene-graph node name to a canonical bone.

    Matching is exact and case-sensitive.

    Args:
        raw_name: Node name from the animation document

    Returns:
        CanonicalBone if the name is a known alias, None otherwise
    """
    if not raw_name:
        return None
    return BONE_ALIASES.get(raw_name)


def bone_from_vrm_name(name: str, vrm1: bool = False) -> Optional[CanonicalBone]:
    """
    Map a bone name from a VRM humanoid extension to a canonical bone.

    Args:
        name: Humanoid bone name (e.g. ``leftUpperLeg``)
        vrm1: True for VRM 1.0 (``VRMC_vrm``) thumb naming

    Returns:
        CanonicalBone, or None for bones outside the taxonomy
    """
    if vrm1 and name in _VRM1_THUMB_NAMES:
        return _VRM1_THUMB_NAMES[name]
    try:
        return CanonicalBone(name)
    except ValueError:
        return None
