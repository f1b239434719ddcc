"""Tests for bone name mapping"""

import pytest

from vrmalib.animation.bone_names import BONE_ALIASES, CanonicalBone, bone_from_vrm_name, map_bone_name


def test_canonical_names_map_to_themselves():
    """Every bone is reachable through its PascalCase name"""
    for bone in CanonicalBone:
        assert map_bone_name(bone.display_name) is bone


@pytest.mark.parametrize("aliases, bone", [
    (("LeftUpLeg", "LeftUpperLeg"), CanonicalBone.LEFT_UPPER_LEG),
    (("RightUpLeg", "RightUpperLeg"), CanonicalBone.RIGHT_UPPER_LEG),
    (("LeftLeg", "LeftLowerLeg"), CanonicalBone.LEFT_LOWER_LEG),
    (("LeftArm", "LeftUpperArm"), CanonicalBone.LEFT_UPPER_ARM),
    (("RightForeArm", "RightLowerArm"), CanonicalBone.RIGHT_LOWER_ARM),
    (("LeftToeBase", "LeftFoot"), CanonicalBone.LEFT_FOOT),
    (("RightToeBase_end", "RightToes"), CanonicalBone.RIGHT_TOES),
    (("LeftHandIndex1", "LeftIndexProximal"), CanonicalBone.LEFT_INDEX_PROXIMAL),
    (("RightHandThumb2", "RightThumbIntermediate"), CanonicalBone.RIGHT_THUMB_INTERMEDIATE),
    (("LeftHandPinky3", "LeftHandLittle3", "LeftLittleDistal"), CanonicalBone.LEFT_LITTLE_DISTAL),
])
def test_aliases_agree(aliases, bone):
    """All spellings of a joint yield the same bone"""
    assert {map_bone_name(alias) for alias in aliases} == {bone}


@pytest.mark.parametrize("name", [
    "", None, "hips", "HIPS", "LeftUpperLeg ", "mixamorig:Hips", "LeftHandIndex4", "Tail",
])
def test_unknown_names_return_none(name):
    """Matching is exact and case-sensitive"""
    assert map_bone_name(name) is None


def test_alias_table_is_read_only():
    """The alias table cannot be modified"""
    with pytest.raises(TypeError):
        BONE_ALIASES["Tail"] = CanonicalBone.HIPS


def test_upper_chest_alias():
    """UpperChest is distinct from Chest"""
    assert map_bone_name("UpperChest") is CanonicalBone.UPPER_CHEST
    assert map_bone_name("Chest") is CanonicalBone.CHEST


def test_vrm_humanoid_names():
    """VRM 0.x names map directly; VRM 1.0 thumbs shift by one segment"""
    assert bone_from_vrm_name("leftUpperLeg") is CanonicalBone.LEFT_UPPER_LEG
    assert bone_from_vrm_name("leftThumbProximal") is CanonicalBone.LEFT_THUMB_PROXIMAL
    assert bone_from_vrm_name("leftThumbProximal", vrm1=True) is CanonicalBone.LEFT_THUMB_INTERMEDIATE
    assert bone_from_vrm_name("rightThumbMetacarpal", vrm1=True) is CanonicalBone.RIGHT_THUMB_PROXIMAL
    assert bone_from_vrm_name("rightThumbMetacarpal") is None
    assert bone_from_vrm_name("tail") is None
