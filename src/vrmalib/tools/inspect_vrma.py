"""
Print the contents of a VRMA animation document.

Lists scenes, nodes, skins and animations, then imports the first
animation and summarizes its humanoid tracks.

Usage:
    vrma-inspect path/to/clip.vrma [--verbose]
"""

from __future__ import annotations

import argparse
import logging
from typing import Sequence

from ..animation.bone_names import map_bone_name
from ..config.settings import LOG_FORMAT, LOG_LEVEL
from ..loaders.errors import VrmaError
from ..loaders.vrma_loader import VrmaDocument, import_clip, load_vrma_document


def print_document_info(document: VrmaDocument) -> None:
    gltf = document.gltf
    print(f"Loaded VRMA file: {document.path}")

    print(f"Scenes ({len(gltf.scenes)}):")
    for idx, scene in enumerate(gltf.scenes):
        print(f"  Scene[{idx}] name: {scene.name!r}")

    print(f"Nodes ({len(gltf.nodes)}):")
    for idx, node in enumerate(gltf.nodes):
        bone = map_bone_name(node.name)
        mapped = f" -> {bone.value}" if bone else ""
        print(f"  Node[{idx}] name: {node.name!r}{mapped}")

    print(f"Skins ({len(gltf.skins)}):")
    for idx, skin in enumerate(gltf.skins):
        print(f"  Skin[{idx}] name: {skin.name!r}")

    print(f"Animations ({len(gltf.animations)}):")
    for idx, animation in enumerate(gltf.animations):
        print(f"  Animation[{idx}] name: {animation.name!r}, channels: {len(animation.channels)}")

    print(f"Buffers loaded: {len(document.buffers)}")


def print_clip_info(document: VrmaDocument) -> None:
    clip = import_clip(document)
    print(f"Clip '{clip.name}': {len(clip.tracks)} tracks, duration {clip.duration:.3f}s")
    for track in clip.tracks:
        print(f"  {track.bone.value:<24} {track.target_property.value:<12} "
              f"{len(track.times):>5} keys  {track.interpolation.value}")


def cli(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Print the structure and humanoid tracks of a VRMA animation file.",
    )
    parser.add_argument("path", help="Path to a .vrma, .gltf or .glb file.")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show debug logging from the importer.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(format=LOG_FORMAT, level=logging.DEBUG if args.verbose else LOG_LEVEL)

    try:
        document = load_vrma_document(args.path)
        print_document_info(document)
        print_clip_info(document)
    except VrmaError as exc:
        print(f"Error reading VRMA file: {exc}")
        return 1
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """CLI-compatible entry point."""

    return cli(argv)


if __name__ == "__main__":
    raise SystemExit(cli())
