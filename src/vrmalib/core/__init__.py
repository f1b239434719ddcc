"""Core engine components"""
from .asset_manager import AssetHandle, AssetManager, AssetState

__all__ = [
    "AssetHandle",
    "AssetManager",
    "AssetState",
]
