"""
Playback Configuration Settings

All configuration constants for the VRMA playback engine.
Modify these values to change import and playback behavior.
"""

import math
from dataclasses import dataclass
from pathlib import Path

# ============================================================================
# Project Paths
# ============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
ASSETS_DIR = PROJECT_ROOT / "assets"

# ============================================================================
# Default Selection
# ============================================================================

DEFAULT_MODEL = "alicia.vrm"
DEFAULT_CLIP = "handDance.vrma"

# File extensions routed to the clip slot (everything else is a model)
CLIP_EXTENSIONS = (".vrma",)

# ============================================================================
# Playback
# ============================================================================

PLAYBACK_ENABLED = True      # Animate on startup
PLAYBACK_SPEED = 1.0         # Multiplier applied to the frame delta time

# Rig orientation fix-up applied to every sampled rotation: C * q * C where
# C is a rotation of ROTATION_CORRECTION_ANGLE radians about +Y. VRMA clips
# are authored facing +Z while the target rig is spawned turned by 180 degrees.
ROTATION_CORRECTION_ENABLED = True
ROTATION_CORRECTION_ANGLE = math.pi

# ============================================================================
# Asset Cache
# ============================================================================

ASSET_CACHE_MAX_ENTRIES = 16  # Unreferenced documents kept before eviction

# ============================================================================
# Logging
# ============================================================================

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
LOG_LEVEL = "INFO"


@dataclass(slots=True)
class PlaybackSettings:
    """Selection source shared between the settings UI and the animation controller."""

    model: str = DEFAULT_MODEL
    clip: str = DEFAULT_CLIP
    enabled: bool = PLAYBACK_ENABLED
    regenerate: bool = False
    playback_speed: float = PLAYBACK_SPEED

    def select_file(self, path: str) -> None:
        """
        Route a dropped or opened file to the clip or model slot.

        Args:
            path: Asset path of the file
        """
        if path.lower().endswith(CLIP_EXTENSIONS):
            self.clip = path
        else:
            self.model = path
        self.regenerate = True
