"""
Animation Controller

Owns the imported clip and rest pose for one skeleton and drives
VRMA playback every tick.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Optional

from ..config.settings import PlaybackSettings
from ..loaders.errors import ClipImportError, VrmaError
from ..loaders import vrma_loader
from .animation import AnimationClip, wrap_time
from .pose import RestPoseSnapshot, apply_pose, capture_rest_pose, restore_rest_pose
from .skeleton import Skeleton

if TYPE_CHECKING:
    from ..core.asset_manager import AssetHandle, AssetManager

logger = logging.getLogger(__name__)


class PlaybackState(Enum):
    """Controller lifecycle states."""

    EMPTY = auto()     # No clip selected
    LOADING = auto()   # Waiting for the selected document (or its import failed)
    READY = auto()     # Clip imported, rest pose captured, sampling each tick


@dataclass(frozen=True)
class AnimationContext:
    """Imported clip plus the rest pose captured when it was loaded."""

    selection: str
    clip: AnimationClip
    rest_pose: RestPoseSnapshot


class AnimationController:
    """
    Controls VRMA playback for one skeleton.

    Manages:
    - Detecting selection changes and regenerate requests
    - Importing the selected document once it has decoded
    - Capturing and restoring the rest pose
    - Applying the looping clip to the skeleton each tick

    Each skeleton gets its own controller; nothing here is shared.
    """

    def __init__(self, skeleton: Skeleton, assets: AssetManager, settings: Optional[PlaybackSettings] = None):
        """
        Initialize animation controller.

        Args:
            skeleton: Skeleton to animate
            assets: Asset source providing decoded documents
            settings: Selection source (clip path, enabled and regenerate flags)
        """
        self.skeleton = skeleton
        self.assets = assets
        self.settings = settings if settings is not None else PlaybackSettings()

        self.state = PlaybackState.EMPTY
        self.context: Optional[AnimationContext] = None
        self.elapsed: float = 0.0
        self.last_error: Optional[VrmaError] = None

        self._selection = ""
        self._handle: Optional[AssetHandle] = None
        self._ready_handle: Optional[AssetHandle] = None
        self._skeleton_changed = False

        self.stats = {
            'requests': 0,
            'imports': 0,
            'failed_imports': 0,
            'rest_captures': 0,
        }

    @property
    def clip(self) -> Optional[AnimationClip]:
        return self.context.clip if self.context else None

    def set_skeleton(self, skeleton: Skeleton):
        """
        Retarget playback to a newly spawned skeleton.

        The clip is re-imported and the rest pose recaptured on the next tick.
        """
        self.skeleton = skeleton
        self.context = None
        self._skeleton_changed = True

    def update(self, delta_time: float):
        """
        Advance playback by one tick.

        Args:
            delta_time: Time elapsed since last frame (seconds)
        """
        self.elapsed += delta_time * self.settings.playback_speed

        self._sync_selection()
        self._import_ready_document()

        if self.context is None:
            return

        if not self.settings.enabled:
            restore_rest_pose(self.skeleton, self.context.rest_pose)
            return

        t = wrap_time(self.elapsed, self.context.clip.duration)
        apply_pose(self.skeleton, self.context.clip, self.context.rest_pose, t)

    def _sync_selection(self):
        """Request the selected document when the selection or skeleton changed."""
        selection = self.settings.clip

        if not selection:
            if self._selection:
                self._clear()
            return

        if not self.skeleton.has_bones():
            # Wait for the model's bones to spawn
            return

        if selection == self._selection and not self.settings.regenerate and not self._skeleton_changed:
            return

        self.settings.regenerate = False
        self._skeleton_changed = False
        self._request(selection)

    def _request(self, selection: str):
        logger.info("Loading animation clip '%s'", selection)
        previous = self._handle

        self._selection = selection
        self.state = PlaybackState.LOADING
        self.last_error = None
        self._ready_handle = None
        self._handle = self.assets.load(selection)
        self.stats['requests'] += 1

        if previous is not None:
            self.assets.release(previous)

        self.assets.subscribe(self._handle, self._on_asset_loaded)

    def _on_asset_loaded(self, handle: AssetHandle):
        if handle is self._handle:
            self._ready_handle = handle

    def _import_ready_document(self):
        handle, self._ready_handle = self._ready_handle, None
        if handle is None:
            return

        if handle.error is not None:
            self.last_error = handle.error
            self.stats['failed_imports'] += 1
            return

        document = self.assets.get(handle)
        try:
            clip = vrma_loader.import_clip(document)
        except ClipImportError as exc:
            logger.error("Failed to import animation clip '%s': %s", self._selection, exc)
            self.last_error = exc
            self.stats['failed_imports'] += 1
            return

        # Put the previous clip's bones back before recording the new rest pose
        if self.context is not None:
            restore_rest_pose(self.skeleton, self.context.rest_pose)

        rest_pose = capture_rest_pose(self.skeleton, clip)
        self.context = AnimationContext(selection=self._selection, clip=clip, rest_pose=rest_pose)
        self.state = PlaybackState.READY
        self.elapsed = 0.0
        self.stats['imports'] += 1
        self.stats['rest_captures'] += 1

        missing = clip.bones - set(rest_pose)
        if missing:
            logger.info("  %d animated bones are not present on the skeleton", len(missing))

    def _clear(self):
        """Drop the clip after the selection was cleared."""
        if self.context is not None:
            restore_rest_pose(self.skeleton, self.context.rest_pose)
        if self._handle is not None:
            self.assets.release(self._handle)
        self.context = None
        self._handle = None
        self._ready_handle = None
        self._selection = ""
        self.last_error = None
        self.state = PlaybackState.EMPTY

    def __repr__(self):
        clip_name = self.context.clip.name if self.context else "None"
        return f"AnimationController(clip='{clip_name}', state={self.state.name}, time={self.elapsed:.2f}s)"
