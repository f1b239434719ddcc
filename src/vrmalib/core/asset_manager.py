"""
Asset Manager

Caches decoded animation documents by path with reference counting and
notifies subscribers when a document finishes decoding.
"""

import logging
from collections import OrderedDict
from concurrent.futures import Executor, Future
from enum import Enum, auto
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..config.settings import ASSET_CACHE_MAX_ENTRIES, ASSETS_DIR
from ..loaders.errors import DocumentLoadError
from ..loaders.vrma_loader import VrmaDocument, load_vrma_document

logger = logging.getLogger(__name__)


class AssetState(Enum):
    """Decode state of an asset handle."""
    PENDING = auto()
    LOADED = auto()
    FAILED = auto()


class AssetHandle:
    """Reference to a (possibly still decoding) document."""

    def __init__(self, key: str, path: Path):
        self.key = key
        self.path = path
        self.state = AssetState.PENDING
        self.document: Optional[VrmaDocument] = None
        self.error: Optional[DocumentLoadError] = None
        self.ref_count = 0
        self._future: Optional[Future] = None
        self._callbacks: List[Callable[['AssetHandle'], None]] = []

    @property
    def is_done(self) -> bool:
        return self.state is not AssetState.PENDING

    def __repr__(self):
        return f"AssetHandle(path='{self.path}', state={self.state.name}, refs={self.ref_count})"


class AssetManager:
    """
    Document cache for the animation controllers.

    Manages document lifecycle with:
    - Caching of decoded documents keyed by resolved path
    - Reference counting; unreferenced documents are evicted oldest first
    - Optional off-thread decoding through an Executor
    - Load notifications delivered from update() on the caller's thread
    """

    def __init__(
        self,
        assets_dir: Optional[Path] = None,
        loader: Callable[[Path], VrmaDocument] = load_vrma_document,
        executor: Optional[Executor] = None,
        max_unreferenced: int = ASSET_CACHE_MAX_ENTRIES,
    ):
        """
        Initialize asset manager.

        Args:
            assets_dir: Directory that relative paths resolve against
            loader: Function decoding a path into a document
            executor: Decode off-thread when given, otherwise decode inside load()
            max_unreferenced: Unreferenced documents kept before eviction
        """
        self.assets_dir = Path(assets_dir) if assets_dir is not None else ASSETS_DIR
        self.loader = loader
        self.executor = executor
        self.max_unreferenced = max_unreferenced

        self._cache: Dict[str, AssetHandle] = {}
        self._unreferenced: "OrderedDict[str, AssetHandle]" = OrderedDict()

        # Statistics
        self._stats = {
            'total_loads': 0,
            'cache_hits': 0,
            'cache_misses': 0,
            'failures': 0,
            'evictions': 0,
        }

    def resolve(self, path) -> Path:
        """Resolve an asset path against the assets directory."""
        path = Path(path)
        if not path.is_absolute():
            path = self.assets_dir / path
        return path.resolve()

    def load(self, path) -> AssetHandle:
        """
        Request a document.

        Args:
            path: Asset path (relative to the assets directory or absolute)

        Returns:
            Handle holding one new reference; release() it when done
        """
        resolved = self.resolve(path)
        key = str(resolved)
        self._stats['total_loads'] += 1

        handle = self._cache.get(key)
        if handle is not None:
            self._stats['cache_hits'] += 1
            self._unreferenced.pop(key, None)
            handle.ref_count += 1
            return handle

        self._stats['cache_misses'] += 1
        handle = AssetHandle(key, resolved)
        handle.ref_count = 1
        self._cache[key] = handle

        if self.executor is not None:
            handle._future = self.executor.submit(self.loader, resolved)
        else:
            self._decode(handle)
        return handle

    def subscribe(self, handle: AssetHandle, callback: Callable[[AssetHandle], None]):
        """
        Call ``callback(handle)`` once the handle finishes decoding.

        Fires immediately when the handle is already done.
        """
        if handle.is_done:
            callback(handle)
        else:
            handle._callbacks.append(callback)

    def release(self, handle: AssetHandle):
        """Drop one reference to a handle."""
        if handle.ref_count <= 0:
            return
        handle.ref_count -= 1
        if handle.ref_count == 0 and self._cache.get(handle.key) is handle:
            handle._callbacks.clear()
            self._unreferenced[handle.key] = handle
            self._evict_if_needed()

    def get(self, handle: AssetHandle) -> Optional[VrmaDocument]:
        """Get the decoded document, or None while pending or failed."""
        return handle.document

    def update(self):
        """
        Collect finished off-thread decodes and notify subscribers.

        Call once per tick before the animation controllers update.
        """
        for handle in list(self._cache.values()):
            future = handle._future
            if future is None or not future.done():
                continue
            handle._future = None
            try:
                document = future.result()
            except DocumentLoadError as exc:
                self._fail(handle, exc)
            except Exception as exc:
                self._fail(handle, DocumentLoadError(str(handle.path), str(exc)))
            else:
                self._finish(handle, document)

    def get_stats(self) -> Dict[str, int]:
        """Get cache statistics."""
        stats = dict(self._stats)
        stats['cached'] = len(self._cache)
        stats['unreferenced'] = len(self._unreferenced)
        return stats

    def _decode(self, handle: AssetHandle):
        try:
            document = self.loader(handle.path)
        except DocumentLoadError as exc:
            self._fail(handle, exc)
        except Exception as exc:
            self._fail(handle, DocumentLoadError(str(handle.path), str(exc)))
        else:
            self._finish(handle, document)

    def _finish(self, handle: AssetHandle, document: VrmaDocument):
        handle.document = document
        handle.state = AssetState.LOADED
        self._notify(handle)

    def _fail(self, handle: AssetHandle, error: DocumentLoadError):
        logger.error("Failed to load asset %s: %s", handle.path, error.reason)
        handle.error = error
        handle.state = AssetState.FAILED
        self._stats['failures'] += 1
        # Failed decodes are not cached so a later request retries the file
        if self._cache.get(handle.key) is handle:
            del self._cache[handle.key]
        self._unreferenced.pop(handle.key, None)
        self._notify(handle)

    def _notify(self, handle: AssetHandle):
        callbacks, handle._callbacks = handle._callbacks, []
        for callback in callbacks:
            callback(handle)

    def _evict_if_needed(self):
        while len(self._unreferenced) > self.max_unreferenced:
            key, _ = self._unreferenced.popitem(last=False)
            self._cache.pop(key, None)
            self._stats['evictions'] += 1
            logger.debug("Evicted asset %s", key)

    def __repr__(self):
        return f"AssetManager(cached={len(self._cache)}, dir='{self.assets_dir}')"
