"""Tests for the document cache"""

from concurrent.futures import Future

import pytest

from vrmalib.core import AssetManager, AssetState
from vrmalib.loaders import DocumentLoadError, import_clip


class CountingLoader:
    def __init__(self, document, fail=()):
        self.document = document
        self.fail = set(fail)
        self.calls = []

    def __call__(self, path):
        self.calls.append(path.name)
        if path.name in self.fail:
            raise DocumentLoadError(str(path), "corrupt")
        return self.document


class ManualExecutor:
    """Hands out futures that tests resolve by hand."""

    def __init__(self):
        self.futures = []

    def submit(self, fn, *args):
        future = Future()
        self.futures.append(future)
        return future


@pytest.fixture
def loader(hips_document):
    return CountingLoader(hips_document, fail={"bad.vrma"})


@pytest.fixture
def assets(loader, tmp_path):
    return AssetManager(assets_dir=tmp_path, loader=loader, max_unreferenced=1)


def test_resolve(assets, tmp_path):
    """Relative paths resolve against the assets directory"""
    assert assets.resolve("walk.vrma") == (tmp_path / "walk.vrma").resolve()
    absolute = (tmp_path / "other" / "x.vrma").resolve()
    assert assets.resolve(absolute) == absolute


def test_load_decodes_once(assets, loader, hips_document):
    """Repeated loads share one handle and one decode"""
    first = assets.load("walk.vrma")
    second = assets.load("walk.vrma")

    assert first is second
    assert first.state is AssetState.LOADED
    assert first.ref_count == 2
    assert assets.get(first) is hips_document
    assert loader.calls == ["walk.vrma"]

    stats = assets.get_stats()
    assert stats['total_loads'] == 2
    assert stats['cache_hits'] == 1
    assert stats['cache_misses'] == 1
    assert stats['cached'] == 1


def test_subscribe_fires_immediately_when_done(assets):
    handle = assets.load("walk.vrma")
    seen = []
    assets.subscribe(handle, seen.append)
    assert seen == [handle]


def test_release_and_reuse(assets, loader):
    """Unreferenced documents stay cached until evicted"""
    handle = assets.load("walk.vrma")
    assets.release(handle)
    assert handle.ref_count == 0
    assert assets.get_stats()['unreferenced'] == 1

    again = assets.load("walk.vrma")
    assert again is handle
    assert again.ref_count == 1
    assert assets.get_stats()['unreferenced'] == 0
    assert loader.calls == ["walk.vrma"]


def test_release_twice_is_noop(assets):
    handle = assets.load("walk.vrma")
    assets.release(handle)
    assets.release(handle)
    assert handle.ref_count == 0


def test_eviction(assets, loader):
    """Oldest unreferenced documents are evicted first"""
    walk = assets.load("walk.vrma")
    wave = assets.load("wave.vrma")
    assets.release(walk)
    assets.release(wave)

    stats = assets.get_stats()
    assert stats['evictions'] == 1
    assert stats['cached'] == 1

    assets.load("walk.vrma")
    assert loader.calls == ["walk.vrma", "wave.vrma", "walk.vrma"]


def test_failed_decode_is_not_cached(assets, loader):
    """Failures notify subscribers and are retried on the next load"""
    handle = assets.load("bad.vrma")
    assert handle.state is AssetState.FAILED
    assert isinstance(handle.error, DocumentLoadError)
    assert assets.get(handle) is None
    assert assets.get_stats()['failures'] == 1
    assert assets.get_stats()['cached'] == 0

    retry = assets.load("bad.vrma")
    assert retry is not handle
    assert loader.calls == ["bad.vrma", "bad.vrma"]


def test_executor_decode(loader, hips_document, tmp_path):
    """Executor decodes stay pending until update() collects them"""
    executor = ManualExecutor()
    assets = AssetManager(assets_dir=tmp_path, loader=loader, executor=executor)
    handle = assets.load("walk.vrma")
    seen = []
    assets.subscribe(handle, seen.append)

    assets.update()
    assert handle.state is AssetState.PENDING
    assert not handle.is_done
    assert seen == []

    executor.futures[0].set_result(hips_document)
    assets.update()
    assert handle.state is AssetState.LOADED
    assert seen == [handle]
    assert import_clip(assets.get(handle)).name == "walk"


def test_executor_unexpected_error(loader, tmp_path):
    """Unexpected decode errors are wrapped as load errors"""
    executor = ManualExecutor()
    assets = AssetManager(assets_dir=tmp_path, loader=loader, executor=executor)
    handle = assets.load("walk.vrma")

    executor.futures[0].set_exception(RuntimeError("boom"))
    assets.update()

    assert handle.state is AssetState.FAILED
    assert isinstance(handle.error, DocumentLoadError)
    assert "boom" in handle.error.reason


def test_loader_unexpected_error(tmp_path):
    """Loaders that raise something other than a load error still fail the handle"""
    def broken_loader(path):
        raise IndexError("list index out of range")

    assets = AssetManager(assets_dir=tmp_path, loader=broken_loader)
    handle = assets.load("walk.vrma")

    assert handle.state is AssetState.FAILED
    assert isinstance(handle.error, DocumentLoadError)
    assert "out of range" in handle.error.reason


def test_released_pending_handle_drops_callbacks(loader, hips_document, tmp_path):
    """Callbacks of a fully released handle are not called"""
    executor = ManualExecutor()
    assets = AssetManager(assets_dir=tmp_path, loader=loader, executor=executor)
    handle = assets.load("walk.vrma")
    seen = []
    assets.subscribe(handle, seen.append)
    assets.release(handle)

    executor.futures[0].set_result(hips_document)
    assets.update()
    assert handle.state is AssetState.LOADED
    assert seen == []


def test_default_loader_reads_files(hips_document, tmp_path):
    """Without a custom loader documents are decoded from disk"""
    hips_document.gltf.save_binary(str(tmp_path / "walk.vrma"))
    assets = AssetManager(assets_dir=tmp_path)

    handle = assets.load("walk.vrma")
    assert handle.state is AssetState.LOADED
    assert assets.get(handle).animation_count == 1

    missing = assets.load("missing.vrma")
    assert missing.state is AssetState.FAILED
