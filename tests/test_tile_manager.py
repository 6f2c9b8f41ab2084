from __future__ import annotations

import pytest

pytest.importorskip("PySide6")

from PySide6.QtCore import QCoreApplication

from conftest import CAPE_OTWAY
from hollowglobe.tile_fetcher import DebugRasterProvider
from hollowglobe.tile_manager import TerrainWorker


@pytest.fixture(scope="module")
def qapp():
    return QCoreApplication.instance() or QCoreApplication([])


@pytest.fixture
def worker(qapp, small_config) -> TerrainWorker:
    provider = DebugRasterProvider(elevation_size=(8, 8), color_size=(4, 4))
    return TerrainWorker(provider, small_config)


def test_worker_start_and_shutdown(worker) -> None:
    assert not worker.running
    worker.start()
    assert worker.running
    worker.shutdown()
    assert not worker.running


def test_worker_emits_tiles(worker) -> None:
    ready = []
    failed = []
    worker.terrainReady.connect(lambda lat, lon, tiles: ready.append((lat, lon, tiles)))
    worker.terrainFailed.connect(failed.append)
    worker.start()

    worker.buildTerrain(*CAPE_OTWAY)

    assert not failed
    assert len(ready) == 1
    lat, lon, tiles = ready[0]
    assert (lat, lon) == pytest.approx(CAPE_OTWAY)
    assert tiles
    assert all(t.mesh.vertex_count > t.mesh.grid_vertex_count for t in tiles)


def test_worker_reports_invalid_location(worker) -> None:
    ready = []
    failed = []
    worker.terrainReady.connect(lambda lat, lon, tiles: ready.append(tiles))
    worker.terrainFailed.connect(failed.append)
    worker.start()

    worker.buildTerrain(88.0, 0.0)

    assert not ready
    assert len(failed) == 1
    assert "Web Mercator" in failed[0]


def test_stopped_worker_ignores_requests(worker) -> None:
    ready = []
    worker.terrainReady.connect(lambda lat, lon, tiles: ready.append(tiles))

    worker.buildTerrain(*CAPE_OTWAY)
    assert not ready

    worker.start()
    worker.shutdown()
    worker.buildTerrain(*CAPE_OTWAY)
    assert not ready
