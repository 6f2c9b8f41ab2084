import logging
import time
from PySide6.QtCore import QObject, Signal, Slot, QThread

from hollowglobe.config import DEFAULT_CONFIG, TerrainConfig
from hollowglobe.terrain import build_terrain
from hollowglobe.tile_fetcher import RasterProvider

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# TerrainWorker: lives entirely in its own QThread
# ---------------------------------------------------------------------------

class TerrainWorker(QObject):
    '''Runs terrain tiling passes

    Remarks
    -------
    - One pass per request, passes run one after another
    - Requests arriving before start or after shutdown are ignored
    - Emits terrainReady with the list of TerrainTile when a pass completes
    - Emits terrainFailed with a message if a pass could not run at all
    '''

    terrainReady = Signal(float, float, list)
    terrainFailed = Signal(str)

    def __init__(self, provider: RasterProvider, config: TerrainConfig = DEFAULT_CONFIG, parent=None):
        '''
        Parameters
        ----------
        provider : RasterProvider
            Source of tile rasters
        config : TerrainConfig
            Tiling parameters
        '''
        super().__init__(parent)
        self.provider = provider
        self.config = config
        self.running = False

    @Slot()
    def start(self) -> None:
        self.running = True

    @Slot()
    def shutdown(self) -> None:
        self.running = False

    @Slot(float, float)
    def buildTerrain(self, lat: float, lon: float) -> None:
        """Run a tiling pass and publish the result

        Parameters
        ----------
        lat : float
            Viewer latitude in degrees
        lon : float
            Viewer longitude in degrees
        """
        if not self.running:
            logger.debug("Worker stopped, ignoring request for (%.4f, %.4f)", lat, lon)
            return
        try:
            tiles = build_terrain(lat, lon, self.provider, self.config)
        except ValueError as e:
            logger.error("Terrain pass at (%.4f, %.4f) failed: %s", lat, lon, e)
            self.terrainFailed.emit(str(e))
            return
        self.terrainReady.emit(lat, lon, tiles)


class TerrainManager(QObject):
    """
    Wrapper for TerrainWorker and the thread it lives in.  This is the class that the main thread should interact with.

    Signals
    -------
    terrainReady : float, float, list
        Viewer location and the TerrainTile list of a finished pass
    terrainFailed : str
        A pass was rejected, e.g. for an invalid viewer latitude
    sigBuildTerrain : float, float
        Tell the worker to run a pass for (lat, lon)
    sigStartWorker :
        Tell the worker to initialize
    sigShutdown :
        Tell the worker to shutdown
    """
    terrainReady = Signal(float, float, list)
    terrainFailed = Signal(str)
    sigBuildTerrain = Signal(float, float)
    sigStartWorker = Signal()
    sigShutdown = Signal()

    def __init__(self, provider: RasterProvider, config: TerrainConfig = DEFAULT_CONFIG):
        super().__init__()
        self._thread = QThread(self)
        self._worker = TerrainWorker(provider, config)

        # Move worker to thread (it will live in that thread after the thread starts)
        self._worker.moveToThread(self._thread)

        self._worker.terrainReady.connect(self.terrainReady)
        self._worker.terrainFailed.connect(self.terrainFailed)
        self.sigBuildTerrain.connect(self._worker.buildTerrain)

        # START AND STOP SIGNALS
        self.sigStartWorker.connect(self._worker.start)
        self.sigShutdown.connect(self._worker.shutdown)

        # Thread lifecycle wiring
        self._thread.started.connect(self._on_thread_started)
        self._thread.finished.connect(self._on_thread_finished)

    @Slot()
    def _on_thread_started(self) -> None:
        """After the thread has started, signal the worker to initialize"""
        self.sigStartWorker.emit()

    @Slot()
    def _on_thread_finished(self) -> None:
        """Cleanup when thread finished."""
        self._worker.deleteLater()

    # Public API
    def start(self) -> None:
        """Start the thread and initialize the worker."""
        if not self._thread.isRunning():
            self._thread.start()

    def stop(self) -> None:
        """Stop the thread cleanly and wait for it to finish."""
        self.sigShutdown.emit()

        # Wait for the worker to stop running before stopping the thread
        now = time.time()
        while self._worker.running:
            time.sleep(0.1)
            if time.time() - now > 1:
                break

        if self._thread.isRunning():
            self._thread.quit()
            self._thread.wait()

    def requestTerrain(self, lat: float, lon: float) -> None:
        '''Ask the worker for a tiling pass at a viewer location

        Parameters
        ----------
        lat : float
            Viewer latitude in degrees
        lon : float
            Viewer longitude in degrees
        '''
        self.sigBuildTerrain.emit(lat, lon)
