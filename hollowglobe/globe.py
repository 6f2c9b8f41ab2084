# STDLIB Imports
import logging
import numpy as np

# Pyside Imports
from PySide6.QtOpenGLWidgets import QOpenGLWidget
from PySide6.QtCore import Qt, QTimer, Signal, Slot

# OpenGL Imports
from OpenGL.GL import *
from OpenGL.GLU import *

# This Project Imports
from hollowglobe.config import DEFAULT_CONFIG, TerrainConfig
from hollowglobe.coord_utils import spherical_to_cartesian, camera_frame
from hollowglobe.quadtree import count_by_level
from hollowglobe.tile_fetcher import RasterProvider
from hollowglobe.tile_manager import TerrainManager

logger = logging.getLogger(__name__)

# Mouselook tuning
LOOK_SENSITIVITY = 0.003  # radians per pixel
MAX_PITCH = np.pi / 2 - 0.01


class TerrainWidget(QOpenGLWidget):
    '''PySide6 OpenGL Widget showing terrain from inside the sphere'''

    infoSig = Signal(dict)

    def __init__(self, provider: RasterProvider, lat: float, lon: float,
                 config: TerrainConfig = DEFAULT_CONFIG, eye_depth_km: float = 50.0, parent=None):
        '''
        Parameters
        ----------
        provider : RasterProvider
            Source of tile rasters
        lat : float
            Viewer latitude in degrees
        lon : float
            Viewer longitude in degrees
        config : TerrainConfig
            Tiling parameters
        eye_depth_km : float
            How far inside the sphere the camera sits
        '''
        super().__init__(parent)
        self.setMinimumSize(1000, 600)
        self.config = config
        self.eye_depth_km = eye_depth_km
        self.lat = lat
        self.lon = lon
        self.heading = 0.0  # radians east of north
        self.pitch = 0.0  # radians toward the sphere center
        self.last_pos = None  # For mouse dragging

        # Tiles owned by the widget: address -> (tile, texture id)
        self.tiles = {}
        self.pending_tiles = None  # Tiles waiting to be uploaded to GPU
        self.level_counts = {}

        self.terrain_manager = None
        self.init_terrain_manager(provider)

        # Publish info to display on a timer
        self.info_timer = QTimer(self)
        self.info_timer.timeout.connect(self.publish_display_info)
        self.info_timer.start(1000)

    def init_terrain_manager(self, provider: RasterProvider) -> None:
        '''Replace the raster source and rebuild the terrain'''
        if self.terrain_manager is not None:
            self.terrain_manager.stop()
            del self.terrain_manager

        self.terrain_manager = TerrainManager(provider, self.config)
        self.terrain_manager.terrainReady.connect(self.on_terrain_ready)
        self.terrain_manager.start()
        self.terrain_manager.requestTerrain(self.lat, self.lon)

    def set_location(self, lat: float, lon: float) -> None:
        '''Move the viewer and request a new tiling pass'''
        self.lat = lat
        self.lon = lon
        self.heading = 0.0
        self.pitch = 0.0
        self.terrain_manager.requestTerrain(lat, lon)
        self.update()

    def initializeGL(self):
        glEnable(GL_DEPTH_TEST)
        glEnable(GL_TEXTURE_2D)
        glDisable(GL_LIGHTING)
        glDisable(GL_CULL_FACE)  # Skirts are seen from both sides
        glPixelStorei(GL_UNPACK_ALIGNMENT, 1)
        glClearColor(0.53, 0.81, 0.92, 1.0)  # sky blue

    def resizeGL(self, w, h):
        glViewport(0, 0, w, h)
        glMatrixMode(GL_PROJECTION)
        glLoadIdentity()
        gluPerspective(90, w / h if h > 0 else 1, 0.001, 20000)
        glMatrixMode(GL_MODELVIEW)

    def paintGL(self):
        self.makeCurrent()

        # Upload any pending tile data to GPU
        self.upload_pending_tiles()

        glClear(GL_COLOR_BUFFER_BIT | GL_DEPTH_BUFFER_BIT)
        glLoadIdentity()

        eye, target, up = self.camera_vectors()
        gluLookAt(*eye, *target, *up)

        glColor3f(1.0, 1.0, 1.0)  # White to show texture colors
        for tile, texture_id in self.tiles.values():
            self.draw_tile(tile, texture_id)

    #------------------------------------------------
    # Camera
    #------------------------------------------------
    def camera_vectors(self):
        '''Eye position, look-at target and up vector in scene coordinates'''
        eye = np.array(spherical_to_cartesian(
            self.lat, self.lon, self.config.planet_radius_km - self.eye_depth_km))
        R = camera_frame(self.lat, self.lon)
        east, north, up = R[:, 0], R[:, 1], R[:, 2]

        horizontal = np.cos(self.heading) * north + np.sin(self.heading) * east
        forward = np.cos(self.pitch) * horizontal + np.sin(self.pitch) * up
        return eye, eye + forward * 1000.0, up

    #------------------------------------------------
    # Tile Handling
    #------------------------------------------------
    @Slot(float, float, list)
    def on_terrain_ready(self, lat, lon, tiles):
        """Called when a tiling pass finishes"""
        if (lat, lon) != (self.lat, self.lon):
            # a newer location has been requested since
            return
        self.pending_tiles = tiles
        self.level_counts = count_by_level(t.node for t in tiles)
        self.update()

    def upload_pending_tiles(self):
        """Replace the current tiles with the pending pass"""
        if self.pending_tiles is None:
            return

        self.release_tiles()
        for tile in self.pending_tiles:
            # Raster rows are top-down, GL textures are bottom-up
            pixels = np.ascontiguousarray(np.flipud(tile.color.pixels[:, :, :3]))

            texture_id = glGenTextures(1)
            glBindTexture(GL_TEXTURE_2D, texture_id)
            glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_MIN_FILTER, GL_LINEAR_MIPMAP_LINEAR)
            glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_MAG_FILTER, GL_LINEAR)
            glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_WRAP_S, GL_CLAMP_TO_EDGE)
            glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_WRAP_T, GL_CLAMP_TO_EDGE)
            glTexImage2D(GL_TEXTURE_2D, 0, GL_RGB, tile.color.width, tile.color.height,
                         0, GL_RGB, GL_UNSIGNED_BYTE, pixels)
            glGenerateMipmap(GL_TEXTURE_2D)
            glBindTexture(GL_TEXTURE_2D, 0)

            self.tiles[tile.node.address] = (tile, texture_id)

        logger.info("Uploaded %d terrain tiles", len(self.tiles))
        self.pending_tiles = None

    def release_tiles(self):
        '''Delete the GPU textures of the current tiles'''
        if self.tiles:
            glDeleteTextures([texture_id for _, texture_id in self.tiles.values()])
        self.tiles.clear()

    def draw_tile(self, tile, texture_id):
        """Draw a single tile mesh"""
        mesh = tile.mesh
        glBindTexture(GL_TEXTURE_2D, texture_id)

        glEnableClientState(GL_VERTEX_ARRAY)
        glEnableClientState(GL_TEXTURE_COORD_ARRAY)
        glVertexPointer(3, GL_FLOAT, 0, mesh.positions)
        glTexCoordPointer(2, GL_FLOAT, 0, mesh.uvs)
        glDrawElements(GL_TRIANGLES, mesh.indices.size, GL_UNSIGNED_INT, mesh.indices)
        glDisableClientState(GL_TEXTURE_COORD_ARRAY)
        glDisableClientState(GL_VERTEX_ARRAY)

        glBindTexture(GL_TEXTURE_2D, 0)

    #-------------------------------------------------------
    # EVENT HANDLERS
    #-------------------------------------------------------
    def publish_display_info(self) -> None:
        '''Emit debug info'''
        self.infoSig.emit({'tiles': len(self.tiles),
                           'levels': dict(self.level_counts),
                           'location': {'lat': self.lat, 'lon': self.lon},
                           'heading_deg': float(np.degrees(self.heading)),
                           'pitch_deg': float(np.degrees(self.pitch))})

    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton:
            self.last_pos = event.pos()

    def mouseMoveEvent(self, event):
        if self.last_pos is None or not (event.buttons() & Qt.LeftButton):
            return

        dx = event.pos().x() - self.last_pos.x()
        dy = event.pos().y() - self.last_pos.y()

        self.heading += dx * LOOK_SENSITIVITY
        pitch = self.pitch + dy * LOOK_SENSITIVITY
        if abs(pitch) < MAX_PITCH:
            self.pitch = pitch

        self.last_pos = event.pos()
        self.update()

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.LeftButton:
            self.last_pos = None

    def keyPressEvent(self, event):
        if event.key() == Qt.Key_R:
            self.heading = 0.0
            self.pitch = 0.0
            self.update()

    def close(self):
        if self.terrain_manager is not None:
            self.terrain_manager.stop()
        self.makeCurrent()
        self.release_tiles()
        self.doneCurrent()


# end class TerrainWidget
