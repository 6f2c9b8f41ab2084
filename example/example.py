import logging
import os
import sys
from PySide6.QtWidgets import QApplication, QWidget, QHBoxLayout, QVBoxLayout, QLabel, QComboBox

from hollowglobe import globe
from hollowglobe.config import DEFAULT_CONFIG
from hollowglobe.tile_fetcher import DebugRasterProvider, MapboxRasterProvider

# Cape Otway Lighthouse, Victoria, Australia
LOCATION = (-38.8539766, 143.5105863)

logger = logging.getLogger(__name__)


def make_provider(name: str):
    token = os.environ.get('MAPBOX_TOKEN', '')
    if name == 'Mapbox':
        if token:
            return MapboxRasterProvider(token, cache_dir='cache')
        logger.warning("No Mapbox token provided. Set MAPBOX_TOKEN; using debug tiles")
    return DebugRasterProvider(DEFAULT_CONFIG.elevation_raster_size, DEFAULT_CONFIG.color_raster_size)


class TerrainTestWidget(QWidget):

    def __init__(self):
        super().__init__()
        hbox = QHBoxLayout()
        vbox = QVBoxLayout()

        # Drop-down to select raster source
        self.source_combo = QComboBox()
        self.source_combo.addItems(["Mapbox", "Debug"])
        self.source_combo.currentIndexChanged.connect(self.on_source_combo)
        vbox.addWidget(self.source_combo)

        # Text area to print display debug output
        self.text = QLabel('Loading terrain...')
        vbox.addWidget(self.text)
        vbox.addWidget(QLabel('Click and drag to look around, R to reset'))
        vbox.addStretch()
        hbox.addLayout(vbox)

        # Terrain Widget
        lat, lon = LOCATION
        self.terrain = globe.TerrainWidget(make_provider('Mapbox'), lat, lon, parent=self)
        hbox.addWidget(self.terrain, stretch=1)

        self.terrain.infoSig.connect(self.on_info)
        self.setLayout(hbox)

    def on_source_combo(self):
        self.terrain.init_terrain_manager(make_provider(self.source_combo.currentText()))

    def on_info(self, info):
        lines = [f"tiles: {info['tiles']}"]
        lines += [f"  level {level}: {count}" for level, count in info['levels'].items()]
        lines.append(f"lat: {info['location']['lat']:.4f}")
        lines.append(f"lon: {info['location']['lon']:.4f}")
        lines.append(f"heading: {info['heading_deg']:.1f}")
        lines.append(f"pitch: {info['pitch_deg']:.1f}")
        self.text.setText('\n'.join(lines))

    def closeEvent(self, evt):
        self.terrain.close()


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    app = QApplication(sys.argv)
    window = TerrainTestWidget()
    window.setWindowTitle('hollowglobe')
    window.resize(1300, 700)
    window.show()
    sys.exit(app.exec())

if __name__ == "__main__":
    main()
