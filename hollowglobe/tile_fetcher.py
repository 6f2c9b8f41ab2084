import logging
import os
from dataclasses import dataclass
from typing import Optional

import numpy as np
import requests

from hollowglobe.elevation import encode_terrain_rgb
from hollowglobe.raster import Raster, RasterError
from hollowglobe.tile_utils import TileAddress

logger = logging.getLogger(__name__)

MAPBOX_TERRAIN_URL = "https://api.mapbox.com/v4/mapbox.terrain-rgb/{z}/{x}/{y}.pngraw?access_token={token}"
MAPBOX_SATELLITE_URL = "https://api.mapbox.com/v4/mapbox.satellite/{z}/{x}/{y}@2x.jpg?access_token={token}"
USER_AGENT = "hollowglobe/0.1 (terrain tiler)"

# Solid colors per level for the debug provider
DEBUG_COLORS = {
    6: (0xff, 0xff, 0x00),   # yellow
    7: (0xff, 0x88, 0x00),   # orange
    8: (0x00, 0x00, 0xff),   # blue
    9: (0x00, 0xff, 0xff),   # cyan
    10: (0x00, 0xff, 0x00),  # green
    11: (0xff, 0x00, 0xff),  # magenta
    12: (0xff, 0x00, 0x00),  # red
}


class TileFetchError(RuntimeError):
    '''A provider could not supply rasters for a tile'''


@dataclass(frozen=True)
class TileRasters:
    '''Elevation and color rasters covering one tile'''
    elevation: Raster
    color: Raster


class RasterProvider:
    '''Supplies the rasters for a tile address. May be called from several threads at once.'''

    def fetch_tile(self, address: TileAddress) -> TileRasters:
        """Fetch both rasters for a tile

        Parameters
        ----------
        address : TileAddress
            Tile to fetch

        Returns
        -------
        rasters : TileRasters

        Raises
        ------
        TileFetchError
            If the tile is unavailable
        """
        raise NotImplementedError

    def __str__(self):
        return self.__class__.__name__


def tile_path(cache_root: str, layer: str, address: TileAddress, ext: str) -> str:
    '''Tile index to path where it should be in cache'''
    return os.path.join(cache_root, layer, str(address.level), str(address.x), f"{address.y}.{ext}")


class UrlTemplateRasterProvider(RasterProvider):
    """HTTP raster provider with an on-disk cache

    Remarks
    -------
    - URL templates must include {z}, {x} and {y}
    - Raw response bytes are cached under cache_dir/<layer>/z/x/y.<ext>
    - No retries; a failed request fails the tile
    """

    def __init__(self, elevation_url: str, color_url: str, cache_dir: Optional[str] = "cache",
                 session: Optional[requests.Session] = None, timeout: float = 10.0,
                 elevation_ext: str = "png", color_ext: str = "jpg"):
        '''
        Parameters
        ----------
        elevation_url : str
            Template for terrain-RGB tiles
        color_url : str
            Template for imagery tiles
        cache_dir : str | None
            Path to a directory for tile storage, None disables caching
        session : requests.Session | None
            Session to reuse; one is created if not given
        timeout : float
            Per-request timeout in seconds
        '''
        self.elevation_url = elevation_url
        self.color_url = color_url
        self.cache_dir = cache_dir
        self.timeout = timeout
        self.layers = {
            'elevation': (elevation_url, elevation_ext),
            'color': (color_url, color_ext),
        }
        if session is None:
            session = requests.Session()
            session.headers.update({"User-Agent": USER_AGENT})
        self.session = session

    def fetch_tile(self, address: TileAddress) -> TileRasters:
        return TileRasters(
            elevation=self._fetch_raster('elevation', address),
            color=self._fetch_raster('color', address),
        )

    def _fetch_raster(self, layer: str, address: TileAddress) -> Raster:
        try:
            return Raster.from_bytes(self._fetch_bytes(layer, address))
        except RasterError as e:
            raise TileFetchError(f"Tile {address} {layer} is not a valid image: {e}") from e

    def _fetch_bytes(self, layer: str, address: TileAddress) -> bytes:
        """Read a tile from the cache or download and cache it"""
        template, ext = self.layers[layer]
        cache_path = None
        if self.cache_dir is not None:
            cache_path = tile_path(self.cache_dir, layer, address, ext)
            # already on disk?
            if os.path.exists(cache_path):
                logger.debug("Cache hit %s %s", layer, address)
                with open(cache_path, "rb") as f:
                    return f.read()

        url = template.format(z=address.level, x=address.x, y=address.y)
        logger.debug("Downloading %s %s", layer, address)
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise TileFetchError(f"Tile {address} {layer} failed: {e}") from e
        data = resp.content

        if cache_path is not None:
            os.makedirs(os.path.dirname(cache_path), exist_ok=True)
            with open(cache_path, "wb") as f:
                f.write(data)
        return data


class MapboxRasterProvider(UrlTemplateRasterProvider):
    '''Mapbox terrain-RGB heights with satellite imagery'''

    def __init__(self, token: str, cache_dir: Optional[str] = "cache", **kwargs):
        if not token:
            raise ValueError("A Mapbox access token is required")
        super().__init__(
            elevation_url=MAPBOX_TERRAIN_URL.replace("{token}", token),
            color_url=MAPBOX_SATELLITE_URL.replace("{token}", token),
            cache_dir=cache_dir,
            elevation_ext="png",
            color_ext="jpg",
            **kwargs,
        )


class DebugRasterProvider(RasterProvider):
    '''Flat sea-level tiles painted with one color per level, no network'''

    def __init__(self, elevation_size: tuple[int, int] = (256, 256),
                 color_size: tuple[int, int] = (512, 512), elevation_m: float = 0.0):
        self.elevation_size = elevation_size
        self.color_size = color_size
        self.elevation_m = elevation_m

    def fetch_tile(self, address: TileAddress) -> TileRasters:
        w, h = self.elevation_size
        heights = np.full((h, w), self.elevation_m, dtype=np.float64)
        w, h = self.color_size
        color = np.empty((h, w, 3), dtype=np.uint8)
        color[:] = DEBUG_COLORS.get(address.level, (0xff, 0xff, 0xff))
        return TileRasters(elevation=Raster(encode_terrain_rgb(heights)), color=Raster(color))
