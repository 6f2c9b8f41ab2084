"""One terrain tiling pass: select tiles, fetch rasters, build meshes"""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

from hollowglobe.config import DEFAULT_CONFIG, TerrainConfig
from hollowglobe.mesh import TileMesh, build_tile_mesh
from hollowglobe.quadtree import QuadtreeNode, count_by_level, select_leaf_tiles
from hollowglobe.raster import Raster, validate_raster
from hollowglobe.skirt import add_skirt
from hollowglobe.tile_fetcher import RasterProvider, TileRasters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TerrainTile:
    '''A finished tile handed to the renderer, which owns it from here on'''
    node: QuadtreeNode
    mesh: TileMesh
    color: Raster


def build_tile(node: QuadtreeNode, rasters: TileRasters, config: TerrainConfig = DEFAULT_CONFIG) -> TerrainTile:
    """Build the skirted mesh for one tile

    Raises
    ------
    RasterError
        If either raster has the wrong dimensions
    """
    validate_raster(rasters.elevation, 'elevation', config.elevation_raster_size)
    validate_raster(rasters.color, 'color', config.color_raster_size)
    mesh = build_tile_mesh(node, rasters.elevation, config)
    mesh = add_skirt(mesh, config.skirt_depth_km)
    return TerrainTile(node=node, mesh=mesh, color=rasters.color)

def fetch_rasters(nodes: list[QuadtreeNode], provider: RasterProvider,
                  executor: ThreadPoolExecutor) -> dict:
    """Fetch rasters for every node at once and wait for all of them

    Returns
    -------
    rasters : dict[TileAddress, TileRasters]
        Only the tiles that were fetched; failures are logged and left out
    """
    futures = {executor.submit(provider.fetch_tile, node.address): node for node in nodes}
    rasters = {}
    for fut in as_completed(futures):
        node = futures[fut]
        try:
            result = fut.result()
        except Exception as e:
            logger.warning("Failed to fetch tile %s: %s", node.address, e)
            continue
        if not isinstance(result, TileRasters):
            logger.warning("Failed to fetch tile %s: provider returned %r", node.address, result)
            continue
        rasters[node.address] = result
    return rasters

def build_terrain(lat: float, lon: float, provider: RasterProvider,
                  config: TerrainConfig = DEFAULT_CONFIG) -> list[TerrainTile]:
    """Run a full tiling pass for a viewer location

    Tiles whose rasters cannot be fetched or are malformed are dropped,
    leaving a hole; the rest of the pass is unaffected.

    Parameters
    ----------
    lat : float
        Viewer latitude in degrees, within the Web Mercator range
    lon : float
        Viewer longitude in degrees
    provider : RasterProvider
        Source of elevation and color rasters
    config : TerrainConfig
        Tiling parameters

    Returns
    -------
    tiles : list[TerrainTile]
        In leaf selection order
    """
    leaves = select_leaf_tiles(lat, lon, config)
    logger.info("Quadtree: %d leaf tiles", len(leaves))
    logger.info("Tiles per level: %s", count_by_level(leaves))

    with ThreadPoolExecutor(max_workers=config.max_workers) as ex:
        rasters = fetch_rasters(leaves, provider, ex)

        futures = {}
        for node in leaves:
            if node.address in rasters:
                futures[node.address] = ex.submit(build_tile, node, rasters[node.address], config)

        tiles = []
        for node in leaves:
            fut = futures.get(node.address)
            if fut is None:
                continue
            try:
                tiles.append(fut.result())
            except Exception as e:
                logger.warning("Dropping tile %s: %s", node.address, e)

    logger.info("Built %d of %d tiles", len(tiles), len(leaves))
    return tiles
