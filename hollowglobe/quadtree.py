"""Level-of-detail tile selection around a viewer"""
import logging
import math
from collections import Counter
from dataclasses import dataclass

from hollowglobe.config import DEFAULT_CONFIG, TerrainConfig
from hollowglobe.tile_utils import (
    KM_PER_DEGREE, MAX_LATITUDE, GeoBounds, TileAddress, child_tiles,
    clamp, haversine_km, latlon_to_tile, tile_bounds, tile_size_km
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuadtreeNode:
    '''A tile address with its bounds'''
    address: TileAddress
    bounds: GeoBounds

    @classmethod
    def from_address(cls, address: TileAddress) -> "QuadtreeNode":
        return cls(address=address, bounds=tile_bounds(address))

    @property
    def level(self) -> int:
        return self.address.level

    def children(self) -> list["QuadtreeNode"]:
        return [QuadtreeNode.from_address(a) for a in child_tiles(self.address)]


def _distance_and_size(node: QuadtreeNode, lat: float, lon: float) -> tuple[float, float]:
    center_lat, center_lon = node.bounds.center
    return haversine_km(lat, lon, center_lat, center_lon), tile_size_km(node.bounds)

def _check_viewer(lat: float) -> None:
    if not (-MAX_LATITUDE <= lat <= MAX_LATITUDE):
        raise ValueError(
            f"Viewer latitude {lat} is outside the Web Mercator range +/-{MAX_LATITUDE:.4f}"
        )

def starting_tiles(lat: float, lon: float, config: TerrainConfig = DEFAULT_CONFIG) -> list[QuadtreeNode]:
    """Seed tiles at min_level covering the area of interest

    Parameters
    ----------
    lat : float
        Viewer latitude in degrees
    lon : float
        Viewer longitude in degrees
    config : TerrainConfig
        Supplies min_level and max_radius_km

    Returns
    -------
    nodes : list[QuadtreeNode]
        Row-major list of tiles whose center is closer than
        max_radius_km + tile size to the viewer
    """
    _check_viewer(lat)
    level = config.min_level
    radius = config.max_radius_km

    radius_deg_lat = radius / KM_PER_DEGREE
    radius_deg_lon = radius / (KM_PER_DEGREE * max(math.cos(math.radians(lat)), 1e-6))

    north = clamp(lat + radius_deg_lat, -MAX_LATITUDE, MAX_LATITUDE)
    south = clamp(lat - radius_deg_lat, -MAX_LATITUDE, MAX_LATITUDE)
    top_left = latlon_to_tile(north, lon - radius_deg_lon, level)
    bottom_right = latlon_to_tile(south, lon + radius_deg_lon, level)

    nodes = []
    for y in range(top_left.y, bottom_right.y + 1):
        for x in range(top_left.x, bottom_right.x + 1):
            node = QuadtreeNode.from_address(TileAddress(x, y, level))
            distance, size = _distance_and_size(node, lat, lon)
            if distance < radius + size:
                nodes.append(node)
    return nodes

def select_leaf_tiles(lat: float, lon: float, config: TerrainConfig = DEFAULT_CONFIG) -> list[QuadtreeNode]:
    """Select the non-overlapping leaf tiles to render for a viewer

    Each node is either emitted as a leaf or replaced by its four
    children, never both. Distance is measured to the tile's center,
    not its nearest edge.

    Parameters
    ----------
    lat : float
        Viewer latitude in degrees
    lon : float
        Viewer longitude in degrees
    config : TerrainConfig
        Level range, subdivision factor and area-of-interest radius

    Returns
    -------
    leaves : list[QuadtreeNode]
        Leaf tiles in depth-first order of the seed tiles
    """
    leaves = []
    # (node, depth below min_level); depth is bounded by max_level - min_level
    stack = [(node, 0) for node in reversed(starting_tiles(lat, lon, config))]

    while stack:
        node, depth = stack.pop()
        distance, size = _distance_and_size(node, lat, lon)

        if distance > config.max_radius_km + size:
            continue

        if node.level < config.max_level and distance < size * config.subdivision_factor:
            for child in reversed(node.children()):
                stack.append((child, depth + 1))
        else:
            leaves.append(node)

    logger.debug("Selected %d leaf tiles around (%.4f, %.4f)", len(leaves), lat, lon)
    return leaves

def count_by_level(nodes) -> dict[int, int]:
    '''Number of tiles per level, sorted by level'''
    counts = Counter(node.level for node in nodes)
    return dict(sorted(counts.items()))
