import logging
from dataclasses import dataclass

import numpy as np

from hollowglobe.config import DEFAULT_CONFIG, TerrainConfig
from hollowglobe.coord_utils import spherical_to_cartesian
from hollowglobe.elevation import decode_elevation_km
from hollowglobe.quadtree import QuadtreeNode
from hollowglobe.raster import Raster
from hollowglobe.tile_utils import TileAddress

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TileMesh:
    """Indexed triangle mesh for one tile

    Attributes
    ----------
    address : TileAddress
        Tile this mesh was built for
    positions : np.ndarray
        float32 (N, 3) vertex positions in km
    uvs : np.ndarray
        float32 (N, 2) texture coordinates into the color raster
    indices : np.ndarray
        uint32 (M, 3) triangle vertex indices
    segments : int
        Grid cells along each tile edge
    grid_vertex_count : int
        Vertices belonging to the primary grid; skirt vertices follow
    grid_triangle_count : int
        Triangles belonging to the primary grid; skirt triangles follow
    """
    address: TileAddress
    positions: np.ndarray
    uvs: np.ndarray
    indices: np.ndarray
    segments: int
    grid_vertex_count: int
    grid_triangle_count: int

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.indices)

    def __str__(self):
        return (f'{self.__class__.__name__} : {self.address} '
                f'({self.vertex_count} vertices, {self.triangle_count} triangles)')


def segments_for_level(level: int, config: TerrainConfig = DEFAULT_CONFIG) -> int:
    '''Grid resolution for a tile; finer levels get more segments'''
    exponent = level - config.segment_reference_level
    segments = 2 ** exponent if exponent >= 0 else 0
    return int(min(config.max_segments, max(config.min_segments, segments)))

def grid_indices(segments: int) -> np.ndarray:
    """Triangles for a (segments+1) x (segments+1) vertex grid

    Cell corners are a (top-left), b (top-right), c (bottom-left) and
    d (bottom-right). Triangles (a, c, b) and (b, c, d) wind so that
    their normals face the sphere center.
    """
    row = segments + 1
    j, i = np.mgrid[0:segments, 0:segments]
    a = (j * row + i).ravel()
    b = a + 1
    c = a + row
    d = c + 1
    tris = np.empty((segments * segments * 2, 3), dtype=np.uint32)
    tris[0::2] = np.column_stack([a, c, b])
    tris[1::2] = np.column_stack([b, c, d])
    return tris

def build_tile_mesh(node: QuadtreeNode, elevation: Raster, config: TerrainConfig = DEFAULT_CONFIG,
                    segments: int | None = None) -> TileMesh:
    """Build the displaced grid for a tile on the inside of the sphere

    Higher terrain is moved toward the center: the viewer stands on the
    inner surface, so mountains rise toward them.

    Parameters
    ----------
    node : QuadtreeNode
        Tile to build
    elevation : Raster
        Terrain-RGB raster aligned with the tile bounds
    config : TerrainConfig
        Radius, offset, exaggeration and segment settings
    segments : int | None
        Override for the grid resolution

    Returns
    -------
    mesh : TileMesh
        Grid mesh without skirts
    """
    if segments is None:
        segments = segments_for_level(node.level, config)
    bounds = node.bounds

    steps = np.linspace(0.0, 1.0, segments + 1)
    v, u = np.meshgrid(steps, steps, indexing='ij')

    lat = bounds.north + (bounds.south - bounds.north) * v
    lon = bounds.west + (bounds.east - bounds.west) * u

    height_km = decode_elevation_km(elevation.sample_grid(u, v), config)
    radius = config.base_radius_km - height_km

    x, y, z = spherical_to_cartesian(lat, lon, radius)
    positions = np.column_stack([x.ravel(), y.ravel(), z.ravel()]).astype(np.float32)
    # Raster rows run top-down, texture V runs bottom-up
    uvs = np.column_stack([u.ravel(), 1.0 - v.ravel()]).astype(np.float32)
    indices = grid_indices(segments)

    return TileMesh(
        address=node.address,
        positions=positions,
        uvs=uvs,
        indices=indices,
        segments=segments,
        grid_vertex_count=len(positions),
        grid_triangle_count=len(indices),
    )

def triangle_normals(mesh: TileMesh) -> np.ndarray:
    '''Unit face normals (right-hand rule over each triangle's winding)'''
    p = mesh.positions.astype(np.float64)
    a = p[mesh.indices[:, 0]]
    b = p[mesh.indices[:, 1]]
    c = p[mesh.indices[:, 2]]
    n = np.cross(b - a, c - a)
    lengths = np.linalg.norm(n, axis=1, keepdims=True)
    return n / np.where(lengths == 0.0, 1.0, lengths)
