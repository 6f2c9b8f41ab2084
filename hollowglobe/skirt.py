"""Skirts hide cracks between neighbouring tiles of different levels

Each edge of a tile gets a strip that hangs outward, away from the
sphere center, so gaps caused by mismatched edge heights are covered
when seen from inside. Skirts can show at grazing angles.
"""
import dataclasses

import numpy as np

from hollowglobe.config import DEFAULT_CONFIG
from hollowglobe.mesh import TileMesh


def edge_vertex_indices(segments: int) -> list[np.ndarray]:
    '''Grid vertex indices along the north, south, west and east edges'''
    row = segments + 1
    steps = np.arange(row)
    return [
        steps,
        segments * row + steps,
        steps * row,
        steps * row + segments,
    ]

def add_skirt(mesh: TileMesh, depth_km: float = DEFAULT_CONFIG.skirt_depth_km) -> TileMesh:
    """Append skirt geometry to a grid mesh

    Parameters
    ----------
    mesh : TileMesh
        Mesh produced by build_tile_mesh; only its primary grid is read
    depth_km : float
        How far the skirt reaches outward, the same for every tile

    Returns
    -------
    mesh : TileMesh
        New mesh with the grid followed by the skirt vertices and triangles
    """
    grid_positions = mesh.positions[:mesh.grid_vertex_count].astype(np.float64)
    grid_uvs = mesh.uvs[:mesh.grid_vertex_count]

    positions = [mesh.positions[:mesh.grid_vertex_count]]
    uvs = [grid_uvs]
    indices = [mesh.indices[:mesh.grid_triangle_count]]
    offset = mesh.grid_vertex_count

    for edge in edge_vertex_indices(mesh.segments):
        top = grid_positions[edge]
        length = np.linalg.norm(top, axis=1, keepdims=True)
        bottom = top * ((length + depth_km) / length)

        # Interleave (edge vertex, extended vertex) pairs
        strip = np.empty((2 * len(edge), 3), dtype=np.float64)
        strip[0::2] = top
        strip[1::2] = bottom
        positions.append(strip.astype(np.float32))
        uvs.append(np.repeat(grid_uvs[edge], 2, axis=0))

        k = np.arange(len(edge) - 1)
        a = offset + 2 * k
        b = a + 1
        c = a + 2
        d = a + 3
        tris = np.empty((2 * len(k), 3), dtype=np.uint32)
        tris[0::2] = np.column_stack([a, b, c])
        tris[1::2] = np.column_stack([c, b, d])
        indices.append(tris)

        offset += len(strip)

    return dataclasses.replace(
        mesh,
        positions=np.concatenate(positions),
        uvs=np.concatenate(uvs).astype(np.float32),
        indices=np.concatenate(indices),
    )
