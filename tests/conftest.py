from __future__ import annotations

import dataclasses

import numpy as np
import pytest

from hollowglobe.config import DEFAULT_CONFIG, TerrainConfig
from hollowglobe.elevation import encode_terrain_rgb
from hollowglobe.raster import Raster

CAPE_OTWAY = (-38.85, 143.51)


@pytest.fixture
def small_config() -> TerrainConfig:
    """Coarse settings that keep passes fast."""
    return dataclasses.replace(
        DEFAULT_CONFIG,
        min_level=6,
        max_level=8,
        max_radius_km=300.0,
        elevation_raster_size=(8, 8),
        color_raster_size=(4, 4),
        max_workers=4,
    )


def flat_elevation(meters: float = 0.0, size: int = 8) -> Raster:
    return Raster(encode_terrain_rgb(np.full((size, size), meters)))


def solid_color(rgb=(10, 20, 30), size: int = 4) -> Raster:
    pixels = np.empty((size, size, 3), dtype=np.uint8)
    pixels[:] = rgb
    return Raster(pixels)
