from __future__ import annotations

import dataclasses

import pytest

from hollowglobe.config import DEFAULT_CONFIG, TerrainConfig


def test_defaults() -> None:
    config = TerrainConfig()
    assert config == DEFAULT_CONFIG
    assert config.base_radius_km == pytest.approx(6363.0)
    assert (config.min_level, config.max_level) == (6, 12)
    assert config.subdivision_factor == 2.0
    assert config.max_radius_km == 800.0
    assert config.exaggeration == 3.0
    assert config.ocean_floor_m == -50.0
    assert config.skirt_depth_km == 0.5


def test_config_is_frozen() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_CONFIG.max_level = 14


@pytest.mark.parametrize(
    "changes, message",
    [
        ({"planet_radius_km": 0.0}, "planet_radius_km"),
        ({"surface_offset_km": 7000.0}, "surface_offset_km"),
        ({"min_level": -1}, "min_level"),
        ({"min_level": 9, "max_level": 8}, "min_level <= max_level"),
        ({"subdivision_factor": -0.5}, "subdivision_factor"),
        ({"max_radius_km": 0.0}, "max_radius_km"),
        ({"exaggeration": -1.0}, "exaggeration"),
        ({"ocean_floor_m": 10.0}, "ocean_floor_m"),
        ({"skirt_depth_km": -0.1}, "skirt_depth_km"),
        ({"min_segments": 0}, "segment bounds"),
        ({"min_segments": 32, "max_segments": 16}, "segment bounds"),
        ({"color_raster_size": (0, 512)}, "color_raster_size"),
        ({"max_workers": 0}, "max_workers"),
    ],
)
def test_invalid_values(changes, message) -> None:
    with pytest.raises(ValueError, match=message):
        dataclasses.replace(DEFAULT_CONFIG, **changes)


def test_any_raster_size_allowed() -> None:
    config = dataclasses.replace(DEFAULT_CONFIG, elevation_raster_size=None, color_raster_size=None)
    assert config.elevation_raster_size is None
