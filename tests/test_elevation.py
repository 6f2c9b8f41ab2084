from __future__ import annotations

import dataclasses

import numpy as np
import pytest

from hollowglobe.config import DEFAULT_CONFIG
from hollowglobe.elevation import (
    clamp_ocean,
    decode_elevation_km,
    decode_terrain_rgb,
    elevation_km,
    encode_terrain_rgb,
)


def test_decode_terrain_rgb_known_values() -> None:
    assert decode_terrain_rgb(0, 0, 0) == pytest.approx(-10000.0)
    assert decode_terrain_rgb(0, 0, 100) == pytest.approx(-9990.0)
    # 100000 * 0.1 = 10000 above the base
    assert decode_terrain_rgb(1, 134, 160) == pytest.approx(0.0)
    assert decode_terrain_rgb(255, 255, 255) == pytest.approx(-10000.0 + 16777215 * 0.1)


def test_decode_terrain_rgb_arrays() -> None:
    r = np.array([0, 1], dtype=np.uint8)
    g = np.array([0, 134], dtype=np.uint8)
    b = np.array([100, 160], dtype=np.uint8)
    np.testing.assert_allclose(decode_terrain_rgb(r, g, b), [-9990.0, 0.0])


def test_encode_decodes_back() -> None:
    meters = np.array([-10000.0, -2000.0, 0.0, 1234.5, 8848.8])
    rgb = encode_terrain_rgb(meters)
    assert rgb.dtype == np.uint8
    assert rgb.shape == (5, 3)
    decoded = decode_terrain_rgb(rgb[..., 0], rgb[..., 1], rgb[..., 2])
    np.testing.assert_allclose(decoded, meters, atol=0.05)


def test_clamp_ocean() -> None:
    assert clamp_ocean(-2000.0) == pytest.approx(-50.0)
    assert clamp_ocean(-20.0) == pytest.approx(-20.0)
    assert clamp_ocean(0.0) == pytest.approx(0.0)
    assert clamp_ocean(8000.0) == pytest.approx(8000.0)
    assert clamp_ocean(-300.0, floor_m=-100.0) == pytest.approx(-100.0)
    np.testing.assert_allclose(clamp_ocean(np.array([-500.0, 500.0])), [-50.0, 500.0])


def test_elevation_km_clamps_then_exaggerates() -> None:
    # -2000 m -> -50 m -> -0.05 km -> x3
    assert elevation_km(-2000.0) == pytest.approx(-0.15)
    radius = DEFAULT_CONFIG.base_radius_km - elevation_km(-2000.0)
    assert radius - DEFAULT_CONFIG.base_radius_km == pytest.approx(0.15)

    assert elevation_km(1000.0) == pytest.approx(3.0)
    flat = dataclasses.replace(DEFAULT_CONFIG, exaggeration=1.0)
    assert elevation_km(1000.0, flat) == pytest.approx(1.0)


def test_decode_elevation_km_over_pixels() -> None:
    pixels = encode_terrain_rgb(np.array([[0.0, -2000.0], [500.0, 1000.0]]))
    km = decode_elevation_km(pixels)
    assert km.shape == (2, 2)
    np.testing.assert_allclose(km, [[0.0, -0.15], [1.5, 3.0]], atol=1e-3)
