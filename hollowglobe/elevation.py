"""Terrain-RGB elevation decoding

Elevation is packed into three 8-bit channels:

    meters = -10000 + (R * 65536 + G * 256 + B) * 0.1
"""
import numpy as np

from hollowglobe.config import DEFAULT_CONFIG, TerrainConfig

BASE_M = -10000.0
STEP_M = 0.1


def decode_terrain_rgb(r, g, b):
    '''Elevation in meters from terrain-RGB channels (scalars or arrays)'''
    packed = (np.asarray(r, dtype=np.float64) * 65536.0
              + np.asarray(g, dtype=np.float64) * 256.0
              + np.asarray(b, dtype=np.float64))
    meters = BASE_M + packed * STEP_M
    if np.ndim(meters) == 0:
        return float(meters)
    return meters

def encode_terrain_rgb(meters) -> np.ndarray:
    """Pack elevation in meters into terrain-RGB channels

    Returns
    -------
    rgb : np.ndarray
        uint8 array of shape meters.shape + (3,)
    """
    packed = np.rint((np.asarray(meters, dtype=np.float64) - BASE_M) / STEP_M)
    packed = np.clip(packed, 0, 2 ** 24 - 1).astype(np.int64)
    return np.stack([(packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF],
                    axis=-1).astype(np.uint8)

def clamp_ocean(meters, floor_m: float = DEFAULT_CONFIG.ocean_floor_m):
    '''Limit how deep below zero terrain may go; land is left untouched'''
    meters = np.asarray(meters, dtype=np.float64)
    clamped = np.where(meters < 0.0, np.maximum(meters, floor_m), meters)
    if clamped.ndim == 0:
        return float(clamped)
    return clamped

def elevation_km(meters, config: TerrainConfig = DEFAULT_CONFIG):
    '''Clamp, convert to km and exaggerate'''
    return clamp_ocean(meters, config.ocean_floor_m) / 1000.0 * config.exaggeration

def decode_elevation_km(pixels: np.ndarray, config: TerrainConfig = DEFAULT_CONFIG) -> np.ndarray:
    """Decode sampled terrain-RGB pixels into displacement in km

    Parameters
    ----------
    pixels : np.ndarray
        Array of shape (..., channels) with at least three channels
    config : TerrainConfig
        Supplies ocean_floor_m and exaggeration

    Returns
    -------
    elevation : np.ndarray
        Array of shape pixels.shape[:-1]
    """
    pixels = np.asarray(pixels)
    meters = decode_terrain_rgb(pixels[..., 0], pixels[..., 1], pixels[..., 2])
    return np.asarray(elevation_km(meters, config), dtype=np.float64)
