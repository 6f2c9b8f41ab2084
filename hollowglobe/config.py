from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TerrainConfig:
    """Parameters for one tiling pass.

    Distances are in kilometers unless the name says otherwise. A single
    instance is passed into every entry point; derive variants with
    ``dataclasses.replace``.
    """

    planet_radius_km: float = 6371.0
    # Terrain sits this far inside the sphere so it clears the base globe.
    surface_offset_km: float = 8.0

    min_level: int = 6
    max_level: int = 12
    # A tile is subdivided when distance < tile_size * subdivision_factor.
    subdivision_factor: float = 2.0
    max_radius_km: float = 800.0

    exaggeration: float = 3.0
    ocean_floor_m: float = -50.0

    skirt_depth_km: float = 0.5

    min_segments: int = 16
    max_segments: int = 64
    segment_reference_level: int = 6

    # (width, height) each raster must have; None accepts any size.
    elevation_raster_size: Optional[tuple[int, int]] = (256, 256)
    color_raster_size: Optional[tuple[int, int]] = (512, 512)

    max_workers: int = 8

    def __post_init__(self) -> None:
        if self.planet_radius_km <= 0:
            raise ValueError(f"planet_radius_km must be > 0: {self.planet_radius_km}")
        if not (0 <= self.surface_offset_km < self.planet_radius_km):
            raise ValueError(
                f"surface_offset_km out of range: {self.surface_offset_km}"
            )
        if self.min_level < 0:
            raise ValueError(f"Invalid min_level: {self.min_level}")
        if self.max_level < self.min_level:
            raise ValueError(
                f"Expected min_level <= max_level, got {self.min_level} > {self.max_level}"
            )
        if self.subdivision_factor < 0:
            raise ValueError(
                f"subdivision_factor must be >= 0: {self.subdivision_factor}"
            )
        if self.max_radius_km <= 0:
            raise ValueError(f"max_radius_km must be > 0: {self.max_radius_km}")
        if self.exaggeration < 0:
            raise ValueError(f"exaggeration must be >= 0: {self.exaggeration}")
        if self.ocean_floor_m > 0:
            raise ValueError(f"ocean_floor_m must be <= 0: {self.ocean_floor_m}")
        if self.skirt_depth_km < 0:
            raise ValueError(f"skirt_depth_km must be >= 0: {self.skirt_depth_km}")
        if not (1 <= self.min_segments <= self.max_segments):
            raise ValueError(
                f"Invalid segment bounds: [{self.min_segments}, {self.max_segments}]"
            )
        for name in ("elevation_raster_size", "color_raster_size"):
            size = getattr(self, name)
            if size is not None and (len(size) != 2 or min(size) < 1):
                raise ValueError(f"{name} must be (width, height), got {size!r}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1: {self.max_workers}")

    @property
    def base_radius_km(self) -> float:
        """Radius of zero-elevation terrain."""
        return self.planet_radius_km - self.surface_offset_km


DEFAULT_CONFIG = TerrainConfig()
