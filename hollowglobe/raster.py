from dataclasses import dataclass
from io import BytesIO
from typing import Optional

import numpy as np
from PIL import Image


class RasterError(ValueError):
    '''Raised when a raster cannot be used to build a tile'''


@dataclass(frozen=True)
class Raster:
    """Read-only pixel buffer

    Attributes
    ----------
    pixels : np.ndarray
        uint8 array of shape (height, width, channels), row 0 at the top
    """
    pixels: np.ndarray

    def __post_init__(self) -> None:
        pixels = np.asarray(self.pixels)
        if pixels.ndim == 2:
            pixels = pixels[:, :, np.newaxis]
        if pixels.ndim != 3:
            raise RasterError(f"Expected a 2D pixel grid, got shape {pixels.shape}")
        pixels = np.array(pixels, dtype=np.uint8, copy=True)
        pixels.setflags(write=False)
        object.__setattr__(self, 'pixels', pixels)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def channels(self) -> int:
        return self.pixels.shape[2]

    @property
    def stride(self) -> int:
        '''Bytes per row'''
        return self.width * self.channels

    @classmethod
    def from_image(cls, image: Image.Image) -> "Raster":
        '''Wrap a Pillow image as an RGB raster'''
        return cls(np.asarray(image.convert("RGB")))

    @classmethod
    def from_bytes(cls, data: bytes) -> "Raster":
        '''Decode an encoded image (PNG, JPEG, ...)'''
        try:
            with Image.open(BytesIO(data)) as image:
                return cls.from_image(image)
        except (OSError, Image.DecompressionBombError) as e:
            raise RasterError(f"Could not decode image: {e}") from e

    def sample(self, u: float, v: float) -> np.ndarray:
        '''Nearest pixel at normalized (u, v); v = 0 is the top row'''
        px, py = self._pixel_index(np.asarray(u), np.asarray(v))
        return self.pixels[py, px]

    def sample_grid(self, u: np.ndarray, v: np.ndarray) -> np.ndarray:
        """Sample many normalized positions at once

        Parameters
        ----------
        u : np.ndarray
            Horizontal positions in [0, 1]
        v : np.ndarray
            Vertical positions in [0, 1], same shape as u

        Returns
        -------
        samples : np.ndarray
            Array of shape u.shape + (channels,)
        """
        px, py = self._pixel_index(np.asarray(u), np.asarray(v))
        return self.pixels[py, px]

    def _pixel_index(self, u: np.ndarray, v: np.ndarray):
        px = np.floor(np.clip(u, 0.0, 1.0) * (self.width - 1)).astype(np.intp)
        py = np.floor(np.clip(v, 0.0, 1.0) * (self.height - 1)).astype(np.intp)
        return px, py


def validate_raster(raster: Raster, name: str, size: Optional[tuple[int, int]] = None,
                    min_channels: int = 3) -> None:
    """Check a raster is usable for a tile

    Parameters
    ----------
    raster : Raster
        Raster to check
    name : str
        Label used in the error message
    size : tuple[int, int] | None
        Required (width, height), or None to accept any size of at least 2x2
    min_channels : int
        Minimum number of channels

    Raises
    ------
    RasterError
        If the raster has the wrong dimensions
    """
    if raster.width < 2 or raster.height < 2:
        raise RasterError(f"{name} raster too small: {raster.width}x{raster.height}")
    if size is not None and (raster.width, raster.height) != tuple(size):
        raise RasterError(
            f"{name} raster is {raster.width}x{raster.height}, expected {size[0]}x{size[1]}"
        )
    if raster.channels < min_channels:
        raise RasterError(f"{name} raster has {raster.channels} channels, need {min_channels}")
