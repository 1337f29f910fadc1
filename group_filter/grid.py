"""
Immutable RGBA pixel grid shared by the decoder, the filter engines and the
encoder.

The grid wraps a ``(height, width, 4)`` ``uint8`` array.  The array is marked
read-only on construction so engines can hand out views without worrying
about callers scribbling over the source image; output images are assembled
in a separate writable buffer obtained from :meth:`PixelGrid.blank_like`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List

import numpy as np

from .errors import ConfigurationError


@dataclass(frozen=True)
class Pixel:
    """One RGBA sample and where it lives in the grid."""
    r: int
    g: int
    b: int
    a: int
    x: int
    y: int

    @property
    def rgb(self) -> tuple:
        return (self.r, self.g, self.b)


class PixelGrid:
    def __init__(self, rgba: np.ndarray):
        """
        Wrap an RGBA array.

        Args:
            rgba: Array of shape (height, width, 4).  RGB (3 channel) arrays
                are accepted and given an opaque alpha channel.
        """
        data = np.asarray(rgba)
        if data.ndim != 3 or data.shape[2] not in (3, 4):
            raise ConfigurationError(f"Expected an (H, W, 3|4) array, got shape {data.shape}")
        if data.shape[0] == 0 or data.shape[1] == 0:
            raise ConfigurationError(f"Image has no pixels (shape {data.shape[:2]})")
        if data.dtype != np.uint8 and (data.min() < 0 or data.max() > 255):
            raise ConfigurationError("Channel samples must be within 0-255")
        if data.shape[2] == 3:
            alpha = np.full(data.shape[:2] + (1,), 255, dtype=np.uint8)
            data = np.concatenate([data.astype(np.uint8), alpha], axis=2)
        data = np.array(data, dtype=np.uint8, copy=True)
        data.flags.writeable = False
        self._rgba = data

    # ----------------------------- shape -----------------------------------

    @property
    def width(self) -> int:
        return int(self._rgba.shape[1])

    @property
    def height(self) -> int:
        return int(self._rgba.shape[0])

    @property
    def size(self) -> tuple:
        """(width, height), matching ``PIL.Image.size``."""
        return (self.width, self.height)

    @property
    def rgba(self) -> np.ndarray:
        """Read-only view of the underlying samples."""
        return self._rgba

    # --------------------------- accessors ---------------------------------

    def at(self, x: int, y: int) -> Pixel:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"({x}, {y}) outside {self.width}x{self.height} grid")
        r, g, b, a = (int(v) for v in self._rgba[y, x])
        return Pixel(r, g, b, a, x, y)

    def row(self, y: int) -> List[Pixel]:
        return [self.at(x, y) for x in range(self.width)]

    def rows(self) -> Iterator[List[Pixel]]:
        for y in range(self.height):
            yield self.row(y)

    def blank_like(self) -> np.ndarray:
        """Writable zero buffer of the same shape (transparent black)."""
        return np.zeros_like(self._rgba, dtype=np.uint8)

    def premultiplied(self) -> "PixelGrid":
        """Copy with colour channels scaled by alpha (``c * a // 255``)."""
        data = self._rgba.astype(np.uint32)
        rgb = data[:, :, :3] * data[:, :, 3:4] // 255
        return PixelGrid(np.concatenate([rgb, data[:, :, 3:4]], axis=2).astype(np.uint8))

    def __eq__(self, other) -> bool:
        if not isinstance(other, PixelGrid):
            return NotImplemented
        return np.array_equal(self._rgba, other._rgba)

    __hash__ = None

    def __repr__(self) -> str:
        return f"PixelGrid({self.width}x{self.height})"
