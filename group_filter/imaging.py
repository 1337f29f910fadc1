"""
Pillow-backed image decoding and PNG encoding.

Decoding accepts anything Pillow can identify and converts it to RGBA.
Encoding writes PNG through a temporary file in the destination directory so
a failed write never leaves a truncated image behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import DecodeError, EncodeError
from .grid import PixelGrid

logger = logging.getLogger(__name__)

# Pillow modes holding 16-bit (or wider) single-channel samples
_WIDE_GREY_MODES = {"I", "I;16", "I;16B", "I;16L", "I;16N"}


def _to_rgba(img: Image.Image) -> np.ndarray:
    """RGBA ``uint8`` samples; 16-bit grey is scaled down rather than clipped."""
    if img.mode in _WIDE_GREY_MODES:
        wide = np.clip(np.array(img, dtype=np.int64), 0, 65535)
        img = Image.fromarray((wide // 257).astype(np.uint8))
    return np.array(img.convert("RGBA"), dtype=np.uint8)


def _default_file_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def load_grid(path: Union[str, Path], premultiply: bool = True) -> PixelGrid:
    """
    Decode an image file into a :class:`PixelGrid`.

    Args:
        path: Source image.
        premultiply: Scale colour channels by alpha, which is how samples are
            read for filtering.  Opaque images are unaffected.

    Raises:
        DecodeError: Missing file, unreadable data or unsupported format.
    """
    path = Path(path)
    try:
        with Image.open(path) as img:
            img.load()
            fmt = img.format
            rgba = _to_rgba(img)
    except FileNotFoundError as exc:
        raise DecodeError(f"Source image not found: {path}") from exc
    except UnidentifiedImageError as exc:
        raise DecodeError(f"Unsupported image format: {path}") from exc
    except Image.DecompressionBombError as exc:
        raise DecodeError(f"Image too large to decode safely: {path}") from exc
    except (OSError, ValueError) as exc:
        raise DecodeError(f"Could not decode {path}: {exc}") from exc

    if rgba.ndim != 3 or rgba.shape[0] == 0 or rgba.shape[1] == 0:
        raise DecodeError(f"Image has no pixels: {path}")

    grid = PixelGrid(rgba)
    logger.info("Loaded %s (%s, %dx%d)", path, fmt, grid.width, grid.height)
    return grid.premultiplied() if premultiply else grid


def save_grid(path: Union[str, Path], grid: PixelGrid) -> Path:
    """
    Write ``grid`` as a PNG, replacing ``path`` atomically.

    Raises:
        EncodeError: The destination directory is missing or not writable.
    """
    path = Path(path)
    image = Image.fromarray(np.ascontiguousarray(grid.rgba))

    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "wb") as handle:
            # mkstemp creates 0600; match a plain open() under the current umask
            os.chmod(tmp_name, _default_file_mode())
            image.save(handle, format="PNG")
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as exc:
        raise EncodeError(f"Could not write {path}: {exc}") from exc
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)

    logger.info("Saved %s (%dx%d)", path, grid.width, grid.height)
    return path
