"""Luminance mask: decides which pixels are copied through untouched."""

from __future__ import annotations

import numpy as np

from .config import MaskThresholds
from .grid import Pixel

# 16.16 fixed-point weights for Y = 0.299 R + 0.587 G + 0.114 B.  They sum to
# 1 << 16, so white maps to exactly 255.
_R_WEIGHT = 19595
_G_WEIGHT = 38470
_B_WEIGHT = 7471
_ROUND = 1 << 15
_SHIFT = 16


def luma(r: int, g: int, b: int) -> int:
    """8-bit luma of one RGB triple, rounded to nearest."""
    return (_R_WEIGHT * r + _G_WEIGHT * g + _B_WEIGHT * b + _ROUND) >> _SHIFT


def luma_array(rgb: np.ndarray) -> np.ndarray:
    """Vectorised :func:`luma` over an ``(..., 3)`` array."""
    samples = np.asarray(rgb, dtype=np.int64)
    y = (
        _R_WEIGHT * samples[..., 0]
        + _G_WEIGHT * samples[..., 1]
        + _B_WEIGHT * samples[..., 2]
        + _ROUND
    ) >> _SHIFT
    return y.astype(np.uint8)


def is_protected(pixel: Pixel, thresholds: MaskThresholds) -> bool:
    """True when the pixel's luma falls outside the shadow/highlight band."""
    y = luma(pixel.r, pixel.g, pixel.b)
    return y < thresholds.shadow or y > thresholds.highlight


def protected_mask(rgb: np.ndarray, thresholds: MaskThresholds) -> np.ndarray:
    """Boolean mask of protected samples, same leading shape as ``rgb``."""
    rgb = np.asarray(rgb)
    if thresholds.disabled:
        return np.zeros(rgb.shape[:-1], dtype=bool)
    y = luma_array(rgb)
    return (y < thresholds.shadow) | (y > thresholds.highlight)
