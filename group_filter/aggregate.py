"""
Per-group statistics.

A :class:`Group` is an ordered run of samples taken from the source grid in
the order the owning engine visits them.  :func:`aggregate` reduces it to one
RGB triple (avg/min/max) or to per-channel ascending sequences (sort), and a
:class:`SortCursor` hands the sorted values back out during reconstruction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import AggregationMode
from .errors import ConfigurationError


@dataclass(frozen=True)
class Group:
    """Samples of one row or tile, in visitation order."""
    label: str
    samples: np.ndarray   # (n, 4) uint8 RGBA
    xs: np.ndarray        # (n,) x coordinate of each sample
    ys: np.ndarray        # (n,) y coordinate of each sample

    def __len__(self) -> int:
        return int(self.samples.shape[0])

    @property
    def rgb(self) -> np.ndarray:
        return self.samples[:, :3]


@dataclass(frozen=True)
class AggregateResult:
    mode: AggregationMode
    value: Optional[np.ndarray] = None     # (3,) for avg/min/max
    ordered: Optional[np.ndarray] = None   # (n, 3) for sort

    @property
    def is_sorted(self) -> bool:
        return self.ordered is not None


def _average(rgb: np.ndarray, divisor: int) -> np.ndarray:
    if divisor <= 0:
        raise ConfigurationError(f"Average divisor must be positive, got {divisor}")
    totals = rgb.astype(np.int64).sum(axis=0)
    # stored as an 8-bit sample: quotients above 255 wrap
    return ((totals // divisor) % 256).astype(np.uint8)


def aggregate(group: Group, mode: AggregationMode, divisor: Optional[int] = None) -> AggregateResult:
    """
    Reduce a group to its statistic.

    Args:
        group: Non-empty group of samples.
        mode: Statistic to compute, as an enum member or its name.
        divisor: Denominator for ``avg``; defaults to the group size.

    Raises:
        InvalidModeError: ``mode`` is not a known statistic.
        ConfigurationError: Empty group or non-positive divisor.
    """
    mode = AggregationMode.parse(mode)
    if len(group) == 0:
        raise ConfigurationError(f"Group {group.label} has no pixels")

    rgb = group.rgb
    if mode is AggregationMode.AVERAGE:
        return AggregateResult(mode, value=_average(rgb, len(group) if divisor is None else divisor))
    if mode is AggregationMode.MINIMUM:
        return AggregateResult(mode, value=rgb.min(axis=0).astype(np.uint8))
    if mode is AggregationMode.MAXIMUM:
        return AggregateResult(mode, value=rgb.max(axis=0).astype(np.uint8))
    return AggregateResult(mode, ordered=np.sort(rgb, axis=0, kind="stable").astype(np.uint8))


class SortCursor:
    """
    Hands sorted values to unmasked pixels in visitation order.

    One cursor is created per group.  With ``advance_on_masked`` every pixel
    owns the slot matching its position in the group, so a protected pixel
    leaves its value unused; without it the cursor is a running counter that
    only moves when a value is consumed.
    """

    def __init__(self, ordered: np.ndarray, advance_on_masked: bool):
        self._ordered = ordered
        self._advance_on_masked = advance_on_masked
        self.position = 0

    def take(self, unmasked: np.ndarray) -> np.ndarray:
        """Values for the ``True`` entries of ``unmasked``, in order."""
        unmasked = np.asarray(unmasked, dtype=bool)
        if self._advance_on_masked:
            slots = self.position + np.flatnonzero(unmasked)
            self.position += unmasked.size
        else:
            count = int(np.count_nonzero(unmasked))
            slots = np.arange(self.position, self.position + count)
            self.position += count
        if slots.size and slots[-1] >= len(self._ordered):
            raise IndexError("Sort cursor ran past the end of the group")
        return self._ordered[slots]
