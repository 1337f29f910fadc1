"""
Row and checkerbox filter engines.

Both engines follow the same two-pass recipe per group:

1. collect the group's samples in visitation order and aggregate them;
2. re-visit the same pixels in the same order and write the output:
   protected pixels keep their original colour, sort mode hands out the
   sorted values through a :class:`SortCursor`, every other mode fills the
   scalar statistic.

Output alpha is always opaque.  Groups never overlap, so each output
coordinate is written by exactly one group.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Optional, Union

import numpy as np

from .aggregate import Group, SortCursor, aggregate
from .config import DivisorPolicy, FilterConfig, Grouping
from .errors import ConfigurationError
from .grid import PixelGrid
from .imaging import load_grid, save_grid
from .luma import protected_mask
from .naming import default_output_path

logger = logging.getLogger(__name__)

OPAQUE = 255


class _GroupFilterEngine:
    """Shared reconstruction logic; subclasses decide how the grid is cut."""

    grouping: Grouping
    # whether a protected pixel consumes its sorted slot
    advance_on_masked = False

    def __init__(self, config: Optional[FilterConfig] = None):
        self.config = config or FilterConfig()

    def groups(self, grid: PixelGrid) -> Iterator[Group]:
        raise NotImplementedError

    def divisor_for(self, grid: PixelGrid, group: Group) -> int:
        if self.config.divisor is DivisorPolicy.WIDTH:
            return grid.width
        return len(group)

    def run(self, grid: PixelGrid) -> PixelGrid:
        """Filter ``grid`` and return the output grid (same dimensions)."""
        out = grid.blank_like()
        visited = 0
        protected_total = 0
        for group in self.groups(grid):
            protected_total += self._render_group(grid, group, out)
            visited += 1
        logger.info(
            "%s filter (%s) processed %d group(s), %d protected pixel(s)",
            self.grouping.value,
            self.config.mode.value,
            visited,
            protected_total,
        )
        return PixelGrid(out)

    def _render_group(self, grid: PixelGrid, group: Group, out: np.ndarray) -> int:
        result = aggregate(group, self.config.mode, self.divisor_for(grid, group))
        rgb = group.rgb
        protected = protected_mask(rgb, self.config.thresholds)
        unmasked = ~protected

        colours = np.empty_like(rgb)
        colours[protected] = rgb[protected]
        if result.is_sorted:
            cursor = SortCursor(result.ordered, self.advance_on_masked)
            colours[unmasked] = cursor.take(unmasked)
        else:
            colours[unmasked] = result.value

        out[group.ys, group.xs, :3] = colours
        out[group.ys, group.xs, 3] = OPAQUE

        masked_count = int(np.count_nonzero(protected))
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "%s: %d pixel(s), %d protected, statistic=%s",
                group.label,
                len(group),
                masked_count,
                "sorted" if result.is_sorted else result.value.tolist(),
            )
        return masked_count


class RowFilterEngine(_GroupFilterEngine):
    """Every image row is one group, visited left to right."""

    grouping = Grouping.ROW
    advance_on_masked = True

    def groups(self, grid: PixelGrid) -> Iterator[Group]:
        xs = np.arange(grid.width)
        for y in range(grid.height):
            yield Group(
                label=f"row {y}",
                samples=grid.rgba[y],
                xs=xs,
                ys=np.full(grid.width, y),
            )


class CheckerboxFilterEngine(_GroupFilterEngine):
    """
    Square ``size`` x ``size`` tiles, tile rows outer and tile columns inner.

    Inside a tile pixels are visited column by column (x outer, y inner),
    which fixes where sort mode puts each value.  Trailing strips narrower
    than ``size`` are left transparent unless ``partial_tiles`` is set.
    """

    grouping = Grouping.CHECKERBOX

    def tile_counts(self, grid: PixelGrid) -> tuple:
        """(tile rows, tile columns) that will be visited."""
        size = self.config.size
        num_rows, num_cols = grid.height // size, grid.width // size
        if self.config.partial_tiles:
            num_rows += 1 if grid.height % size else 0
            num_cols += 1 if grid.width % size else 0
        return num_rows, num_cols

    def groups(self, grid: PixelGrid) -> Iterator[Group]:
        size = self.config.size
        num_rows, num_cols = self.tile_counts(grid)
        if num_rows == 0 or num_cols == 0:
            raise ConfigurationError(
                f"Tile size {size} does not fit a {grid.width}x{grid.height} image"
            )
        if not self.config.partial_tiles and (grid.width % size or grid.height % size):
            logger.warning(
                "Image %dx%d is not a multiple of tile size %d; trailing pixels stay transparent",
                grid.width,
                grid.height,
                size,
            )

        for row in range(num_rows):
            y0 = row * size
            y1 = min(y0 + size, grid.height)
            for col in range(num_cols):
                x0 = col * size
                x1 = min(x0 + size, grid.width)
                block = grid.rgba[y0:y1, x0:x1]
                tile_xs, tile_ys = np.meshgrid(
                    np.arange(x0, x1), np.arange(y0, y1), indexing="ij"
                )
                yield Group(
                    label=f"tile ({row}, {col})",
                    samples=block.transpose(1, 0, 2).reshape(-1, 4),
                    xs=tile_xs.ravel(),
                    ys=tile_ys.ravel(),
                )


def engine_for(grouping: Union[Grouping, str], config: Optional[FilterConfig] = None) -> _GroupFilterEngine:
    try:
        grouping = Grouping(grouping)
    except ValueError:
        raise ConfigurationError(f"Unknown grouping {grouping!r}") from None
    if grouping is Grouping.ROW:
        return RowFilterEngine(config)
    return CheckerboxFilterEngine(config)


def filter_file(
    source: Union[str, Path],
    output: Optional[Union[str, Path]] = None,
    config: Optional[FilterConfig] = None,
    grouping: Union[Grouping, str] = Grouping.ROW,
) -> Path:
    """
    Decode ``source``, filter it and write a PNG.

    Returns:
        The path that was written; derived from the source name and the
        filter settings when ``output`` is not given.
    """
    config = config or FilterConfig()
    engine = engine_for(grouping, config)
    grid = load_grid(source)
    result = engine.run(grid)

    target = Path(output) if output else default_output_path(source, config, engine.grouping)
    save_grid(target, result)
    return target
