"""Public interface for the row / checkerbox group filters."""

from __future__ import annotations

__version__ = "1.0.0"

from .aggregate import AggregateResult, Group, SortCursor, aggregate
from .config import (
    AggregationMode,
    DivisorPolicy,
    FilterConfig,
    Grouping,
    MaskThresholds,
)
from .engines import CheckerboxFilterEngine, RowFilterEngine, engine_for, filter_file
from .errors import (
    ConfigurationError,
    DecodeError,
    EncodeError,
    GroupFilterError,
    InvalidModeError,
)
from .grid import Pixel, PixelGrid
from .imaging import load_grid, save_grid
from .luma import is_protected, luma, luma_array, protected_mask
from .naming import default_output_path

__all__ = [
    "AggregateResult",
    "AggregationMode",
    "CheckerboxFilterEngine",
    "ConfigurationError",
    "DecodeError",
    "DivisorPolicy",
    "EncodeError",
    "FilterConfig",
    "Group",
    "GroupFilterError",
    "Grouping",
    "InvalidModeError",
    "MaskThresholds",
    "Pixel",
    "PixelGrid",
    "RowFilterEngine",
    "SortCursor",
    "aggregate",
    "default_output_path",
    "engine_for",
    "filter_file",
    "is_protected",
    "load_grid",
    "luma",
    "luma_array",
    "protected_mask",
    "save_grid",
]
