"""Default output file names derived from the source path and filter settings."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from .config import FilterConfig, Grouping


def strip_extension(source: Union[str, Path]) -> str:
    """Drop the extension of the last path element, keeping any directories.

    The extension starts at the final ``.`` of the file name, so a dotfile
    such as ``.hidden`` loses its whole name.
    """
    text = str(source)
    sep = max(text.rfind("/"), text.rfind("\\"))
    dot = text.rfind(".")
    if dot > sep:
        return text[:dot]
    return text


def default_output_path(source: Union[str, Path], config: FilterConfig, grouping: Grouping) -> Path:
    """
    ``<stem>-row-<mode>-high-<h>-low-<s>.png`` for row grouping and
    ``<stem>-checker-<size>-<mode>-high-<h>-low-<s>.png`` for checkerbox.
    """
    stem = strip_extension(source)
    mode = config.mode.value
    high = config.thresholds.highlight
    low = config.thresholds.shadow
    if Grouping(grouping) is Grouping.ROW:
        name = f"{stem}-row-{mode}-high-{high}-low-{low}.png"
    else:
        name = f"{stem}-checker-{config.size}-{mode}-high-{high}-low-{low}.png"
    return Path(name)
