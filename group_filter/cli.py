"""Command line interface for the group filters.

Usage:
    group-filter --source <image> [--output <png>] [--shadow N] [--highlight N] row-filter [mode]
    group-filter --source <image> [--output <png>] [--shadow N] [--highlight N] checkerbox-filter [mode] [--size 100]

Subcommands:
  row-filter         : every row becomes the avg/min/max (or sorted remap) of its pixels
  checkerbox-filter  : every size x size tile becomes the statistic of its pixels

``mode`` is one of avg, min, max or sort (default avg).  Pixels whose luma is
below ``--shadow`` or above ``--highlight`` are copied through unchanged.
When ``--output`` is omitted the PNG is written next to the source with the
filter settings encoded in its name.
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import (
    DEFAULT_HIGHLIGHT,
    DEFAULT_MODE,
    DEFAULT_SHADOW,
    DEFAULT_TILE_SIZE,
    AggregationMode,
    DivisorPolicy,
    FilterConfig,
    Grouping,
)
from .engines import filter_file
from .errors import GroupFilterError

logger = logging.getLogger("group_filter")

MODE_HELP = "[mode] ({})".format("|".join(m.value for m in AggregationMode))


def _setup_logging(debug: bool = False):
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _run(args, grouping: Grouping, config: FilterConfig) -> int:
    logger.info(
        "%s filter on %s (mode=%s, shadow=%d, highlight=%d)",
        grouping.value,
        args.source,
        config.mode.value,
        config.thresholds.shadow,
        config.thresholds.highlight,
    )
    written = filter_file(args.source, args.output, config, grouping)
    logger.info("Wrote %s", written)
    return 0


# ---- Subcommand: row-filter ----

def cmd_row(args) -> int:
    config = FilterConfig.from_values(
        mode=args.mode,
        shadow=args.shadow,
        highlight=args.highlight,
    )
    return _run(args, Grouping.ROW, config)


# ---- Subcommand: checkerbox-filter ----

def cmd_checkerbox(args) -> int:
    config = FilterConfig.from_values(
        mode=args.mode,
        shadow=args.shadow,
        highlight=args.highlight,
        size=args.size,
        divisor=args.avg_divisor,
        partial_tiles=args.partial_tiles,
    )
    if config.divisor is DivisorPolicy.WIDTH and config.mode is AggregationMode.AVERAGE:
        logger.warning("Averaging tiles by image width; values above 255 wrap around")
    return _run(args, Grouping.CHECKERBOX, config)


# ---- Argument parser ----

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="group-filter",
        description="Replace rows or square tiles of an image with a per-group statistic.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--source", "--src", required=True,
                        help="The source image to transform")
    parser.add_argument("--output", "--out", default=None,
                        help="Output path for the generated PNG "
                             "(default: derived from --source and the filter options)")
    parser.add_argument("--shadow", "--low", type=int, default=DEFAULT_SHADOW,
                        help="Shadow mask: keep pixels with luma below this (0-255, default: 0 = off)")
    parser.add_argument("--highlight", "--high", type=int, default=DEFAULT_HIGHLIGHT,
                        help="Highlight mask: keep pixels with luma above this (0-255, default: 255 = off)")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    # -- row-filter --
    p_row = sub.add_parser(
        "row-filter",
        aliases=["row"],
        help="Each row becomes the avg, min, max or sorted remap of its pixels",
    )
    p_row.add_argument("mode", nargs="?", default=DEFAULT_MODE.value, help=MODE_HELP)
    p_row.set_defaults(func=cmd_row)

    # -- checkerbox-filter --
    p_check = sub.add_parser(
        "checkerbox-filter",
        aliases=["checkerbox", "check"],
        help="Each square tile becomes the avg, min, max or sorted remap of its pixels",
    )
    p_check.add_argument("mode", nargs="?", default=DEFAULT_MODE.value, help=MODE_HELP)
    p_check.add_argument("--size", type=int, default=DEFAULT_TILE_SIZE,
                         help="Edge length of the tiles in pixels (default: 100)")
    p_check.add_argument("--avg-divisor", default=DivisorPolicy.COUNT.value,
                         choices=[p.value for p in DivisorPolicy],
                         help="Denominator for avg: pixels in the tile (count) "
                              "or the image width (width, legacy output)")
    p_check.add_argument("--partial-tiles", action="store_true",
                         help="Also filter the trailing strips narrower than --size "
                              "instead of leaving them transparent")
    p_check.set_defaults(func=cmd_checkerbox)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.debug)
    try:
        return args.func(args)
    except GroupFilterError as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
