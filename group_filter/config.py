"""Filter configuration: aggregation modes, divisor policy, mask thresholds."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .errors import ConfigurationError, InvalidModeError


# ---------------------------------------------------------------------------
# Defaults shared by the CLI and library callers
# ---------------------------------------------------------------------------
DEFAULT_SHADOW = 0
DEFAULT_HIGHLIGHT = 255
DEFAULT_TILE_SIZE = 100

CHANNEL_MIN = 0
CHANNEL_MAX = 255


class AggregationMode(str, Enum):
    AVERAGE = "avg"
    MINIMUM = "min"
    MAXIMUM = "max"
    SORTED_REMAP = "sort"

    @classmethod
    def parse(cls, value) -> "AggregationMode":
        """Convert a user supplied mode name, raising ``InvalidModeError``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = "|".join(m.value for m in cls)
            raise InvalidModeError(f"Unknown mode {value!r} (expected {choices})") from None


DEFAULT_MODE = AggregationMode.AVERAGE


class DivisorPolicy(str, Enum):
    COUNT = "count"   # number of samples in the group
    WIDTH = "width"   # image width, whatever the group shape


class Grouping(str, Enum):
    ROW = "row"
    CHECKERBOX = "checkerbox"


@dataclass(frozen=True)
class MaskThresholds:
    """Luma band outside of which pixels are copied unchanged.

    ``shadow <= highlight`` is the usual setup but is not required; an
    inverted band simply protects more pixels.
    """
    shadow: int = DEFAULT_SHADOW
    highlight: int = DEFAULT_HIGHLIGHT

    def __post_init__(self):
        for name in ("shadow", "highlight"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} threshold must be an integer, got {value!r}")
            if not CHANNEL_MIN <= value <= CHANNEL_MAX:
                raise ConfigurationError(
                    f"{name} threshold must be within {CHANNEL_MIN}-{CHANNEL_MAX}, got {value}"
                )

    @property
    def disabled(self) -> bool:
        return self.shadow <= CHANNEL_MIN and self.highlight >= CHANNEL_MAX


@dataclass(frozen=True)
class FilterConfig:
    """Immutable settings for one filter invocation."""
    mode: AggregationMode = DEFAULT_MODE
    thresholds: MaskThresholds = field(default_factory=MaskThresholds)
    size: int = DEFAULT_TILE_SIZE                 # checkerbox tile edge
    divisor: DivisorPolicy = DivisorPolicy.COUNT  # avg denominator for tiles
    partial_tiles: bool = False                   # process trailing strips

    def __post_init__(self):
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "mode", AggregationMode.parse(self.mode))
        try:
            object.__setattr__(self, "divisor", DivisorPolicy(self.divisor))
        except ValueError:
            raise ConfigurationError(f"Unknown divisor policy {self.divisor!r}") from None
        if isinstance(self.size, bool) or not isinstance(self.size, int) or self.size <= 0:
            raise ConfigurationError(f"Tile size must be a positive integer, got {self.size!r}")

    @classmethod
    def from_values(
        cls,
        mode="avg",
        shadow: int = DEFAULT_SHADOW,
        highlight: int = DEFAULT_HIGHLIGHT,
        size: int = DEFAULT_TILE_SIZE,
        divisor="count",
        partial_tiles: bool = False,
    ) -> "FilterConfig":
        return cls(
            mode=AggregationMode.parse(mode),
            thresholds=MaskThresholds(shadow=shadow, highlight=highlight),
            size=size,
            divisor=divisor,
            partial_tiles=partial_tiles,
        )
