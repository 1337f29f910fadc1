"""Exception taxonomy for the group filter toolkit."""

from __future__ import annotations


class GroupFilterError(Exception):
    """Base class for every fatal error raised by the toolkit."""


class DecodeError(GroupFilterError):
    """The source image is missing, unreadable or in an unsupported format."""


class EncodeError(GroupFilterError):
    """The output image could not be written."""


class InvalidModeError(GroupFilterError, ValueError):
    """The aggregation mode is not one of avg, min, max or sort."""


class ConfigurationError(GroupFilterError, ValueError):
    """Thresholds, tile size, divisor or image dimensions are unusable."""
