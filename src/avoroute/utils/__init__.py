"""Utility modules."""

from avoroute.utils.timing import timed

__all__ = ["timed"]
