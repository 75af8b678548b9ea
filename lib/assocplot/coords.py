"""
Coordinate systems.

Flipping swaps which data axis is drawn horizontally. It is applied at render
time only: data, bindings and resolved values are untouched, only the
orientation metadata of the emitted primitives changes.
"""

from __future__ import annotations

from enum import Enum

from .aesthetics import Channel
from .errors import ConfigurationError
from .primitives import Orientation


class CoordSystem(str, Enum):
    IDENTITY = "identity"
    FLIPPED = "flipped"

    @classmethod
    def parse(cls, raw: CoordSystem | str) -> CoordSystem:
        try:
            return cls(raw)
        except ValueError:
            msg = f"unknown coordinate system {raw!r} (expected 'identity' or 'flipped')"
            raise ConfigurationError(msg) from None

    @property
    def is_flipped(self) -> bool:
        return self is CoordSystem.FLIPPED

    def screen_axis(self, axis: Channel) -> Channel:
        """Data axis -> screen axis (``X`` is horizontal on screen)."""
        if not self.is_flipped:
            return axis
        return Channel.Y if axis is Channel.X else Channel.X

    def line_orientation(self, axis: Channel) -> Orientation:
        """
        Orientation of a reference line whose intercept lies on ``axis``.

        A ``y`` intercept runs parallel to the x axis, so it is horizontal on
        screen unless the axes are flipped.
        """
        if self.screen_axis(axis) is Channel.Y:
            return Orientation.HORIZONTAL
        return Orientation.VERTICAL

    @property
    def range_orientation(self) -> Orientation:
        """Orientation of point-range bars, which extend along the value axis."""
        return Orientation.HORIZONTAL if self.is_flipped else Orientation.VERTICAL
