"""
Backend-agnostic drawing IR produced by resolving a PlotSpec.

Primitives keep their resolved *data-space* coordinates. The coordinate system
only contributes orientation metadata (``flipped``/``orientation``); renderers
read ``screen_position`` to place a primitive.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from .aesthetics import Channel, Geometry


class Orientation(str, Enum):
    """Direction in which a line-like primitive extends on screen."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True)
class DrawPrimitive:
    """
    One drawable item.

    ``x``/``y`` are data-space positions after dodging. For point-ranges,
    ``extent`` is the (low, high) interval on the value axis. Reference lines
    set only the coordinate of their semantic axis.
    """

    kind: Geometry
    z_order: int
    x: float | None = None
    y: float | None = None
    extent: tuple[float, float] | None = None
    orientation: Orientation | None = None
    flipped: bool = False
    style: Mapping[str, Any] = field(default_factory=dict)
    label: str | None = None
    nudge: tuple[float, float] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "style", MappingProxyType(dict(self.style)))

    @property
    def screen_position(self) -> tuple[float | None, float | None]:
        """(horizontal, vertical) position once the coordinate system is applied."""
        if self.flipped:
            return (self.y, self.x)
        return (self.x, self.y)


@dataclass(frozen=True)
class GuideRow:
    key: Any
    label: str
    swatch: Mapping[str, Any]

    def __post_init__(self) -> None:
        object.__setattr__(self, "swatch", MappingProxyType(dict(self.swatch)))


@dataclass(frozen=True)
class LegendGuide:
    """A legend block covering one or more merged channels."""

    title: str
    channels: tuple[Channel, ...]
    rows: tuple[GuideRow, ...]


@dataclass(frozen=True)
class AxisTick:
    """
    A labelled tick on a positional axis.

    Staggered ticks carry a prefix (a leading newline by default) that pushes
    their label away from the axis, so adjacent labels do not collide.
    """

    value: Any
    position: float
    text: str
    staggered: bool = False
    prefix: str = "\n"

    @property
    def label(self) -> str:
        return f"{self.prefix}{self.text}" if self.staggered else self.text


@dataclass(frozen=True)
class Axis:
    title: str | None = None
    ticks: tuple[AxisTick, ...] = ()


@dataclass(frozen=True)
class RenderedPlot:
    """Everything a renderer needs: primitives in z-order, guides and axes."""

    primitives: tuple[DrawPrimitive, ...]
    guides: tuple[LegendGuide, ...] = ()
    x_axis: Axis = field(default_factory=Axis)
    y_axis: Axis = field(default_factory=Axis)
    title: str | None = None
    flipped: bool = False

    def by_kind(self, kind: Geometry | str) -> tuple[DrawPrimitive, ...]:
        wanted = Geometry(kind)
        return tuple(primitive for primitive in self.primitives if primitive.kind is wanted)

    def by_layer(self, z_order: int) -> tuple[DrawPrimitive, ...]:
        return tuple(primitive for primitive in self.primitives if primitive.z_order == z_order)
