"""
Layer variants.

A plot is an ordered stack of layers; the position of a layer in the stack is
its z-order. Each variant declares the channels it requires and accepts, and
checks its mapping when it is constructed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from .aesthetics import Aes, Channel, FieldRef, Geometry, coerce_channel
from .dodge import Dodge
from .errors import ConfigurationError
from .table import Table

_STYLE_CHANNELS = frozenset(
    {Channel.COLOR, Channel.FILL, Channel.SHAPE, Channel.ALPHA, Channel.SIZE},
)


@dataclass(frozen=True)
class Layer:
    """
    Common part of every layer.

    Args:
        mapping: Channel bindings, usually built with ``aes``
        data: Table the layer draws from; ``None`` means the plot's base table
    """

    mapping: Aes = field(default_factory=Aes)
    data: Table | None = None

    geometry: ClassVar[Geometry]
    required: ClassVar[frozenset[Channel]] = frozenset()
    accepted: ClassVar[frozenset[Channel]] = _STYLE_CHANNELS

    def __post_init__(self) -> None:
        if not isinstance(self.mapping, Aes):
            object.__setattr__(self, "mapping", Aes(self.mapping))

        missing = sorted(channel.value for channel in self.required if channel not in self.mapping)
        if missing:
            msg = f"{self.geometry.value} layer requires channel(s): {', '.join(missing)}"
            raise ConfigurationError(msg)

        unsupported = sorted(
            channel.value
            for channel in self.mapping
            if channel not in self.accepted and channel not in self.required
        )
        if unsupported:
            msg = f"{self.geometry.value} layer does not accept channel(s): {', '.join(unsupported)}"
            raise ConfigurationError(msg)

    def source(self, base: Table) -> Table:
        return base if self.data is None else self.data

    @property
    def uses_base_data(self) -> bool:
        return self.data is None

    def field_bindings(self) -> dict[Channel, str]:
        return self.mapping.fields()


@dataclass(frozen=True)
class PointRange(Layer):
    """A point with a range bar (estimate and confidence interval)."""

    dodge: Dodge | None = None

    geometry: ClassVar[Geometry] = Geometry.POINTRANGE
    required: ClassVar[frozenset[Channel]] = frozenset(
        {Channel.X, Channel.Y, Channel.YMIN, Channel.YMAX},
    )


@dataclass(frozen=True)
class Point(Layer):
    dodge: Dodge | None = None

    geometry: ClassVar[Geometry] = Geometry.POINT
    required: ClassVar[frozenset[Channel]] = frozenset({Channel.X, Channel.Y})


@dataclass(frozen=True)
class HLine(Layer):
    """
    Straight reference line at a fixed intercept.

    ``axis`` is the data axis the intercept is declared against, not the
    screen direction: a line at ``y = 1`` stays on the value axis when the
    coordinate system is flipped. Only literal bindings are accepted.
    """

    intercept: float = 0.0
    axis: Channel = Channel.Y
    linetype: str = "solid"

    geometry: ClassVar[Geometry] = Geometry.HLINE
    accepted: ClassVar[frozenset[Channel]] = frozenset(
        {Channel.COLOR, Channel.ALPHA, Channel.SIZE},
    )

    def __post_init__(self) -> None:
        super().__post_init__()
        axis = coerce_channel(self.axis)
        if axis not in (Channel.X, Channel.Y):
            msg = f"reference line axis must be 'x' or 'y', got {axis.value!r}"
            raise ConfigurationError(msg)
        object.__setattr__(self, "axis", axis)
        bound = [
            channel.value
            for channel, binding in self.mapping.items()
            if isinstance(binding, FieldRef)
        ]
        if bound:
            msg = f"reference line bindings must be literal values, got fields for: {', '.join(bound)}"
            raise ConfigurationError(msg)


@dataclass(frozen=True)
class Text(Layer):
    """
    Text annotation at a data position.

    ``hjust``/``vjust`` are justification nudges carried through to the
    primitive and applied by the renderer after layout (``0.5`` is centered).
    """

    hjust: float = 0.5
    vjust: float = 0.5

    geometry: ClassVar[Geometry] = Geometry.TEXT
    required: ClassVar[frozenset[Channel]] = frozenset({Channel.X, Channel.Y, Channel.LABEL})
    accepted: ClassVar[frozenset[Channel]] = frozenset(
        {Channel.COLOR, Channel.ALPHA, Channel.SIZE},
    )
