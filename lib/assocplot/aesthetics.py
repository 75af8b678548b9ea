"""
Aesthetic channels and bindings.

A layer maps each channel either to a field of its data (``FieldRef``) or to a
literal visual value (``Value``). Field bindings are resolved per record through
the channel's scale; literal bindings bypass scales and never reach the legend.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from .errors import ConfigurationError


class Channel(str, Enum):
    """Visual properties a layer can bind."""

    X = "x"
    Y = "y"
    YMIN = "ymin"
    YMAX = "ymax"
    COLOR = "color"
    FILL = "fill"
    SHAPE = "shape"
    ALPHA = "alpha"
    SIZE = "size"
    LABEL = "label"

    @property
    def is_scaled(self) -> bool:
        """Whether field bindings on this channel go through a discrete scale."""
        return self in SCALED_CHANNELS

    @property
    def is_position(self) -> bool:
        """Whether the channel places a record on an axis."""
        return self in POSITION_CHANNELS

    @property
    def axis(self) -> Channel | None:
        """The positional axis a channel lives on (``ymin``/``ymax`` share ``y``)."""
        if self is Channel.X:
            return Channel.X
        if self in (Channel.Y, Channel.YMIN, Channel.YMAX):
            return Channel.Y
        return None


SCALED_CHANNELS = frozenset(
    {Channel.COLOR, Channel.FILL, Channel.SHAPE, Channel.ALPHA, Channel.SIZE},
)
POSITION_CHANNELS = frozenset({Channel.X, Channel.Y, Channel.YMIN, Channel.YMAX})


class Geometry(str, Enum):
    """Closed set of drawable geometry kinds."""

    POINTRANGE = "pointrange"
    POINT = "point"
    HLINE = "hline"
    TEXT = "text"


@dataclass(frozen=True)
class FieldRef:
    """Bind a channel to a field of the layer's data."""

    name: str


@dataclass(frozen=True)
class Value:
    """Bind a channel to a literal visual value."""

    value: Any


Binding = Union[FieldRef, Value]


def value(literal: Any) -> Value:
    """Wrap a literal so ``aes`` does not treat a string as a field name."""
    return Value(literal)


def coerce_channel(key: Channel | str) -> Channel:
    if isinstance(key, Channel):
        return key
    try:
        return Channel("color" if key == "colour" else key)
    except ValueError:
        valid = ", ".join(channel.value for channel in Channel)
        msg = f"unknown aesthetic channel {key!r} (expected one of: {valid})"
        raise ConfigurationError(msg) from None


def _coerce_binding(raw: Any) -> Binding:
    if isinstance(raw, (FieldRef, Value)):
        return raw
    if isinstance(raw, str):
        return FieldRef(raw)
    return Value(raw)


class Aes(Mapping[Channel, Binding]):
    """Immutable channel -> binding mapping, kept in declaration order."""

    __slots__ = ("_bindings",)

    def __init__(self, bindings: Mapping[Channel | str, Any] | None = None) -> None:
        resolved: dict[Channel, Binding] = {}
        for key, raw in (bindings or {}).items():
            resolved[coerce_channel(key)] = _coerce_binding(raw)
        self._bindings = resolved

    def __getitem__(self, channel: Channel | str) -> Binding:
        return self._bindings[coerce_channel(channel)]

    def __iter__(self) -> Iterator[Channel]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        inner = ", ".join(f"{channel.value}={binding!r}" for channel, binding in self._bindings.items())
        return f"Aes({inner})"

    def merged(self, other: Mapping[Channel | str, Any]) -> Aes:
        """Return a new mapping with ``other``'s bindings layered on top."""
        combined: dict[Channel | str, Any] = dict(self._bindings)
        combined.update({coerce_channel(key): raw for key, raw in other.items()})
        return Aes(combined)

    def fields(self) -> dict[Channel, str]:
        return {
            channel: binding.name
            for channel, binding in self._bindings.items()
            if isinstance(binding, FieldRef)
        }

    def literals(self) -> dict[Channel, Any]:
        return {
            channel: binding.value
            for channel, binding in self._bindings.items()
            if isinstance(binding, Value)
        }


def aes(**channels: Any) -> Aes:
    """
    Declare aesthetic bindings.

    Strings become field references; ``value(...)`` and non-string literals
    become literal bindings.

    Example:
        aes(x="snp", y="odds_ratio", color="model", size=value(3))
    """
    return Aes(channels)
