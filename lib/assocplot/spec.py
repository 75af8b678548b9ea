"""
PlotSpec: the immutable plot declaration.

Every builder method returns a new PlotSpec and leaves the receiver untouched,
so partially built specs can be shared, reused as templates and compared with
``==``. ``validate`` runs the checks that need the whole declaration (fields
present in each layer's data, scales registered for field-bound channels) and
is called by ``render`` before anything is resolved.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from loguru import logger

from .aesthetics import Channel, coerce_channel
from .coords import CoordSystem
from .errors import ConfigurationError
from .layers import Layer
from .legend import GuideSpec
from .primitives import AxisTick
from .scales import Scale, ScaleRegistry
from .table import Table


@dataclass(frozen=True)
class Labels:
    title: str | None = None
    x: str | None = None
    y: str | None = None


@dataclass(frozen=True)
class PlotSpec:
    """
    Everything needed to resolve a plot.

    Args:
        data: Base table, used by layers without their own data
        scales: Registered scales, one per channel
        layers: Layer stack in z-order
        coord: Coordinate system applied at render time
        labels: Plot title and axis titles (``None`` falls back to field names)
        guides: Per-channel guide overrides
        ticks: Explicit ticks per positional axis
        merge_legends: Merge guides that read identically
        legend_visible: Whether guides are produced at all
    """

    data: Table
    scales: ScaleRegistry = field(default_factory=ScaleRegistry)
    layers: tuple[Layer, ...] = ()
    coord: CoordSystem = CoordSystem.IDENTITY
    labels: Labels = field(default_factory=Labels)
    guides: Mapping[Channel, GuideSpec] = field(default_factory=dict)
    ticks: Mapping[Channel, tuple[AxisTick, ...]] = field(default_factory=dict)
    merge_legends: bool = True
    legend_visible: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "layers", tuple(self.layers))
        object.__setattr__(self, "coord", CoordSystem.parse(self.coord))
        object.__setattr__(self, "guides", MappingProxyType(dict(self.guides)))
        object.__setattr__(self, "ticks", MappingProxyType(dict(self.ticks)))

    def add_layer(self, layer: Layer) -> PlotSpec:
        return replace(self, layers=(*self.layers, layer))

    def add_scale(self, scale: Scale) -> PlotSpec:
        """Register a scale; a later scale for the same channel replaces the earlier one."""
        return replace(self, scales=self.scales.with_scale(scale))

    def with_coord(self, coord: CoordSystem | str) -> PlotSpec:
        return replace(self, coord=CoordSystem.parse(coord))

    def flip(self) -> PlotSpec:
        return self.with_coord(CoordSystem.FLIPPED)

    def with_labels(
        self,
        *,
        title: str | None = None,
        x: str | None = None,
        y: str | None = None,
    ) -> PlotSpec:
        """Set any of the plot title and axis titles; ``None`` keeps the current one."""
        return replace(
            self,
            labels=Labels(
                title=self.labels.title if title is None else title,
                x=self.labels.x if x is None else x,
                y=self.labels.y if y is None else y,
            ),
        )

    def with_guide(
        self,
        channel: Channel | str,
        override_aes: Mapping[str, Any] | GuideSpec,
    ) -> PlotSpec:
        spec = override_aes if isinstance(override_aes, GuideSpec) else GuideSpec(override_aes)
        guides = dict(self.guides)
        guides[coerce_channel(channel)] = spec
        return replace(self, guides=guides)

    def with_ticks(self, axis: Channel | str, ticks: Sequence[AxisTick]) -> PlotSpec:
        resolved = coerce_channel(axis)
        if resolved not in (Channel.X, Channel.Y):
            msg = f"ticks can only be set on the x or y axis, got {resolved.value!r}"
            raise ConfigurationError(msg)
        updated = dict(self.ticks)
        updated[resolved] = tuple(ticks)
        return replace(self, ticks=updated)

    def show_legend(self, visible: bool = True) -> PlotSpec:
        return replace(self, legend_visible=visible)

    def merge_legend(self, merge: bool = True) -> PlotSpec:
        return replace(self, merge_legends=merge)

    def validate(self) -> PlotSpec:
        """
        Check that the declaration can be resolved.

        Fields are only checked against tables that have records, so an empty
        base table without columns still renders its scaffolding.

        Returns:
            This PlotSpec, so the call can be chained

        Raises:
            ConfigurationError: On the first problem found
        """
        for z_order, layer in enumerate(self.layers):
            where = f"layer {z_order} ({layer.geometry.value})"
            source = layer.source(self.data)
            bound = layer.field_bindings()

            if not source.is_empty:
                missing = [name for name in bound.values() if not source.has_column(name)]
                if missing:
                    msg = f"{where} binds field(s) missing from its data: {', '.join(missing)}"
                    raise ConfigurationError(msg)

            for channel in bound:
                if channel.is_scaled and channel not in self.scales:
                    msg = (
                        f"{where} binds the {channel.value} channel to a field but no "
                        f"{channel.value} scale is registered"
                    )
                    raise ConfigurationError(msg)

            dodge = getattr(layer, "dodge", None)
            if dodge is not None:
                if dodge.by not in bound:
                    msg = f"{where} dodges by {dodge.by.value}, which is not bound to a field"
                    raise ConfigurationError(msg)
                if dodge.by not in self.scales:
                    msg = f"{where} dodges by {dodge.by.value}, which has no registered scale"
                    raise ConfigurationError(msg)

        logger.debug(f"Validated plot with {len(self.layers)} layer(s)")
        return self


def plot(data: Table) -> PlotSpec:
    """Start a plot declaration over a base table."""
    return PlotSpec(data=data)
