"""
Resolution: PlotSpec -> RenderedPlot.

Layers are resolved independently, in z-order. For each record the positional
channels are resolved first (through a positional scale or as plain numbers),
then the style channels through their scales; literal bindings are copied as
is. Dodge offsets are added to the primary position once all records of a
layer are known, and the coordinate system only sets orientation metadata.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from loguru import logger

from .aesthetics import Channel, FieldRef, Geometry
from .dodge import layout_offsets
from .errors import ConfigurationError, EmptyDatasetError
from .layers import HLine, Layer, Text
from .legend import compose_legend
from .primitives import Axis, AxisTick, DrawPrimitive, RenderedPlot
from .scales import ScaleRegistry
from .spec import PlotSpec


@dataclass(frozen=True)
class _ResolvedRow:
    positions: dict[Channel, float]
    style: dict[str, Any]
    label: str | None
    dodge_key: Any


def _position(channel: Channel, raw: Any, scales: ScaleRegistry) -> float | None:
    """Data-space coordinate of a raw value, or None when the value is missing."""
    if raw is None or (isinstance(raw, float) and math.isnan(raw)):
        return None
    axis = channel.axis
    scale = scales.get(axis) if axis is not None else None
    if scale is not None:
        return float(scale.resolve(raw))
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        msg = (
            f"{channel.value} value {raw!r} is not numeric and no positional "
            f"{axis.value if axis else channel.value} scale is registered"
        )
        raise ConfigurationError(msg)
    return float(raw)


def _resolve_rows(layer: Layer, spec: PlotSpec) -> list[_ResolvedRow]:
    source = layer.source(spec.data)
    dodge = getattr(layer, "dodge", None)
    resolved: list[_ResolvedRow] = []
    skipped = 0

    for record in source:
        positions: dict[Channel, float] = {}
        complete = True
        for channel, binding in layer.mapping.items():
            if not channel.is_position:
                continue
            raw = record[binding.name] if isinstance(binding, FieldRef) else binding.value
            position = _position(channel, raw, spec.scales)
            if position is None:
                complete = False
                break
            positions[channel] = position
        if not complete:
            skipped += 1
            continue

        style: dict[str, Any] = {}
        label = None
        for channel, binding in layer.mapping.items():
            if channel.is_position:
                continue
            raw = record[binding.name] if isinstance(binding, FieldRef) else binding.value
            if channel is Channel.LABEL:
                label = None if raw is None else str(raw)
            elif isinstance(binding, FieldRef):
                style[channel.value] = spec.scales.resolve(channel, raw)
            else:
                style[channel.value] = raw

        dodge_key = None
        if dodge is not None:
            dodge_key = record[layer.mapping[dodge.by].name]
        resolved.append(_ResolvedRow(positions, style, label, dodge_key))

    if skipped:
        logger.debug(
            f"Skipped {skipped} record(s) with a missing position in the "
            f"{layer.geometry.value} layer",
        )
    return resolved


def _resolve_reference_line(layer: HLine, spec: PlotSpec, z_order: int) -> DrawPrimitive:
    style = dict(layer.mapping.literals())
    style["linetype"] = layer.linetype
    on_x = layer.axis is Channel.X
    return DrawPrimitive(
        kind=Geometry.HLINE,
        z_order=z_order,
        x=float(layer.intercept) if on_x else None,
        y=None if on_x else float(layer.intercept),
        orientation=spec.coord.line_orientation(layer.axis),
        flipped=spec.coord.is_flipped,
        style=style,
    )


def resolve_layer(layer: Layer, spec: PlotSpec, z_order: int) -> list[DrawPrimitive]:
    """Resolve one layer of a validated spec into primitives."""
    if isinstance(layer, HLine):
        return [_resolve_reference_line(layer, spec, z_order)]

    rows = _resolve_rows(layer, spec)
    offsets = [0.0] * len(rows)
    dodge = getattr(layer, "dodge", None)
    if dodge is not None and rows:
        offsets = layout_offsets(
            [row.positions[Channel.X] for row in rows],
            [row.dodge_key for row in rows],
            spec.scales.require(dodge.by),
            dodge.width,
        )

    primitives = []
    for row, offset in zip(rows, offsets):
        extent = None
        orientation = None
        if layer.geometry is Geometry.POINTRANGE:
            extent = (row.positions[Channel.YMIN], row.positions[Channel.YMAX])
            orientation = spec.coord.range_orientation
        nudge = (layer.hjust, layer.vjust) if isinstance(layer, Text) else None
        primitives.append(
            DrawPrimitive(
                kind=layer.geometry,
                z_order=z_order,
                x=row.positions[Channel.X] + offset,
                y=row.positions[Channel.Y],
                extent=extent,
                orientation=orientation,
                flipped=spec.coord.is_flipped,
                style=row.style,
                label=row.label,
                nudge=nudge,
            ),
        )
    logger.debug(f"Resolved {len(primitives)} {layer.geometry.value} primitive(s) at z={z_order}")
    return primitives


def _axis(spec: PlotSpec, axis: Channel) -> Axis:
    title = getattr(spec.labels, axis.value)
    if title is None:
        title = next(
            (
                layer.field_bindings()[axis]
                for layer in spec.layers
                if axis in layer.field_bindings()
            ),
            None,
        )

    if axis in spec.ticks:
        ticks = spec.ticks[axis]
    else:
        ticks = tuple(
            AxisTick(value=row.key, position=float(row.visual), text=row.label)
            for row in spec.scales.legend_rows(axis)
        )
    return Axis(title=title, ticks=ticks)


def render(spec: PlotSpec, *, strict: bool = False) -> RenderedPlot:
    """
    Resolve a plot declaration into drawable primitives, guides and axes.

    Args:
        spec: The plot to resolve
        strict: Raise instead of warning when the base table is empty

    Returns:
        The rendered plot; primitives are ordered by z-order, then record order

    Raises:
        ConfigurationError: If the declaration is invalid
        UnmappedDomainValue: If a record's value is missing from a scale
        EmptyDatasetError: If ``strict`` and the base table has no records
    """
    spec.validate()
    guides = compose_legend(
        spec.layers,
        spec.scales,
        spec.guides,
        merge=spec.merge_legends,
        visible=spec.legend_visible,
    )
    scaffold = {
        "guides": guides,
        "x_axis": _axis(spec, Channel.X),
        "y_axis": _axis(spec, Channel.Y),
        "title": spec.labels.title,
        "flipped": spec.coord.is_flipped,
    }

    if spec.data.is_empty:
        if strict:
            msg = "the base table has no records"
            raise EmptyDatasetError(msg)
        logger.warning("The base table has no records; rendering axes and legend only")
        return RenderedPlot(primitives=(), **scaffold)

    primitives: list[DrawPrimitive] = []
    for z_order, layer in enumerate(spec.layers):
        primitives.extend(resolve_layer(layer, spec, z_order))
    logger.debug(f"Rendered {len(primitives)} primitive(s) from {len(spec.layers)} layer(s)")
    return RenderedPlot(primitives=tuple(primitives), **scaffold)
