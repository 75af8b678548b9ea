"""
Altair renderer for resolved plots.

Turns a RenderedPlot into a layered Vega-Lite chart. Every visual value has
already been resolved by the engine, so all encodings use ``scale=None`` and
pass literal colours, shapes and opacities straight through. Legends are drawn
as a separate column of swatch charts built from the composed guides, which
keeps merged guides and swatch overrides exactly as declared.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import altair as alt
import polars as pl
from loguru import logger

from ..aesthetics import Geometry
from ..primitives import Axis, AxisTick, DrawPrimitive, LegendGuide, Orientation, RenderedPlot

DEFAULT_COLOR = "#000000"
DEFAULT_SHAPE = "circle"
DEFAULT_POINT_SIZE = 1.5
TEXT_SIZE = 11

# point size -> Vega symbol area, (size * factor) ** 2
_AREA_FACTOR = 3.6

LINE_DASHES = {
    "solid": [],
    "dashed": [6, 4],
    "dotted": [1, 3],
    "dotdash": [1, 3, 6, 3],
    "longdash": [10, 4],
}

_POINT_SCHEMA = {
    "h": pl.Float64,
    "v": pl.Float64,
    "stroke": pl.Utf8,
    "fill": pl.Utf8,
    "shape": pl.Utf8,
    "opacity": pl.Float64,
    "size": pl.Float64,
}

# sampled Manhattan scans are far above the default 5000-row guard
alt.data_transformers.disable_max_rows()


@alt.theme.register("assocplot", enable=True)
def _assocplot_theme() -> alt.theme.ThemeConfig:
    """Black-and-white theme: white panel, light grid, framed view."""
    return alt.theme.ThemeConfig(
        {
            "background": "#ffffff",
            "config": {
                "title": {
                    "fontSize": 15,
                    "fontWeight": "bold",
                    "anchor": "middle",
                    "color": "#000000",
                },
                "axis": {
                    "labelFontSize": 11,
                    "titleFontSize": 12,
                    "titleColor": "#000000",
                    "labelColor": "#333333",
                    "gridColor": "#ebebeb",
                    "domainColor": "#333333",
                    "tickColor": "#333333",
                },
                "legend": {
                    "labelFontSize": 11,
                    "titleFontSize": 12,
                },
                "view": {
                    "stroke": "#333333",
                    "strokeWidth": 1,
                },
            },
        }
    )


def register_assocplot_theme() -> None:
    """Enable the assocplot theme (registered on import)."""
    alt.theme.enable("assocplot")


def _area(size: Any) -> float:
    return float((DEFAULT_POINT_SIZE if size is None else size) * _AREA_FACTOR) ** 2


def _swatch_record(style: dict[str, Any]) -> dict[str, Any]:
    color = style.get("color", DEFAULT_COLOR)
    return {
        "stroke": color,
        "fill": style.get("fill", color),
        "shape": style.get("shape", DEFAULT_SHAPE),
        "opacity": float(style.get("alpha", 1.0)),
        "size": _area(style.get("size")),
    }


def _label_expr(ticks: Sequence[AxisTick]) -> str:
    """
    Vega expression mapping tick positions to their labels.

    Multi-line labels (staggered ticks) become arrays, which Vega draws one
    element per line.
    """
    expr = []
    for tick in ticks:
        lines = tick.label.split("\n")
        literal = json.dumps(lines if len(lines) > 1 else tick.label)
        expr.append(f"datum.value == {tick.position!r} ? {literal} : ")
    return "".join(expr) + '""'


class _Encoder:
    """Builds position encodings shared by every layer of one chart."""

    def __init__(self, plot: RenderedPlot) -> None:
        self.horizontal = plot.y_axis if plot.flipped else plot.x_axis
        self.vertical = plot.x_axis if plot.flipped else plot.y_axis

    @staticmethod
    def _position(channel: Any, field: str, axis: Axis) -> Any:
        encoding = (
            channel(f"{field}:Q")
            .title(axis.title or "")
            .scale(zero=False, padding=12)
        )
        if axis.ticks:
            encoding = encoding.axis(
                values=[tick.position for tick in axis.ticks],
                labelExpr=_label_expr(axis.ticks),
            )
        return encoding

    def x(self, field: str = "h") -> Any:
        return self._position(alt.X, field, self.horizontal)

    def y(self, field: str = "v") -> Any:
        return self._position(alt.Y, field, self.vertical)


def _points(primitives: Sequence[DrawPrimitive], encoder: _Encoder) -> alt.Chart:
    records = []
    for primitive in primitives:
        horizontal, vertical = primitive.screen_position
        records.append({"h": horizontal, "v": vertical, **_swatch_record(dict(primitive.style))})
    return (
        alt.Chart(pl.DataFrame(records, schema=_POINT_SCHEMA))
        .mark_point(filled=True, strokeWidth=1.2)
        .encode(
            encoder.x(),
            encoder.y(),
            alt.Stroke("stroke:N").scale(None),
            alt.Fill("fill:N").scale(None),
            alt.Shape("shape:N").scale(None),
            alt.Opacity("opacity:Q").scale(None),
            alt.Size("size:Q").scale(None),
        )
    )


def _ranges(primitives: Sequence[DrawPrimitive], encoder: _Encoder) -> alt.Chart:
    records = []
    for primitive in primitives:
        horizontal, vertical = primitive.screen_position
        low, high = primitive.extent or (None, None)
        if primitive.orientation is Orientation.HORIZONTAL:
            bounds = {"h": low, "h2": high, "v": vertical, "v2": vertical}
        else:
            bounds = {"h": horizontal, "h2": horizontal, "v": low, "v2": high}
        style = _swatch_record(dict(primitive.style))
        records.append({**bounds, "stroke": style["stroke"], "opacity": style["opacity"]})
    return (
        alt.Chart(pl.DataFrame(records))
        .mark_rule(strokeWidth=1.5)
        .encode(
            encoder.x(),
            alt.X2("h2:Q"),
            encoder.y(),
            alt.Y2("v2:Q"),
            alt.Stroke("stroke:N").scale(None),
            alt.Opacity("opacity:Q").scale(None),
        )
    )


def _reference_line(primitive: DrawPrimitive, encoder: _Encoder) -> alt.Chart:
    horizontal, vertical = primitive.screen_position
    style = dict(primitive.style)
    mark = {
        "color": style.get("color", DEFAULT_COLOR),
        "opacity": float(style.get("alpha", 1.0)),
        "strokeDash": LINE_DASHES.get(str(style.get("linetype", "solid")), []),
    }
    if primitive.orientation is Orientation.HORIZONTAL:
        return alt.Chart(pl.DataFrame({"v": [vertical]})).mark_rule(**mark).encode(encoder.y())
    return alt.Chart(pl.DataFrame({"h": [horizontal]})).mark_rule(**mark).encode(encoder.x())


def _justify(hjust: float, vjust: float) -> dict[str, Any]:
    """ggplot-style justification -> Vega text alignment plus pixel offsets."""
    align = "left" if hjust < 0.25 else "right" if hjust > 0.75 else "center"  # noqa: PLR2004
    baseline = "bottom" if vjust < 0.25 else "top" if vjust > 0.75 else "middle"  # noqa: PLR2004
    dx = -(hjust - 1) * TEXT_SIZE if hjust > 1 else -hjust * TEXT_SIZE if hjust < 0 else 0
    dy = (vjust - 1) * TEXT_SIZE if vjust > 1 else vjust * TEXT_SIZE if vjust < 0 else 0
    return {"align": align, "baseline": baseline, "dx": dx, "dy": dy}


def _text(primitives: Sequence[DrawPrimitive], encoder: _Encoder) -> alt.Chart:
    hjust, vjust = primitives[0].nudge or (0.5, 0.5)
    records = []
    for primitive in primitives:
        horizontal, vertical = primitive.screen_position
        style = _swatch_record(dict(primitive.style))
        records.append(
            {
                "h": horizontal,
                "v": vertical,
                "label": primitive.label or "",
                "stroke": style["stroke"],
                "opacity": style["opacity"],
            },
        )
    return (
        alt.Chart(pl.DataFrame(records))
        .mark_text(fontSize=TEXT_SIZE, **_justify(hjust, vjust))
        .encode(
            encoder.x(),
            encoder.y(),
            alt.Text("label:N"),
            alt.Color("stroke:N").scale(None),
            alt.Opacity("opacity:Q").scale(None),
        )
    )


def _layer_charts(primitives: Sequence[DrawPrimitive], encoder: _Encoder) -> list[alt.Chart]:
    kind = primitives[0].kind
    if kind is Geometry.POINTRANGE:
        return [_ranges(primitives, encoder), _points(primitives, encoder)]
    if kind is Geometry.POINT:
        return [_points(primitives, encoder)]
    if kind is Geometry.TEXT:
        return [_text(primitives, encoder)]
    return [_reference_line(primitive, encoder) for primitive in primitives]


def legend_chart(guides: Sequence[LegendGuide]) -> alt.VConcatChart | None:
    """One swatch block per guide, stacked in guide order."""
    if not guides:
        return None
    blocks = []
    for guide in guides:
        records = [
            {"row": index, "label": row.label, **_swatch_record(dict(row.swatch))}
            for index, row in enumerate(guide.rows)
        ]
        data = pl.DataFrame(records)
        rows = alt.Y("row:O").axis(None)
        swatches = (
            alt.Chart(data)
            .mark_point(filled=True)
            .encode(
                rows,
                alt.XValue(8),
                alt.Stroke("stroke:N").scale(None),
                alt.Fill("fill:N").scale(None),
                alt.Shape("shape:N").scale(None),
                alt.Opacity("opacity:Q").scale(None),
            )
        )
        labels = (
            alt.Chart(data)
            .mark_text(align="left", dx=12, fontSize=TEXT_SIZE)
            .encode(rows, alt.XValue(8), alt.Text("label:N"))
        )
        blocks.append(
            alt.layer(swatches, labels).properties(
                title=alt.TitleParams(guide.title, anchor="start", fontSize=12),
                width=160,
                height=18 * len(guide.rows),
            ),
        )
    return alt.vconcat(*blocks, spacing=16).resolve_scale(y="independent")


def to_chart(plot: RenderedPlot, width: int = 600, height: int = 400) -> alt.TopLevelMixin:
    """
    Convert a rendered plot into an Altair chart.

    Args:
        plot: The resolved plot
        width: Width of the plotting area in pixels
        height: Height of the plotting area in pixels

    Returns:
        A layered chart, concatenated with its legend column when the plot
        has guides
    """
    encoder = _Encoder(plot)

    layers: list[alt.Chart] = []
    current: list[DrawPrimitive] = []
    for primitive in plot.primitives:
        if current and primitive.z_order != current[0].z_order:
            layers.extend(_layer_charts(current, encoder))
            current = []
        current.append(primitive)
    if current:
        layers.extend(_layer_charts(current, encoder))

    if not layers:
        # an empty plot still gets its axes
        empty = pl.DataFrame(schema={"h": pl.Float64, "v": pl.Float64})
        layers.append(alt.Chart(empty).mark_point().encode(encoder.x(), encoder.y()))

    main = alt.layer(*layers).properties(width=width, height=height)
    if plot.title:
        main = main.properties(title=plot.title)

    legend = legend_chart(plot.guides)
    logger.debug(f"Built Altair chart with {len(layers)} layer(s) and {len(plot.guides)} guide(s)")
    if legend is None:
        return main
    return alt.hconcat(main, legend).resolve_scale(x="independent", y="independent")


def save_chart(
    chart: alt.TopLevelMixin,
    output_path: Path,
    formats: list[str] | None = None,
) -> list[Path]:
    """
    Save an Altair chart in one or more formats.

    Args:
        chart: The Altair chart to save
        output_path: Base output path (the extension is replaced per format)
        formats: Formats to write, any of "html", "svg", "png"; defaults to html

    Returns:
        Paths of the written files

    Raises:
        ValueError: If a format is not supported
    """
    if formats is None:
        formats = ["html"]

    saved_paths = []
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    for fmt in formats:
        if fmt == "html":
            path = output_path.with_suffix(".html")
            chart.save(path, embed_options={"renderer": "svg"})
        elif fmt == "svg":
            path = output_path.with_suffix(".svg")
            chart.save(path)
        elif fmt == "png":
            path = output_path.with_suffix(".png")
            chart.save(path, scale_factor=2)
        else:
            msg = f"Unsupported format: {fmt}. Use 'html', 'svg', or 'png'."
            raise ValueError(msg)
        logger.debug(f"Wrote {path}")
        saved_paths.append(path)

    return saved_paths
