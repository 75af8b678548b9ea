"""
assocplot: declarative forest and Manhattan plots for genetic association results.

The engine resolves an immutable plot declaration (PlotSpec) into
backend-agnostic drawing primitives and legend guides. Renderers live in
``assocplot.backends``; the two canonical figures are built by
``assocplot.recipes``.

Modules:
    table: Immutable polars-backed input tables and input schemas
    transforms: Derived fields (significance, composite codes, genomic index, ticks)
    aesthetics: Channels and field/literal bindings
    scales: Discrete scales and the scale registry
    dodge: Centered dodge layout
    coords: Identity and flipped coordinate systems
    layers: Point-range, point, reference line and text layers
    legend: Guide composition and merging
    spec: The PlotSpec builder
    render: PlotSpec -> RenderedPlot
    config: Pydantic/YAML configuration for the recipes
"""

from .aesthetics import Aes, Channel, FieldRef, Geometry, Value, aes, value
from .coords import CoordSystem
from .dodge import Dodge, dodge_offsets
from .errors import AssocPlotError, ConfigurationError, EmptyDatasetError, UnmappedDomainValue
from .layers import HLine, Layer, Point, PointRange, Text
from .legend import GuideSpec, compose_legend
from .primitives import Axis, AxisTick, DrawPrimitive, LegendGuide, Orientation, RenderedPlot
from .render import render
from .scales import LegendRow, Scale, ScaleRegistry, discrete_domain, natural_sort_key
from .spec import PlotSpec, plot
from .table import FOREST_SCHEMA, MANHATTAN_SCHEMA, Table, require_columns
from .transforms import (
    add_composite_group,
    add_neg_log10,
    add_significance,
    bonferroni_threshold,
    compute_group_ticks,
    derive_composite_group,
    derive_genomic_index,
    derive_significance,
    drop_incomplete,
    sample_rows,
    select_below,
)

__version__ = "0.1.0"

__all__ = [
    "FOREST_SCHEMA",
    "MANHATTAN_SCHEMA",
    "Aes",
    "AssocPlotError",
    "Axis",
    "AxisTick",
    "Channel",
    "ConfigurationError",
    "CoordSystem",
    "Dodge",
    "DrawPrimitive",
    "EmptyDatasetError",
    "FieldRef",
    "Geometry",
    "GuideSpec",
    "HLine",
    "Layer",
    "LegendGuide",
    "LegendRow",
    "Orientation",
    "PlotSpec",
    "Point",
    "PointRange",
    "RenderedPlot",
    "Scale",
    "ScaleRegistry",
    "Table",
    "Text",
    "UnmappedDomainValue",
    "Value",
    "add_composite_group",
    "add_neg_log10",
    "add_significance",
    "aes",
    "bonferroni_threshold",
    "compose_legend",
    "compute_group_ticks",
    "derive_composite_group",
    "derive_genomic_index",
    "derive_significance",
    "discrete_domain",
    "dodge_offsets",
    "drop_incomplete",
    "natural_sort_key",
    "plot",
    "render",
    "require_columns",
    "sample_rows",
    "select_below",
    "value",
]
