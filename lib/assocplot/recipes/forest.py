"""
Forest plot recipe.

Odds ratios with confidence intervals for each SNP, one dodged point-range per
adjustment model, flipped so SNPs run down the vertical axis. Significance is
encoded twice through the composite group code: faded outline-only markers for
non-significant estimates, filled markers in the model colour otherwise.
Previously reported odds ratios are overlaid as red points.
"""

from __future__ import annotations

import polars as pl
from loguru import logger

from ..aesthetics import Channel, aes, value
from ..config import ForestConfig
from ..dodge import Dodge
from ..layers import HLine, Point, PointRange
from ..legend import GuideSpec
from ..scales import Scale, natural_sort_key
from ..spec import PlotSpec
from ..table import FOREST_SCHEMA, Table, require_columns
from ..transforms import add_composite_group, add_significance

SIGNIFICANCE_FIELD = "sig"
GROUP_FIELD = "sig_group"


def prepare_forest_table(table: Table, config: ForestConfig) -> Table:
    """Check the input schema and add the significance columns."""
    require_columns(table, FOREST_SCHEMA, "forest plot input")
    threshold = config.threshold
    logger.debug(f"Forest significance threshold: {threshold:.6g}")
    flagged = add_significance(table, threshold, name=SIGNIFICANCE_FIELD)
    return add_composite_group(flagged, threshold, config.model_order, name=GROUP_FIELD)


def highlight_table(config: ForestConfig) -> Table:
    return Table.from_records(
        [{"snp": snp, "odds_ratio": odds} for snp, odds in config.highlights.items()],
        schema={"snp": pl.Utf8(), "odds_ratio": pl.Float64()},
    )


def forest_scales(data: Table, highlights: Table, config: ForestConfig) -> list[Scale]:
    """
    Default scales of the forest plot.

    The SNP axis covers SNPs from the estimates and the overlay alike. Fill
    and alpha both read the composite code; their breaks stop at ``1`` so the
    two guides collapse into one "significant / not significant" block.
    """
    snps = sorted(
        {*data.column("snp"), *highlights.column("snp")} - {None},
        key=natural_sort_key,
    )
    model_labels = [config.model_labels.get(model, model) for model in config.legend_order]
    codes = range(len(config.model_order) + 1)

    return [
        Scale.positional(Channel.X, snps),
        Scale.manual(
            Channel.COLOR,
            config.model_colors,
            breaks=config.legend_order,
            labels=model_labels,
            name=config.adjustment_title,
        ),
        Scale.manual(
            Channel.SHAPE,
            config.model_shapes,
            breaks=config.legend_order,
            labels=model_labels,
            name=config.adjustment_title,
        ),
        Scale.manual(
            Channel.ALPHA,
            dict(zip(codes, config.significance_alphas)),
            breaks=[0, 1],
            labels=config.significance_labels,
            name=config.significance_title,
        ),
        Scale.manual(
            Channel.FILL,
            dict(zip(codes, config.significance_fills)),
            breaks=[0, 1],
            labels=config.significance_labels,
            name=config.significance_title,
        ),
    ]


def forest_guides(config: ForestConfig) -> dict[Channel, GuideSpec]:
    """Fill the adjustment swatches and show significance as filled/empty squares."""
    return {
        Channel.COLOR: GuideSpec(
            {"fill": [config.model_colors[model] for model in config.legend_order]},
        ),
        Channel.ALPHA: GuideSpec(
            {
                "shape": "square",
                "fill": config.significance_fills[:2],
                "alpha": config.significance_alphas[:2],
            },
        ),
    }


def forest_spec(table: Table, config: ForestConfig | None = None) -> PlotSpec:
    """
    Build the forest plot declaration.

    Args:
        table: Input with the forest schema
        config: Recipe options; defaults reproduce the published figure

    Returns:
        The PlotSpec, ready to render
    """
    if config is None:
        config = ForestConfig()

    data = prepare_forest_table(table, config)
    highlights = highlight_table(config)

    spec = PlotSpec(
        data=data,
        coord=config.coord,
        merge_legends=config.merge_legends,
        legend_visible=config.show_legend,
    )
    for scale in forest_scales(data, highlights, config):
        spec = spec.add_scale(scale)
    for override in config.scales:
        spec = spec.add_scale(override.to_scale())

    spec = spec.add_layer(
        PointRange(
            mapping=aes(
                x="snp",
                y="odds_ratio",
                ymin="lower_ci",
                ymax="upper_ci",
                color="model",
                shape="model",
                alpha=GROUP_FIELD,
                fill=GROUP_FIELD,
            ),
            dodge=Dodge(width=config.dodge_width, by=Channel.COLOR),
        ),
    ).add_layer(
        HLine(intercept=config.reference_line, axis=Channel.Y, linetype=config.reference_linetype),
    )
    if not highlights.is_empty:
        spec = spec.add_layer(
            Point(
                mapping=aes(
                    x="snp",
                    y="odds_ratio",
                    color=value(config.highlight_color),
                    size=value(config.highlight_size),
                ),
                data=highlights,
            ),
        )

    for channel, guide in forest_guides(config).items():
        spec = spec.with_guide(channel, guide)
    for guide_config in config.guides:
        spec = spec.with_guide(guide_config.channel, guide_config.to_guide())

    return spec.with_labels(title=config.title, x=config.x_label, y=config.y_label)
