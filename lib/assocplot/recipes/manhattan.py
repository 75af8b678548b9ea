"""
Manhattan plot recipe.

-log10(P) against the linear genomic index, chromosomes in alternating
colours, a suggestive-significance line, and the SNPs below the annotation
threshold highlighted and labelled. Chromosome ticks sit at the centre of each
chromosome with every second label pushed down a line.
"""

from __future__ import annotations

import math
from typing import Any

from loguru import logger

from ..aesthetics import Channel, aes, value
from ..config import ManhattanConfig
from ..layers import HLine, Point, Text
from ..scales import Scale, discrete_domain
from ..spec import PlotSpec
from ..table import MANHATTAN_SCHEMA, Table, require_columns
from ..transforms import (
    add_neg_log10,
    compute_group_ticks,
    derive_genomic_index,
    drop_incomplete,
    sample_rows,
    select_below,
)

INDEX_FIELD = "position"
NEG_LOG10_FIELD = "neg_log10_p"


def prepare_manhattan_table(table: Table, config: ManhattanConfig) -> Table:
    """Drop incomplete records, subsample, index along the genome and add -log10(P)."""
    require_columns(table, MANHATTAN_SCHEMA, "Manhattan plot input")
    cleaned = drop_incomplete(table, list(MANHATTAN_SCHEMA))
    if config.sample_size is not None:
        cleaned = sample_rows(cleaned, config.sample_size, seed=config.seed)
    indexed = derive_genomic_index(
        cleaned,
        name=INDEX_FIELD,
        chromosome_order=config.chromosome_order,
    )
    logger.debug(f"Prepared {len(indexed)} Manhattan record(s)")
    return add_neg_log10(indexed, name=NEG_LOG10_FIELD)


def chromosome_domain(data: Table, config: ManhattanConfig) -> list[Any]:
    """Chromosome values present in the data, in plotting order."""
    present = list(discrete_domain(data, "CHR"))
    if config.chromosome_order is None:
        return present
    rank = {str(chrom): index for index, chrom in enumerate(config.chromosome_order)}
    return sorted(present, key=lambda chrom: rank[str(chrom)])


def manhattan_spec(table: Table, config: ManhattanConfig | None = None) -> PlotSpec:
    """
    Build the Manhattan plot declaration.

    Args:
        table: Input with the Manhattan schema
        config: Recipe options; defaults reproduce the published figure

    Returns:
        The PlotSpec, ready to render
    """
    if config is None:
        config = ManhattanConfig()

    data = prepare_manhattan_table(table, config)
    chromosomes = chromosome_domain(data, config)
    annotated = select_below(data, "P", config.annotate_p)
    ticks = compute_group_ticks(
        data,
        "CHR",
        INDEX_FIELD,
        stagger_prefix=config.stagger_prefix,
        group_order=chromosomes,
    )

    spec = PlotSpec(
        data=data,
        coord=config.coord,
        merge_legends=config.merge_legends,
        legend_visible=config.show_legend,
    ).add_scale(
        Scale.alternating(Channel.COLOR, chromosomes, config.chromosome_colors, name="CHR"),
    )
    for override in config.scales:
        spec = spec.add_scale(override.to_scale())

    spec = (
        spec.add_layer(Point(mapping=aes(x=INDEX_FIELD, y=NEG_LOG10_FIELD, color="CHR")))
        .add_layer(
            HLine(
                intercept=-math.log10(config.suggestive_p),
                axis=Channel.Y,
                mapping=aes(color=value(config.suggestive_color)),
            ),
        )
        .add_layer(
            Point(
                mapping=aes(x=INDEX_FIELD, y=NEG_LOG10_FIELD, color=value(config.annotate_color)),
                data=annotated,
            ),
        )
        .add_layer(
            Text(
                mapping=aes(
                    x=INDEX_FIELD,
                    y=NEG_LOG10_FIELD,
                    label="SNP",
                    color=value(config.annotate_color),
                ),
                data=annotated,
                hjust=config.label_hjust,
                vjust=config.label_vjust,
            ),
        )
        .with_ticks(Channel.X, ticks)
    )
    for guide_config in config.guides:
        spec = spec.with_guide(guide_config.channel, guide_config.to_guide())

    return spec.with_labels(title=config.title, x=config.x_label, y=config.y_label)
