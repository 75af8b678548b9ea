"""
Transform pipeline: pure functions deriving plotting-ready fields.

Each table-level function returns a new Table and leaves its input untouched.
Derived columns are overwritten rather than duplicated when a transform runs
again with the same output name, so re-running the pipeline on its own output
gives identical tables.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import polars as pl
from loguru import logger

from .errors import ConfigurationError
from .primitives import AxisTick
from .scales import discrete_domain, natural_sort_key
from .table import Table, require_columns

_ORDINAL_COLUMN = "__chrom_ordinal"
_ROW_COLUMN = "__row"


def bonferroni_threshold(alpha: float = 0.05, n_tests: int = 1) -> float:
    """Multiple-testing corrected significance threshold ``alpha / n_tests``."""
    if n_tests < 1:
        msg = f"number of tests must be >= 1, got {n_tests}"
        raise ConfigurationError(msg)
    return alpha / n_tests


def derive_significance(pval: float | None, corrected_alpha: float) -> bool:
    """True iff ``pval`` is strictly below the corrected threshold."""
    return pval is not None and pval < corrected_alpha


def derive_composite_group(
    significant: bool,
    model: Any,
    model_order: Sequence[Any],
) -> int:
    """
    Ordinal code combining significance and model identity.

    ``0`` means not significant, whatever the model. Significant records get
    ``1 + position of their model in model_order``, so the codes follow the
    same order as the eventual legend breaks.

    Raises:
        ConfigurationError: If the model is not part of ``model_order``
    """
    if model not in model_order:
        msg = f"model {model!r} is not in the declared model order {list(model_order)!r}"
        raise ConfigurationError(msg)
    return list(model_order).index(model) + 1 if significant else 0


def add_significance(
    table: Table,
    corrected_alpha: float,
    *,
    pval_field: str = "pval",
    name: str = "sig",
) -> Table:
    """Add a boolean significance column (null p-values are not significant)."""
    require_columns(table, [pval_field])
    return table.with_columns(
        (pl.col(pval_field) < corrected_alpha).fill_null(value=False).alias(name),
    )


def add_composite_group(
    table: Table,
    corrected_alpha: float,
    model_order: Sequence[str],
    *,
    pval_field: str = "pval",
    model_field: str = "model",
    name: str = "sig_group",
) -> Table:
    """
    Add the composite significance/model code used to drive fill and alpha.

    The code is computed from the p-value rather than a previously derived
    significance flag, so it does not depend on other derived columns.

    Args:
        table: Forest-plot input
        corrected_alpha: Significance threshold, already corrected
        model_order: Declared model order; position ``i`` gets code ``i + 1``
        pval_field: Column holding p-values
        model_field: Column holding the model label
        name: Output column

    Raises:
        ConfigurationError: If a model in the table is missing from
                            ``model_order``, or the order repeats a model
    """
    require_columns(table, [pval_field, model_field])
    order = [str(model) for model in model_order]
    if len(set(order)) != len(order):
        msg = f"model order contains duplicates: {order!r}"
        raise ConfigurationError(msg)

    present = {None if model is None else str(model) for model in table.column(model_field)}
    unknown = sorted((model for model in present if model not in order), key=str)
    if unknown:
        msg = f"model(s) {unknown!r} are not in the declared model order {order!r}"
        raise ConfigurationError(msg)

    codes = {model: index + 1 for index, model in enumerate(order)}
    logger.debug(f"Assigning composite group codes {codes} at alpha={corrected_alpha:g}")
    return table.with_columns(
        pl.when(pl.col(pval_field) < corrected_alpha)
        .then(
            pl.col(model_field)
            .cast(pl.Utf8)
            .replace_strict(codes, default=None, return_dtype=pl.Int64),
        )
        .otherwise(pl.lit(0, dtype=pl.Int64))
        .alias(name),
    )


def derive_genomic_index(
    table: Table,
    *,
    chrom_field: str = "CHR",
    pos_field: str = "BP",
    name: str = "position",
    chromosome_order: Sequence[Any] | None = None,
) -> Table:
    """
    Linearize genomic coordinates into a dense ``1..N`` index.

    Records are stably sorted by (chromosome ordinal, base-pair position), so
    ties keep their input order, and then numbered from 1.

    Args:
        table: Manhattan-plot input
        chrom_field: Chromosome column
        pos_field: Base-pair position column
        name: Output index column (placed first)
        chromosome_order: Explicit chromosome order; defaults to natural order

    Returns:
        The sorted table with the index column

    Raises:
        ConfigurationError: If a chromosome is missing from an explicit order
    """
    require_columns(table, [chrom_field, pos_field])
    if chromosome_order is None:
        order = list(discrete_domain(table, chrom_field))
    else:
        order = list(chromosome_order)
        known = {str(chrom) for chrom in order}
        unknown = [
            chrom for chrom in discrete_domain(table, chrom_field) if str(chrom) not in known
        ]
        if unknown:
            msg = f"chromosome(s) {unknown!r} are not in the declared chromosome order"
            raise ConfigurationError(msg)

    frame = table.frame.drop(name, strict=False)
    if frame.height == 0:
        return Table(frame.with_row_index(name, offset=1).with_columns(pl.col(name).cast(pl.Int64)))

    ordinals = {str(chrom): index for index, chrom in enumerate(order)}
    frame = (
        frame.with_columns(
            pl.col(chrom_field)
            .cast(pl.Utf8)
            .replace_strict(ordinals, default=None, return_dtype=pl.Int64)
            .alias(_ORDINAL_COLUMN),
        )
        .sort([_ORDINAL_COLUMN, pos_field], nulls_last=True, maintain_order=True)
        .drop(_ORDINAL_COLUMN)
        .with_row_index(name, offset=1)
        .with_columns(pl.col(name).cast(pl.Int64))
    )
    logger.debug(f"Indexed {frame.height} records across {len(order)} chromosome(s)")
    return Table(frame)


def compute_group_ticks(
    table: Table,
    group_field: str,
    index_field: str,
    *,
    stagger_prefix: str = "\n",
    group_order: Sequence[Any] | None = None,
) -> tuple[AxisTick, ...]:
    """
    One axis tick per group, placed at the mean index of the group.

    Ticks follow the sorted group order (``group_order`` if given, otherwise
    natural order). Every second tick in that order is staggered, which
    alternates label offsets between neighbouring groups.
    """
    require_columns(table, [group_field, index_field])
    if table.is_empty:
        return ()

    means = (
        table.frame.filter(pl.col(group_field).is_not_null())
        .group_by(group_field)
        .agg(pl.col(index_field).mean().alias("__tick_position"))
    )
    positions = dict(means.iter_rows())

    present = sorted(positions, key=natural_sort_key)
    if group_order is None:
        ordered = present
    else:
        declared = [group for group in group_order if group in positions]
        ordered = declared + [group for group in present if group not in declared]

    ticks = tuple(
        AxisTick(
            value=group,
            position=float(positions[group]),
            text=str(group),
            staggered=index % 2 == 1,
            prefix=stagger_prefix,
        )
        for index, group in enumerate(ordered)
    )
    logger.debug(f"Computed {len(ticks)} tick(s) for {group_field!r}")
    return ticks


def add_neg_log10(table: Table, *, p_field: str = "P", name: str = "neg_log10_p") -> Table:
    """Add ``-log10(P)``; p-values of exactly zero are floored at 1e-300."""
    require_columns(table, [p_field])
    return table.with_columns(
        (-pl.col(p_field).cast(pl.Float64).clip(lower_bound=1e-300).log10()).alias(name),
    )


def drop_incomplete(table: Table, fields: Sequence[str] | None = None) -> Table:
    """Remove records with a null or NaN value in any of ``fields`` (all by default)."""
    subset = list(fields) if fields is not None else table.columns
    require_columns(table, subset)
    frame = table.frame.drop_nulls(subset=subset)
    float_fields = [column for column in subset if frame.schema[column].is_float()]
    if float_fields:
        frame = frame.filter(~pl.any_horizontal(pl.col(float_fields).is_nan()))
    dropped = table.frame.height - frame.height
    if dropped:
        logger.debug(f"Dropped {dropped} incomplete record(s)")
    return Table(frame)


def sample_rows(table: Table, n: int, *, seed: int | None = None) -> Table:
    """
    Draw ``n`` records without replacement, keeping their input order.

    A table with ``n`` or fewer records is returned unchanged.
    """
    if n < 0:
        msg = f"sample size must be >= 0, got {n}"
        raise ConfigurationError(msg)
    if n >= len(table):
        return table
    frame = (
        table.frame.with_row_index(_ROW_COLUMN)
        .sample(n=n, seed=seed)
        .sort(_ROW_COLUMN)
        .drop(_ROW_COLUMN)
    )
    return Table(frame)


def select_below(table: Table, field: str, threshold: float) -> Table:
    """Records whose ``field`` is strictly below ``threshold``."""
    require_columns(table, [field])
    return table.filter(pl.col(field) < threshold)
