"""
Immutable tabular input for the assocplot engine.

A Table wraps a polars DataFrame. Every operation that changes the data returns
a new Table; the wrapped frame is never modified in place. The two input
schemas the recipes understand are declared here as well.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

import polars as pl

from .errors import ConfigurationError

# Forest plot input: one row per (SNP, adjustment model)
FOREST_SCHEMA: dict[str, pl.DataType] = {
    "snp": pl.Utf8(),
    "model": pl.Utf8(),
    "odds_ratio": pl.Float64(),
    "lower_ci": pl.Float64(),
    "upper_ci": pl.Float64(),
    "pval": pl.Float64(),
}

# Manhattan plot input: one row per tested SNP
MANHATTAN_SCHEMA: dict[str, pl.DataType] = {
    "SNP": pl.Utf8(),
    "CHR": pl.Utf8(),
    "BP": pl.Int64(),
    "P": pl.Float64(),
}


@dataclass(frozen=True, eq=False)
class Table:
    """An ordered, immutable sequence of records backed by a polars DataFrame."""

    frame: pl.DataFrame

    def __post_init__(self) -> None:
        if isinstance(self.frame, pl.LazyFrame):
            object.__setattr__(self, "frame", self.frame.collect())
        elif not isinstance(self.frame, pl.DataFrame):
            msg = f"Table expects a polars DataFrame, got {type(self.frame).__name__}"
            raise TypeError(msg)

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        schema: Mapping[str, pl.DataType] | None = None,
    ) -> Table:
        """
        Build a Table from an iterable of row mappings.

        Args:
            records: Row mappings, all with the same keys
            schema: Column dtypes, used for an empty input so the columns
                    still exist

        Returns:
            A new Table preserving the input row order
        """
        rows = [dict(record) for record in records]
        if not rows:
            return cls(pl.DataFrame(schema=dict(schema or {})))
        return cls(pl.DataFrame(rows))

    @classmethod
    def empty(cls, schema: Mapping[str, pl.DataType]) -> Table:
        return cls(pl.DataFrame(schema=dict(schema)))

    def __len__(self) -> int:
        return self.frame.height

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self.frame.iter_rows(named=True))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Table):
            return NotImplemented
        return self.frame.equals(other.frame)

    def __repr__(self) -> str:
        return f"Table(rows={self.frame.height}, columns={self.frame.columns})"

    @property
    def columns(self) -> list[str]:
        return self.frame.columns

    @property
    def is_empty(self) -> bool:
        return self.frame.height == 0

    def has_column(self, name: str) -> bool:
        return name in self.frame.columns

    def column(self, name: str) -> list[Any]:
        """Return the values of one column, in row order."""
        if name not in self.frame.columns:
            msg = f"field {name!r} is not present (available: {', '.join(self.frame.columns)})"
            raise ConfigurationError(msg)
        return self.frame.get_column(name).to_list()

    def rows(self) -> list[dict[str, Any]]:
        return self.frame.to_dicts()

    def with_columns(self, *exprs: pl.Expr, **named_exprs: pl.Expr) -> Table:
        return Table(self.frame.with_columns(*exprs, **named_exprs))

    def filter(self, predicate: pl.Expr) -> Table:
        return Table(self.frame.filter(predicate))


def require_columns(
    table: Table,
    schema: Mapping[str, Any] | Iterable[str],
    what: str = "input table",
) -> None:
    """
    Check that every field of a schema is present in a table.

    Args:
        table: The table to check
        schema: Field names (or a name -> dtype mapping) that must be present
        what: Description of the table used in the error message

    Raises:
        ConfigurationError: If any field is absent
    """
    missing = [name for name in schema if not table.has_column(name)]
    if missing:
        msg = f"{what} is missing required field(s): {', '.join(missing)}"
        raise ConfigurationError(msg)
