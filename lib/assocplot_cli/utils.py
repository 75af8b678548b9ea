"""
Utility functions for the assocplot CLI.

Provides console output helpers, logging setup and CSV loading.
"""

from collections.abc import Mapping
from pathlib import Path

import polars as pl
import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape

from assocplot import PlotSpec, Table, render
from assocplot.backends import save_chart, to_chart

console = Console()
err_console = Console(stderr=True)

LOG_LEVELS = {0: "WARNING", 1: "SUCCESS", 2: "INFO", 3: "DEBUG"}

# Missing-value spellings written by R and spreadsheet exports
NULL_VALUES = ["NA", "NaN", ""]


# =============================================================================
# Console Output Helpers
# =============================================================================


def error(message: str, exit_code: int = 1) -> None:
    """Print an error message and optionally exit."""
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    if exit_code:
        raise typer.Exit(exit_code)


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def info(message: str) -> None:
    """Print an informational message."""
    console.print(f"[cyan]Info:[/cyan] {message}")


def warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning:[/yellow] {message}")


# =============================================================================
# Logging and input
# =============================================================================


def configure_logging(verbosity: int) -> None:
    """Route loguru through the rich console at a level picked by the -v count."""
    level = LOG_LEVELS.get(min(verbosity, 3), "WARNING")
    logger.remove()
    logger.add(lambda msg: err_console.print(msg, end=""), colorize=True, level=level)


def read_csv_table(path: Path, schema: Mapping[str, pl.DataType]) -> Table:
    """
    Read a CSV file into a Table, parsing the schema columns that are present
    with their declared dtypes rather than inferred ones.

    Missing columns are left for the recipe to report. The header is read first
    so that only columns in the file are overridden; inference would otherwise
    settle on an integer CHR column long before an ``X`` row turns up.

    Raises:
        polars.exceptions.PolarsError: If the file cannot be parsed or a column
                                       does not fit its declared dtype
    """
    header = pl.read_csv(path, n_rows=0).columns
    overrides = {name: dtype for name, dtype in schema.items() if name in header}
    frame = pl.read_csv(
        path,
        null_values=NULL_VALUES,
        schema_overrides=overrides,
        infer_schema_length=10000,
    )
    logger.info(f"Read {frame.height} record(s) from {path}")
    return Table(frame)


def save_plot(
    spec: PlotSpec,
    output: Path,
    formats: list[str],
    width: int,
    height: int,
) -> list[Path]:
    """Render a plot declaration and save the chart in each requested format."""
    plot = render(spec)
    if not plot.primitives:
        warning("The input has no records; the chart only shows axes and legend")
    return save_chart(to_chart(plot, width=width, height=height), output, formats)
