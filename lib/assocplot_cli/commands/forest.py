"""
The 'forest' command for the assocplot CLI.

Draws odds ratios and confidence intervals per SNP, compared across
adjustment models.
"""

from pathlib import Path
from typing import Annotated, Optional

import polars as pl
import typer

from assocplot import FOREST_SCHEMA, AssocPlotError
from assocplot.config import ForestConfig, load_config
from assocplot.recipes import forest_spec
from assocplot_cli.app import app
from assocplot_cli.utils import configure_logging, error, read_csv_table, save_plot, success


@app.command("forest")
def forest(
    input_csv: Annotated[
        Path,
        typer.Argument(
            help="CSV with snp, model, odds_ratio, lower_ci, upper_ci and pval columns",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    output: Annotated[
        Path,
        typer.Option(
            "--output",
            "-o",
            help="Output path; the extension is set per format",
        ),
    ] = Path("forest_plot"),
    config_path: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="YAML file overriding the default figure options",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    formats: Annotated[
        Optional[list[str]],
        typer.Option(
            "--format",
            "-f",
            help="Output format (html, svg, png); repeat for several",
        ),
    ] = None,
    width: Annotated[int, typer.Option("--width", min=100, help="Plot width in pixels")] = 600,
    height: Annotated[int, typer.Option("--height", min=100, help="Plot height in pixels")] = 400,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase verbosity (-v, -vv, -vvv)",
            rich_help_panel="Logging",
        ),
    ] = 0,
) -> None:
    """
    [bold cyan]Draw[/bold cyan] a forest plot of odds ratios across adjustment models.

    [bold cyan]Examples:[/bold cyan]

    [green]$ assocplot forest results.csv -o figures/forest[/green]

    [green]$ assocplot forest results.csv -c forest.yaml -f html -f svg[/green]
    """
    configure_logging(verbose)
    try:
        config = load_config(config_path, ForestConfig) if config_path else ForestConfig()
        table = read_csv_table(input_csv, FOREST_SCHEMA)
        saved = save_plot(forest_spec(table, config), output, formats or ["html"], width, height)
    except (AssocPlotError, ValueError, pl.exceptions.PolarsError) as exc:
        error(str(exc))
        return

    for path in saved:
        success(f"Wrote {path}")
