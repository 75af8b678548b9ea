"""
The 'manhattan' command for the assocplot CLI.

Draws a genome-wide Manhattan plot with a suggestive-significance line and
labelled hits.
"""

from pathlib import Path
from typing import Annotated, Optional

import polars as pl
import typer

from assocplot import MANHATTAN_SCHEMA, AssocPlotError
from assocplot.config import ManhattanConfig, load_config
from assocplot.recipes import manhattan_spec
from assocplot_cli.app import app
from assocplot_cli.utils import configure_logging, error, read_csv_table, save_plot, success


@app.command("manhattan")
def manhattan(
    input_csv: Annotated[
        Path,
        typer.Argument(
            help="CSV with SNP, CHR, BP and P columns",
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
    ] = Path("manhattan_plot"),
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
    sample_size: Annotated[
        Optional[int],
        typer.Option(
            "--sample-size",
            "-n",
            min=1,
            help="Plot a random subset of this many SNPs (overrides the config)",
            rich_help_panel="Sampling",
        ),
    ] = None,
    seed: Annotated[
        Optional[int],
        typer.Option(
            "--seed",
            help="Seed for the random subset (overrides the config)",
            rich_help_panel="Sampling",
        ),
    ] = None,
    all_snps: Annotated[  # noqa: FBT002
        bool,
        typer.Option(
            "--all",
            help="Plot every SNP instead of a random subset",
            rich_help_panel="Sampling",
        ),
    ] = False,
    width: Annotated[int, typer.Option("--width", min=100, help="Plot width in pixels")] = 900,
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
    [bold cyan]Draw[/bold cyan] a Manhattan plot of a genome-wide association scan.

    [bold cyan]Examples:[/bold cyan]

    [green]$ assocplot manhattan gwas.csv -o figures/manhattan[/green]

    [green]$ assocplot manhattan gwas.csv --all -f png[/green]
    """
    configure_logging(verbose)
    try:
        config = load_config(config_path, ManhattanConfig) if config_path else ManhattanConfig()
        overrides = {}
        if all_snps:
            overrides["sample_size"] = None
        elif sample_size is not None:
            overrides["sample_size"] = sample_size
        if seed is not None:
            overrides["seed"] = seed
        if overrides:
            config = config.model_copy(update=overrides)

        table = read_csv_table(input_csv, MANHATTAN_SCHEMA)
        saved = save_plot(manhattan_spec(table, config), output, formats or ["html"], width, height)
    except (AssocPlotError, ValueError, pl.exceptions.PolarsError) as exc:
        error(str(exc))
        return

    for path in saved:
        success(f"Wrote {path}")
