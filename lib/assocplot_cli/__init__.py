"""
assocplot CLI - A Typer-based command-line interface for the assocplot recipes.

Reads association results from CSV, builds the forest or Manhattan figure and
saves it through Altair.

Usage:
    assocplot forest results.csv -o forest_plot
    assocplot manhattan gwas.csv -o manhattan --config manhattan.yaml -f html -f png
    assocplot --help
"""

import sys

import typer
from rich.console import Console

from assocplot_cli.app import app

# Import commands to register them with the app
from assocplot_cli.commands import forest, manhattan  # noqa: F401

__all__ = ["app", "main"]

console = Console()


def main() -> None:
    """Main entry point for the assocplot CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except typer.Exit:
        raise
    except typer.Abort:
        sys.exit(1)
