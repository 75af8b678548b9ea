"""
The Typer app shared by the assocplot commands.

Command modules import ``app`` from here and register themselves on it, so
``assocplot_cli/__init__.py`` only has to import them.
"""

import typer

app = typer.Typer(
    name="assocplot",
    help="assocplot: forest and Manhattan plots for genetic association results.",
    rich_markup_mode="rich",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
