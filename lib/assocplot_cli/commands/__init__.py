"""
Command modules for the assocplot CLI.

Each submodule defines one Typer command that is registered with the main app
in assocplot_cli/__init__.py.
"""

from assocplot_cli.commands import forest, manhattan

__all__ = ["forest", "manhattan"]
