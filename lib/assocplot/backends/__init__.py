"""
Renderers for resolved plots.

Modules:
    altair: Layered Vega-Lite charts, saved as HTML, SVG or PNG
"""

from .altair import register_assocplot_theme, save_chart, to_chart

__all__ = ["register_assocplot_theme", "save_chart", "to_chart"]
