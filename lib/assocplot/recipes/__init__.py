"""
Ready-made plot declarations.

Modules:
    forest: Odds ratios across adjustment models, per SNP
    manhattan: Genome-wide -log10(P) scan
"""

from .forest import forest_spec, prepare_forest_table
from .manhattan import manhattan_spec, prepare_manhattan_table

__all__ = [
    "forest_spec",
    "manhattan_spec",
    "prepare_forest_table",
    "prepare_manhattan_table",
]
