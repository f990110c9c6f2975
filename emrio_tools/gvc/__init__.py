"""
GVC module for value-added decomposition of exports and its uncertainty summary.

This module recomputes the Leontief system of a transaction matrix, builds the
export diagonal, decomposes exports into DVA/FVA/DVX/GVCPR per country and
summarizes the indicators across Monte Carlo scenarios.
"""

from emrio_tools.gvc.decomposition import (
    INDICATOR_COLUMNS,
    compute_gvc_for_transactions,
    country_index_sets,
)
from emrio_tools.gvc.exports import ExportDiagonal, build_export_diagonal
from emrio_tools.gvc.leontief import LeontiefSolution, solve_after_transactions
from emrio_tools.gvc.summary import SUMMARY_COLUMNS, summarize_scenarios, summarize_values

__all__ = [
    "INDICATOR_COLUMNS",
    "SUMMARY_COLUMNS",
    "ExportDiagonal",
    "LeontiefSolution",
    "build_export_diagonal",
    "compute_gvc_for_transactions",
    "country_index_sets",
    "solve_after_transactions",
    "summarize_scenarios",
    "summarize_values",
]
