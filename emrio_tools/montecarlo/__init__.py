"""
Monte Carlo module for perturbing Firm->Firm links of the twofold system.

This module enumerates candidate FF links, applies the balance-preserving 2x2
reallocation and generates reproducible sets of perturbed transaction matrices.
"""

from emrio_tools.montecarlo.candidates import candidate_ff_pairs
from emrio_tools.montecarlo.generator import (
    ScenarioMetadata,
    ScenarioSet,
    generate_scenarios,
    max_share_excess,
)
from emrio_tools.montecarlo.reallocation import reallocate_ff_block

__all__ = [
    "ScenarioMetadata",
    "ScenarioSet",
    "candidate_ff_pairs",
    "generate_scenarios",
    "max_share_excess",
    "reallocate_ff_block",
]
