"""Configuration module for robustness analysis runs."""

from emrio_tools.configurations.config import (
    AnalysisConfig,
    FirmShares,
    MonteCarloConfig,
    NegativeCellPolicy,
    SummaryConfig,
    default_firm_shares,
)

__all__ = [
    "AnalysisConfig",
    "FirmShares",
    "MonteCarloConfig",
    "NegativeCellPolicy",
    "SummaryConfig",
    "default_firm_shares",
]
