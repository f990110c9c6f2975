"""
Expansion module for building the twofold Firm/Other system.

This module splits every base sector of a sector-level table into a Firm and an
Other subsegment while preserving the column accounting identity.
"""

from emrio_tools.expansion.twofold import (
    SubsegmentInfo,
    SubsegmentTag,
    TwofoldSystem,
    build_partition_matrix,
    coefficients_from_transactions,
)

__all__ = [
    "SubsegmentInfo",
    "SubsegmentTag",
    "TwofoldSystem",
    "build_partition_matrix",
    "coefficients_from_transactions",
]
