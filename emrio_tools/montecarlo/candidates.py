"""Enumeration of Firm->Firm links eligible for reallocation."""

import logging

from emrio_tools.errors import NoCandidatesError
from emrio_tools.expansion.twofold import TwofoldSystem

logger = logging.getLogger(__name__)


def candidate_ff_pairs(system: TwofoldSystem, cross_border: bool = True) -> list[tuple[int, int]]:
    """
    List the Firm->Firm subsegment pairs of the twofold system.

    Pairs are returned in row-major order over subsegment indices, so the list is
    the same on every call and sampling from it is reproducible for a fixed seed.

    Args:
        system: Twofold system defining the subsegments
        cross_border: If True, only keep pairs whose countries differ

    Returns:
        List of (row, column) subsegment index pairs

    Raises:
        NoCandidatesError: If no pair is eligible
    """
    firms = [s for s in system.subsegments if s.is_firm]
    pairs = [
        (source.index, target.index)
        for source in firms
        for target in firms
        if not cross_border or source.country != target.country
    ]

    if not pairs:
        raise NoCandidatesError(
            f"No Firm->Firm candidates found (cross_border={cross_border}), "
            "check the countries of the base table"
        )

    logger.debug(f"Found {len(pairs)} FF candidate pairs (cross_border={cross_border})")
    return pairs
