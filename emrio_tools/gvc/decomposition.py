"""
UNCTAD-style decomposition of value added in exports for one transaction matrix.

The flow matrix F = diag(v) L diag(e) gives, in F[p, q], the value added created
at subsegment p that is embodied in the exports of subsegment q. Aggregating its
blocks by country yields:

    DVA_c   = sum_{p in c, q in c}     F[p, q]   domestic value added in exports
    FVA_c   = sum_{p not in c, q in c} F[p, q]   foreign value added in exports
    DVX_c   = sum_{p in c, q not in c} F[p, q]   value added re-exported by others
    GVCPR_c = (FVA_c + DVX_c) / Exports_c

Reference: Casella, B., Bolwijn, R., Moran, D. & Kanemoto, K. UNCTAD insights:
Improving the analysis of global value chains: the UNCTAD-Eora Database.
Transnational Corporations 26, 115-142 (2019).
"""

import logging

import numpy as np
import pandas as pd

from emrio_tools.configurations.config import NegativeCellPolicy
from emrio_tools.errors import NegativeTransactionError
from emrio_tools.expansion.twofold import TwofoldSystem
from emrio_tools.gvc.exports import build_export_diagonal
from emrio_tools.gvc.leontief import solve_after_transactions

logger = logging.getLogger(__name__)

COUNTRY_COLUMN = "ISO_COUNTRY"
INDICATORS = ["DVA", "FVA", "DVX", "Exports", "GVCPR"]
INDICATOR_COLUMNS = [COUNTRY_COLUMN] + INDICATORS


def country_index_sets(system: TwofoldSystem, countries: list[str]) -> dict[str, list[int]]:
    """
    Group subsegment indices by country.

    The same sets index rows and columns, since the twofold system is square.

    Args:
        system: Twofold system
        countries: Country codes to group by

    Returns:
        Mapping of country code to its subsegment indices, in matrix order
    """
    index_sets: dict[str, list[int]] = {c: [] for c in countries}
    for s in system.subsegments:
        if s.country not in index_sets:
            raise ValueError(f"Subsegment {s.label} belongs to unknown country {s.country}")
        index_sets[s.country].append(s.index)
    return index_sets


def check_negative_cells(T: np.ndarray, policy: NegativeCellPolicy) -> int:
    """
    Apply the negative-cell policy to a transaction matrix.

    Args:
        T: Transaction matrix
        policy: accept (silently), warn (log a warning) or reject (raise)

    Returns:
        Number of negative cells in T

    Raises:
        NegativeTransactionError: If T has negative cells and the policy is reject
    """
    policy = NegativeCellPolicy(policy)
    n_negative = int(np.count_nonzero(T < 0))
    if n_negative == 0:
        return 0

    message = f"Transaction matrix has {n_negative} negative cells (min {T.min():.6g})"
    if policy is NegativeCellPolicy.REJECT:
        raise NegativeTransactionError(message)
    if policy is NegativeCellPolicy.WARN:
        logger.warning(message)
    return n_negative


def compute_gvc_for_transactions(
    system: TwofoldSystem,
    T: np.ndarray,
    countries: list[str] | None = None,
    negative_cells: NegativeCellPolicy = NegativeCellPolicy.ACCEPT,
) -> pd.DataFrame:
    """
    Compute DVA, FVA, DVX, Exports and GVCPR per country for one transaction matrix.

    Args:
        system: Twofold system the matrix belongs to
        T: Transaction matrix (e.g. one Monte Carlo scenario)
        countries: Country codes, defaults to the destination order of the system
        negative_cells: Policy for matrices with negative cells

    Returns:
        DataFrame with columns ISO_COUNTRY, DVA, FVA, DVX, Exports, GVCPR and one
        row per country. GVCPR is NaN for a country without exports.
    """
    if countries is None:
        countries = system.countries
    countries = list(countries)

    check_negative_cells(T, negative_cells)

    solution = solve_after_transactions(system, T)
    exports = build_export_diagonal(system, T, countries)
    index_sets = country_index_sets(system, countries)

    # F = diag(v) L diag(e)
    F = (solution.v[:, None] * solution.L) @ exports.ehat

    in_country = np.zeros(F.shape[0], dtype=bool)
    rows = []
    for c in countries:
        in_country[:] = False
        in_country[index_sets[c]] = True

        dva = float(F[np.ix_(in_country, in_country)].sum())
        fva = float(F[np.ix_(~in_country, in_country)].sum())
        dvx = float(F[np.ix_(in_country, ~in_country)].sum())
        total_exports = exports.exports_by_country[c]
        gvcpr = (fva + dvx) / total_exports if total_exports > 0 else np.nan

        rows.append((c, dva, fva, dvx, total_exports, gvcpr))

    return pd.DataFrame(rows, columns=INDICATOR_COLUMNS)
