"""Uncertainty summary of GVC indicators across Monte Carlo scenarios."""

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from functools import partial

import numpy as np
import pandas as pd

from emrio_tools.configurations.config import NegativeCellPolicy
from emrio_tools.expansion.twofold import TwofoldSystem
from emrio_tools.gvc.decomposition import (
    COUNTRY_COLUMN,
    INDICATORS,
    compute_gvc_for_transactions,
)

logger = logging.getLogger(__name__)

DEFAULT_PROBS = (0.025, 0.5, 0.975)

# Column prefix of each indicator in the summary table
SUMMARY_PREFIXES = {
    "DVA": "DVA",
    "FVA": "FVA",
    "DVX": "DVX",
    "Exports": "EX",
    "GVCPR": "GVCPR",
}
SUMMARY_FIELDS = ["Median", "P2_5", "P97_5", "U_pm_pct", "epsilon"]
SUMMARY_COLUMNS = [COUNTRY_COLUMN] + [
    f"{SUMMARY_PREFIXES[indicator]}_{name}" for indicator in INDICATORS for name in SUMMARY_FIELDS
]

# Medians this close to zero get a relative uncertainty of 0
ZERO_MEDIAN_TOLERANCE = 1e-12
# Reallocation rate, in percentage points, that epsilon is normalised to
EPSILON_RATE_POINTS = 10.0


def summarize_values(
    values: Sequence[float], probs: tuple[float, float, float] = DEFAULT_PROBS
) -> tuple[float, float, float, float, float]:
    """
    Summarize the values of one indicator across scenarios.

    NaN values (undefined indicators) are ignored.

    Args:
        values: Indicator value of each scenario
        probs: Lower, central and upper quantile probabilities

    Returns:
        Tuple of (median, lower bound, upper bound, U%, epsilon) where
        U% = (upper - lower) / (2 * median) * 100, or 0 for a zero median, and
        epsilon = U% / 10. All NaN if no value is defined.
    """
    array = np.asarray(values, dtype=np.float64)
    array = array[~np.isnan(array)]
    if array.size == 0:
        return (np.nan,) * 5

    lo, med, hi = np.quantile(array, [probs[0], probs[1], probs[2]])
    if abs(med) <= ZERO_MEDIAN_TOLERANCE:
        u_pct = 0.0
    else:
        u_pct = (hi - lo) / (2.0 * med) * 100.0
    epsilon = u_pct / EPSILON_RATE_POINTS
    return float(med), float(lo), float(hi), float(u_pct), float(epsilon)


def summarize_scenarios(
    system: TwofoldSystem,
    matrices: Sequence[np.ndarray],
    countries: list[str] | None = None,
    probs: tuple[float, float, float] = DEFAULT_PROBS,
    max_workers: int | None = None,
    negative_cells: NegativeCellPolicy = NegativeCellPolicy.ACCEPT,
) -> tuple[list[pd.DataFrame], pd.DataFrame]:
    """
    Decompose every scenario and summarize the indicators per country.

    Scenarios are independent, so with max_workers > 1 they are decomposed in a
    thread pool. Results are pooled in scenario order once all workers finish.

    Args:
        system: Twofold system the matrices belong to
        matrices: Transaction matrix of each scenario
        countries: Country codes, defaults to the destination order of the system
        probs: Lower, central and upper quantile probabilities
        max_workers: Number of worker threads, None or 1 runs sequentially
        negative_cells: Policy for matrices with negative cells

    Returns:
        Tuple of (per-scenario indicator tables, summary table). The summary has
        one row per country with columns ISO_COUNTRY followed by Median, P2_5,
        P97_5, U_pm_pct and epsilon for DVA, FVA, DVX, EX and GVCPR.
    """
    if countries is None:
        countries = system.countries
    countries = list(countries)
    if not matrices:
        raise ValueError("At least one scenario matrix is required")

    decompose = partial(
        compute_gvc_for_transactions,
        system,
        countries=countries,
        negative_cells=negative_cells,
    )

    logger.info(f"Decomposing {len(matrices)} scenarios")
    if max_workers is not None and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            per_scenario = list(executor.map(decompose, matrices))
    else:
        per_scenario = [decompose(T) for T in matrices]

    pooled = pd.concat(per_scenario, ignore_index=True)

    rows = []
    for c in countries:
        country_values = pooled[pooled[COUNTRY_COLUMN] == c]
        row = [c]
        for indicator in INDICATORS:
            row.extend(summarize_values(country_values[indicator].to_numpy(), probs))
        rows.append(row)

    summary = pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
    logger.debug(f"Summary table shape: {summary.shape}")
    return per_scenario, summary
