"""Illustrative sector-level base table used for demonstrations and tests.

The numbers are not calibrated to any real table. Each country has the same three
sectors; final demand and intermediate sales are fixed shares of output and value
added closes the column identity sum_i T[i, j] + va[j] = x[j].
"""

import logging
from collections.abc import Mapping, Sequence

import numpy as np

from emrio_tools.errors import ConfigurationError
from emrio_tools.readers.base_table import BaseTable

logger = logging.getLogger(__name__)

SYNTHETIC_SECTORS = ("Primary", "Secondary", "Tertiary")

DEFAULT_OUTPUTS = {
    "A": (100.0, 160.0, 220.0),
    "B": (95.0, 150.0, 210.0),
}

# Final demand as a share of output
FINAL_DEMAND_SHARE = {"Primary": 0.55, "Secondary": 0.40, "Tertiary": 0.65}
# Share of final demand absorbed by the origin country
FINAL_DEMAND_DOMESTIC_SHARE = {"Primary": 0.80, "Secondary": 0.70, "Tertiary": 0.85}
# Share of intermediate sales going to domestic users
INTERMEDIATE_DOMESTIC_SHARE = {"Primary": 0.85, "Secondary": 0.75, "Tertiary": 0.80}
# Allocation of intermediate sales across using sectors
DOMESTIC_USER_WEIGHTS = (0.50, 0.30, 0.20)
FOREIGN_USER_WEIGHTS = (0.20, 0.50, 0.30)


def make_synthetic_base_table(
    outputs: Mapping[str, Sequence[float]] | None = None,
) -> BaseTable:
    """
    Build the illustrative multi-country, three-sector base table.

    Foreign final demand and foreign intermediate sales are split equally across
    all non-origin countries, so with two countries this is the 6 x 6 table used
    throughout the examples.

    Args:
        outputs: Mapping of country code to the outputs of its Primary, Secondary
            and Tertiary sectors. Defaults to two countries A and B.

    Returns:
        BaseTable with countries in the order of `outputs`

    Raises:
        ConfigurationError: If fewer than two countries are given, a country does not
            have three outputs, or the resulting value added is not positive
    """
    outputs = dict(DEFAULT_OUTPUTS if outputs is None else outputs)
    countries = list(outputs)
    if len(countries) < 2:
        raise ConfigurationError("The synthetic table needs at least two countries")

    n_sectors = len(SYNTHETIC_SECTORS)
    for country, values in outputs.items():
        if len(values) != n_sectors:
            raise ConfigurationError(
                f"Country {country} needs {n_sectors} sector outputs, got {len(values)}"
            )

    n_countries = len(countries)
    N = n_countries * n_sectors
    x = np.array([float(v) for country in countries for v in outputs[country]])
    idx_country = [country for country in countries for _ in SYNTHETIC_SECTORS]
    idx_sector = [sector for _ in countries for sector in SYNTHETIC_SECTORS]

    y = np.array([FINAL_DEMAND_SHARE[idx_sector[i]] * x[i] for i in range(N)])

    # Destination split of final demand
    y_s = np.zeros((N, n_countries))
    for i in range(N):
        origin = countries.index(idx_country[i])
        alpha = FINAL_DEMAND_DOMESTIC_SHARE[idx_sector[i]]
        y_s[i, origin] += alpha * y[i]
        per_foreign = (1.0 - alpha) * y[i] / (n_countries - 1)
        for d in range(n_countries):
            if d != origin:
                y_s[i, d] += per_foreign

    # Intermediate transactions: rows are producers, columns are users
    w_dom = np.array(DOMESTIC_USER_WEIGHTS)
    w_for = np.array(FOREIGN_USER_WEIGHTS)
    T = np.zeros((N, N))
    for i in range(N):
        sales = x[i] - y[i]
        alpha = INTERMEDIATE_DOMESTIC_SHARE[idx_sector[i]]
        origin = countries.index(idx_country[i])
        for d in range(n_countries):
            block = slice(d * n_sectors, (d + 1) * n_sectors)
            if d == origin:
                T[i, block] = sales * alpha * w_dom
            else:
                T[i, block] = sales * (1.0 - alpha) * w_for / (n_countries - 1)

    va = x - T.sum(axis=0)
    if not (va > 0).all():
        raise ConfigurationError("Negative value added detected, adjust the synthetic shares")

    logger.debug(f"Built synthetic base table with {N} sectors for countries {countries}")

    return BaseTable(
        T=T,
        x=x,
        y=y,
        va=va,
        y_s=y_s,
        countries=idx_country,
        sectors=idx_sector,
        destinations=countries,
    )
