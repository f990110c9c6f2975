"""Export diagonal with intermediate and final exports by destination."""

import logging
from dataclasses import dataclass

import numpy as np

from emrio_tools.expansion.twofold import TwofoldSystem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportDiagonal:
    """
    Exports of every subsegment.

    Attributes:
        e: Total exports of each subsegment (2N)
        exports_by_country: Sum of e over the subsegments of each origin country
    """

    e: np.ndarray
    exports_by_country: dict[str, float]

    @property
    def ehat(self) -> np.ndarray:
        """The export diagonal matrix diag(e)."""
        return np.diag(self.e)


def build_export_diagonal(
    system: TwofoldSystem, T: np.ndarray, countries: list[str]
) -> ExportDiagonal:
    """
    Build exports from cross-border intermediate sales and cross-border final demand.

    For a subsegment p of country c_p:

        e[p] = sum_{q: country(q) != c_p} T[p, q] + sum_{d != c_p} y_s_q[p, d]

    Args:
        system: Twofold system with subsegment countries and y_s_q
        T: Transaction matrix to evaluate
        countries: Country codes, in the order of the columns of y_s_q

    Returns:
        ExportDiagonal with per-subsegment and per-country exports

    Raises:
        ValueError: If countries does not match the destination columns of y_s_q
    """
    n_rows = system.y_s_q.shape[0]
    if T.shape != (n_rows, n_rows):
        raise ValueError(f"T should have shape ({n_rows}, {n_rows}), got {T.shape}")
    if list(countries) != system.countries:
        raise ValueError(
            f"countries {list(countries)} must match the destination order {system.countries}"
        )

    sub_country = np.array(system.subsegment_countries)
    dest_country = np.array(countries)

    # foreign[p, q] is True when q belongs to another country than p
    foreign_users = sub_country[:, None] != sub_country[None, :]
    foreign_destinations = sub_country[:, None] != dest_country[None, :]

    intermediate = np.where(foreign_users, T, 0.0).sum(axis=1)
    final = np.where(foreign_destinations, system.y_s_q, 0.0).sum(axis=1)
    e = intermediate + final

    exports_by_country = {c: float(e[sub_country == c].sum()) for c in countries}
    logger.debug(f"Exports by country: {exports_by_country}")

    return ExportDiagonal(e=e, exports_by_country=exports_by_country)
