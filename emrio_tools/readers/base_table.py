"""
Module holding the sector-level base table that is disaggregated into Firm/Other.

The base table is the immutable input of the analysis: an N x N transaction matrix,
the column-aligned vectors (output, final demand, value added) and the final demand
split by destination country. All arrays are validated and frozen on construction.
"""

import logging
from dataclasses import dataclass, field
from typing import TypeAlias

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from emrio_tools.errors import ConfigurationError

# Type alias for float arrays
Array: TypeAlias = NDArray[np.float64]

# Base sectors are identified by (country, sector) pairs
SectorId: TypeAlias = tuple[str, str]

logger = logging.getLogger(__name__)

INDEX_NAMES = ["CountryInd", "industryInd"]


def _frozen_array(values, name: str, ndim: int) -> Array:
    try:
        array = np.array(values, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Field {name} is not numeric: {e}") from e
    if array.ndim != ndim:
        raise ConfigurationError(f"Field {name} must be {ndim}-dimensional, got shape {array.shape}")
    if not np.isfinite(array).all():
        raise ConfigurationError(f"Field {name} contains missing or infinite values")
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class BaseTable:
    """
    Sector-level multi-regional input-output table.

    Attributes:
        T: Intermediate transactions (N x N), rows are producers, columns are users
        x: Total output (N)
        y: Total final demand (N)
        va: Value added (N)
        y_s: Final demand by destination country (N x Nc)
        countries: Country label of each base sector (N)
        sectors: Sector label of each base sector (N)
        destinations: Destination country of each column of y_s (Nc)
    """

    T: Array
    x: Array
    y: Array
    va: Array
    y_s: Array
    countries: list[str]
    sectors: list[str]
    destinations: list[str]
    sector_ids: list[SectorId] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "T", _frozen_array(self.T, "T", 2))
        object.__setattr__(self, "x", _frozen_array(self.x, "x", 1))
        object.__setattr__(self, "y", _frozen_array(self.y, "y", 1))
        object.__setattr__(self, "va", _frozen_array(self.va, "va", 1))
        object.__setattr__(self, "y_s", _frozen_array(self.y_s, "y_s", 2))
        object.__setattr__(self, "countries", [str(c) for c in self.countries])
        object.__setattr__(self, "sectors", [str(s) for s in self.sectors])
        object.__setattr__(self, "destinations", [str(d) for d in self.destinations])
        object.__setattr__(self, "sector_ids", list(zip(self.countries, self.sectors)))
        self.validate()

    def validate(self) -> None:
        """
        Validate shapes and labels of the table.

        Raises:
            ConfigurationError: If a field is mis-shaped or labels are inconsistent
        """
        n = len(self.x)
        if n == 0:
            raise ConfigurationError("Base table has no sectors")
        if self.T.shape != (n, n):
            raise ConfigurationError(f"T should have shape ({n}, {n}), got {self.T.shape}")
        for name in ("y", "va"):
            vector = getattr(self, name)
            if vector.shape != (n,):
                raise ConfigurationError(f"{name} should have length {n}, got {vector.shape}")
        if len(self.countries) != n or len(self.sectors) != n:
            raise ConfigurationError(
                f"Expected {n} country and sector labels, got "
                f"{len(self.countries)} and {len(self.sectors)}"
            )
        if len(set(self.sector_ids)) != n:
            raise ConfigurationError("Base sector (country, sector) labels must be unique")

        n_dest = len(self.destinations)
        if self.y_s.shape != (n, n_dest):
            raise ConfigurationError(f"y_s should have shape ({n}, {n_dest}), got {self.y_s.shape}")
        if len(set(self.destinations)) != n_dest:
            raise ConfigurationError("Destination countries must be unique")
        missing = sorted(set(self.countries) - set(self.destinations))
        if missing:
            raise ConfigurationError(f"Countries missing from final demand destinations: {missing}")

        if not np.allclose(self.y_s.sum(axis=1), self.y, rtol=1e-8, atol=1e-8):
            raise ConfigurationError("Final demand by destination does not add up to final demand")

        logger.debug(f"Validated base table with {n} sectors and {n_dest} destinations")

    @property
    def n_sectors(self) -> int:
        """Number of base sectors N."""
        return len(self.x)

    @property
    def country_list(self) -> list[str]:
        """Countries in the order of the final demand destinations."""
        return list(self.destinations)

    @property
    def technical_coefficients(self) -> Array:
        """Technical coefficients T / x by column, zero for columns without output."""
        A = np.zeros_like(self.T)
        positive = self.x > 0
        A[:, positive] = self.T[:, positive] / self.x[positive]
        return A

    @property
    def value_added_coefficients(self) -> Array:
        """Value added coefficients va / x, zero for sectors without output."""
        v = np.zeros_like(self.va)
        positive = self.x > 0
        v[positive] = self.va[positive] / self.x[positive]
        return v

    def identity_residual(self) -> float:
        """Largest deviation of sum_i A[i, j] + v[j] from 1 over columns with output."""
        positive = self.x > 0
        if not positive.any():
            return 0.0
        col_totals = self.technical_coefficients.sum(axis=0) + self.value_added_coefficients
        return float(np.max(np.abs(col_totals[positive] - 1.0)))

    def to_frame(self) -> pd.DataFrame:
        """
        Get the table in the CSV layout understood by `read_base_table`.

        Rows are the base sectors followed by the VA and OUT rows. Columns are the
        base sectors, one FD column per destination country and the OUT column.
        """
        sector_index = pd.MultiIndex.from_tuples(self.sector_ids, names=INDEX_NAMES)
        fd_columns = [(d, "FD") for d in self.destinations]
        columns = pd.MultiIndex.from_tuples(
            self.sector_ids + fd_columns + [("OUT", "OUT")], names=INDEX_NAMES
        )

        body = np.hstack([self.T, self.y_s, self.x.reshape(-1, 1)])
        data = pd.DataFrame(body, index=sector_index, columns=columns)

        padding = np.full(len(fd_columns) + 1, np.nan)
        bottom = pd.DataFrame(
            [np.concatenate([self.va, padding]), np.concatenate([self.x, padding])],
            index=pd.MultiIndex.from_tuples([("VA", "VA"), ("OUT", "OUT")], names=INDEX_NAMES),
            columns=columns,
        )

        return pd.concat([data, bottom])
