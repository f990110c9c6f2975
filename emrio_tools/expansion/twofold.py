"""Module for the twofold (Firm/Other) disaggregation of a sector-level base table."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, TypeAlias

import numpy as np
from numpy.typing import NDArray
from pydantic import ValidationError

from emrio_tools.configurations.config import FirmShares
from emrio_tools.errors import AccountingIdentityError, ConfigurationError
from emrio_tools.readers.base_table import BaseTable, SectorId

# Type alias for float arrays
Array: TypeAlias = NDArray[np.float64]

# Shares can be given as validated FirmShares or as a plain (country, sector) mapping
ShareMapping: TypeAlias = FirmShares | Mapping[SectorId, float]

logger = logging.getLogger(__name__)

SUBSEGMENTS_PER_SECTOR = 2
PARTITION_TOLERANCE = 1e-12
IDENTITY_TOLERANCE = 1e-10


class SubsegmentTag(str, Enum):
    """Subsegment of a base sector."""

    FIRM = "Firm"
    OTHER = "Other"


class SubsegmentInfo(NamedTuple):
    """
    Information about a subsegment of the twofold system.

    Subsegments are ordered Firm, Other within each base sector, so base sector j
    (0-based) owns subsegments 2j (Firm) and 2j + 1 (Other).
    """

    index: int  # Row/column index in the expanded matrices
    base_index: int  # Index of the parent base sector
    country: str
    sector: str
    tag: SubsegmentTag

    @property
    def sector_id(self) -> SectorId:
        """The (country, sector) pair of the parent base sector."""
        return (self.country, self.sector)

    @property
    def label(self) -> str:
        """Label of the form "country:sector:Firm"."""
        return f"{self.country}:{self.sector}:{self.tag.value}"

    @property
    def is_firm(self) -> bool:
        return self.tag is SubsegmentTag.FIRM


def firm_index(base_index: int) -> int:
    """Index of the Firm subsegment of a base sector."""
    return SUBSEGMENTS_PER_SECTOR * base_index


def other_index(base_index: int) -> int:
    """Index of the Other subsegment of a base sector."""
    return SUBSEGMENTS_PER_SECTOR * base_index + 1


def _as_firm_shares(shares: ShareMapping, side: str) -> FirmShares:
    """Validate a plain (country, sector) mapping into FirmShares."""
    if isinstance(shares, FirmShares):
        return shares
    try:
        return FirmShares.from_pairs(shares)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid {side} shares: {e}") from e


def _collect_shares(sector_ids: list[SectorId], shares: ShareMapping, side: str) -> Array:
    """Look up the share of every base sector, failing on missing or invalid shares."""
    firm_shares = _as_firm_shares(shares, side)
    values = np.zeros(len(sector_ids))
    for j, sector_id in enumerate(sector_ids):
        try:
            values[j] = firm_shares.get_share(sector_id)
        except ConfigurationError as e:
            raise ConfigurationError(f"Invalid {side} shares: {e}") from None
    return values


def build_partition_matrix(shares: Array) -> Array:
    """
    Build a partition matrix splitting each base sector into Firm and Other.

    Column j holds shares[j] in the Firm row 2j and 1 - shares[j] in the Other
    row 2j + 1, so every column sums to one.

    Args:
        shares: Firm shares of the N base sectors

    Returns:
        Array of shape (2N, N)

    Raises:
        AccountingIdentityError: If a column does not sum to one
    """
    n = len(shares)
    P = np.zeros((SUBSEGMENTS_PER_SECTOR * n, n))
    for j, share in enumerate(shares):
        P[firm_index(j), j] = share
        P[other_index(j), j] = 1.0 - share

    deviation = np.max(np.abs(P.sum(axis=0) - 1.0)) if n else 0.0
    if not deviation < PARTITION_TOLERANCE:
        raise AccountingIdentityError(f"Partition matrix columns deviate from 1 by {deviation}")
    return P


def coefficients_from_transactions(T: Array, x_col: Array, va: Array) -> tuple[Array, Array]:
    """
    Compute technical and value added coefficients column by column.

    Columns whose output is not positive get all-zero coefficients.

    Args:
        T: Transaction matrix
        x_col: Column totals (output) used for scaling
        va: Value added aligned with the columns of T

    Returns:
        Tuple of (A, v)
    """
    A = np.zeros_like(T, dtype=np.float64)
    v = np.zeros_like(x_col, dtype=np.float64)
    positive = x_col > 0
    A[:, positive] = T[:, positive] / x_col[positive]
    v[positive] = va[positive] / x_col[positive]
    return A, v


def identity_residual(A: Array, v: Array, x_col: Array) -> float:
    """Largest deviation of sum_i A[i, j] + v[j] from 1 over columns with output."""
    positive = x_col > 0
    if not positive.any():
        return 0.0
    return float(np.max(np.abs(A[:, positive].sum(axis=0) + v[positive] - 1.0)))


def _freeze(*arrays: Array) -> None:
    for array in arrays:
        array.setflags(write=False)


@dataclass(frozen=True, eq=False)
class TwofoldSystem:
    """
    Twofold disaggregated EMRIO system.

    Every base sector is split into a Firm and an Other subsegment on both the
    supply side (rows, shares r) and the use side (columns, shares c). The system
    is read-only once built: all arrays are flagged non-writeable, and scenario
    matrices must be derived from copies of `T`.

    Attributes:
        base_table: The sector-level table the system was built from
        subsegments: Descriptors of the 2N subsegments in matrix order
        R: Row partition matrix (2N x N)
        C: Column partition matrix (2N x N)
        T: Expanded transactions R T C' (2N x 2N)
        x_col: Expanded column totals C x (2N)
        y: Expanded final demand C y (2N)
        va: Expanded value added C va (2N)
        y_s_q: Expanded final demand by destination C y_s (2N x Nc)
        A: Technical coefficients (2N x 2N)
        v: Value added coefficients (2N)
    """

    base_table: BaseTable
    subsegments: list[SubsegmentInfo]
    R: Array
    C: Array
    T: Array
    x_col: Array
    y: Array
    va: Array
    y_s_q: Array
    A: Array
    v: Array

    @classmethod
    def from_base_table(
        cls,
        base_table: BaseTable,
        row_shares: ShareMapping,
        col_shares: ShareMapping | None = None,
    ) -> "TwofoldSystem":
        """
        Expand a base table into the twofold system.

        Transactions are split with the outer product R T C', which spreads every
        base-to-base flow proportionally to the firm shares of both endpoints. The
        column identity of the base table therefore carries over to the expanded
        system without any per-cell correction.

        Args:
            base_table: Sector-level table to expand
            row_shares: Supply-side firm share of each (country, sector)
            col_shares: Use-side firm share of each (country, sector), defaults to
                row_shares

        Returns:
            TwofoldSystem with expanded transactions, vectors and coefficients

        Raises:
            ConfigurationError: If a share is missing or outside [0, 1]
            AccountingIdentityError: If the expanded column identity does not hold
        """
        if col_shares is None:
            col_shares = row_shares

        sector_ids = base_table.sector_ids
        r = _collect_shares(sector_ids, row_shares, "row")
        c = _collect_shares(sector_ids, col_shares, "col")

        subsegments = []
        for j, (country, sector) in enumerate(sector_ids):
            for k, tag in ((firm_index(j), SubsegmentTag.FIRM), (other_index(j), SubsegmentTag.OTHER)):
                subsegments.append(SubsegmentInfo(k, j, country, sector, tag))

        R = build_partition_matrix(r)
        C = build_partition_matrix(c)

        T = R @ base_table.T @ C.T
        x_col = C @ base_table.x
        y = C @ base_table.y
        va = C @ base_table.va
        y_s_q = C @ base_table.y_s

        logger.debug(f"Expanded T from {base_table.T.shape} to {T.shape}")
        logger.debug(f"Expanded destination final demand to shape {y_s_q.shape}")

        A, v = coefficients_from_transactions(T, x_col, va)

        residual = identity_residual(A, v, x_col)
        if residual >= IDENTITY_TOLERANCE:
            raise AccountingIdentityError(
                f"Column identity sum(A) + v = 1 violated after expansion (max deviation "
                f"{residual}, base table deviation {base_table.identity_residual()})"
            )

        _freeze(R, C, T, x_col, y, va, y_s_q, A, v)

        logger.info(
            f"Built twofold system with {len(subsegments)} subsegments "
            f"from {base_table.n_sectors} base sectors"
        )
        return cls(
            base_table=base_table,
            subsegments=subsegments,
            R=R,
            C=C,
            T=T,
            x_col=x_col,
            y=y,
            va=va,
            y_s_q=y_s_q,
            A=A,
            v=v,
        )

    @property
    def n_base(self) -> int:
        """Number of base sectors N."""
        return self.R.shape[1]

    @property
    def n_subsegments(self) -> int:
        """Number of subsegments 2N."""
        return len(self.subsegments)

    @property
    def countries(self) -> list[str]:
        """Countries in the order of the destination columns of y_s_q."""
        return self.base_table.country_list

    @property
    def base_labels(self) -> list[str]:
        """Base sector labels of the form "country:sector"."""
        return [f"{country}:{sector}" for country, sector in self.base_table.sector_ids]

    @property
    def sub_labels(self) -> list[str]:
        """Subsegment labels of the form "country:sector:Firm"."""
        return [s.label for s in self.subsegments]

    @property
    def subsegment_to_base(self) -> list[int]:
        """Base sector index of every subsegment."""
        return [s.base_index for s in self.subsegments]

    @property
    def subsegment_countries(self) -> list[str]:
        """Country of every subsegment."""
        return [s.country for s in self.subsegments]

    def _check_base(self, base_index: int) -> None:
        if not 0 <= base_index < self.n_base:
            raise ValueError(f"Base sector index {base_index} out of range [0, {self.n_base})")

    def row_share(self, i_base: int) -> float:
        """Supply-side firm share r_i of a base sector."""
        self._check_base(i_base)
        return float(self.R[firm_index(i_base), i_base])

    def col_share(self, j_base: int) -> float:
        """Use-side firm share c_j of a base sector."""
        self._check_base(j_base)
        return float(self.C[firm_index(j_base), j_base])

    def base_index(self, k: int) -> int:
        """Base sector index of subsegment k."""
        if not 0 <= k < self.n_subsegments:
            raise ValueError(f"Subsegment index {k} out of range [0, {self.n_subsegments})")
        return k // SUBSEGMENTS_PER_SECTOR

    def identity_residual(self) -> float:
        """Largest column identity deviation of the expanded system."""
        return identity_residual(self.A, self.v, self.x_col)
