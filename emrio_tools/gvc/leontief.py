"""Recomputation of the Leontief system after a change of the transaction matrix."""

import logging
from dataclasses import dataclass

import numpy as np

from emrio_tools.errors import AccountingIdentityError
from emrio_tools.expansion.twofold import (
    TwofoldSystem,
    coefficients_from_transactions,
    identity_residual,
)

logger = logging.getLogger(__name__)

RESOLVE_TOLERANCE = 1e-9


@dataclass(frozen=True)
class LeontiefSolution:
    """Coefficients, value added and Leontief inverse of one transaction matrix."""

    A: np.ndarray
    v: np.ndarray
    va: np.ndarray
    L: np.ndarray


def solve_after_transactions(system: TwofoldSystem, T_new: np.ndarray) -> LeontiefSolution:
    """
    Rebuild A, v and L = (I - A)^-1 for a modified transaction matrix.

    Output levels are kept at the column totals of the twofold system. Any input
    removed from a column is booked as extra value added of that column (and vice
    versa): va_new = va + colsum(T) - colsum(T_new).

    Args:
        system: Twofold system providing the unperturbed T, va and column totals
        T_new: Modified transaction matrix of the same shape as system.T

    Returns:
        LeontiefSolution for T_new

    Raises:
        ValueError: If T_new has the wrong shape
        AccountingIdentityError: If the column identity does not hold afterwards
    """
    if T_new.shape != system.T.shape:
        raise ValueError(f"T_new should have shape {system.T.shape}, got {T_new.shape}")

    x_col = system.x_col
    va = system.va + (system.T.sum(axis=0) - T_new.sum(axis=0))
    A, v = coefficients_from_transactions(T_new, x_col, va)

    residual = identity_residual(A, v, x_col)
    if residual >= RESOLVE_TOLERANCE:
        raise AccountingIdentityError(
            f"Column identity violated after recomputing coefficients (max deviation {residual})"
        )

    n = A.shape[0]
    L = np.linalg.inv(np.eye(n) - A)
    logger.debug(f"Computed Leontief inverse of size {n}")
    return LeontiefSolution(A=A, v=v, va=va, L=L)
