"""Local 2x2 reallocation of Firm->Firm flows within a base-sector pair."""

import numpy as np

from emrio_tools.expansion.twofold import firm_index, other_index


def reallocate_ff_block(T: np.ndarray, i_base: int, j_base: int) -> float:
    """
    Move the Firm->Firm flow of a base-sector pair to the Firm->Other and Other->Firm cells.

    With iF, iO the Firm/Other rows of i_base, jF, jO the Firm/Other columns of
    j_base and delta = T[iF, jF]:

        T[iF, jF] = 0
        T[iF, jO] += delta
        T[iO, jF] += delta
        T[iO, jO] -= delta

    Row sums over {jF, jO} and column sums over {iF, iO} of the 2x2 block are
    unchanged, so the base-to-base flow between i_base and j_base is too. The
    Other->Other cell can become negative if delta exceeds it.

    T is modified in place. Nothing happens if delta <= 0.

    Args:
        T: Writeable transaction matrix of the twofold system
        i_base: Base sector index of the supplying sector
        j_base: Base sector index of the using sector

    Returns:
        The reallocated flow delta, 0.0 for a no-op
    """
    iF, iO = firm_index(i_base), other_index(i_base)
    jF, jO = firm_index(j_base), other_index(j_base)

    delta = float(T[iF, jF])
    if delta <= 0.0:
        return 0.0

    T[iF, jF] = 0.0
    T[iF, jO] += delta
    T[iO, jF] += delta
    T[iO, jO] -= delta
    return delta
