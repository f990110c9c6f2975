"""Tests for the 2x2 Firm->Firm reallocation."""

import numpy as np

from emrio_tools.montecarlo import reallocate_ff_block


def _integer_matrix():
    # Integer values so sums are exact in floating point
    return np.arange(1.0, 37.0).reshape(6, 6)


def test_reallocation_moves_flow():
    """Test the cell updates of a reallocation."""
    T = _integer_matrix()
    before = T.copy()

    delta = reallocate_ff_block(T, 0, 2)

    assert delta == before[0, 4]
    assert T[0, 4] == 0.0
    assert T[0, 5] == before[0, 5] + delta
    assert T[1, 4] == before[1, 4] + delta
    assert T[1, 5] == before[1, 5] - delta


def test_reallocation_preserves_block_sums():
    """Test that row and column sums of the block are unchanged bit for bit."""
    T = _integer_matrix()
    before = T.copy()

    reallocate_ff_block(T, 1, 0)

    rows, cols = [2, 3], [0, 1]
    assert np.array_equal(T[np.ix_(rows, cols)].sum(axis=1), before[np.ix_(rows, cols)].sum(axis=1))
    assert np.array_equal(T[np.ix_(rows, cols)].sum(axis=0), before[np.ix_(rows, cols)].sum(axis=0))
    assert np.array_equal(T.sum(axis=0), before.sum(axis=0))
    assert np.array_equal(T.sum(axis=1), before.sum(axis=1))
    # Cells outside the block are untouched
    outside = np.ones_like(T, dtype=bool)
    outside[np.ix_(rows, cols)] = False
    assert np.array_equal(T[outside], before[outside])


def test_reallocation_is_idempotent():
    """Test that reallocating the same block twice changes nothing the second time."""
    T = _integer_matrix()
    reallocate_ff_block(T, 2, 1)
    after_first = T.copy()

    assert reallocate_ff_block(T, 2, 1) == 0.0
    assert np.array_equal(T, after_first)


def test_reallocation_can_go_negative():
    """Test that the Other->Other cell goes negative if it is smaller than the flow."""
    T = np.array([[8.0, 1.0], [1.0, 2.0]])

    delta = reallocate_ff_block(T, 0, 0)

    assert delta == 8.0
    assert T.tolist() == [[0.0, 9.0], [9.0, -6.0]]
