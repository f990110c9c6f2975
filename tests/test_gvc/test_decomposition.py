"""Tests for the GVC decomposition of a transaction matrix."""

import logging

import numpy as np
import pytest

from emrio_tools.configurations import NegativeCellPolicy
from emrio_tools.errors import NegativeTransactionError
from emrio_tools.gvc import INDICATOR_COLUMNS, compute_gvc_for_transactions, country_index_sets
from emrio_tools.gvc.decomposition import check_negative_cells
from emrio_tools.montecarlo import generate_scenarios


def test_country_index_sets(default_system):
    """Test grouping of subsegments by country."""
    index_sets = country_index_sets(default_system, ["A", "B"])

    assert index_sets == {"A": [0, 1, 2, 3, 4, 5], "B": [6, 7, 8, 9, 10, 11]}

    with pytest.raises(ValueError, match="unknown country"):
        country_index_sets(default_system, ["A"])


def test_decomposition_of_base_system(default_system):
    """Test the indicator table of the unperturbed system."""
    result = compute_gvc_for_transactions(default_system, default_system.T)

    assert list(result.columns) == INDICATOR_COLUMNS
    assert result["ISO_COUNTRY"].tolist() == ["A", "B"]

    # Exports are fully split into domestic and foreign value added
    np.testing.assert_allclose(result["DVA"] + result["FVA"], result["Exports"])
    # With two countries, value added of A re-exported by B is FVA of B
    assert result.loc[0, "DVX"] == pytest.approx(result.loc[1, "FVA"])
    assert result.loc[1, "DVX"] == pytest.approx(result.loc[0, "FVA"])

    assert (result[["DVA", "FVA", "DVX", "Exports"]] > 0).all().all()
    assert result["GVCPR"].between(0.0, 1.0).all()
    expected = (result["FVA"] + result["DVX"]) / result["Exports"]
    np.testing.assert_allclose(result["GVCPR"], expected)


def test_decomposition_of_scenario(default_system):
    """Test that country indicators do not depend on the reallocations."""
    base = compute_gvc_for_transactions(default_system, default_system.T)
    T_new = generate_scenarios(default_system, n_scenarios=1, rate=1.0).matrices[0]

    result = compute_gvc_for_transactions(default_system, T_new)

    np.testing.assert_allclose(result["DVA"] + result["FVA"], result["Exports"])
    # Firm and Other subsegments share coefficients and value added ratios, so
    # moving flows inside a base-sector block leaves country aggregates unchanged
    for column in ["DVA", "FVA", "DVX", "Exports", "GVCPR"]:
        np.testing.assert_allclose(result[column], base[column], rtol=1e-9)


def test_country_without_exports(single_country_system):
    """Test that GVCPR is undefined without exports."""
    result = compute_gvc_for_transactions(single_country_system, single_country_system.T)

    assert result["ISO_COUNTRY"].tolist() == ["A"]
    assert result.loc[0, "Exports"] == 0.0
    assert result.loc[0, "DVA"] == 0.0
    assert np.isnan(result.loc[0, "GVCPR"])


def test_negative_cell_policy(default_system, caplog):
    """Test the accept, warn and reject policies."""
    T = default_system.T.copy()
    T[1, 1] = -1.0

    assert check_negative_cells(default_system.T, NegativeCellPolicy.REJECT) == 0
    assert check_negative_cells(T, "accept") == 1

    result = compute_gvc_for_transactions(default_system, T)
    assert len(result) == 2

    with caplog.at_level(logging.WARNING):
        compute_gvc_for_transactions(default_system, T, negative_cells=NegativeCellPolicy.WARN)
    assert "1 negative cells" in caplog.text

    with pytest.raises(NegativeTransactionError):
        compute_gvc_for_transactions(default_system, T, negative_cells=NegativeCellPolicy.REJECT)
