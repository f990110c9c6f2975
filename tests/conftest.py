"""Fixtures for testing the EMRIO robustness package."""

import numpy as np
import pytest

from emrio_tools.configurations import AnalysisConfig, MonteCarloConfig, default_firm_shares
from emrio_tools.expansion import TwofoldSystem
from emrio_tools.readers import BaseTable, make_synthetic_base_table

# Small two-country, one-sector table without OUT row or column.
# Output is 40 for both sectors, from row sums and from column sums + VA.
SAMPLE_DATA = """CountryInd,,A,B,A,B
industryInd,,AGR,AGR,FD,FD
CountryInd,industryInd,,,,
A,AGR,10,5,20,5
B,AGR,4,8,6,22
VA,VA,26,27,,"""


@pytest.fixture
def sample_csv(tmp_path):
    """Write the small sample table to a CSV file."""
    path = tmp_path / "sample_table.csv"
    path.write_text(SAMPLE_DATA)
    return path


@pytest.fixture(scope="session")
def synthetic_table() -> BaseTable:
    """The illustrative two-country, three-sector table."""
    return make_synthetic_base_table()


@pytest.fixture(scope="session")
def default_shares():
    """Illustrative firm shares for countries A and B."""
    return default_firm_shares()


@pytest.fixture(scope="session")
def default_system(synthetic_table, default_shares) -> TwofoldSystem:
    """Twofold system of the synthetic table with the illustrative shares."""
    return TwofoldSystem.from_base_table(synthetic_table, default_shares)


@pytest.fixture
def single_country_table() -> BaseTable:
    """A closed economy with two sectors, so no cross-border links exist."""
    T = np.array([[10.0, 20.0], [30.0, 40.0]])
    y = np.array([70.0, 80.0])
    x = T.sum(axis=1) + y
    return BaseTable(
        T=T,
        x=x,
        y=y,
        va=x - T.sum(axis=0),
        y_s=y.reshape(-1, 1),
        countries=["A", "A"],
        sectors=["AGR", "MFG"],
        destinations=["A"],
    )


@pytest.fixture
def single_country_system(single_country_table) -> TwofoldSystem:
    """Twofold system of the closed economy."""
    shares = {("A", "AGR"): 0.4, ("A", "MFG"): 0.3}
    return TwofoldSystem.from_base_table(single_country_table, shares)


@pytest.fixture
def small_analysis_config(default_shares) -> AnalysisConfig:
    """Analysis configuration with few scenarios for fast runs."""
    return AnalysisConfig(
        row_shares=default_shares,
        monte_carlo=MonteCarloConfig(n_scenarios=5),
    )
