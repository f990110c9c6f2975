"""Tests for the base table."""

import numpy as np
import pytest

from emrio_tools.errors import ConfigurationError
from emrio_tools.readers import BaseTable


def _table_kwargs():
    T = np.array([[10.0, 5.0], [4.0, 8.0]])
    y_s = np.array([[20.0, 5.0], [6.0, 22.0]])
    y = y_s.sum(axis=1)
    x = T.sum(axis=1) + y
    return {
        "T": T,
        "x": x,
        "y": y,
        "va": x - T.sum(axis=0),
        "y_s": y_s,
        "countries": ["A", "B"],
        "sectors": ["AGR", "AGR"],
        "destinations": ["A", "B"],
    }


def test_base_table_properties():
    """Test derived properties of a valid table."""
    table = BaseTable(**_table_kwargs())

    assert table.n_sectors == 2
    assert table.sector_ids == [("A", "AGR"), ("B", "AGR")]
    assert table.country_list == ["A", "B"]
    np.testing.assert_allclose(table.x, [40.0, 40.0])
    np.testing.assert_allclose(table.technical_coefficients, [[0.25, 0.125], [0.1, 0.2]])
    np.testing.assert_allclose(table.value_added_coefficients, [0.65, 0.675])
    assert table.identity_residual() < 1e-12


def test_base_table_is_read_only():
    """Test that the arrays cannot be modified after construction."""
    table = BaseTable(**_table_kwargs())

    with pytest.raises(ValueError):
        table.T[0, 0] = 1.0
    with pytest.raises(AttributeError):
        table.x = np.zeros(2)


@pytest.mark.parametrize(
    "field, value, message",
    [
        ("T", np.ones((2, 3)), "T should have shape"),
        ("va", np.ones(3), "va should have length"),
        ("countries", ["A"], "country and sector labels"),
        ("destinations", ["A"], "y_s should have shape"),
        ("y", np.array([1.0, 2.0]), "does not add up"),
        ("x", np.array([np.nan, 40.0]), "missing or infinite"),
    ],
)
def test_base_table_validation(field, value, message):
    """Test that inconsistent tables are rejected."""
    kwargs = _table_kwargs()
    kwargs[field] = value

    with pytest.raises(ConfigurationError, match=message):
        BaseTable(**kwargs)


def test_base_table_duplicate_sectors():
    """Test that (country, sector) labels must be unique."""
    kwargs = _table_kwargs()
    kwargs["countries"] = ["A", "A"]
    with pytest.raises(ConfigurationError, match="unique"):
        BaseTable(**kwargs)


def test_base_table_missing_destination():
    """Test that every origin country must be a destination."""
    kwargs = _table_kwargs()
    kwargs["destinations"] = ["A", "C"]
    with pytest.raises(ConfigurationError, match="missing from final demand"):
        BaseTable(**kwargs)


def test_to_frame_layout(synthetic_table):
    """Test the CSV layout of a table."""
    frame = synthetic_table.to_frame()

    assert frame.shape == (8, 6 + 2 + 1)
    assert frame.index[-2:].tolist() == [("VA", "VA"), ("OUT", "OUT")]
    assert frame.columns[-3:].tolist() == [("A", "FD"), ("B", "FD"), ("OUT", "OUT")]
    np.testing.assert_allclose(frame.loc[("VA", "VA")].iloc[:6], synthetic_table.va)
    np.testing.assert_allclose(frame[("OUT", "OUT")].iloc[:6], synthetic_table.x)
