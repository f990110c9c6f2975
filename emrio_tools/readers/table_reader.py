"""
Module for reading sector-level base tables from CSV files.

The expected layout follows the ICIO convention of two header rows and two index
columns, both indexed by (country, industry) pairs:

    CountryInd,,A,A,B,B,A,B,OUT
    industryInd,,AGR,MFG,AGR,MFG,FD,FD,OUT
    CountryInd,industryInd,,,,,,,
    A,AGR,...
    ...
    VA,VA,...
    OUT,OUT,...

Industry columns carry the intermediate transactions, one FD column per destination
country carries final demand, and the VA row carries value added. The OUT row (or
OUT column) is optional; when it is missing, output is computed from row sums.
"""

import logging
from pathlib import Path

import numpy as np
import pandas as pd

from emrio_tools.errors import ConfigurationError
from emrio_tools.readers.base_table import INDEX_NAMES, BaseTable

logger = logging.getLogger(__name__)

# Special elements that are not base sectors
SPECIAL_ELEMENTS = {
    "VA": "Value added",
    "OUT": "Total output",
}

FINAL_DEMAND_CODE = "FD"


def _output_from_sums(T: np.ndarray, y: np.ndarray) -> np.ndarray:
    # total output = intermediate sales + final demand
    return T.sum(axis=1) + y


def read_base_table(csv_path: str | Path) -> BaseTable:
    """
    Read a base table from a CSV file.

    Args:
        csv_path: Path to the CSV file containing the table

    Returns:
        BaseTable with the transactions, vectors and destination final demand

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigurationError: If the file layout is invalid
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"File not found: {csv_path}")

    try:
        raw_data = pd.read_csv(csv_path, header=[0, 1], index_col=[0, 1])
    except Exception as e:
        raise ConfigurationError(f"Invalid file format: {e}") from e

    raw_data.index.names = INDEX_NAMES
    raw_data.columns.names = INDEX_NAMES

    sector_ids = [
        (str(country), str(sector))
        for country, sector in raw_data.index
        if country not in SPECIAL_ELEMENTS
    ]
    fd_columns = [col for col in raw_data.columns if col[1] == FINAL_DEMAND_CODE]
    logger.debug(f"Found {len(sector_ids)} base sectors and {len(fd_columns)} FD columns")

    if not fd_columns:
        raise ConfigurationError("No final demand (FD) columns found")
    if ("VA", "VA") not in raw_data.index:
        raise ConfigurationError("No value added (VA) row found")

    try:
        T = raw_data.loc[sector_ids, sector_ids].to_numpy(dtype=float)
        y_s = raw_data.loc[sector_ids, fd_columns].to_numpy(dtype=float)
        va = raw_data.loc[("VA", "VA"), sector_ids].to_numpy(dtype=float)
    except KeyError as e:
        raise ConfigurationError(f"Table rows and columns do not match: {e}") from e

    y = y_s.sum(axis=1)

    if ("OUT", "OUT") in raw_data.index:
        x = raw_data.loc[("OUT", "OUT"), sector_ids].to_numpy(dtype=float)
    elif ("OUT", "OUT") in raw_data.columns:
        x = raw_data.loc[sector_ids, ("OUT", "OUT")].to_numpy(dtype=float)
    else:
        logger.info("No OUT row or column found, computing output from sums")
        x = _output_from_sums(T, y)

    table = BaseTable(
        T=T,
        x=x,
        y=y,
        va=va,
        y_s=y_s,
        countries=[country for country, _ in sector_ids],
        sectors=[sector for _, sector in sector_ids],
        destinations=[str(col[0]) for col in fd_columns],
    )
    logger.info(f"Read base table with {table.n_sectors} sectors from {csv_path}")
    return table
