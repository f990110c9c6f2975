"""
Readers module for sector-level base tables.

This module provides the immutable base table consumed by the twofold expansion,
a CSV reader for tables in the ICIO layout and the illustrative synthetic table.
"""

from emrio_tools.readers.base_table import BaseTable, SectorId
from emrio_tools.readers.synthetic import make_synthetic_base_table
from emrio_tools.readers.table_reader import read_base_table

__all__ = ["BaseTable", "SectorId", "make_synthetic_base_table", "read_base_table"]
