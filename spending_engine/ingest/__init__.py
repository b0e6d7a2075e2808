"""
Statement ingestion and export.
"""

from .csv_parser import CSVParseError, parse_csv, parse_date, parse_amount
from .export import (
    CSV_COLUMNS,
    transactions_to_dataframe,
    export_to_csv,
    export_to_json,
    export_records,
)

__all__ = [
    "CSVParseError",
    "parse_csv",
    "parse_date",
    "parse_amount",
    "CSV_COLUMNS",
    "transactions_to_dataframe",
    "export_to_csv",
    "export_to_json",
    "export_records",
]
