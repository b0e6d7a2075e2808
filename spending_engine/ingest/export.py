"""
Transaction export to CSV and JSON.
"""

import io
import json
import logging
from typing import Dict, List, Optional, Sequence

import pandas as pd

from ..config.categories import DEFAULT_CATEGORIES, resolve_categories
from ..models import Transaction


logger = logging.getLogger(__name__)

CSV_COLUMNS = ["Date", "Purchase Date", "Merchant", "Location", "Category", "Amount", "Description"]


def _category_names(settings=None) -> Dict[str, str]:
    categories = resolve_categories(settings) if settings is not None else DEFAULT_CATEGORIES
    return {category_id: category.name for category_id, category in categories.items()}


def transactions_to_dataframe(
    transactions: Sequence[Transaction], settings=None
) -> pd.DataFrame:
    """
    Tabulate transactions with display columns.

    Unknown or deleted category ids are shown by their id.
    """
    names = _category_names(settings)
    rows = [
        {
            "Date": txn.date.strftime("%Y-%m-%d"),
            "Purchase Date": txn.purchase_date.strftime("%Y-%m-%d"),
            "Merchant": txn.merchant,
            "Location": txn.location,
            "Category": names.get(txn.category, txn.category),
            "Amount": f"{txn.amount:.2f}",
            "Description": txn.description,
        }
        for txn in transactions
    ]
    return pd.DataFrame(rows, columns=CSV_COLUMNS)


def export_to_csv(transactions: Sequence[Transaction], settings=None) -> str:
    csv_buffer = io.StringIO()
    transactions_to_dataframe(transactions, settings).to_csv(csv_buffer, index=False)
    logger.info(f"Exported {len(transactions)} transactions to CSV")
    return csv_buffer.getvalue()


def export_records(transactions: Sequence[Transaction], settings=None) -> List[Dict]:
    names = _category_names(settings)
    return [
        {
            "id": txn.id,
            "date": txn.date.isoformat(),
            "purchase_date": txn.purchase_date.isoformat(),
            "merchant": txn.merchant,
            "location": txn.location,
            "amount": txn.amount,
            "category": txn.category,
            "category_name": names.get(txn.category, txn.category),
            "description": txn.description,
        }
        for txn in transactions
    ]


def export_to_json(transactions: Sequence[Transaction], settings=None, indent: Optional[int] = 2) -> str:
    """Serialize transactions with ISO dates and resolved category names."""
    return json.dumps(export_records(transactions, settings), indent=indent)
