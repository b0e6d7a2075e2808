"""
Bank statement CSV parsing.

Expected layout: a header row followed by rows of
``date, purchase date, description, amount`` with dates such as
``04 Jan 2026``. Fields may be double-quoted to contain commas.
"""

import csv
import io
import logging
import random
import string
import time
from datetime import datetime
from typing import List, Optional

from ..categorisation.engine import TransactionCategorizer
from ..categorisation.preprocess import extract_location, extract_merchant_name
from ..models import Transaction


logger = logging.getLogger(__name__)

DATE_FORMAT = "%d %b %Y"
MIN_FIELDS = 4


class CSVParseError(Exception):
    """Raised when statement content cannot be parsed at all."""
    pass


def parse_date(value: str, now: Optional[datetime] = None) -> datetime:
    """
    Parse a statement date, falling back to ``now`` when it is malformed.
    """
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT)
    except (ValueError, AttributeError):
        logger.debug(f"Unparseable date {value!r}, using current time")
        return now or datetime.now()


def parse_amount(value: str) -> Optional[float]:
    """Absolute amount of a charge, or None if the field is not numeric."""
    try:
        return abs(float(value.replace(",", "").strip()))
    except (ValueError, AttributeError):
        return None


def _transaction_id(row_index: int) -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"txn-{row_index}-{int(time.time() * 1000)}-{suffix}"


def parse_csv(
    content: str,
    categorizer: Optional[TransactionCategorizer] = None,
    now: Optional[datetime] = None,
) -> List[Transaction]:
    """
    Parse statement CSV content into categorized transactions.

    Rows with fewer than four fields or a non-numeric amount are skipped.
    Malformed dates become ``now``.

    Args:
        content: CSV text including the header row
        categorizer: Categorizer to apply; defaults to built-in rules only
        now: Clock override for date fallback

    Returns:
        Transactions sorted newest first

    Raises:
        CSVParseError: If content is not text
    """
    if not isinstance(content, str):
        raise CSVParseError(f"CSV content must be text, got {type(content).__name__}")

    categorizer = categorizer or TransactionCategorizer()
    now = now or datetime.now()
    transactions = []
    skipped = 0

    reader = csv.reader(io.StringIO(content.strip()))
    try:
        rows = list(reader)
    except csv.Error as e:
        raise CSVParseError(f"Malformed CSV content: {e}") from e

    for index, row in enumerate(rows[1:], start=1):
        values = [value.strip() for value in row]
        if len(values) < MIN_FIELDS:
            if values:
                skipped += 1
            continue

        date_str, purchase_date_str, description, amount_str = values[:MIN_FIELDS]
        amount = parse_amount(amount_str)
        if amount is None:
            logger.warning(f"Skipping row {index}: unparseable amount {amount_str!r}")
            skipped += 1
            continue

        date = parse_date(date_str, now)
        transactions.append(Transaction(
            id=_transaction_id(index),
            date=date,
            purchase_date=parse_date(purchase_date_str, now),
            description=description,
            amount=amount,
            merchant=extract_merchant_name(description),
            location=extract_location(description),
            category=categorizer.categorize(description, amount, date),
        ))

    if skipped:
        logger.warning(f"Skipped {skipped} malformed rows")
    logger.info(f"Parsed {len(transactions)} transactions from CSV")

    transactions.sort(key=lambda t: t.date, reverse=True)
    return transactions
