"""
JSON persistence for the transaction history.
"""

import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .models import Transaction


logger = logging.getLogger(__name__)


class TransactionStore:
    """Stores transactions as a JSON array with ISO-8601 dates."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Optional[List[Transaction]]:
        """
        Load stored transactions.

        Returns:
            Transactions, or None when nothing is stored or the file is unreadable
        """
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return [Transaction.from_dict(item) for item in data]
        except (OSError, ValueError, TypeError, KeyError, AttributeError) as e:
            logger.error(f"Failed to load transactions from {self.path}: {e}")
            return None

    def save(self, transactions: Sequence[Transaction]) -> bool:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump([t.to_dict() for t in transactions], f)
            os.replace(tmp_path, self.path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save transactions to {self.path}: {e}")
            return False

    def merge(self, new_transactions: Sequence[Transaction]) -> List[Transaction]:
        """Append transactions to the stored history and save, newest first."""
        merged = list(self.load() or []) + list(new_transactions)
        merged.sort(key=lambda t: t.date, reverse=True)
        self.save(merged)
        return merged

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Failed to clear transactions at {self.path}: {e}")
