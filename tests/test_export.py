"""
Tests for transaction export and the transaction store.
"""

import json
import os
import tempfile
import unittest
from datetime import datetime

from spending_engine.config.settings import UserSettings
from spending_engine.ingest import CSV_COLUMNS, export_to_csv, export_to_json
from spending_engine.models import Transaction
from spending_engine.storage import TransactionStore


def make_txn(txn_id="t1", category="entertainment", date=datetime(2026, 1, 4)):
    return Transaction(
        id=txn_id,
        date=date,
        purchase_date=datetime(2026, 1, 3),
        description="NETFLIX.COM 888-638-3549",
        amount=219.0,
        merchant="NETFLIX.COM",
        category=category,
    )


class TestCSVExport(unittest.TestCase):

    def test_header_and_row(self):
        lines = export_to_csv([make_txn()]).splitlines()
        self.assertEqual(lines[0], ",".join(CSV_COLUMNS))
        self.assertEqual(
            lines[1],
            "2026-01-04,2026-01-03,NETFLIX.COM,,Entertainment,219.00,NETFLIX.COM 888-638-3549",
        )

    def test_empty_export_has_header(self):
        self.assertEqual(export_to_csv([]).splitlines(), [",".join(CSV_COLUMNS)])

    def test_unknown_category_shown_by_id(self):
        lines = export_to_csv([make_txn(category="gone")]).splitlines()
        self.assertIn(",gone,", lines[1])


class TestJSONExport(unittest.TestCase):

    def test_records(self):
        records = json.loads(export_to_json([make_txn()]))
        self.assertEqual(records[0]["id"], "t1")
        self.assertEqual(records[0]["date"], "2026-01-04T00:00:00")
        self.assertEqual(records[0]["category"], "entertainment")
        self.assertEqual(records[0]["category_name"], "Entertainment")
        self.assertEqual(records[0]["amount"], 219.0)

    def test_custom_category_name(self):
        settings = UserSettings()
        category_id = settings.add_custom_category("Streaming", "#000000", "Tv")
        records = json.loads(export_to_json([make_txn(category=category_id)], settings))
        self.assertEqual(records[0]["category_name"], "Streaming")

    def test_renamed_default_category(self):
        settings = UserSettings()
        settings.update_default_category("entertainment", name="Fun")
        records = json.loads(export_to_json([make_txn()], settings))
        self.assertEqual(records[0]["category_name"], "Fun")


class TestTransactionStore(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.store = TransactionStore(os.path.join(self.tmpdir.name, "transactions.json"))

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_missing_file(self):
        self.assertIsNone(self.store.load())

    def test_round_trip(self):
        txn = make_txn()
        self.assertTrue(self.store.save([txn]))
        self.assertEqual(self.store.load(), [txn])

    def test_merge_sorts_newest_first(self):
        self.store.save([make_txn("old", date=datetime(2026, 1, 1))])
        merged = self.store.merge([make_txn("new", date=datetime(2026, 2, 1))])
        self.assertEqual([t.id for t in merged], ["new", "old"])
        self.assertEqual([t.id for t in self.store.load()], ["new", "old"])

    def test_corrupt_file(self):
        with open(self.store.path, "w") as f:
            f.write("[{")
        with self.assertLogs("spending_engine.storage", level="ERROR"):
            self.assertIsNone(self.store.load())

    def test_clear(self):
        self.store.save([make_txn()])
        self.store.clear()
        self.assertIsNone(self.store.load())


if __name__ == '__main__':
    unittest.main()
