"""
Tests for cross-batch and intra-batch duplicate detection.
"""

import unittest
from datetime import datetime

from spending_engine.categorisation.preprocess import extract_merchant_name
from spending_engine.duplicates import (
    are_legitimately_separate,
    classify_pair,
    detect_duplicates,
    detect_internal_duplicates,
    get_duplicate_stats,
    get_enhanced_duplicate_stats,
    string_similarity,
)
from spending_engine.models import Transaction


def make_txn(txn_id, description, amount, date):
    return Transaction(
        id=txn_id,
        date=date,
        purchase_date=date,
        description=description,
        amount=amount,
        merchant=extract_merchant_name(description),
    )


class TestStringSimilarity(unittest.TestCase):

    def test_equal(self):
        self.assertEqual(string_similarity("UBER TRIP", "UBER TRIP"), 1.0)

    def test_containment(self):
        self.assertEqual(string_similarity("UBER", "uber trip"), 0.9)

    def test_word_overlap(self):
        self.assertAlmostEqual(string_similarity("starbucks #4521", "starbucks #7789"), 1 / 3)

    def test_empty(self):
        self.assertEqual(string_similarity("", "UBER"), 0.0)


class TestCrossBatchDuplicates(unittest.TestCase):

    def setUp(self):
        self.day = datetime(2026, 1, 10, 9, 30)

    def test_exact_duplicate(self):
        existing = make_txn("old", "NETFLIX.COM", 219.0, self.day)
        new = make_txn("new", "NETFLIX.COM", 219.0, datetime(2026, 1, 10, 18, 0))
        result = detect_duplicates([new], [existing])
        self.assertEqual(result.unique, [])
        self.assertEqual(len(result.duplicates), 1)
        self.assertEqual(result.duplicates[0].match_type, "exact")
        self.assertEqual(result.duplicates[0].confidence, 1.0)

    def test_same_merchant_different_store_number(self):
        existing = make_txn("old", "STARBUCKS #4521", 85.0, self.day)
        new = make_txn("new", "STARBUCKS #7789", 85.0, self.day)
        candidate = classify_pair(new, existing)
        self.assertEqual(candidate.match_type, "possible")
        self.assertEqual(candidate.confidence, 0.75)
        self.assertEqual(len(detect_duplicates([new], [existing]).duplicates), 1)

    def test_likely_duplicate_by_containment(self):
        existing = make_txn("old", "UBER TRIP", 120.0, self.day)
        new = make_txn("new", "UBER TRIP HELP.UBER.COM", 120.0, self.day)
        candidate = classify_pair(new, existing)
        self.assertEqual(candidate.match_type, "likely")
        self.assertEqual(candidate.confidence, 0.95)

    def test_different_amount_is_unique(self):
        existing = make_txn("old", "NETFLIX.COM", 219.0, self.day)
        new = make_txn("new", "NETFLIX.COM", 299.0, self.day)
        result = detect_duplicates([new], [existing])
        self.assertEqual(result.unique, [new])

    def test_next_day_same_merchant(self):
        existing = make_txn("old", "CHIPOTLE 1234", 150.0, self.day)
        new = make_txn("new", "CHIPOTLE 1234", 150.0, datetime(2026, 1, 11, 9, 30))
        candidate = classify_pair(new, existing)
        self.assertEqual(candidate.confidence, 0.75)

    def test_three_days_apart_is_unique(self):
        existing = make_txn("old", "CHIPOTLE 1234", 150.0, self.day)
        new = make_txn("new", "CHIPOTLE 1234", 150.0, datetime(2026, 1, 13, 9, 30))
        self.assertIsNone(classify_pair(new, existing))
        self.assertEqual(detect_duplicates([new], [existing]).unique, [new])

    def test_first_qualifying_match_is_used(self):
        next_day = make_txn("next-day", "CHIPOTLE 1234", 150.0, datetime(2026, 1, 11, 9, 30))
        same_day = make_txn("same-day", "CHIPOTLE 1234", 150.0, self.day)
        new = make_txn("new", "CHIPOTLE 1234", 150.0, self.day)
        result = detect_duplicates([new], [next_day, same_day])
        self.assertEqual(result.duplicates[0].existing_transaction.id, "next-day")
        self.assertEqual(result.duplicates[0].confidence, 0.75)

    def test_duplicate_stats(self):
        existing = [make_txn("old", "NETFLIX.COM", 219.0, self.day)]
        new = [
            make_txn("dup", "NETFLIX.COM", 219.0, self.day),
            make_txn("fresh", "SPOTIFY", 99.0, self.day),
        ]
        stats = get_duplicate_stats(detect_duplicates(new, existing))
        self.assertEqual(stats, {"total": 2, "unique": 1, "exact": 1, "likely": 0, "possible": 0})


class TestInternalDuplicates(unittest.TestCase):

    def setUp(self):
        self.day = datetime(2026, 2, 3)

    def test_identical_subscription_charges_are_legitimate(self):
        txns = [
            make_txn("a", "NETFLIX.COM", 219.0, self.day),
            make_txn("b", "NETFLIX.COM", 219.0, self.day),
        ]
        result = detect_internal_duplicates(txns)
        self.assertEqual(len(result.internal_duplicates), 1)
        self.assertEqual(result.internal_duplicates[0].match_type, "exact")
        self.assertTrue(result.internal_duplicates[0].is_legitimate)
        self.assertEqual(len(result.transactions), 2)

    def test_identical_restaurant_charges_flagged(self):
        txns = [
            make_txn("a", "CHIPOTLE 1234", 150.0, self.day),
            make_txn("b", "CHIPOTLE 1234", 150.0, self.day),
        ]
        duplicate = detect_internal_duplicates(txns).internal_duplicates[0]
        self.assertFalse(duplicate.is_legitimate)

    def test_different_amounts_not_compared(self):
        txns = [
            make_txn("a", "CHIPOTLE 1234", 150.0, self.day),
            make_txn("b", "CHIPOTLE 1234", 151.0, self.day),
        ]
        self.assertEqual(detect_internal_duplicates(txns).internal_duplicates, [])

    def test_unrelated_merchants_not_flagged(self):
        txns = [
            make_txn("a", "CHIPOTLE 1234", 150.0, self.day),
            make_txn("b", "TARGET 0042", 150.0, self.day),
        ]
        self.assertEqual(detect_internal_duplicates(txns).internal_duplicates, [])

    def test_legitimately_separate_requires_subscription_service(self):
        a = make_txn("a", "CLAUDE.AI SUBSCRIPTION", 400.0, self.day)
        b = make_txn("b", "CLAUDE.AI SUBSCRIPTION", 400.0, self.day)
        c = make_txn("c", "COSTCO WHSE", 400.0, self.day)
        self.assertTrue(are_legitimately_separate(a, b))
        self.assertFalse(are_legitimately_separate(a, c))

    def test_enhanced_stats(self):
        txns = [
            make_txn("a", "NETFLIX.COM", 219.0, self.day),
            make_txn("b", "NETFLIX.COM", 219.0, self.day),
            make_txn("c", "SPOTIFY", 99.0, self.day),
        ]
        stats = get_enhanced_duplicate_stats(detect_internal_duplicates(txns))
        self.assertEqual(stats["total"], 3)
        self.assertEqual(stats["internal_duplicates"], 1)
        self.assertEqual(stats["internal_exact"], 1)
        self.assertEqual(stats["internal_legitimate"], 1)


if __name__ == '__main__':
    unittest.main()
