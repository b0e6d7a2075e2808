"""
Tests for fuzzy merchant matching.
"""

import unittest

from spending_engine.matching.fuzzy_match import (
    calculate_similarity,
    find_best_matches,
    fuzzy_match,
    fuzzy_pattern_match,
    levenshtein_distance,
    normalize_merchant_name,
    token_similarity,
)


class TestStringDistance(unittest.TestCase):
    """Levenshtein distance and character similarity."""

    def test_levenshtein_distance(self):
        self.assertEqual(levenshtein_distance("kitten", "sitting"), 3)
        self.assertEqual(levenshtein_distance("", "abc"), 3)
        self.assertEqual(levenshtein_distance("same", "same"), 0)

    def test_levenshtein_is_symmetric(self):
        values = ["kitten", "sitting", "", "#", "---", "Uber Eats", "NETFLIX.COM", "netflix"]
        for a in values:
            for b in values:
                self.assertEqual(levenshtein_distance(a, b), levenshtein_distance(b, a), (a, b))
                self.assertEqual(calculate_similarity(a, b), calculate_similarity(b, a), (a, b))

    def test_similarity_is_case_insensitive(self):
        self.assertEqual(calculate_similarity("Uber", "UBER"), 1.0)

    def test_similarity_of_two_empty_strings(self):
        self.assertEqual(calculate_similarity("", ""), 1.0)

    def test_token_similarity_is_jaccard(self):
        self.assertAlmostEqual(token_similarity("a b", "b c"), 1 / 3)
        self.assertEqual(token_similarity("", ""), 1.0)
        self.assertEqual(token_similarity("word", ""), 0.0)


class TestNormalizeMerchantName(unittest.TestCase):

    def test_strips_legal_suffix(self):
        self.assertEqual(normalize_merchant_name("Starbucks Corp."), "starbucks")
        self.assertEqual(normalize_merchant_name("Acme Widgets LLC"), "acme widgets")

    def test_strips_processor_id_and_special_chars(self):
        self.assertEqual(normalize_merchant_name("SQ *COFFEE SHOP*1234"), "sq coffee shop")

    def test_strips_trailing_store_number(self):
        self.assertEqual(normalize_merchant_name("CHIPOTLE 1234"), "chipotle")

    def test_empty_input(self):
        self.assertEqual(normalize_merchant_name(None), "")
        self.assertEqual(normalize_merchant_name(""), "")


class TestFuzzyMatch(unittest.TestCase):

    def test_equal_after_normalization(self):
        self.assertEqual(fuzzy_match("Netflix", "NETFLIX"), 1.0)

    def test_one_empty_side_scores_zero(self):
        self.assertEqual(fuzzy_match("", "abc"), 0.0)
        self.assertEqual(fuzzy_match("abc", ""), 0.0)

    def test_both_empty_are_equal(self):
        self.assertEqual(fuzzy_match("", ""), 1.0)

    def test_containment_penalized_by_length_difference(self):
        expected = 0.8 + 0.2 - (5 / 9) * 0.2
        self.assertAlmostEqual(fuzzy_match("uber", "uber eats"), expected)

    def test_unrelated_names_score_low(self):
        self.assertLess(fuzzy_match("starbucks", "walmart"), 0.5)

    def test_scores_stay_in_unit_interval(self):
        pairs = [
            ("amazon mktp", "amazon.com"),
            ("uber trip", "uber eats"),
            ("costco whse", "costco wholesale"),
            ("x", "completely different merchant"),
        ]
        for search, target in pairs:
            score = fuzzy_match(search, target)
            self.assertGreaterEqual(score, 0.0)
            self.assertLessEqual(score, 1.0)

    def test_identical_inputs_score_one(self):
        for value in ["netflix", "Uber Eats", "SQ *COFFEE SHOP*1234", "#", "---", "CHIPOTLE 1234"]:
            self.assertEqual(fuzzy_match(value, value), 1.0, value)
            self.assertEqual(fuzzy_match(value, value, normalize_first=False), 1.0, value)

    def test_without_normalization_only_lowercases(self):
        self.assertEqual(fuzzy_match("Starbucks Corp", "starbucks corp", normalize_first=False), 1.0)
        self.assertLess(fuzzy_match("Starbucks Corp", "starbucks", normalize_first=False), 1.0)


class TestBestMatches(unittest.TestCase):

    def test_ranks_and_filters_candidates(self):
        matches = find_best_matches("starbucks", ["WALMART", "STARBUCKS #123", "STARBUCKS"])
        values = [m["value"] for m in matches]
        self.assertEqual(values[0], "STARBUCKS")
        self.assertIn("STARBUCKS #123", values)
        self.assertNotIn("WALMART", values)

    def test_max_results(self):
        matches = find_best_matches("uber", ["UBER"] * 10, max_results=3)
        self.assertEqual(len(matches), 3)

    def test_fuzzy_pattern_match(self):
        self.assertTrue(fuzzy_pattern_match("NETFLIX.COM", "netflix"))
        self.assertFalse(fuzzy_pattern_match("WALMART SUPERCENTER", "netflix"))


if __name__ == '__main__':
    unittest.main()
