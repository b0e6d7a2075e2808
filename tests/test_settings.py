"""
Tests for user settings, migrations, persistence and category management.
"""

import json
import os
import tempfile
import unittest
from datetime import datetime

from spending_engine.config import (
    CURRENT_VERSION,
    MIGRATIONS,
    SettingsStorageError,
    SettingsStore,
    UserSettings,
    get_category_or_fallback,
    migrate_settings,
    resolve_categories,
    settings_from_document,
)
from spending_engine.models import SplitRuleBranch, SplitRuleCondition


NOW = datetime(2026, 3, 1, 12, 0)


class TestMigrations(unittest.TestCase):

    def test_one_step_per_version(self):
        self.assertEqual(len(MIGRATIONS), CURRENT_VERSION - 1)

    def test_v1_document_reaches_current_version(self):
        migrated = migrate_settings({"version": 1, "budgets": {}})
        self.assertEqual(migrated["version"], CURRENT_VERSION)
        self.assertEqual(migrated["custom_categories"], [])
        self.assertEqual(migrated["category_overrides"], [])
        self.assertEqual(migrated["subscriptions"], {})
        self.assertIsNone(migrated["preferences"]["user_name"])
        self.assertTrue(migrated["preferences"]["enable_greetings"])
        self.assertEqual(migrated["split_rules"], [])
        self.assertEqual(migrated["suggestion_settings"], {})

    def test_missing_version_treated_as_v1(self):
        self.assertEqual(migrate_settings({})["version"], CURRENT_VERSION)

    def test_input_is_not_modified(self):
        document = {"version": 3, "preferences": {"user_name": "Sam"}}
        migrate_settings(document)
        self.assertEqual(document, {"version": 3, "preferences": {"user_name": "Sam"}})

    def test_existing_values_are_preserved(self):
        document = {
            "version": 3,
            "preferences": {"user_name": "Sam", "enable_greetings": False},
        }
        migrated = migrate_settings(document)
        self.assertEqual(migrated["preferences"]["user_name"], "Sam")
        self.assertFalse(migrated["preferences"]["enable_greetings"])
        self.assertTrue(migrated["preferences"]["enable_fun_messages"])

    def test_rejects_non_object(self):
        with self.assertRaises(TypeError):
            migrate_settings(["not", "a", "document"])

    def test_saved_budgets_merge_over_defaults(self):
        settings = settings_from_document({
            "version": 5,
            "budgets": {"personal": {"enabled": False, "amount": 100}},
        })
        self.assertFalse(settings.budgets["personal"].enabled)
        self.assertEqual(settings.budgets["personal"].amount, 100)
        self.assertTrue(settings.budgets["nightlife"].enabled)
        self.assertEqual(settings.budgets["nightlife"].amount, 12000)

    def test_old_document_round_trips_subscriptions(self):
        settings = settings_from_document({
            "version": 2,
            "preferences": {"user_name": "Sam"},
        })
        self.assertEqual(settings.version, CURRENT_VERSION)
        self.assertEqual(settings.preferences.user_name, "Sam")
        self.assertEqual(settings.subscriptions.subscriptions, [])


class TestSettingsStore(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, "settings.json")
        self.store = SettingsStore(self.path)

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_missing_file_gives_defaults(self):
        settings = self.store.load()
        self.assertEqual(settings.version, CURRENT_VERSION)
        self.assertEqual(settings.custom_rules, [])

    def test_round_trip(self):
        settings = UserSettings()
        settings.add_custom_rule("coffee", "personal", now=NOW, priority=3)
        settings.learn_pattern("STARBUCKS", "eating-out-delivery", NOW)
        settings.preferences.user_name = "Sam"
        self.assertTrue(self.store.save(settings))

        loaded = self.store.load()
        self.assertEqual(loaded.custom_rules[0].pattern, "coffee")
        self.assertEqual(loaded.custom_rules[0].priority, 3)
        self.assertEqual(loaded.learned_patterns[0].merchant_pattern, "STARBUCKS")
        self.assertEqual(loaded.preferences.user_name, "Sam")
        self.assertEqual(loaded.to_dict(), settings.to_dict())

    def test_corrupt_file_falls_back_to_defaults(self):
        with open(self.path, "w") as f:
            f.write("{not json")
        with self.assertLogs("spending_engine.config.settings_storage", level="ERROR"):
            settings = self.store.load()
        self.assertEqual(settings.to_dict(), UserSettings().to_dict())

    def test_load_strict_raises(self):
        with open(self.path, "w") as f:
            f.write("{not json")
        with self.assertRaises(SettingsStorageError):
            self.store.load_strict()

    def test_clear(self):
        self.store.save(UserSettings())
        self.store.clear()
        self.assertFalse(os.path.exists(self.path))
        self.store.clear()

    def test_saved_document_is_versioned_json(self):
        self.store.save(UserSettings())
        with open(self.path) as f:
            data = json.load(f)
        self.assertEqual(data["version"], CURRENT_VERSION)


class TestCategoryManagement(unittest.TestCase):

    def setUp(self):
        self.settings = UserSettings()

    def test_default_catalogue(self):
        categories = resolve_categories(self.settings)
        self.assertEqual(len(categories), 11)
        self.assertEqual(categories["personal"].name, "Personal")

    def test_rename_default_category(self):
        self.settings.update_default_category("personal", now=NOW, name="Me")
        category = resolve_categories(self.settings)["personal"]
        self.assertEqual(category.name, "Me")
        self.assertEqual(category.color, "#3B82F6")
        self.assertTrue(category.has_budget)

    def test_soft_delete_and_restore(self):
        rule = self.settings.add_custom_rule("bar", "nightlife", now=NOW)
        self.settings.delete_default_category("nightlife", now=NOW)
        self.assertNotIn("nightlife", resolve_categories(self.settings))
        self.assertEqual(rule.category_id, "uncategorized")

        self.settings.restore_default_category("nightlife", now=NOW)
        self.assertIn("nightlife", resolve_categories(self.settings))

    def test_reset_drops_override(self):
        self.settings.update_default_category("personal", now=NOW, name="Me")
        self.settings.reset_default_category("personal")
        self.assertEqual(resolve_categories(self.settings)["personal"].name, "Personal")

    def test_uncategorized_is_protected(self):
        with self.assertRaises(ValueError):
            self.settings.delete_default_category("uncategorized")
        with self.assertRaises(ValueError):
            self.settings.update_default_category("uncategorized", name="Other")

    def test_custom_category_lifecycle(self):
        category_id = self.settings.add_custom_category("Pets", "#000000", "Dog", now=NOW)
        self.assertIn(category_id, resolve_categories(self.settings))
        self.assertFalse(self.settings.budgets[category_id].enabled)

        rule = self.settings.add_custom_rule("vet", category_id, now=NOW)
        pattern = self.settings.learn_pattern("PET STORE", category_id, NOW)
        split = self.settings.add_split_rule(
            "PETCO",
            category_id,
            [SplitRuleBranch(SplitRuleCondition("amount", "gt", 500), category_id)],
            now=NOW,
        )

        self.settings.delete_custom_category(category_id)
        self.assertNotIn(category_id, resolve_categories(self.settings))
        self.assertNotIn(category_id, self.settings.budgets)
        self.assertEqual(rule.category_id, "uncategorized")
        self.assertEqual(pattern.category_id, "uncategorized")
        self.assertEqual(split.default_category_id, "uncategorized")
        self.assertEqual(split.conditions[0].category_id, "uncategorized")

    def test_delete_custom_category_rejects_default_id(self):
        with self.assertRaises(ValueError):
            self.settings.delete_custom_category("personal")

    def test_category_fallback(self):
        self.assertEqual(get_category_or_fallback("missing", self.settings).id, "uncategorized")
        self.settings.delete_default_category("personal", now=NOW)
        self.assertEqual(get_category_or_fallback("personal", self.settings).id, "uncategorized")

    def test_negative_budget_rejected(self):
        with self.assertRaises(ValueError):
            self.settings.set_budget("personal", True, -1)


if __name__ == '__main__':
    unittest.main()
