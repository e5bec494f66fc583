import json
import tempfile
import unittest
from pathlib import Path

from emotionscore.affect_rules import (
    DEFAULT_NEGATORS,
    EMOTION_CATALOG,
    default_affect_rules,
    load_affect_rules,
)
from emotionscore.affect_scorer import AffectScorer


RULES_YAML = """
patterns:
  '\\bmeh\\b': [-0.4, -0.3, -0.1, 0.8]
  '\\bbroken(': [0.1, 0.1, 0.1, 0.5]
  '\\bsomething\\b': "not a signal"
negators:
  - hardly
emotions:
  calm:
    valence: [0.2, 0.6]
    arousal: [-0.9, -0.2]
    dominance: [0.0, 0.5]
    weight: 0.9
  broken:
    valence: [0.5]
"""


class TestAffectRules(unittest.TestCase):
    def test_default_tables_are_populated(self):
        rules = default_affect_rules()
        self.assertEqual(len(rules.emotions), 22)
        self.assertIn("neutral", EMOTION_CATALOG)
        self.assertIn("can't", rules.negators)
        self.assertTrue(any(rule.pattern == r"\bnot\b" and not rule.negatable for rule in rules.patterns))
        self.assertIsNotNone(rules.region("frustration"))
        self.assertIsNone(rules.region("neutral"))

    def test_overlapping_phrases_count_once(self):
        rules = default_affect_rules()
        for text in ("i am tired of this", "that was disappointing", "thank you"):
            with self.subTest(text=text):
                matched = [rule.pattern for rule in rules.patterns if rule.compiled.search(text)]
                self.assertEqual(len(matched), 1, matched)

    def test_missing_file_keeps_defaults(self):
        with self.assertLogs("emotionscore.affect_rules", level="WARNING"):
            rules = load_affect_rules("/nonexistent/affect_rules.yaml")
        self.assertEqual(rules.negators, DEFAULT_NEGATORS)

    def test_yaml_overlay_extends_tables_and_skips_bad_entries(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            rules_path = Path(tmp_dir) / "rules.yaml"
            rules_path.write_text(RULES_YAML, encoding="utf-8")
            with self.assertLogs("emotionscore.affect_rules", level="WARNING") as captured:
                rules = load_affect_rules(rules_path)

        patterns = {rule.pattern for rule in rules.patterns}
        self.assertIn(r"\bmeh\b", patterns)
        self.assertNotIn(r"\bbroken(", patterns)
        self.assertNotIn(r"\bsomething\b", patterns)
        self.assertIn("hardly", rules.negators)
        self.assertEqual(rules.region("calm").weight, 0.9)
        self.assertIsNone(rules.region("broken"))
        self.assertEqual(len(captured.output), 3)

        scorer = AffectScorer(rules=rules)
        self.assertLess(scorer.score("meh").valence, 0)
        self.assertLess(scorer.score("I am hardly happy").valence, 0)

    def test_json_overlay_adds_emoji(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            rules_path = Path(tmp_dir) / "rules.json"
            rules_path.write_text(
                json.dumps({"emoji": {"\U0001F525": {"valence": 0.7, "arousal": 0.8, "dominance": 0.5, "weight": 0.8}}}),
                encoding="utf-8",
            )
            rules = load_affect_rules(rules_path)

        self.assertIn("\U0001F525", dict(rules.emoji))
        self.assertGreater(AffectScorer(rules=rules).score("\U0001F525").valence, 0)


if __name__ == "__main__":
    unittest.main()
