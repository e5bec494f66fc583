import unittest

from emotionscore.affect_rules import EMOTION_CATALOG
from emotionscore.affect_scorer import (
    DEFAULT_AFFECT,
    AffectScore,
    AffectScorer,
    AffectScorerConfig,
    describe_affect,
)


SAMPLE_TEXTS = [
    "I'm sick of everything today",
    "hey bro whats up lol",
    "I am SO excited about this!!!",
    "I don't know what to do...",
    "Why does this keep happening???",
    "Thanks so much :)",
    "nope",
    "THIS IS AWFUL",
    "😢😢",
    "The meeting moved to Thursday at noon.",
]


class TestAffectScorer(unittest.TestCase):
    def setUp(self):
        self.scorer = AffectScorer()

    def test_empty_input_returns_default_affect(self):
        for text in ("", "   ", "\n\t"):
            self.assertEqual(self.scorer.score(text), DEFAULT_AFFECT)
        self.assertEqual(DEFAULT_AFFECT.primary_emotion, "empathy")
        self.assertEqual(DEFAULT_AFFECT.confidence, 0.4)

    def test_dimensions_and_confidence_stay_in_range(self):
        for text in SAMPLE_TEXTS:
            with self.subTest(text=text):
                score = self.scorer.score(text)
                for value in (score.valence, score.arousal, score.dominance):
                    self.assertGreaterEqual(value, -1.0)
                    self.assertLessEqual(value, 1.0)
                self.assertGreaterEqual(score.confidence, 0.0)
                self.assertLessEqual(score.confidence, 0.95)
                self.assertIn(score.primary_emotion, EMOTION_CATALOG)
                if score.secondary_emotion is not None:
                    self.assertIn(score.secondary_emotion, EMOTION_CATALOG)
                    self.assertNotEqual(score.secondary_emotion, score.primary_emotion)

    def test_scoring_is_deterministic(self):
        other = AffectScorer()
        for text in SAMPLE_TEXTS:
            self.assertEqual(self.scorer.score(text), other.score(text))

    def test_negation_lowers_valence(self):
        happy = self.scorer.score("I am happy")
        unhappy = self.scorer.score("I am not happy")
        self.assertGreater(happy.valence, 0)
        self.assertLess(unhappy.valence, 0)
        self.assertLess(unhappy.valence, happy.valence)

    def test_negation_does_not_cross_clause_boundaries(self):
        score = self.scorer.score("I am not tired. I am happy")
        self.assertGreater(score.valence, 0.3)

    def test_negation_constants_are_configurable(self):
        softer = AffectScorer(config=AffectScorerConfig(negation_inversion=0.0, negation_dampening=1.0))
        default = self.scorer.score("I am not happy")
        flattened = softer.score("I am not happy")
        self.assertGreater(flattened.valence, default.valence)

    def test_frustrated_message_scores_negative(self):
        score = self.scorer.score("I'm sick of everything today")
        self.assertLess(score.valence, -0.3)
        self.assertIn(score.primary_emotion, {"sadness", "frustration"})

    def test_shouting_raises_arousal(self):
        quiet = self.scorer.score("this is awful")
        loud = self.scorer.score("THIS IS AWFUL")
        self.assertGreater(loud.arousal, quiet.arousal)
        self.assertGreater(loud.dominance, quiet.dominance)

    def test_caps_ratio_threshold_controls_shouting(self):
        lenient = AffectScorer(config=AffectScorerConfig(caps_ratio_threshold=0.5))
        mixed = "THIS IS awful"
        self.assertGreater(lenient.score(mixed).arousal, self.scorer.score(mixed).arousal)

    def test_emoticons_contribute(self):
        self.assertLess(self.scorer.score(":(").valence, 0)
        self.assertGreater(self.scorer.score(":)").valence, 0)

    def test_short_acknowledgement_is_neutral(self):
        score = self.scorer.score("ok")
        self.assertEqual(score.primary_emotion, "neutral")
        self.assertAlmostEqual(score.valence, 0.1)
        self.assertEqual(score.confidence, 0.4)

    def test_unmatched_longer_text_gets_curiosity_bias(self):
        score = self.scorer.score("The train leaves at noon")
        self.assertAlmostEqual(score.valence, 0.1)
        self.assertAlmostEqual(score.arousal, 0.2)
        self.assertAlmostEqual(score.dominance, 0.0)

    def test_strong_positive_message_is_excitement_with_capped_confidence(self):
        score = self.scorer.score("I am so excited and thrilled about this amazing news!!!")
        self.assertEqual(score.primary_emotion, "excitement")
        self.assertGreater(score.valence, 0.6)
        self.assertAlmostEqual(score.confidence, 0.95)

    def test_to_dict_is_serialisable_shape(self):
        payload = self.scorer.score("Thanks so much :)").to_dict()
        self.assertEqual(
            set(payload),
            {"valence", "arousal", "dominance", "primary_emotion", "secondary_emotion", "confidence"},
        )


class TestDescribeAffect(unittest.TestCase):
    def test_description_includes_secondary(self):
        score = AffectScore(-0.5, -0.5, -0.5, primary_emotion="sadness", secondary_emotion="regret", confidence=0.6)
        self.assertEqual(
            describe_affect(score),
            "Sadness with moderately negative emotions, relaxed energy, and some uncertainty, "
            "with elements of Regret",
        )

    def test_description_extremes(self):
        score = AffectScore(0.9, 0.8, 0.8, primary_emotion="excitement")
        self.assertEqual(
            describe_affect(score),
            "Excitement with very positive emotions, high energy, and strong confidence",
        )
        neutral = AffectScore(0.0, 0.0, 0.0, primary_emotion="neutral")
        self.assertEqual(
            describe_affect(neutral),
            "Neutral with neutral emotions, balanced energy level, and balanced control",
        )


if __name__ == "__main__":
    unittest.main()
