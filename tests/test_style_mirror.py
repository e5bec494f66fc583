import random
import re
import unittest

from emotionscore.style_mirror import (
    SLANG_OPENERS,
    SLANG_REPLACEMENTS,
    TERMS_OF_ENDEARMENT,
    apply_user_style,
    strip_terms_of_endearment,
)
from emotionscore.style_profiler import StyleProfile


class AlwaysRandom(random.Random):
    """Random source whose probability draws always land on ``value``."""

    def __init__(self, value):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


class TestApplyUserStyle(unittest.TestCase):
    def test_lowercase_keeps_capital_i(self):
        profile = StyleProfile(uses_lower_case=True)
        styled = apply_user_style("Hello There. I think I'm able to help.", profile, AlwaysRandom(0.99))
        self.assertEqual(styled, "hello there. I think I'm able to help.")

    def test_casual_address_interleaving(self):
        profile = StyleProfile(uses_casual_address=True)
        styled = apply_user_style("That works. See you soon.", profile, AlwaysRandom(0.0))
        self.assertEqual(styled, "That works, bro. Bro, see you soon.")

    def test_shorthand_replaces_about_half(self):
        profile = StyleProfile(uses_shorthand=True)
        styled = apply_user_style("you and you and you", profile, AlwaysRandom(0.99))
        self.assertEqual(styled, "u and u and you")

    def test_exclamation_terminators(self):
        profile = StyleProfile(uses_exclamations=True)
        self.assertEqual(
            apply_user_style("Sounds fine. Let's go.", profile, AlwaysRandom(0.0)),
            "Sounds fine! Let's go!",
        )
        self.assertEqual(
            apply_user_style("Sounds fine. Let's go.", profile, AlwaysRandom(0.99)),
            "Sounds fine. Let's go.",
        )

    def test_emoji_after_sentences(self):
        profile = StyleProfile(uses_emojis=True, preferred_emojis=(":)",))
        styled = apply_user_style("Nice work. Keep going.", profile, AlwaysRandom(0.0))
        self.assertEqual(styled, "Nice work. :) Keep going. :)")

    def test_slang_substitution_and_opener(self):
        profile = StyleProfile(uses_slang=True)
        styled = apply_user_style("That is good.", profile, AlwaysRandom(0.0))
        self.assertNotIn("good", styled)
        self.assertTrue(any(styled.startswith(f"{opener}, ") for opener in SLANG_OPENERS))
        self.assertTrue(any(word in styled for word in SLANG_REPLACEMENTS))

    def test_short_sentence_users_get_split_clauses(self):
        profile = StyleProfile(average_sentence_length=3.0)
        styled = apply_user_style(
            "I checked the whole configuration file, it looks fine now.",
            profile,
            AlwaysRandom(0.99),
        )
        self.assertEqual(styled, "I checked the whole configuration file. it looks fine now.")

    def test_seeded_rng_is_deterministic(self):
        profile = StyleProfile(
            uses_casual_address=True,
            uses_exclamations=True,
            uses_emojis=True,
            uses_slang=True,
        )
        text = "That is a good plan. Let me know how it goes. I think it will be great."
        first = apply_user_style(text, profile, random.Random(11))
        second = apply_user_style(text, profile, random.Random(11))
        self.assertEqual(first, second)


class TestTermsOfEndearment(unittest.TestCase):
    def test_removes_pet_names_in_address_positions(self):
        cleaned = strip_terms_of_endearment("Honey, I hear you, sweetie. It will be okay, dear.", "I'm sad")
        self.assertEqual(cleaned, "I hear you. It will be okay.")

    def test_recapitalises_sentence_starts(self):
        self.assertEqual(strip_terms_of_endearment("Okay. Sweetie, rest a bit.", "so tired"), "Okay. Rest a bit.")

    def test_no_denylisted_term_survives(self):
        response = "I love that idea, love. Babe you got this, baby!"
        cleaned = strip_terms_of_endearment(response, "what do you think?")
        for term in TERMS_OF_ENDEARMENT:
            self.assertIsNone(re.search(rf"\b{term}\b", cleaned, re.IGNORECASE), term)

    def test_user_pet_name_allows_response_terms(self):
        response = "Of course, honey."
        self.assertEqual(strip_terms_of_endearment(response, "thanks honey"), response)


if __name__ == "__main__":
    unittest.main()
