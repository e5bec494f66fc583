import unittest

from emotionscore.affect_scorer import AffectScore
from emotionscore.prompt_builder import (
    ConversationTurn,
    bare_prompt,
    build_context_prompt,
    coerce_turns,
    format_alternating_history,
    user_messages,
)
from emotionscore.style_profiler import profile_style


SAD = AffectScore(-0.5, -0.5, -0.5, primary_emotion="sadness", confidence=0.7)


class TestFormatAlternatingHistory(unittest.TestCase):
    def test_starts_with_user_and_ends_with_assistant(self):
        history = [
            ConversationTurn("assistant", "Welcome!"),
            ConversationTurn("user", "hi"),
            ConversationTurn("user", "anyone there?"),
            ConversationTurn("assistant", "Yes, I'm here."),
            ConversationTurn("user", "cool"),
        ]
        formatted = format_alternating_history(history, limit=6)
        self.assertEqual(
            formatted,
            [
                {"role": "user", "content": "hi"},
                {"role": "assistant", "content": "Yes, I'm here."},
            ],
        )

    def test_limit_keeps_latest_turns_starting_with_user(self):
        history = []
        for index in range(5):
            history.append({"role": "user", "content": f"u{index}"})
            history.append({"role": "assistant", "content": f"a{index}"})
        formatted = format_alternating_history(history, limit=5)
        self.assertEqual(formatted[0], {"role": "user", "content": "u3"})
        self.assertEqual(formatted[-1], {"role": "assistant", "content": "a4"})
        self.assertEqual(len(formatted), 4)

    def test_roles_alternate_strictly(self):
        history = [("user", "a"), ("bot", "b"), ("assistant", "c"), ("user", "d"), ("model", "e")]
        formatted = format_alternating_history(history)
        roles = [turn["role"] for turn in formatted]
        self.assertEqual(roles, ["user", "assistant", "user", "assistant"])

    def test_empty_history(self):
        self.assertEqual(format_alternating_history([]), [])
        self.assertEqual(format_alternating_history([("user", "only me")]), [])


class TestPromptText(unittest.TestCase):
    def test_context_prompt_includes_affect_history_and_style(self):
        history = [("user", "my week was rough"), ("assistant", "I'm sorry to hear that.")]
        prompt = build_context_prompt(
            "still feeling down",
            SAD,
            style=profile_style("still feeling down", user_messages(history)),
            history=history,
        )
        self.assertIn("Sadness with moderately negative emotions", prompt)
        self.assertIn("User: my week was rough", prompt)
        self.assertIn("You: I'm sorry to hear that.", prompt)
        self.assertIn("lowercase", prompt)
        self.assertTrue(prompt.endswith("User: still feeling down"))

    def test_context_prompt_limits_recent_turns(self):
        history = [("user", f"m{index}") for index in range(8)]
        prompt = build_context_prompt("latest", SAD, history=history, turn_limit=4)
        self.assertNotIn("User: m3", prompt)
        self.assertIn("User: m4", prompt)

    def test_bare_prompt(self):
        self.assertEqual(bare_prompt("  hello  "), "hello")

    def test_coerce_turns_skips_unknown_roles_and_blank_content(self):
        turns = coerce_turns([("system", "x"), ("user", "  "), {"role": "USER", "content": "ok"}, 42])
        self.assertEqual(turns, [ConversationTurn("user", "ok")])


if __name__ == "__main__":
    unittest.main()
