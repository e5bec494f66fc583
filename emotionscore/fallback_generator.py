##########################################################################
#                                                                        #
#  This file (fallback_generator.py) composes rule-based replies used    #
#  when no generation provider can answer.                               #
#                                                                        #
##########################################################################

from __future__ import annotations

from dataclasses import dataclass
import logging
import random
import re
from typing import Any, Iterable

from emotionscore.affect_scorer import AffectScore
from emotionscore.fallback_phrases import DEFAULT_PHRASES, FallbackPhrases, load_fallback_phrases
from emotionscore.runtime_settings import get_runtime_setting
from emotionscore.style_mirror import apply_user_style, strip_terms_of_endearment
from emotionscore.style_profiler import StyleMarkers, load_style_markers, profile_style


logger = logging.getLogger(__name__)

_GREETING_PATTERN = re.compile(r"^(hello|hi|hey|greetings|good (morning|afternoon|evening))\b", re.IGNORECASE)
_HELP_PATTERN = re.compile(r"\b(help|assist|support)\b", re.IGNORECASE)
_HOW_ARE_YOU_PATTERN = re.compile(r"\bhow are (you|u)\b", re.IGNORECASE)

_ELABORATED_EMOTIONS = {"confusion", "interest", "curiosity"}


@dataclass(frozen=True)
class TopicMatch:
    name: str
    keyword: str
    position: int
    confidence: float = 0.9
    parent: str | None = None


class FallbackGenerator:
    """Deterministic (for a seeded rng) rule-based reply composer."""

    def __init__(
        self,
        rng: random.Random | None = None,
        phrases: FallbackPhrases | None = None,
        acknowledgment_probability: float = 0.7,
        elaboration_probability: float = 0.5,
        style_markers: StyleMarkers | None = None,
    ):
        self._rng = rng if rng is not None else random.Random()
        self._phrases = phrases if phrases is not None else DEFAULT_PHRASES
        self._acknowledgment_probability = acknowledgment_probability
        self._elaboration_probability = elaboration_probability
        self._style_markers = style_markers

    @classmethod
    def from_settings(
        cls,
        settings: dict[str, Any],
        rng: random.Random | None = None,
        style_markers: StyleMarkers | None = None,
    ) -> "FallbackGenerator":
        if rng is None:
            rng = random.Random(get_runtime_setting(settings, "fallback.seed"))
        if style_markers is None:
            style_markers = load_style_markers(get_runtime_setting(settings, "style.markers_path", "") or None)
        return cls(
            rng=rng,
            phrases=load_fallback_phrases(get_runtime_setting(settings, "fallback.phrases_path", "") or None),
            acknowledgment_probability=float(get_runtime_setting(settings, "fallback.acknowledgment_probability", 0.7)),
            elaboration_probability=float(get_runtime_setting(settings, "fallback.elaboration_probability", 0.5)),
            style_markers=style_markers,
        )

    def detect_topics(self, text: str) -> list[TopicMatch]:
        """Topics found in ``text``, in table order.

        A subtopic is only reported when its parent topic matched too."""
        text = text or ""
        found: dict[int, TopicMatch] = {}
        matched_parents: set[str] = set()
        for index, topic in enumerate(self._phrases.topics):
            if topic.parent is not None:
                continue
            hit = topic.compiled.search(text)
            if hit:
                found[index] = TopicMatch(topic.name, hit.group(0).lower(), hit.start(), topic.confidence)
                matched_parents.add(topic.name)
        for index, topic in enumerate(self._phrases.topics):
            if topic.parent is None or topic.parent not in matched_parents:
                continue
            hit = topic.compiled.search(text)
            if hit:
                found[index] = TopicMatch(topic.name, hit.group(0).lower(), hit.start(), topic.confidence, topic.parent)
        return [found[index] for index in sorted(found)]

    def _acknowledgment(self, affect: AffectScore) -> str:
        if affect.valence > 0.3:
            pool = self._phrases.positive_acknowledgments
        elif affect.valence < -0.3:
            pool = self._phrases.negative_acknowledgments
        else:
            pool = self._phrases.neutral_acknowledgments
        return self._rng.choice(pool)

    def _elaboration(self, affect: AffectScore) -> str | None:
        if affect.primary_emotion not in _ELABORATED_EMOTIONS:
            return None
        if self._rng.random() >= self._elaboration_probability:
            return None
        if affect.primary_emotion == "confusion":
            return self._rng.choice(self._phrases.confusion_elaborations)
        return self._rng.choice(self._phrases.interest_elaborations)

    def _topic_paragraphs(self, text: str) -> list[str]:
        matches = self.detect_topics(text)
        main_topics = [match for match in matches if match.parent is None]
        if not main_topics:
            return [self._rng.choice(self._phrases.general_paragraphs)]

        main = main_topics[0]
        subtopic = next((match for match in matches if match.parent == main.name), None)
        chosen = self._phrases.topic((subtopic or main).name)
        paragraphs = [self._rng.choice(chosen.paragraphs)]
        if len(main_topics) > 1:
            follow_up = self._rng.choice(self._phrases.topic(main_topics[1].name).paragraphs)
            transition = self._rng.choice(self._phrases.topic_transitions)
            paragraphs.append(f"{transition} {follow_up[:1].lower()}{follow_up[1:]}")
        return paragraphs

    def _compose(self, text: str, affect: AffectScore) -> str:
        length = len(text)
        if _GREETING_PATTERN.search(text) and length < 20:
            greeting = self._rng.choice(self._phrases.greetings)
            return (
                f"{greeting} I notice a {affect.primary_emotion} tone in your message. "
                "How can I assist you today?"
            )
        if _HELP_PATTERN.search(text) and length < 30:
            return "I'd be happy to help! " + self._rng.choice(self._phrases.help_offers)
        if _HOW_ARE_YOU_PATTERN.search(text) and length < 30:
            return self._phrases.how_are_you_reply

        parts: list[str] = []
        if self._rng.random() < self._acknowledgment_probability:
            parts.append(self._acknowledgment(affect))
        elaboration = self._elaboration(affect)
        if elaboration:
            parts.append(elaboration)
        parts.extend(self._topic_paragraphs(text))
        parts.append(self._rng.choice(self._phrases.continuation_prompts))
        return " ".join(parts)

    def generate(self, text: str, affect: AffectScore, history: Iterable[str] = ()) -> str:
        cleaned = str(text or "").strip()
        composed = self._compose(cleaned, affect)

        profile = profile_style(cleaned, history, self._style_markers)
        styled = apply_user_style(composed, profile, self._rng)
        filtered = strip_terms_of_endearment(styled, cleaned)
        if not filtered.strip():
            filtered = self._rng.choice(self._phrases.continuation_prompts)
        logger.info(f"Fallback reply composed for emotion {affect.primary_emotion}")
        return filtered


__all__ = [
    "FallbackGenerator",
    "TopicMatch",
]
