##########################################################################
#                                                                        #
#  This file (affect_scorer.py) turns a message into a valence /         #
#  arousal / dominance vector and an emotion label using lexical rules.  #
#                                                                        #
##########################################################################

from __future__ import annotations

from dataclasses import asdict, dataclass
import logging
import math
import re
from typing import Any

from emotionscore.affect_rules import AffectRules, EmotionRegion, VADWeight, load_affect_rules
from emotionscore.runtime_settings import get_runtime_setting


logger = logging.getLogger(__name__)

_CLAUSE_BREAKS = ".!?"
_TOKEN_PATTERN = re.compile(r"[a-z']+")

_HEDONIC_FAMILY = frozenset({"joy", "sadness", "contentment", "disgust"})
_ENERGY_FAMILY = frozenset({"excitement", "calm", "boredom"})
_POWER_FAMILY = frozenset({"anger", "fear", "pride", "shame"})

_EXCLAMATION_SIGNAL = VADWeight(0.2, 0.5, 0.3, 0.7)
_QUESTION_SIGNAL = VADWeight(0.0, 0.3, -0.2, 0.6)
_ELLIPSIS_SIGNAL = VADWeight(-0.1, -0.3, -0.2, 0.4)
_SHOUTING_SIGNAL = VADWeight(0.0, 0.4, 0.2, 0.5)
_CURIOSITY_BIAS = VADWeight(0.1, 0.2, 0.0, 0.4)


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


@dataclass(frozen=True)
class AffectScore:
    valence: float
    arousal: float
    dominance: float
    primary_emotion: str
    secondary_emotion: str | None = None
    confidence: float = 0.4

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


DEFAULT_AFFECT = AffectScore(0.0, 0.0, 0.0, primary_emotion="empathy", secondary_emotion=None, confidence=0.4)


@dataclass(frozen=True)
class AffectScorerConfig:
    negation_inversion: float = 0.8
    negation_dampening: float = 0.7
    caps_ratio_threshold: float = 1.0

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> "AffectScorerConfig":
        return cls(
            negation_inversion=float(get_runtime_setting(settings, "affect.negation_inversion", 0.8)),
            negation_dampening=float(get_runtime_setting(settings, "affect.negation_dampening", 0.7)),
            caps_ratio_threshold=float(get_runtime_setting(settings, "affect.caps_ratio_threshold", 1.0)),
        )


class _Accumulator:
    """Weighted running sums; divided by the total weight at the end."""

    __slots__ = ("valence", "arousal", "dominance", "weight")

    def __init__(self):
        self.valence = 0.0
        self.arousal = 0.0
        self.dominance = 0.0
        self.weight = 0.0

    def add(self, signal: VADWeight, scale: float = 1.0, valence: float | None = None) -> None:
        weight = signal.weight * scale
        self.valence += (signal.valence if valence is None else valence) * weight
        self.arousal += signal.arousal * weight
        self.dominance += signal.dominance * weight
        self.weight += weight


class AffectScorer:
    """Deterministic lexical affect scoring."""

    def __init__(self, rules: AffectRules | None = None, config: AffectScorerConfig | None = None):
        self._rules = rules if rules is not None else load_affect_rules()
        self._config = config if config is not None else AffectScorerConfig()

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> "AffectScorer":
        rules_path = get_runtime_setting(settings, "affect.rules_path", "")
        return cls(rules=load_affect_rules(rules_path or None), config=AffectScorerConfig.from_settings(settings))

    @property
    def rules(self) -> AffectRules:
        return self._rules

    @property
    def config(self) -> AffectScorerConfig:
        return self._config

    def score(self, text: str) -> AffectScore:
        if not isinstance(text, str) or not text.strip():
            return DEFAULT_AFFECT

        lowered = text.lower().replace("’", "'")
        word_count = len(lowered.split())
        totals = _Accumulator()

        self._score_structure(text, totals)
        self._score_emoji(lowered, totals)
        self._score_patterns(lowered, totals)
        self._score_short_input(lowered, word_count, totals)

        total_weight = totals.weight if totals.weight > 0 else 1.0
        valence = _clamp(totals.valence / total_weight, -1.0, 1.0)
        arousal = _clamp(totals.arousal / total_weight, -1.0, 1.0)
        dominance = _clamp(totals.dominance / total_weight, -1.0, 1.0)

        primary = self._primary_emotion(valence, arousal, dominance)
        secondary = None
        if total_weight >= 1.0:
            secondary = self._secondary_emotion(valence, arousal, dominance, primary)

        confidence = _clamp(total_weight / 4, 0.4, 0.9)
        if primary != "neutral":
            confidence += 0.1
        if word_count > 5:
            confidence += 0.05
        if abs(valence) > 0.7:
            confidence += 0.05

        result = AffectScore(
            valence=valence,
            arousal=arousal,
            dominance=dominance,
            primary_emotion=primary,
            secondary_emotion=secondary,
            confidence=min(0.95, confidence),
        )
        logger.debug(f"Scored affect {result.primary_emotion} ({valence:.2f}, {arousal:.2f}, {dominance:.2f})")
        return result

    ######################
    # Signal accumulation
    ######################

    def _is_shouting(self, text: str) -> bool:
        if len(text) <= 3:
            return False
        cased = [char for char in text if char.isupper() or char.islower()]
        if not cased:
            return False
        upper_ratio = sum(1 for char in cased if char.isupper()) / len(cased)
        return upper_ratio >= self._config.caps_ratio_threshold

    def _score_structure(self, text: str, totals: _Accumulator) -> None:
        if self._is_shouting(text):
            totals.add(_SHOUTING_SIGNAL)

        exclamations = text.count("!")
        if exclamations:
            totals.add(_EXCLAMATION_SIGNAL, scale=min(exclamations, 3) / 3)

        questions = text.count("?")
        if questions:
            totals.add(_QUESTION_SIGNAL, scale=min(questions, 3) / 3)

        if "..." in text:
            totals.add(_ELLIPSIS_SIGNAL)

    def _score_emoji(self, lowered: str, totals: _Accumulator) -> None:
        for glyph, signal in self._rules.emoji:
            if glyph in lowered:
                totals.add(signal)

    def _negated(self, lowered: str, position: int) -> bool:
        clause_start = max(lowered.rfind(mark, 0, position) for mark in _CLAUSE_BREAKS) + 1
        tokens = _TOKEN_PATTERN.findall(lowered[clause_start:position])
        return any(token in self._rules.negators for token in tokens)

    def _score_patterns(self, lowered: str, totals: _Accumulator) -> None:
        for rule in self._rules.patterns:
            match = rule.compiled.search(lowered)
            if match is None:
                continue
            valence = rule.signal.valence
            if rule.negatable and self._negated(lowered, match.start()):
                valence = -valence * self._config.negation_inversion
                if valence < 0:
                    valence *= self._config.negation_dampening
            totals.add(rule.signal, valence=valence)

    def _score_short_input(self, lowered: str, word_count: int, totals: _Accumulator) -> None:
        if totals.weight < 0.5 and word_count <= 3:
            stripped = lowered.strip()
            for rule in self._rules.short_utterances:
                if rule.compiled.match(stripped):
                    totals.add(rule.signal)
                    break
        elif totals.weight < 0.3:
            totals.add(_CURIOSITY_BIAS)

    ######################
    # Classification
    ######################

    @staticmethod
    def _shortcut_emotion(valence: float, arousal: float, dominance: float) -> str | None:
        if abs(valence) < 0.2 and abs(arousal) < 0.2 and abs(dominance) < 0.2:
            return "neutral"
        if valence > 0.6 and arousal > 0.6:
            return "excitement"
        if valence < -0.6 and arousal > 0.6 and dominance > 0.4:
            return "anger"
        if valence < -0.6 and arousal > 0.4 and dominance < -0.3:
            return "fear"
        if valence < -0.5 and arousal < -0.3:
            return "sadness"
        if valence > 0.5 and arousal < -0.3:
            return "calm"
        if abs(valence) < 0.3 and arousal > 0.3 and dominance < 0:
            return "confusion"
        if valence > 0.3 and abs(arousal) < 0.3 and dominance > 0.2:
            return "hope"
        if valence > 0.2 and arousal > 0.2 and dominance > 0:
            return "interest"
        return None

    @staticmethod
    def _dimension_match(value: float, bounds: tuple[float, float]) -> float:
        center = (bounds[0] + bounds[1]) / 2
        half_width = (bounds[1] - bounds[0]) / 2
        if half_width <= 0:
            return 1.0 if value == center else 0.0
        return 1 - min(1.0, abs(value - center) / half_width)

    @staticmethod
    def _dimension_weights(name: str) -> tuple[float, float, float]:
        if name in _HEDONIC_FAMILY:
            return (0.5, 0.3, 0.2)
        if name in _ENERGY_FAMILY:
            return (0.3, 0.5, 0.2)
        if name in _POWER_FAMILY:
            return (0.3, 0.3, 0.4)
        return (0.4, 0.3, 0.3)

    def _region_score(self, region: EmotionRegion, valence: float, arousal: float, dominance: float) -> float | None:
        in_range = sum(region.in_range_flags(valence, arousal, dominance))
        if in_range < 2:
            return None
        weights = self._dimension_weights(region.name)
        matches = (
            self._dimension_match(valence, region.valence),
            self._dimension_match(arousal, region.arousal),
            self._dimension_match(dominance, region.dominance),
        )
        score = sum(weight * match for weight, match in zip(weights, matches)) * region.weight
        if in_range == 3:
            score += 0.1
        return score

    def _primary_emotion(self, valence: float, arousal: float, dominance: float) -> str:
        shortcut = self._shortcut_emotion(valence, arousal, dominance)
        if shortcut is not None:
            return shortcut

        best_emotion = "neutral"
        best_score = 0.0
        for region in self._rules.emotions:
            score = self._region_score(region, valence, arousal, dominance)
            if score is not None and score > best_score:
                best_score = score
                best_emotion = region.name

        if best_score < 0.3:
            if valence > 0.2:
                return "interest"
            if valence < -0.2:
                return "confusion"
            return "neutral"
        return best_emotion

    def _secondary_emotion(self, valence: float, arousal: float, dominance: float, primary: str) -> str | None:
        closest = None
        closest_distance = math.inf
        for region in self._rules.emotions:
            if region.name == primary:
                continue
            if sum(region.in_range_flags(valence, arousal, dominance)) < 2:
                continue
            center = region.center
            distance = math.sqrt(
                (valence - center[0]) ** 2 + (arousal - center[1]) ** 2 + (dominance - center[2]) ** 2
            )
            if distance < closest_distance:
                closest_distance = distance
                closest = region.name
        return closest if closest_distance < 0.8 else None


def _describe_valence(valence: float) -> str:
    if valence > 0.7:
        return "very positive"
    if valence > 0.3:
        return "moderately positive"
    if valence < -0.7:
        return "very negative"
    if valence < -0.3:
        return "moderately negative"
    return "neutral"


def _describe_arousal(arousal: float) -> str:
    if arousal > 0.7:
        return "high energy"
    if arousal > 0.3:
        return "moderate energy"
    if arousal < -0.7:
        return "very low energy"
    if arousal < -0.3:
        return "relaxed energy"
    return "balanced energy level"


def _describe_dominance(dominance: float) -> str:
    if dominance > 0.7:
        return "strong confidence"
    if dominance > 0.3:
        return "moderate confidence"
    if dominance < -0.7:
        return "significant uncertainty"
    if dominance < -0.3:
        return "some uncertainty"
    return "balanced control"


def describe_affect(score: AffectScore) -> str:
    """Human-readable summary of an affect score, used in provider prompts."""
    description = (
        f"{score.primary_emotion.capitalize()} with {_describe_valence(score.valence)} emotions, "
        f"{_describe_arousal(score.arousal)}, and {_describe_dominance(score.dominance)}"
    )
    if score.secondary_emotion:
        description += f", with elements of {score.secondary_emotion.capitalize()}"
    return description


__all__ = [
    "AffectScore",
    "AffectScorer",
    "AffectScorerConfig",
    "DEFAULT_AFFECT",
    "describe_affect",
]
