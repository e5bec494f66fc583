##########################################################################
#                                                                        #
#  This file (affect_rules.py) holds the declarative rule tables used    #
#  by the affect scorer: emotion regions, lexical patterns, emoji,       #
#  negators and canonical short utterances.                              #
#                                                                        #
##########################################################################

from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
from pathlib import Path
import re
from typing import Any, Mapping

from emotionscore.rule_files import read_rule_file


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VADWeight:
    valence: float
    arousal: float
    dominance: float
    weight: float


@dataclass(frozen=True)
class PatternRule:
    pattern: str
    signal: VADWeight
    negatable: bool = True
    compiled: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "compiled", re.compile(self.pattern, re.IGNORECASE))


@dataclass(frozen=True)
class EmotionRegion:
    name: str
    valence: tuple[float, float]
    arousal: tuple[float, float]
    dominance: tuple[float, float]
    weight: float

    def in_range_flags(self, valence: float, arousal: float, dominance: float) -> tuple[bool, bool, bool]:
        return (
            self.valence[0] <= valence <= self.valence[1],
            self.arousal[0] <= arousal <= self.arousal[1],
            self.dominance[0] <= dominance <= self.dominance[1],
        )

    @property
    def center(self) -> tuple[float, float, float]:
        return (
            (self.valence[0] + self.valence[1]) / 2,
            (self.arousal[0] + self.arousal[1]) / 2,
            (self.dominance[0] + self.dominance[1]) / 2,
        )


@dataclass(frozen=True)
class ShortUtteranceRule:
    label: str
    pattern: str
    signal: VADWeight
    compiled: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "compiled", re.compile(self.pattern, re.IGNORECASE))


def _signal(valence: float, arousal: float, dominance: float, weight: float) -> VADWeight:
    return VADWeight(float(valence), float(arousal), float(dominance), float(weight))


DEFAULT_EMOTION_REGIONS: tuple[EmotionRegion, ...] = (
    EmotionRegion("joy", (0.3, 1.0), (0.3, 1.0), (0.0, 1.0), 1.0),
    EmotionRegion("excitement", (0.3, 1.0), (0.6, 1.0), (0.4, 1.0), 0.9),
    EmotionRegion("contentment", (0.3, 1.0), (-0.3, 0.3), (0.0, 1.0), 0.8),
    EmotionRegion("anger", (-1.0, -0.3), (0.3, 1.0), (0.4, 1.0), 1.0),
    EmotionRegion("fear", (-1.0, -0.3), (0.3, 1.0), (-1.0, -0.3), 0.9),
    EmotionRegion("sadness", (-1.0, -0.3), (-1.0, -0.1), (-1.0, 0.0), 1.0),
    EmotionRegion("disgust", (-1.0, -0.5), (0.0, 0.5), (0.0, 0.5), 0.8),
    EmotionRegion("surprise", (-0.3, 0.3), (0.5, 1.0), (-0.3, 0.3), 0.8),
    EmotionRegion("anxiety", (-0.5, -0.1), (0.3, 0.8), (-0.5, 0.0), 0.8),
    EmotionRegion("boredom", (-0.4, 0.0), (-0.8, -0.3), (-0.3, 0.3), 0.7),
    EmotionRegion("calm", (0.1, 0.5), (-0.8, -0.3), (0.0, 0.5), 0.8),
    EmotionRegion("confusion", (-0.3, 0.1), (0.0, 0.5), (-0.5, 0.0), 0.7),
    EmotionRegion("contemplation", (-0.1, 0.3), (-0.5, 0.1), (0.0, 0.5), 0.7),
    EmotionRegion("curiosity", (0.1, 0.5), (0.1, 0.5), (0.1, 0.5), 0.7),
    EmotionRegion("empathy", (-0.1, 0.3), (-0.1, 0.3), (-0.1, 0.3), 0.7),
    EmotionRegion("frustration", (-0.7, -0.3), (0.3, 0.7), (-0.3, 0.5), 0.8),
    EmotionRegion("gratitude", (0.5, 0.9), (0.0, 0.4), (0.0, 0.5), 0.8),
    EmotionRegion("hope", (0.3, 0.8), (0.1, 0.5), (0.1, 0.6), 0.7),
    EmotionRegion("interest", (0.2, 0.7), (0.2, 0.7), (0.0, 0.5), 0.7),
    EmotionRegion("pride", (0.5, 0.9), (0.3, 0.7), (0.5, 1.0), 0.8),
    EmotionRegion("regret", (-0.7, -0.3), (-0.3, 0.2), (-0.6, -0.1), 0.7),
    EmotionRegion("shame", (-0.8, -0.4), (-0.2, 0.3), (-0.9, -0.4), 0.8),
)

# Every label the scorer can emit; neutral has no region of its own.
EMOTION_CATALOG: tuple[str, ...] = tuple(region.name for region in DEFAULT_EMOTION_REGIONS) + ("neutral",)


_DEFAULT_PATTERN_TABLE: tuple[tuple[str, float, float, float, float], ...] = (
    # Positive high arousal
    (r"\bexcit(ed|ing|ement)\b", 0.8, 0.9, 0.7, 0.9),
    (r"\bthrilled?\b", 0.9, 0.9, 0.6, 0.9),
    (r"\becstat(ic|ically)\b", 1.0, 1.0, 0.7, 1.0),
    (r"\blov(e|ing|ed)\b", 0.9, 0.7, 0.5, 0.9),
    (r"\bhapp(y|iness|ily)\b", 0.8, 0.6, 0.6, 0.9),
    (r"\bjoy(ful|ous|fully)?\b", 0.9, 0.7, 0.6, 0.9),
    (r"\bgreat\b", 0.8, 0.6, 0.6, 0.8),
    (r"\bamazing\b", 0.9, 0.7, 0.6, 0.9),
    (r"\bwonderful\b", 0.9, 0.6, 0.5, 0.9),
    (r"\bawesome\b", 0.9, 0.8, 0.7, 0.9),
    (r"\bfantastic\b", 0.9, 0.7, 0.6, 0.9),
    (r"\bdelighted?\b", 0.8, 0.7, 0.6, 0.8),
    (r"\bexcellent\b", 0.8, 0.5, 0.6, 0.8),
    # Positive low arousal
    (r"\bcalm(ly|ing|ed)?\b", 0.6, -0.5, 0.4, 0.8),
    (r"\brelax(ed|ing)?\b", 0.7, -0.6, 0.5, 0.8),
    (r"\bcontent(ed|ment)?\b", 0.7, -0.3, 0.5, 0.8),
    (r"\bsatisf(ied|ying|action)\b", 0.7, 0.2, 0.6, 0.8),
    (r"\bpeac(e|eful)\b", 0.8, -0.7, 0.5, 0.8),
    (r"\brelieved\b", 0.6, -0.2, 0.4, 0.7),
    (r"\bcomfortable\b", 0.6, -0.3, 0.5, 0.7),
    (r"\bserene\b", 0.7, -0.7, 0.4, 0.7),
    # Negative high arousal
    (r"\banger(ed|ing|ly)?\b", -0.8, 0.9, 0.8, 0.9),
    (r"\bangr(y|ily)\b", -0.8, 0.8, 0.7, 0.9),
    (r"\bfurious(ly)?\b", -0.9, 0.9, 0.8, 1.0),
    (r"\brage\b", -1.0, 1.0, 0.9, 1.0),
    (r"\bscar(ed|y|ing)\b", -0.8, 0.8, -0.7, 0.9),
    (r"\bterrif(ied|ying)\b", -0.9, 0.9, -0.8, 0.9),
    (r"\bafraid\b", -0.7, 0.7, -0.6, 0.8),
    (r"\bfear(ful|fully)?\b", -0.8, 0.8, -0.7, 0.9),
    (r"\banxious(ly)?\b", -0.6, 0.7, -0.5, 0.8),
    (r"\bpanic(k(y|ing|ed))?\b", -0.9, 0.9, -0.8, 0.9),
    (r"\bstress(ed|ful)?\b", -0.7, 0.7, -0.5, 0.8),
    (r"\bupset\b", -0.7, 0.6, -0.4, 0.8),
    (r"\birritated?\b", -0.6, 0.6, 0.0, 0.7),
    (r"\bdesperate\b", -0.8, 0.7, -0.7, 0.8),
    (r"\bhorri(ble|fied|fying)\b", -0.9, 0.7, -0.6, 0.9),
    (r"\bterrible\b", -0.8, 0.4, -0.5, 0.9),
    (r"\bawful\b", -0.8, 0.3, -0.4, 0.9),
    # Negative low arousal
    (r"\bsad(ly|ness)?\b", -0.7, -0.4, -0.4, 0.9),
    (r"\bdepress(ed|ing|ion)\b", -0.9, -0.7, -0.8, 0.9),
    (r"\bdespair\b", -0.9, -0.5, -0.8, 0.9),
    (r"\bhopeless(ness)?\b", -0.8, -0.6, -0.9, 0.9),
    (r"\blonely\b", -0.7, -0.5, -0.5, 0.8),
    (r"\bmiserable\b", -0.8, -0.4, -0.7, 0.9),
    (r"\bbor(ed|ing|edom)\b", -0.5, -0.7, -0.3, 0.7),
    (r"\btir(ed|ing)\b(?! of\b)", -0.5, -0.8, -0.4, 0.7),
    (r"\bexhaust(ed|ing|ion)\b", -0.6, -0.8, -0.5, 0.8),
    (r"\bdisappoint(ed|ing|ment)\b", -0.7, -0.2, -0.4, 0.8),
    (r"\bnumb\b", -0.5, -0.7, -0.5, 0.7),
    (r"\bguilty?\b", -0.7, -0.1, -0.6, 0.8),
    # Exasperation phrases
    (r"\b(sick|tired) of\b", -0.6, 0.5, -0.1, 0.9),
    (r"\bfed up\b", -0.6, 0.5, -0.1, 0.9),
    (r"\bhad enough\b", -0.6, 0.5, 0.0, 0.8),
    # Confusion/uncertainty
    (r"\bconfus(ed|ing|ion)\b", -0.3, 0.3, -0.4, 0.7),
    (r"\buncertain(ty)?\b", -0.4, 0.2, -0.5, 0.7),
    (r"\bpuzzl(ed|ing)\b", -0.2, 0.3, -0.3, 0.6),
    (r"\bdoubt(ful|ing)?\b", -0.5, 0.1, -0.5, 0.7),
    (r"\bunsure\b", -0.3, 0.2, -0.5, 0.7),
    (r"\bdon'?t know\b", -0.2, 0.1, -0.4, 0.6),
    (r"\bnot sure\b", -0.2, 0.1, -0.3, 0.6),
    # Interest/curiosity
    (r"\binterest(ed|ing)?\b", 0.6, 0.5, 0.3, 0.7),
    (r"\bcurious\b", 0.5, 0.5, 0.2, 0.7),
    (r"\bfascinat(ed|ing)\b", 0.7, 0.6, 0.3, 0.8),
    (r"\bintrigu(ed|ing)\b", 0.6, 0.5, 0.2, 0.7),
    (r"\bcaptivated\b", 0.7, 0.6, 0.3, 0.7),
    (r"\bengaged\b", 0.6, 0.5, 0.4, 0.7),
    # Other sentiment indicators
    (r"\bgrateful\b", 0.8, 0.2, 0.4, 0.8),
    (r"\bthankful\b", 0.8, 0.3, 0.4, 0.8),
    (r"\bfrustrat(ed|ing)\b", -0.7, 0.6, -0.2, 0.8),
    (r"\bannoy(ed|ing)\b", -0.6, 0.5, 0.1, 0.7),
    (r"\bworried\b", -0.6, 0.5, -0.3, 0.7),
    (r"\bgood\b", 0.7, 0.3, 0.5, 0.7),
    (r"\bbad\b", -0.7, 0.3, -0.2, 0.7),
    (r"\bperfect\b", 0.9, 0.5, 0.7, 0.9),
    (r"\bpleasant\b", 0.7, 0.2, 0.5, 0.7),
    # Common messages/greetings
    (r"\bhello\b", 0.5, 0.3, 0.4, 0.6),
    (r"\bhi\b", 0.5, 0.3, 0.4, 0.6),
    (r"\bhey\b", 0.5, 0.4, 0.4, 0.6),
    (r"\b(thanks|thank(?! you))\b", 0.7, 0.3, 0.4, 0.7),
    (r"\bthank you\b", 0.8, 0.3, 0.4, 0.8),
    (r"\bsorry\b", -0.3, 0.1, -0.3, 0.6),
    (r"\bplease\b", 0.3, 0.2, 0.0, 0.5),
    (r"\bhow are you\b", 0.3, 0.2, 0.1, 0.5),
    (r"\bhelp\b", -0.2, 0.3, -0.3, 0.5),
    # Intensity modifiers
    (r"\bvery\b", 0.2, 0.2, 0.1, 0.2),
    (r"\breally\b", 0.2, 0.2, 0.1, 0.2),
    (r"\bextremely\b", 0.3, 0.3, 0.2, 0.3),
    (r"\bslightly\b", -0.2, -0.2, -0.1, 0.2),
    (r"\bsomewhat\b", -0.1, -0.1, -0.1, 0.1),
)

# Modifiers that are themselves negators contribute but are never flipped.
_NON_NEGATABLE_PATTERNS: tuple[tuple[str, float, float, float, float], ...] = (
    (r"\bnot\b", -1.0, 0.1, 0.1, 0.2),
)

_DEFAULT_EMOJI_TABLE: tuple[tuple[str, float, float, float, float], ...] = (
    (":)", 0.7, 0.3, 0.4, 0.7),
    (":-)", 0.7, 0.3, 0.4, 0.7),
    (":d", 0.9, 0.6, 0.6, 0.8),
    (":-d", 0.9, 0.6, 0.6, 0.8),
    (":(", -0.7, 0.3, -0.4, 0.7),
    (":-(", -0.7, 0.3, -0.4, 0.7),
    (":p", 0.6, 0.4, 0.5, 0.6),
    (":-p", 0.6, 0.4, 0.5, 0.6),
    (";)", 0.7, 0.5, 0.6, 0.7),
    (";-)", 0.7, 0.5, 0.6, 0.7),
    (":/", -0.3, 0.1, -0.1, 0.5),
    (":-/", -0.3, 0.1, -0.1, 0.5),
    (":o", 0.1, 0.7, -0.1, 0.6),
    (":-o", 0.1, 0.7, -0.1, 0.6),
    ("<3", 0.9, 0.6, 0.5, 0.8),
    ("\U0001F60A", 0.8, 0.4, 0.6, 0.8),
    ("\U0001F603", 0.9, 0.7, 0.6, 0.8),
    ("\U0001F622", -0.7, 0.3, -0.4, 0.8),
    ("\U0001F614", -0.6, -0.1, -0.3, 0.7),
    ("\U0001F60D", 0.9, 0.8, 0.6, 0.9),
    ("\U0001F602", 0.9, 0.7, 0.6, 0.8),
    ("\U0001F642", 0.6, 0.3, 0.4, 0.7),
    ("\U0001F600", 0.8, 0.6, 0.5, 0.8),
    ("\U0001F62D", -0.7, 0.6, -0.5, 0.8),
    ("\U0001F621", -0.8, 0.8, 0.4, 0.9),
    ("\U0001F631", -0.7, 0.9, -0.6, 0.9),
    ("\U0001F44D", 0.7, 0.4, 0.5, 0.7),
    ("\U0001F44E", -0.7, 0.3, -0.3, 0.7),
    ("❤️", 0.9, 0.6, 0.5, 0.9),
    ("\U0001F494", -0.8, 0.5, -0.4, 0.8),
)

DEFAULT_NEGATORS: frozenset[str] = frozenset({
    "not", "no", "never", "neither", "nor", "nothing", "nobody", "nowhere",
    "don't", "doesn't", "didn't", "won't", "wouldn't", "can't", "cannot",
    "couldn't", "shouldn't", "isn't", "aren't", "wasn't", "weren't",
    "dont", "doesnt", "didnt", "wont", "cant", "isnt", "wasnt",
})

_DEFAULT_SHORT_UTTERANCES: tuple[tuple[str, str, float, float, float, float], ...] = (
    ("greeting", r"^(hi|hey|hello)(\s+there)?[.!]?$", 0.3, 0.2, 0.1, 0.7),
    ("thanks", r"^(thanks|thank you|ty)[.!]?$", 0.7, 0.3, 0.3, 0.8),
    ("acknowledgement", r"^(ok|okay|k)[.!]?$", 0.1, -0.1, 0.0, 0.5),
    ("yes", r"^(yes|yeah|yep|yup)[.!]?$", 0.4, 0.3, 0.3, 0.6),
    ("no", r"^(no|nope|nah)[.!]?$", -0.3, 0.2, 0.1, 0.6),
    ("question_word", r"^(why|what|how|when|where)[?]?$", 0.0, 0.3, -0.2, 0.5),
)


@dataclass(frozen=True)
class AffectRules:
    emotions: tuple[EmotionRegion, ...]
    patterns: tuple[PatternRule, ...]
    emoji: tuple[tuple[str, VADWeight], ...]
    negators: frozenset[str]
    short_utterances: tuple[ShortUtteranceRule, ...]

    def region(self, name: str) -> EmotionRegion | None:
        for region in self.emotions:
            if region.name == name:
                return region
        return None


def default_affect_rules() -> AffectRules:
    patterns = [PatternRule(pattern, _signal(*values)) for pattern, *values in _DEFAULT_PATTERN_TABLE]
    patterns += [
        PatternRule(pattern, _signal(*values), negatable=False)
        for pattern, *values in _NON_NEGATABLE_PATTERNS
    ]
    return AffectRules(
        emotions=DEFAULT_EMOTION_REGIONS,
        patterns=tuple(patterns),
        emoji=tuple((glyph, _signal(*values)) for glyph, *values in _DEFAULT_EMOJI_TABLE),
        negators=DEFAULT_NEGATORS,
        short_utterances=tuple(
            ShortUtteranceRule(label, pattern, _signal(*values))
            for label, pattern, *values in _DEFAULT_SHORT_UTTERANCES
        ),
    )


def _coerce_signal(raw: Any) -> VADWeight | None:
    try:
        if isinstance(raw, Mapping):
            return _signal(raw["valence"], raw["arousal"], raw["dominance"], raw.get("weight", 0.7))
        if isinstance(raw, (list, tuple)) and len(raw) == 4:
            return _signal(*raw)
    except (KeyError, TypeError, ValueError):
        return None
    return None


def _coerce_range(raw: Any) -> tuple[float, float] | None:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        return None
    try:
        low, high = float(raw[0]), float(raw[1])
    except (TypeError, ValueError):
        return None
    return (low, high) if low <= high else None


def merge_affect_rules(base: AffectRules, payload: Mapping[str, Any]) -> AffectRules:
    """Overlay a rule payload (as read from YAML/JSON) onto ``base``.

    Patterns and emoji with an existing key replace the built-in entry, new
    keys are appended. Negators extend the built-in set. Emotion regions
    replace by name. Malformed entries are skipped and logged.
    """
    patterns = {rule.pattern: rule for rule in base.patterns}
    for pattern, raw in dict(payload.get("patterns") or {}).items():
        signal = _coerce_signal(raw)
        if signal is None:
            logger.warning(f"Skipping malformed affect pattern rule: {pattern!r}")
            continue
        try:
            patterns[str(pattern)] = PatternRule(str(pattern), signal)
        except re.error as error:
            logger.warning(f"Skipping invalid affect pattern {pattern!r}: {error}")

    emoji = dict(base.emoji)
    for glyph, raw in dict(payload.get("emoji") or {}).items():
        signal = _coerce_signal(raw)
        if signal is None:
            logger.warning(f"Skipping malformed emoji rule: {glyph!r}")
            continue
        emoji[str(glyph).lower()] = signal

    negators = set(base.negators)
    for token in payload.get("negators") or []:
        cleaned = str(token).strip().lower()
        if cleaned:
            negators.add(cleaned)

    emotions = {region.name: region for region in base.emotions}
    for name, raw in dict(payload.get("emotions") or {}).items():
        if not isinstance(raw, Mapping):
            logger.warning(f"Skipping malformed emotion region: {name!r}")
            continue
        ranges = [_coerce_range(raw.get(key)) for key in ("valence", "arousal", "dominance")]
        if any(item is None for item in ranges):
            logger.warning(f"Skipping emotion region with invalid ranges: {name!r}")
            continue
        emotions[str(name)] = EmotionRegion(str(name), ranges[0], ranges[1], ranges[2], float(raw.get("weight", 0.7)))

    short_utterances = list(base.short_utterances)
    for raw in payload.get("short_utterances") or []:
        if not isinstance(raw, Mapping) or not raw.get("pattern"):
            logger.warning(f"Skipping malformed short utterance rule: {raw!r}")
            continue
        signal = _coerce_signal(raw)
        if signal is None:
            logger.warning(f"Skipping short utterance rule without a signal: {raw!r}")
            continue
        short_utterances.append(ShortUtteranceRule(str(raw.get("label") or "custom"), str(raw["pattern"]), signal))

    return replace(
        base,
        emotions=tuple(emotions.values()),
        patterns=tuple(patterns.values()),
        emoji=tuple(emoji.items()),
        negators=frozenset(negators),
        short_utterances=tuple(short_utterances),
    )


def load_affect_rules(path: str | Path | None = None) -> AffectRules:
    """Build the rule tables, overlaying a YAML or JSON file when given."""
    rules = default_affect_rules()
    if not path:
        return rules
    payload = read_rule_file(path, logger, "Affect rules")
    if payload is None:
        return rules
    return merge_affect_rules(rules, payload)


__all__ = [
    "AffectRules",
    "DEFAULT_NEGATORS",
    "EMOTION_CATALOG",
    "EmotionRegion",
    "PatternRule",
    "ShortUtteranceRule",
    "VADWeight",
    "default_affect_rules",
    "load_affect_rules",
    "merge_affect_rules",
]
