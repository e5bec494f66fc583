##########################################################################
#                                                                        #
#  Writing style profiler                                                #
#                                                                        #
##########################################################################

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field, replace
import logging
from pathlib import Path
import re
from typing import Any, Iterable, Mapping

from emotionscore.rule_files import read_rule_file


logger = logging.getLogger(__name__)

DEFAULT_PREFERRED_EMOJIS = (":)", ":D", "<3", ";)", ":P")
DEFAULT_GREETINGS = ("hi", "hey")
DEFAULT_CLOSINGS = ("thanks", "bye")
DEFAULT_SENTENCE_LENGTH = 10.0

_UNICODE_EMOJI = "[\U0001F600-\U0001F64F\U0001F44D\U0001F44E\U0001F494❤]"
_ALL_CAPS_PATTERN = re.compile(r"\b[A-Z]{3,}\b")
_ELLIPSIS_PATTERN = re.compile(r"\.{3,}")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def _word_pattern(words: Iterable[str]) -> re.Pattern:
    ordered = sorted(set(words), key=len, reverse=True)
    return re.compile(r"\b(" + "|".join(re.escape(word) for word in ordered) + r")\b", re.IGNORECASE)


def _emoticon_pattern(emoticons: Iterable[str]) -> re.Pattern:
    alternatives = []
    for emoticon in sorted(set(emoticons), key=len, reverse=True):
        escaped = re.escape(emoticon)
        # ":/" inside a URL is not an emoticon
        if emoticon.endswith("/"):
            escaped += "(?!/)"
        alternatives.append(escaped)
    alternatives.append(_UNICODE_EMOJI)
    return re.compile("|".join(alternatives))


@dataclass(frozen=True)
class StyleMarkers:
    """Word and emoticon lists the profiler looks for."""
    emoticons: tuple[str, ...] = (":)", ":(", ":D", ":P", ";P", ";)", ";(", ":/", "<3")
    casual_address: tuple[str, ...] = ("bro", "bruh", "dude", "man", "mate", "buddy", "pal", "fam")
    shorthand: tuple[str, ...] = (
        "lol", "lmao", "rofl", "omg", "wtf", "idk", "tbh", "imo", "imho", "btw", "afaik",
        "rn", "u", "ur", "r", "y", "n", "k", "pls", "thx",
    )
    slang: tuple[str, ...] = (
        "cool", "awesome", "lit", "fire", "dope", "sick", "wicked", "rad", "sweet", "chill", "vibe",
        "flex", "slay", "goals", "mood", "tea", "shade", "ghosted", "salty", "extra", "basic", "sus",
        "low-key", "high-key", "yeet", "bet", "no cap", "cap",
    )
    greetings: tuple[str, ...] = (
        "hey", "hi", "hello", "yo", "sup", "wassup", "howdy", "hiya", "heya",
        "what's up", "whats up", "how's it going", "hows it going",
    )
    closings: tuple[str, ...] = (
        "bye", "see ya", "later", "ttyl", "talk to you later", "cya", "peace", "cheers", "thanks", "thx",
    )
    patterns: dict[str, re.Pattern] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        compiled = {"emoticons": _emoticon_pattern(self.emoticons)}
        for name in ("casual_address", "shorthand", "slang", "greetings", "closings"):
            compiled[name] = _word_pattern(getattr(self, name))
        object.__setattr__(self, "patterns", compiled)


DEFAULT_STYLE_MARKERS = StyleMarkers()
_MARKER_LISTS = ("emoticons", "casual_address", "shorthand", "slang", "greetings", "closings")


def merge_style_markers(base: StyleMarkers, payload: Mapping[str, Any]) -> StyleMarkers:
    """Extend each marker list with the entries given in ``payload``."""
    updates: dict[str, tuple[str, ...]] = {}
    for name in _MARKER_LISTS:
        raw = payload.get(name)
        if raw is None:
            continue
        if isinstance(raw, str) or not isinstance(raw, (list, tuple)):
            logger.warning(f"Skipping style marker list that is not a list: {name}")
            continue
        extra = [str(item).strip() for item in raw if str(item).strip()]
        current = getattr(base, name)
        updates[name] = current + tuple(item for item in extra if item not in current)
    return replace(base, **updates)


def load_style_markers(path: str | Path | None = None) -> StyleMarkers:
    if not path:
        return DEFAULT_STYLE_MARKERS
    payload = read_rule_file(path, logger, "Style markers")
    if payload is None:
        return DEFAULT_STYLE_MARKERS
    return merge_style_markers(DEFAULT_STYLE_MARKERS, payload)


@dataclass(frozen=True)
class StyleProfile:
    uses_emojis: bool = False
    uses_casual_address: bool = False
    uses_shorthand: bool = False
    uses_all_caps: bool = False
    uses_lower_case: bool = False
    uses_exclamations: bool = False
    uses_ellipses: bool = False
    uses_slang: bool = False
    preferred_emojis: tuple[str, ...] = DEFAULT_PREFERRED_EMOJIS
    casual_greetings: tuple[str, ...] = DEFAULT_GREETINGS
    casual_closings: tuple[str, ...] = DEFAULT_CLOSINGS
    average_sentence_length: float = DEFAULT_SENTENCE_LENGTH

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def summary(self) -> list[str]:
        """Short style instructions suitable for a generation prompt."""
        notes: list[str] = []
        if self.uses_lower_case:
            notes.append("write mostly in lowercase")
        if self.uses_emojis:
            notes.append(f"use an occasional emoticon such as {' '.join(self.preferred_emojis[:3])}")
        if self.uses_casual_address:
            notes.append("use casual address like 'bro' or 'dude' sparingly")
        if self.uses_shorthand:
            notes.append("use common chat shorthand (u, ur, idk, btw)")
        if self.uses_slang:
            notes.append("use relaxed slang")
        if self.uses_exclamations:
            notes.append("sound enthusiastic with exclamation marks")
        if self.uses_ellipses:
            notes.append("trail off with ellipses now and then")
        if self.average_sentence_length < 8:
            notes.append("keep sentences short")
        elif self.average_sentence_length > 20:
            notes.append("longer, detailed sentences are fine")
        return notes


def _unique_lowered(matches: Iterable[str]) -> tuple[str, ...]:
    seen: list[str] = []
    for match in matches:
        cleaned = match.lower()
        if cleaned not in seen:
            seen.append(cleaned)
    return tuple(seen)


def _average_sentence_length(text: str) -> float:
    sentences = [sentence.strip() for sentence in _SENTENCE_SPLIT.split(text) if sentence.strip()]
    if not sentences:
        return DEFAULT_SENTENCE_LENGTH
    return sum(len(sentence.split()) for sentence in sentences) / len(sentences)


def profile_style(
    current_text: str,
    history: Iterable[str] = (),
    markers: StyleMarkers | None = None,
) -> StyleProfile:
    """Profile how the user writes from their current message and earlier messages."""
    patterns = (markers or DEFAULT_STYLE_MARKERS).patterns
    current = str(current_text or "")
    prior = [str(message) for message in history if message]
    joined = " ".join(prior + [current])

    emoticons = patterns["emoticons"].findall(joined)
    if emoticons:
        ranked = Counter(emoticons).most_common(5)
        preferred_emojis = tuple(glyph for glyph, _count in ranked)
    else:
        preferred_emojis = DEFAULT_PREFERRED_EMOJIS

    greetings = _unique_lowered(patterns["greetings"].findall(joined)) or DEFAULT_GREETINGS
    closings = _unique_lowered(patterns["closings"].findall(joined)) or DEFAULT_CLOSINGS

    return StyleProfile(
        uses_emojis=bool(emoticons),
        uses_casual_address=bool(patterns["casual_address"].search(joined)),
        uses_shorthand=bool(patterns["shorthand"].search(joined)),
        uses_all_caps=bool(_ALL_CAPS_PATTERN.search(joined)),
        uses_lower_case=current == current.lower() and len(current) > 10,
        uses_exclamations=joined.count("!") > 1,
        uses_ellipses=bool(_ELLIPSIS_PATTERN.search(joined)),
        uses_slang=bool(patterns["slang"].search(joined)),
        preferred_emojis=preferred_emojis,
        casual_greetings=greetings,
        casual_closings=closings,
        average_sentence_length=_average_sentence_length(joined),
    )


__all__ = [
    "DEFAULT_PREFERRED_EMOJIS",
    "DEFAULT_STYLE_MARKERS",
    "StyleMarkers",
    "StyleProfile",
    "load_style_markers",
    "merge_style_markers",
    "profile_style",
]
