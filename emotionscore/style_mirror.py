##########################################################################
#                                                                        #
#  This file (style_mirror.py) rewrites a reply so it reads in the       #
#  user's own register, and filters unsolicited terms of endearment.     #
#                                                                        #
##########################################################################

from __future__ import annotations

import math
import random
import re

from emotionscore.style_profiler import StyleProfile


TERMS_OF_ENDEARMENT = (
    "honey",
    "darling",
    "sweetie",
    "dear",
    "love",
    "hun",
    "babe",
    "baby",
    "sweetheart",
)


# Longer phrases first so "thank you" wins over "you".
SHORTHAND_SUBSTITUTIONS = (
    ("as far as I know", "afaik"),
    ("in my opinion", "imo"),
    ("I don't know", "idk"),
    ("by the way", "btw"),
    ("thank you", "thx"),
    ("right now", "rn"),
    ("thanks", "thx"),
    ("please", "pls"),
    ("your", "ur"),
    ("you", "u"),
    ("are", "r"),
    ("for", "4"),
    ("to", "2"),
    ("be", "b"),
)

SLANG_REPLACEMENTS = ("awesome", "cool", "lit", "sick", "dope")
SLANG_OPENERS = ("tbh", "ngl", "low-key", "high-key", "vibe")

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")
_TERMINATOR = re.compile(r"([.!?]+)$")
_SINGLE_PERIOD = re.compile(r"(?<!\.)\.(?!\.)(?=\s|$)")
_LOWER_PERIOD = re.compile(r"(?<=[a-z])\.(?!\.)(?=\s|$)")
_SENTENCE_END = re.compile(r"([.!?])(?=\s|$)")
_POSITIVE_WORDS = re.compile(r"\b(good|great|excellent|nice)\b", re.IGNORECASE)
_LONG_CLAUSE = re.compile(r"([^.!?]{20,})[,;]\s+([^.!?]+)")

_TERMS_GROUP = "|".join(TERMS_OF_ENDEARMENT)
_LEADING_TERM = re.compile(rf"(^|(?<=[.!?])\s+)({_TERMS_GROUP})\b,?\s+(\w)", re.IGNORECASE)
_TRAILING_TERM = re.compile(rf",\s*(?:my\s+)?({_TERMS_GROUP})\b(?=\s*(?:[.!?,]|$))", re.IGNORECASE)
_ANY_TERM = re.compile(rf"\b({_TERMS_GROUP})\b[,\s]*", re.IGNORECASE)
_USER_TERM = re.compile(rf"\b({_TERMS_GROUP})\b", re.IGNORECASE)


def _capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:] if text else text


def _mirror_casual_address(text: str, rng: random.Random) -> str:
    sentences = _SENTENCE_SPLIT.split(text)
    output: list[str] = []
    for index, sentence in enumerate(sentences):
        if not sentence:
            continue
        if index > 0 and rng.random() < 0.3:
            sentence = "Bro, " + sentence[:1].lower() + sentence[1:]
        elif rng.random() < 0.3:
            if _TERMINATOR.search(sentence):
                sentence = _TERMINATOR.sub(r", bro\1", sentence)
            else:
                sentence = sentence + ", bro"
        output.append(sentence)
    return " ".join(output)


def _mirror_shorthand(text: str) -> str:
    for phrase, short in SHORTHAND_SUBSTITUTIONS:
        pattern = re.compile(rf"\b{re.escape(phrase)}\b", re.IGNORECASE)
        occurrences = len(pattern.findall(text))
        if occurrences:
            text = pattern.sub(short, text, count=math.ceil(occurrences * 0.5))
    return text


def _replace_with_probability(pattern: re.Pattern, text: str, replacement: str, probability: float, rng: random.Random) -> str:
    return pattern.sub(lambda match: replacement if rng.random() < probability else match.group(0), text)


def _mirror_emojis(text: str, emojis: tuple[str, ...], rng: random.Random) -> str:
    if not emojis:
        return text

    def _maybe_emoji(match: re.Match) -> str:
        if rng.random() < 0.25:
            return f"{match.group(1)} {rng.choice(emojis)}"
        return match.group(1)

    text = _SENTENCE_END.sub(_maybe_emoji, text)
    if rng.random() < 0.5 and not text.rstrip().endswith(emojis):
        text = f"{text.rstrip()} {rng.choice(emojis)}"
    return text


def _mirror_slang(text: str, rng: random.Random) -> str:
    text = _POSITIVE_WORDS.sub(lambda match: rng.choice(SLANG_REPLACEMENTS), text)
    if rng.random() < 0.3:
        text = f"{rng.choice(SLANG_OPENERS)}, {text[:1].lower()}{text[1:]}"
    return text


def apply_user_style(text: str, profile: StyleProfile, rng: random.Random | None = None) -> str:
    """Rewrite ``text`` to mirror the register described by ``profile``."""
    rng = rng or random.Random()
    styled = str(text or "")
    if not styled.strip():
        return styled

    if profile.uses_lower_case:
        styled = re.sub(r"\bi\b", "I", styled.lower())

    if profile.uses_casual_address:
        styled = _mirror_casual_address(styled, rng)

    if profile.uses_shorthand:
        styled = _mirror_shorthand(styled)

    if profile.uses_exclamations:
        styled = _replace_with_probability(_SINGLE_PERIOD, styled, "!", 0.3, rng)
        styled = _replace_with_probability(_LOWER_PERIOD, styled, "!!", 0.2, rng)

    if profile.uses_ellipses:
        styled = _replace_with_probability(_SINGLE_PERIOD, styled, "...", 0.15, rng)

    if profile.uses_emojis:
        styled = _mirror_emojis(styled, tuple(profile.preferred_emojis), rng)

    if profile.uses_slang:
        styled = _mirror_slang(styled, rng)

    if profile.average_sentence_length < 5:
        styled = _LONG_CLAUSE.sub(r"\1. \2", styled)

    return styled


def user_uses_endearment(user_text: str) -> bool:
    return bool(_USER_TERM.search(str(user_text or "")))


def strip_terms_of_endearment(response: str, user_text: str) -> str:
    """Remove pet names from ``response`` unless the user used one first."""
    if not response or user_uses_endearment(user_text):
        return response

    def _drop_leading(match: re.Match) -> str:
        following = match.group(3)
        if match.group(2)[:1].isupper():
            following = following.upper()
        return match.group(1) + following

    cleaned = _LEADING_TERM.sub(_drop_leading, response)
    cleaned = _TRAILING_TERM.sub("", cleaned)
    cleaned = _ANY_TERM.sub("", cleaned)
    cleaned = re.sub(r"\s+([,.!?])", r"\1", cleaned)
    cleaned = re.sub(r"[ \t]{2,}", " ", cleaned).strip()
    if response[:1].isupper():
        cleaned = _capitalize_first(cleaned)
    return cleaned


__all__ = [
    "TERMS_OF_ENDEARMENT",
    "apply_user_style",
    "strip_terms_of_endearment",
    "user_uses_endearment",
]
