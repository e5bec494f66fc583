##########################################################################
#                                                                        #
#  This file (prompt_builder.py) shapes conversation history and the     #
#  condensed context prompts sent to generation providers.               #
#                                                                        #
##########################################################################

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from emotionscore.affect_scorer import AffectScore, describe_affect
from emotionscore.style_profiler import StyleProfile


_ASSISTANT_ROLES = {"assistant", "bot", "model", "you", "ai"}


@dataclass(frozen=True)
class ConversationTurn:
    role: str
    content: str

    def to_message(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


def _normalize_role(role: Any) -> str | None:
    cleaned = str(role or "").strip().lower()
    if cleaned == "user":
        return "user"
    if cleaned in _ASSISTANT_ROLES:
        return "assistant"
    return None


def coerce_turns(history: Iterable[Any]) -> list[ConversationTurn]:
    """Accept ConversationTurn objects, role/content mappings or (role, content) pairs."""
    turns: list[ConversationTurn] = []
    for item in history or ():
        if isinstance(item, ConversationTurn):
            role, content = item.role, item.content
        elif isinstance(item, dict):
            role, content = item.get("role"), item.get("content")
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            role, content = item
        else:
            continue
        normalized = _normalize_role(role)
        text = str(content or "").strip()
        if normalized is None or not text:
            continue
        turns.append(ConversationTurn(role=normalized, content=text))
    return turns


def user_messages(history: Iterable[Any]) -> list[str]:
    return [turn.content for turn in coerce_turns(history) if turn.role == "user"]


def format_alternating_history(history: Iterable[Any], limit: int = 6) -> list[dict[str, str]]:
    """Strictly alternating user/assistant turns, starting with a user turn and
    ending with an assistant turn so the new user message can follow."""
    alternating: list[ConversationTurn] = []
    for turn in coerce_turns(history):
        if not alternating:
            if turn.role == "user":
                alternating.append(turn)
            continue
        if turn.role != alternating[-1].role:
            alternating.append(turn)

    if alternating and alternating[-1].role == "user":
        alternating.pop()

    if limit > 0 and len(alternating) > limit:
        alternating = alternating[-limit:]
        if alternating[0].role != "user":
            alternating = alternating[1:]

    return [turn.to_message() for turn in alternating]


def build_context_prompt(
    text: str,
    affect: AffectScore,
    style: StyleProfile | None = None,
    history: Iterable[Any] = (),
    turn_limit: int = 4,
) -> str:
    lines = [f"The user's message carries this emotional tone: {describe_affect(affect)}."]

    recent = coerce_turns(history)
    if turn_limit > 0:
        recent = recent[-turn_limit:]
    if recent:
        lines.append("")
        lines.append("Recent conversation:")
        for turn in recent:
            speaker = "User" if turn.role == "user" else "You"
            lines.append(f"{speaker}: {turn.content}")

    notes = style.summary() if style is not None else []
    if notes:
        lines.append("")
        lines.append("Match the user's writing style: " + "; ".join(notes) + ".")

    lines.append("")
    lines.append(
        "Reply naturally and with empathy to the user's latest message. "
        "Do not use terms of endearment."
    )
    lines.append(f"User: {str(text or '').strip()}")
    return "\n".join(lines)


def bare_prompt(text: str) -> str:
    return str(text or "").strip()


__all__ = [
    "ConversationTurn",
    "bare_prompt",
    "build_context_prompt",
    "coerce_turns",
    "format_alternating_history",
    "user_messages",
]
