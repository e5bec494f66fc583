##########################################################################
#                                                                        #
#  This file (providers.py) defines the generation provider interface   #
#  and the Ollama-backed implementation.                                 #
#                                                                        #
##########################################################################

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import json
import logging
import re
from typing import Any
from urllib.parse import urlparse

from ollama import AsyncClient

from emotionscore.errors import MalformedOutputError, ProviderError
from emotionscore.runtime_settings import get_runtime_setting


logger = logging.getLogger(__name__)

DEFAULT_OLLAMA_HOST = "http://127.0.0.1:11434"

TIER_HISTORY = 1
TIER_CONTEXT = 2
TIER_BARE = 3

_FENCED_BLOCK = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)
_RESPONSE_FIELD = re.compile(r'"response"\s*:\s*"((?:[^"\\]|\\.)*)"', re.DOTALL)
_TRUNCATED_RESPONSE_FIELD = re.compile(r'"response"\s*:\s*"(.*)', re.DOTALL)
_ANSWER_KEYS = ("response", "answer", "text", "content")


@dataclass
class GenerationRequest:
    tier: int
    messages: list[dict[str, str]] = field(default_factory=list)
    prompt: str | None = None

    def as_messages(self) -> list[dict[str, str]]:
        if self.messages:
            return [dict(message) for message in self.messages]
        return [{"role": "user", "content": self.prompt or ""}]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class GenerationResult:
    kind: str
    text: str
    citations: tuple[str, ...] = ()

    @classmethod
    def plain(cls, text: str) -> "GenerationResult":
        return cls(kind="plain", text=text)

    @classmethod
    def structured(cls, text: str, citations: list[str] | tuple[str, ...] = ()) -> "GenerationResult":
        return cls(kind="structured", text=text, citations=tuple(citations))

    def plain_text(self) -> str:
        answer = (self.text or "").strip()
        if not answer:
            raise MalformedOutputError("Provider returned an empty answer.", raw=self.text)
        if looks_like_envelope(answer):
            return extract_plain_text(answer)
        return answer


class GenerationProvider:
    """Interface every text generation backend implements."""

    def __init__(self, name: str, priority: int = 0):
        self.name = name
        self.priority = priority

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r}, priority={self.priority})"


def _unescape_fragment(fragment: str) -> str:
    return fragment.replace('\\"', '"').replace("\\n", "\n").replace("\\t", "\t").replace("\\\\", "\\")


def _answer_from_payload(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    for key in _ANSWER_KEYS:
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def looks_like_envelope(text: str) -> bool:
    stripped = (text or "").lstrip()
    return stripped.startswith("{") or stripped.startswith("```")


def extract_plain_text(raw: Any) -> str:
    """Recover a usable answer from JSON, fenced JSON or a partial envelope."""
    if isinstance(raw, dict):
        answer = _answer_from_payload(raw)
        if answer:
            return answer
        raise MalformedOutputError("Structured payload has no answer field.", raw=raw)

    text = str(raw if raw is not None else "").strip()
    fenced = _FENCED_BLOCK.match(text)
    if fenced:
        text = fenced.group(1).strip()

    if text.startswith("{"):
        try:
            answer = _answer_from_payload(json.loads(text))
        except json.JSONDecodeError:
            answer = None
        if answer:
            return answer

        fragment = _RESPONSE_FIELD.search(text)
        if fragment and fragment.group(1).strip():
            return _unescape_fragment(fragment.group(1)).strip()

        truncated = _TRUNCATED_RESPONSE_FIELD.search(text)
        if truncated:
            recovered = _unescape_fragment(truncated.group(1)).rstrip('"} \n\t').strip()
            if recovered:
                return recovered
        raise MalformedOutputError("Could not recover an answer from provider output.", raw=raw)

    cleaned = text.strip('"').strip()
    if not cleaned:
        raise MalformedOutputError("Provider output was empty.", raw=raw)
    return cleaned


def _message_content(response: Any) -> str:
    if isinstance(response, dict):
        message = response.get("message") or {}
        content = message.get("content") if isinstance(message, dict) else getattr(message, "content", None)
    else:
        message = getattr(response, "message", None)
        content = getattr(message, "content", None)
    return content if isinstance(content, str) else ""


class OllamaProvider(GenerationProvider):
    """Generation provider backed by an Ollama server."""

    def __init__(
        self,
        name: str,
        model: str,
        host: str = DEFAULT_OLLAMA_HOST,
        priority: int = 0,
        options: dict[str, Any] | None = None,
    ):
        super().__init__(name=name, priority=priority)
        self.model = model
        self.host = self._normalize_host(host) or DEFAULT_OLLAMA_HOST
        self.options = dict(options or {})

    @staticmethod
    def _normalize_host(host: str | None) -> str | None:
        if host is None:
            return None
        cleaned = host.strip().rstrip("/")
        parsed = urlparse(cleaned)
        if parsed.scheme in {"http", "https"} and parsed.netloc:
            return cleaned
        return None

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        client = AsyncClient(host=self.host)
        chat_kwargs: dict[str, Any] = {}
        if self.options:
            chat_kwargs["options"] = self.options
        try:
            response = await client.chat(
                model=self.model,
                messages=request.as_messages(),
                stream=False,
                **chat_kwargs,
            )
        except Exception as error:
            raise ProviderError(
                f"{self.name}: {error}",
                provider=self.name,
                metadata={"model": self.model, "host": self.host, "tier": request.tier},
            ) from error

        content = _message_content(response)
        if looks_like_envelope(content):
            try:
                return GenerationResult.plain(extract_plain_text(content))
            except MalformedOutputError as error:
                error.provider = self.name
                raise
        if not content.strip():
            raise MalformedOutputError(f"{self.name}: empty completion.", raw=response, provider=self.name)
        return GenerationResult.plain(content.strip())


def build_providers(settings: dict[str, Any]) -> list[GenerationProvider]:
    """Create providers from ``providers.entries``, highest priority first."""
    default_host = get_runtime_setting(settings, "providers.default_ollama_host", DEFAULT_OLLAMA_HOST)
    entries = get_runtime_setting(settings, "providers.entries", []) or []
    providers: list[GenerationProvider] = []

    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            logger.warning(f"Skipping provider entry #{index}: not a mapping.")
            continue
        if entry.get("enabled") is False:
            continue
        model = str(entry.get("model") or "").strip()
        if not model:
            logger.warning(f"Skipping provider entry #{index}: no model configured.")
            continue
        kind = str(entry.get("type") or "ollama").strip().lower()
        if kind != "ollama":
            logger.warning(f"Skipping provider entry #{index}: unsupported type '{kind}'.")
            continue
        try:
            priority = int(entry.get("priority", 0))
        except (TypeError, ValueError):
            priority = 0
        providers.append(
            OllamaProvider(
                name=str(entry.get("name") or model),
                model=model,
                host=str(entry.get("host") or default_host),
                priority=priority,
                options=entry.get("options") if isinstance(entry.get("options"), dict) else None,
            )
        )

    # sorted() is stable, so equal priorities keep their configured order
    return sorted(providers, key=lambda provider: provider.priority, reverse=True)


__all__ = [
    "DEFAULT_OLLAMA_HOST",
    "GenerationProvider",
    "GenerationRequest",
    "GenerationResult",
    "MalformedOutputError",
    "OllamaProvider",
    "ProviderError",
    "TIER_BARE",
    "TIER_CONTEXT",
    "TIER_HISTORY",
    "build_providers",
    "extract_plain_text",
    "looks_like_envelope",
]
