##########################################################################
#                                                                        #
#  This file (orchestrator.py) answers a user message: rate check,       #
#  cache lookup, provider attempts with rotation, then fallback.         #
#                                                                        #
##########################################################################

from __future__ import annotations

import asyncio
from dataclasses import asdict, dataclass, field
import logging
import random
import threading
import time
from typing import Any, Callable, Iterable

from emotionscore.affect_scorer import AffectScore, AffectScorer
from emotionscore.errors import (
    AllProvidersExhaustedError,
    ProviderError,
    ProviderUnavailableError,
    RateLimitedError,
)
from emotionscore.fallback_generator import FallbackGenerator
from emotionscore.log_utils import configure_logging_from_settings
from emotionscore.prompt_builder import (
    bare_prompt,
    build_context_prompt,
    format_alternating_history,
    user_messages,
)
from emotionscore.provider_rotation import Provider, ProviderRotationManager
from emotionscore.providers import (
    TIER_BARE,
    TIER_CONTEXT,
    TIER_HISTORY,
    GenerationProvider,
    GenerationRequest,
    build_providers,
)
from emotionscore.rate_limiter import RateLimiter
from emotionscore.response_cache import ResponseCache
from emotionscore.runtime_settings import build_runtime_settings, get_runtime_setting
from emotionscore.style_profiler import StyleMarkers, StyleProfile, load_style_markers, profile_style


logger = logging.getLogger(__name__)

SOURCE_CACHE = "cache"
SOURCE_SIMILAR_CACHE = "similar_cache"
SOURCE_PROVIDER = "provider"
SOURCE_FALLBACK = "fallback"


@dataclass(frozen=True)
class OrchestratorConfig:
    similarity_threshold: float = 0.8
    provider_timeout_seconds: float = 30.0
    history_turn_limit: int = 6
    context_turn_limit: int = 4
    style_history_limit: int = 10

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> "OrchestratorConfig":
        return cls(
            similarity_threshold=float(get_runtime_setting(settings, "cache.similarity_threshold", 0.8)),
            provider_timeout_seconds=float(get_runtime_setting(settings, "providers.timeout_seconds", 30.0)),
            history_turn_limit=int(get_runtime_setting(settings, "orchestrator.history_turn_limit", 6)),
            context_turn_limit=int(get_runtime_setting(settings, "orchestrator.context_turn_limit", 4)),
            style_history_limit=int(get_runtime_setting(settings, "orchestrator.style_history_limit", 10)),
        )


@dataclass
class OrchestratorResult:
    response: str
    affect: AffectScore
    source: str
    provider_name: str | None = None
    tier: int | None = None
    attempted_providers: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class _ProviderAnswer:
    response: str
    provider_name: str
    tier: int
    attempted: list[str]


class ResponseOrchestrator:
    """Emotion-aware response pipeline over explicit service objects."""

    def __init__(
        self,
        scorer: AffectScorer,
        cache: ResponseCache,
        rate_limiter: RateLimiter,
        rotation: ProviderRotationManager,
        fallback: FallbackGenerator,
        config: OrchestratorConfig | None = None,
        style_markers: StyleMarkers | None = None,
    ):
        self.scorer = scorer
        self.cache = cache
        self.rate_limiter = rate_limiter
        self.rotation = rotation
        self.fallback = fallback
        self.config = config or OrchestratorConfig()
        self.style_markers = style_markers
        self._stats_lock = threading.RLock()
        self._total_requests = 0
        self._cache_hits = 0
        self._fallbacks = 0

    def _count(self, attribute: str) -> None:
        with self._stats_lock:
            setattr(self, attribute, getattr(self, attribute) + 1)

    async def respond(self, text: str, identity: Any, history: Iterable[Any] = ()) -> OrchestratorResult:
        if self.rate_limiter.is_rate_limited(identity):
            logger.warning(f"Rate limit exceeded for identity {identity}")
            raise RateLimitedError(identity)

        history = list(history or ())
        affect = self.scorer.score(text)

        cached = self.cache.get(text)
        if cached is not None:
            self._count("_cache_hits")
            logger.info("Serving response from exact cache match.")
            return OrchestratorResult(response=cached.response, affect=affect, source=SOURCE_CACHE)

        similar = self.cache.find_similar(text, threshold=self.config.similarity_threshold)
        if similar is not None:
            self._count("_cache_hits")
            logger.info("Serving response from similar cache entry.")
            self.cache.set(text, similar.response, affect)
            return OrchestratorResult(response=similar.response, affect=affect, source=SOURCE_SIMILAR_CACHE)

        try:
            answer = await self._generate_with_rotation(text, affect, history)
        except (ProviderUnavailableError, AllProvidersExhaustedError) as error:
            logger.warning(f"Falling back to rule-based reply: {error}")
            self._count("_fallbacks")
            attempted = list(getattr(error, "attempted", []))
            response = self.fallback.generate(text, affect, user_messages(history))
            self.cache.set(text, response, affect)
            return OrchestratorResult(
                response=response,
                affect=affect,
                source=SOURCE_FALLBACK,
                attempted_providers=attempted,
            )

        self.cache.set(text, answer.response, affect)
        return OrchestratorResult(
            response=answer.response,
            affect=affect,
            source=SOURCE_PROVIDER,
            provider_name=answer.provider_name,
            tier=answer.tier,
            attempted_providers=answer.attempted,
        )

    def _tier_requests(self, text: str, affect: AffectScore, style: StyleProfile, history: list[Any]) -> list[GenerationRequest]:
        requests: list[GenerationRequest] = []
        history_messages = format_alternating_history(history, limit=self.config.history_turn_limit)
        if len(history_messages) >= 2:
            requests.append(
                GenerationRequest(
                    tier=TIER_HISTORY,
                    messages=history_messages + [{"role": "user", "content": text.strip()}],
                )
            )
        requests.append(
            GenerationRequest(
                tier=TIER_CONTEXT,
                prompt=build_context_prompt(
                    text,
                    affect,
                    style=style,
                    history=history,
                    turn_limit=self.config.context_turn_limit,
                ),
            )
        )
        requests.append(GenerationRequest(tier=TIER_BARE, prompt=bare_prompt(text)))
        return requests

    async def _attempt(self, provider: Provider, request: GenerationRequest) -> str:
        self._count("_total_requests")
        result = await asyncio.wait_for(
            provider.client.generate(request),
            timeout=self.config.provider_timeout_seconds,
        )
        return result.plain_text()

    async def _generate_with_rotation(self, text: str, affect: AffectScore, history: list[Any]) -> _ProviderAnswer:
        if not self.rotation.is_available():
            raise ProviderUnavailableError("No generation providers are configured.")

        prior_user_messages = user_messages(history)
        style_limit = self.config.style_history_limit
        if style_limit > 0:
            prior_user_messages = prior_user_messages[-style_limit:]
        style = profile_style(text, prior_user_messages, self.style_markers)
        requests = self._tier_requests(text, affect, style, history)

        cursor = self.rotation.start_rotation()
        provider = cursor.current_provider()
        attempted: list[str] = []
        errors: list[str] = []

        for attempt in range(len(cursor)):
            if attempt:
                provider = cursor.rotate()
            attempted.append(provider.name)

            for request in requests:
                try:
                    response = await self._attempt(provider, request)
                except asyncio.TimeoutError:
                    errors.append(f"{provider.name} tier {request.tier}: timed out")
                    logger.warning(f"Provider {provider.name} timed out on tier {request.tier}")
                except ProviderError as error:
                    errors.append(f"{provider.name} tier {request.tier}: {error}")
                    logger.warning(f"Provider {provider.name} failed on tier {request.tier}: {error}")
                except Exception as error:
                    errors.append(f"{provider.name} tier {request.tier}: {error}")
                    logger.warning(f"Provider {provider.name} raised {type(error).__name__} on tier {request.tier}: {error}")
                else:
                    return _ProviderAnswer(response=response, provider_name=provider.name, tier=request.tier, attempted=attempted)

            logger.info(f"Provider {provider.name} exhausted every prompt tier.")

        raise AllProvidersExhaustedError(
            f"All {len(attempted)} providers failed.",
            attempted=attempted,
            errors=errors,
        )

    def status(self) -> dict[str, Any]:
        with self._stats_lock:
            total_requests = self._total_requests
            cache_hits = self._cache_hits
            fallbacks = self._fallbacks
        return {
            "providers": self.rotation.usage_stats(),
            "model_count": len(self.rotation),
            "cache_size": self.cache.size,
            "total_requests": total_requests,
            "cache_hits": cache_hits,
            "fallbacks": fallbacks,
        }


def build_orchestrator(
    settings: dict[str, Any] | None = None,
    providers: Iterable[GenerationProvider | Provider] | None = None,
    rng: random.Random | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> ResponseOrchestrator:
    """Wire an orchestrator from runtime settings."""
    settings = settings if settings is not None else build_runtime_settings()
    configure_logging_from_settings(settings)
    if providers is None:
        providers = build_providers(settings)
    style_markers = load_style_markers(get_runtime_setting(settings, "style.markers_path", "") or None)
    rotation = ProviderRotationManager(providers)
    if not rotation.is_available():
        logger.warning("No generation providers configured; every reply will use the fallback generator.")

    return ResponseOrchestrator(
        scorer=AffectScorer.from_settings(settings),
        cache=ResponseCache.from_settings(settings, clock=clock),
        rate_limiter=RateLimiter.from_settings(settings, clock=clock),
        rotation=rotation,
        fallback=FallbackGenerator.from_settings(settings, rng=rng, style_markers=style_markers),
        config=OrchestratorConfig.from_settings(settings),
        style_markers=style_markers,
    )


__all__ = [
    "OrchestratorConfig",
    "OrchestratorResult",
    "ResponseOrchestrator",
    "SOURCE_CACHE",
    "SOURCE_FALLBACK",
    "SOURCE_PROVIDER",
    "SOURCE_SIMILAR_CACHE",
    "build_orchestrator",
]
