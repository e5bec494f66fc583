from emotionscore.affect_rules import AffectRules, load_affect_rules
from emotionscore.affect_scorer import AffectScore, AffectScorer, AffectScorerConfig, describe_affect
from emotionscore.errors import (
    AllProvidersExhaustedError,
    EmotionScoreError,
    MalformedOutputError,
    ProviderError,
    ProviderUnavailableError,
    RateLimitedError,
)
from emotionscore.fallback_generator import FallbackGenerator, TopicMatch
from emotionscore.fallback_phrases import FallbackPhrases, load_fallback_phrases
from emotionscore.log_utils import configure_logging, configure_logging_from_settings
from emotionscore.orchestrator import (
    OrchestratorConfig,
    OrchestratorResult,
    ResponseOrchestrator,
    build_orchestrator,
)
from emotionscore.prompt_builder import ConversationTurn
from emotionscore.provider_rotation import Provider, ProviderRotationManager, RotationCursor
from emotionscore.providers import (
    GenerationProvider,
    GenerationRequest,
    GenerationResult,
    OllamaProvider,
    build_providers,
    extract_plain_text,
)
from emotionscore.rate_limiter import RateLimiter
from emotionscore.response_cache import CacheEntry, ResponseCache
from emotionscore.runtime_settings import build_runtime_settings
from emotionscore.style_mirror import apply_user_style, strip_terms_of_endearment
from emotionscore.style_profiler import StyleMarkers, StyleProfile, load_style_markers, profile_style

__all__ = [
    "AffectRules",
    "AffectScore",
    "AffectScorer",
    "AffectScorerConfig",
    "AllProvidersExhaustedError",
    "CacheEntry",
    "ConversationTurn",
    "EmotionScoreError",
    "FallbackGenerator",
    "FallbackPhrases",
    "GenerationProvider",
    "GenerationRequest",
    "GenerationResult",
    "MalformedOutputError",
    "OllamaProvider",
    "OrchestratorConfig",
    "OrchestratorResult",
    "Provider",
    "ProviderError",
    "ProviderRotationManager",
    "ProviderUnavailableError",
    "RateLimitedError",
    "RateLimiter",
    "ResponseCache",
    "ResponseOrchestrator",
    "RotationCursor",
    "StyleMarkers",
    "StyleProfile",
    "TopicMatch",
    "apply_user_style",
    "build_orchestrator",
    "build_providers",
    "build_runtime_settings",
    "configure_logging",
    "configure_logging_from_settings",
    "describe_affect",
    "extract_plain_text",
    "load_affect_rules",
    "load_fallback_phrases",
    "load_style_markers",
    "profile_style",
    "strip_terms_of_endearment",
]
