##########################################################################
#                                                                        #
#  Central runtime settings hydration for config.json + .env             #
#                                                                        #
##########################################################################

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Mapping


DEFAULT_RUNTIME_SETTINGS: dict[str, Any] = {
    "affect": {
        "negation_inversion": 0.8,
        "negation_dampening": 0.7,
        "caps_ratio_threshold": 1.0,
        "rules_path": "",
    },
    "cache": {
        "capacity": 1000,
        "ttl_minutes": 60.0,
        "similarity_threshold": 0.8,
    },
    "rate_limit": {
        "window_ms": 60000,
        "max_requests": 20,
    },
    "providers": {
        "default_ollama_host": "http://127.0.0.1:11434",
        "timeout_seconds": 30.0,
        # Ordered by priority, highest first.
        "entries": [],
    },
    "orchestrator": {
        "history_turn_limit": 6,
        "context_turn_limit": 4,
        "style_history_limit": 10,
    },
    "fallback": {
        "acknowledgment_probability": 0.7,
        "elaboration_probability": 0.5,
        "seed": None,
        "phrases_path": "",
    },
    "style": {
        "markers_path": "",
    },
    "logging": {
        "enabled": True,
        "level": "INFO",
        "colored": True,
    },
}


ENV_OVERRIDES: dict[str, tuple[tuple[str, ...], str]] = {
    "affect.negation_inversion": (("EMOTIONSCORE_NEGATION_INVERSION",), "float"),
    "affect.negation_dampening": (("EMOTIONSCORE_NEGATION_DAMPENING",), "float"),
    "affect.caps_ratio_threshold": (("EMOTIONSCORE_CAPS_RATIO_THRESHOLD",), "float"),
    "affect.rules_path": (("EMOTIONSCORE_AFFECT_RULES_PATH",), "str"),
    "cache.capacity": (("EMOTIONSCORE_CACHE_CAPACITY",), "int"),
    "cache.ttl_minutes": (("EMOTIONSCORE_CACHE_TTL_MINUTES",), "float"),
    "cache.similarity_threshold": (("EMOTIONSCORE_CACHE_SIMILARITY_THRESHOLD",), "float"),
    "rate_limit.window_ms": (("EMOTIONSCORE_RATE_LIMIT_WINDOW_MS",), "int"),
    "rate_limit.max_requests": (("EMOTIONSCORE_RATE_LIMIT_MAX_REQUESTS",), "int"),
    "providers.default_ollama_host": (("EMOTIONSCORE_OLLAMA_HOST", "OLLAMA_HOST"), "str"),
    "providers.timeout_seconds": (("EMOTIONSCORE_PROVIDER_TIMEOUT_SECONDS",), "float"),
    "orchestrator.history_turn_limit": (("EMOTIONSCORE_HISTORY_TURN_LIMIT",), "int"),
    "orchestrator.context_turn_limit": (("EMOTIONSCORE_CONTEXT_TURN_LIMIT",), "int"),
    "orchestrator.style_history_limit": (("EMOTIONSCORE_STYLE_HISTORY_LIMIT",), "int"),
    "fallback.acknowledgment_probability": (("EMOTIONSCORE_FALLBACK_ACK_PROBABILITY",), "float"),
    "fallback.elaboration_probability": (("EMOTIONSCORE_FALLBACK_ELABORATION_PROBABILITY",), "float"),
    "fallback.seed": (("EMOTIONSCORE_FALLBACK_SEED",), "int"),
    "fallback.phrases_path": (("EMOTIONSCORE_FALLBACK_PHRASES_PATH",), "str"),
    "style.markers_path": (("EMOTIONSCORE_STYLE_MARKERS_PATH",), "str"),
    "logging.enabled": (("EMOTIONSCORE_LOG_ENABLED",), "bool"),
    "logging.level": (("EMOTIONSCORE_LOG_LEVEL",), "str"),
    "logging.colored": (("EMOTIONSCORE_LOG_COLORED",), "bool"),
}


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _coerce_env_value(raw_value: str, value_type: str) -> Any:
    if value_type == "str":
        return raw_value
    if value_type == "int":
        return int(raw_value)
    if value_type == "float":
        return float(raw_value)
    if value_type == "bool":
        return _parse_bool(raw_value)
    return raw_value


def _deep_merge(base: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    for key, value in incoming.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _path_parts(path: str) -> list[str]:
    return [part for part in path.split(".") if part]


def get_runtime_setting(settings: dict[str, Any], path: str, default: Any = None) -> Any:
    cursor: Any = settings
    for part in _path_parts(path):
        if not isinstance(cursor, dict) or part not in cursor:
            return default
        cursor = cursor.get(part)
    return cursor


def set_runtime_setting(settings: dict[str, Any], path: str, value: Any) -> None:
    parts = _path_parts(path)
    if not parts:
        return
    cursor: dict[str, Any] = settings
    for part in parts[:-1]:
        next_value = cursor.get(part)
        if not isinstance(next_value, dict):
            next_value = {}
            cursor[part] = next_value
        cursor = next_value
    cursor[parts[-1]] = value


def load_dotenv_file(path: str | Path = ".env", override: bool = False) -> dict[str, str]:
    dotenv_path = Path(path)
    loaded: dict[str, str] = {}
    if not dotenv_path.exists():
        return loaded

    for raw_line in dotenv_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        if line.startswith("export "):
            line = line[len("export ") :].strip()

        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue

        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]

        loaded[key] = value
        if override or key not in os.environ:
            os.environ[key] = value

    return loaded


def load_config_file(path: str | Path = "config.json") -> dict[str, Any]:
    """Read a JSON config file; a missing file yields an empty config."""
    config_path = Path(path)
    if not config_path.exists():
        return {}
    payload = json.loads(config_path.read_text(encoding="utf-8"))
    return payload if isinstance(payload, dict) else {}


def build_runtime_settings(
    config_data: dict[str, Any] | None = None,
    env_data: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    settings = copy.deepcopy(DEFAULT_RUNTIME_SETTINGS)
    if isinstance(config_data, dict):
        runtime_config = config_data.get("runtime")
        if isinstance(runtime_config, dict):
            _deep_merge(settings, runtime_config)

    env_values = env_data if env_data is not None else os.environ
    for path, (env_keys, value_type) in ENV_OVERRIDES.items():
        raw_value = None
        for env_key in env_keys:
            raw_candidate = env_values.get(env_key)
            if raw_candidate is None or str(raw_candidate).strip() == "":
                continue
            raw_value = raw_candidate
            break
        if raw_value is None or str(raw_value).strip() == "":
            continue
        try:
            parsed = _coerce_env_value(str(raw_value).strip(), value_type)
        except (TypeError, ValueError):
            continue
        set_runtime_setting(settings, path, parsed)

    return settings
