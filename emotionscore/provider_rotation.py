##########################################################################
#                                                                        #
#  This file (provider_rotation.py) tracks which generation provider    #
#  is current, rotates through them and counts their usage.              #
#                                                                        #
##########################################################################

from __future__ import annotations

from dataclasses import dataclass
import logging
import threading
from typing import Any, Iterable

from emotionscore.providers import GenerationProvider


logger = logging.getLogger(__name__)


@dataclass
class Provider:
    name: str
    priority: int
    client: GenerationProvider
    usage_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "priority": self.priority, "usage_count": self.usage_count}


def _as_record(candidate: GenerationProvider | Provider) -> Provider:
    if isinstance(candidate, Provider):
        return candidate
    return Provider(
        name=str(getattr(candidate, "name", type(candidate).__name__)),
        priority=int(getattr(candidate, "priority", 0) or 0),
        client=candidate,
    )


class RotationCursor:
    """One request's walk over the rotation order.

    The cursor keeps its own index, so concurrent requests never move each
    other's position. Usage is still counted on the shared manager."""

    def __init__(self, manager: "ProviderRotationManager", providers: list[Provider]):
        self._manager = manager
        self._providers = providers
        self._index = 0

    def __len__(self) -> int:
        return len(self._providers)

    def current_provider(self) -> Provider | None:
        if not self._providers:
            return None
        return self._manager._select(self._providers[self._index])

    def rotate(self) -> Provider | None:
        if not self._providers:
            return None
        self._index = (self._index + 1) % len(self._providers)
        logger.info(f"Rotated to provider {self._providers[self._index].name}")
        return self.current_provider()


class ProviderRotationManager:
    """Circular selection over a priority-ordered provider list."""

    def __init__(self, providers: Iterable[GenerationProvider | Provider] = ()):
        self._providers = [_as_record(provider) for provider in providers]
        self._index = 0
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._providers)

    def is_available(self) -> bool:
        return len(self._providers) > 0

    def provider_names(self) -> list[str]:
        return [provider.name for provider in self._providers]

    def _select(self, provider: Provider) -> Provider:
        with self._lock:
            provider.usage_count += 1
            return provider

    def current_provider(self) -> Provider | None:
        """Return the current provider and count the selection."""
        with self._lock:
            if not self._providers:
                return None
            return self._select(self._providers[self._index])

    def rotate(self) -> Provider | None:
        with self._lock:
            if not self._providers:
                return None
            self._index = (self._index + 1) % len(self._providers)
            logger.info(f"Rotated to provider {self._providers[self._index].name}")
            return self.current_provider()

    def reset(self) -> None:
        with self._lock:
            self._index = 0

    def start_rotation(self) -> RotationCursor:
        """Cursor starting at the highest priority provider, for a single request."""
        with self._lock:
            return RotationCursor(self, list(self._providers))

    def usage(self, name: str) -> int:
        with self._lock:
            for provider in self._providers:
                if provider.name == name:
                    return provider.usage_count
        return 0

    def usage_stats(self) -> dict[str, int]:
        with self._lock:
            return {provider.name: provider.usage_count for provider in self._providers}


__all__ = [
    "Provider",
    "ProviderRotationManager",
    "RotationCursor",
]
