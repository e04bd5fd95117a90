"""Time-boxed cache in front of the model-listing call."""

import time
from dataclasses import dataclass
from typing import Callable

from . import fmt

DEFAULT_CACHE_DURATION = 300  # seconds


@dataclass(frozen=True)
class ModelCacheEntry:
    names: tuple[str, ...]
    fetched_at: float


class ModelCache:
    """Backs /model listing and tab completion.

    Fetch failures never propagate: the last good list (or an empty one)
    is returned instead.
    """

    def __init__(
        self,
        client,
        cache_duration: float = DEFAULT_CACHE_DURATION,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.cache_duration = cache_duration
        self._clock = clock
        self._entry: ModelCacheEntry | None = None

    def get_models(self, force_refresh: bool = False) -> list[str]:
        if force_refresh or self._expired():
            self._refresh()
        else:
            fmt.debug(f"Using cached models ({len(self._entry.names)})")
        return list(self._entry.names) if self._entry else []

    def invalidate(self) -> None:
        self._entry = None

    def _expired(self) -> bool:
        if self._entry is None:
            return True
        return self._clock() - self._entry.fetched_at > self.cache_duration

    def _refresh(self) -> None:
        fmt.debug("Refreshing models cache")
        try:
            names = self.client.list_models()
        except Exception as e:
            fmt.debug(f"Error fetching models: {e}")
            return
        self._entry = ModelCacheEntry(tuple(sorted(names)), self._clock())
        fmt.debug(f"Cache updated with {len(self._entry.names)} models")
