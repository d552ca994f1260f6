r"""Process-lifetime cache of generated adapter classes."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

from .storage import ThreadSafeLocalStorage
from .utils import get_type_name

logger = logging.getLogger(__name__)

__all__ = ["TypeCache"]

CacheKey = Tuple[type, type]


class TypeCache:
    """Memoizes adapter classes by `(wrapped_type, interface)`.

    Exactly one build runs per key for the lifetime of the cache; concurrent
    requests for the same key receive the identical class. Entries are never
    evicted.
    """

    def __init__(self):
        self._repository: ThreadSafeLocalStorage[CacheKey, type] = ThreadSafeLocalStorage()

    def get_or_build(
        self, wrapped_type: type, interface: type, build: Callable[[], type]
    ) -> type:
        key = (wrapped_type, interface)
        if logger.isEnabledFor(logging.DEBUG) and key not in self._repository:
            logger.debug(
                "Cache miss for (%s, %s)",
                get_type_name(wrapped_type),
                get_type_name(interface),
            )
        return self._repository.get_or_create(key, build)

    def get(self, wrapped_type: type, interface: type) -> Optional[type]:
        return self._repository.get((wrapped_type, interface))

    def __contains__(self, key: object) -> bool:
        return key in self._repository

    def __len__(self) -> int:
        return len(self._repository)

    def keys(self):
        return self._repository.keys()
