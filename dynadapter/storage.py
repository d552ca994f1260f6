r"""Thread-safe local storage with an atomic get-or-create."""

from __future__ import annotations

import logging
from collections.abc import ItemsView, KeysView, ValuesView
from threading import RLock
from typing import Callable, Dict, Generic, Hashable, Iterator, MutableMapping, TypeVar

logger = logging.getLogger(__name__)

__all__ = ["ThreadSafeLocalStorage"]

KeyType = TypeVar("KeyType", bound=Hashable)
ValType = TypeVar("ValType")


class ThreadSafeLocalStorage(
    MutableMapping[KeyType, ValType], Generic[KeyType, ValType]
):
    """Thread-safe local storage with single-write multi-read semantics.

    `get_or_create` builds a missing value at most once per key: concurrent
    callers for the same key wait for the first builder and receive its
    value. Builds for different keys do not block each other. A value is
    published only after its factory returned.
    """

    def __init__(self):
        self._storage: Dict[KeyType, ValType] = {}
        self._pending: Dict[KeyType, RLock] = {}
        self._lock = RLock()

    def __getitem__(self, key: KeyType) -> ValType:
        with self._lock:
            return self._storage[key]

    def __setitem__(self, key: KeyType, value: ValType) -> None:
        with self._lock:
            self._storage[key] = value

    def __delitem__(self, key: KeyType) -> None:
        with self._lock:
            del self._storage[key]

    def __iter__(self) -> Iterator[KeyType]:
        with self._lock:
            return iter(list(self._storage.keys()))

    def __len__(self) -> int:
        with self._lock:
            return len(self._storage)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._storage

    def clear(self) -> None:
        with self._lock:
            self._storage.clear()

    def keys(self) -> KeysView[KeyType]:
        with self._lock:
            return dict(self._storage).keys()

    def values(self) -> ValuesView[ValType]:
        with self._lock:
            return dict(self._storage).values()

    def items(self) -> ItemsView[KeyType, ValType]:
        with self._lock:
            return dict(self._storage).items()

    def get_or_create(self, key: KeyType, factory: Callable[[], ValType]) -> ValType:
        """Return the value under `key`, building it with `factory` if absent.

        If `factory` raises, nothing is stored and the exception propagates;
        a later call retries the build. The per-key lock is released in
        either case.
        """
        while True:
            with self._lock:
                if key in self._storage:
                    return self._storage[key]
                key_lock = self._pending.setdefault(key, RLock())

            with key_lock:
                with self._lock:
                    if key in self._storage:
                        return self._storage[key]
                    if self._pending.get(key) is not key_lock:
                        # The build we waited for failed; start over.
                        continue
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug("Building value for %r", key)
                try:
                    value = factory()
                    with self._lock:
                        self._storage[key] = value
                    return value
                finally:
                    with self._lock:
                        if self._pending.get(key) is key_lock:
                            del self._pending[key]
