r"""Named indexed properties.

Python has a single anonymous indexer per class (`__getitem__`). This module
adds named, possibly multi-index, properties so both interfaces and wrapped
classes can declare them:

    class Person:
        @indexer
        def subname(self, index: int) -> str:
            return self.name[index:]

        @indexer
        def substring(self, index: int, length: int) -> str:
            return self.name[index:index + length]

    person.subname[1]        # -> "lice"
    person.substring[1, 2]   # -> "li"
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Optional, Tuple

from .utils import EMPTY, get_hints

__all__ = ["IndexedProperty", "BoundIndexer", "indexer", "normalize_key", "pack_key"]


def normalize_key(key: Any, arity: int) -> Tuple[Any, ...]:
    """Turn a subscription key into an index tuple of the given arity.

    Raises:
        TypeError: if the number of indices does not match `arity`.
    """
    if arity == 1:
        return (key,)
    index = key if isinstance(key, tuple) else (key,)
    if len(index) != arity:
        raise TypeError(f"expected {arity} indices, got {len(index)}")
    return index


def pack_key(index: Tuple[Any, ...]) -> Any:
    """Inverse of `normalize_key`: the key to pass to `obj[...]`."""
    return index[0] if len(index) == 1 else tuple(index)


class IndexedProperty:
    """Descriptor for a named property taking one or more indices.

    The getter is called as `fget(obj, *index)`, the setter as
    `fset(obj, *index, value)`.
    """

    def __init__(
        self,
        fget: Optional[Callable[..., Any]] = None,
        fset: Optional[Callable[..., Any]] = None,
        doc: Optional[str] = None,
        arity: Optional[int] = None,
    ):
        self.fget = fget
        self.fset = fset
        self.__doc__ = doc if doc is not None else getattr(fget, "__doc__", None)
        self.name: Optional[str] = getattr(fget, "__name__", None)
        self._arity = arity

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, obj: Any, objtype: Optional[type] = None) -> Any:
        if obj is None:
            return self
        return BoundIndexer(self, obj)

    def __set__(self, obj: Any, value: Any) -> None:
        raise AttributeError(f"indexed property '{self.name}' cannot be assigned")

    def __repr__(self) -> str:
        return f"<indexer {self.name}[{', '.join(map(_type_repr, self.index_types))}]>"

    def getter(self, fget: Callable[..., Any]) -> "IndexedProperty":
        return type(self)(fget, self.fset, self.__doc__, self._arity)

    def setter(self, fset: Callable[..., Any]) -> "IndexedProperty":
        return type(self)(self.fget, fset, self.__doc__, self._arity)

    @property
    def index_types(self) -> Tuple[Any, ...]:
        """Annotations of the getter's index parameters."""
        if self.fget is None:
            return ()
        hints = get_hints(self.fget)
        return tuple(hints.get(name, EMPTY) for name in _index_names(self.fget))

    @property
    def value_type(self) -> Any:
        """Return annotation of the getter."""
        if self.fget is None:
            return EMPTY
        return get_hints(self.fget).get("return", EMPTY)

    @property
    def arity(self) -> int:
        if self._arity is not None:
            return self._arity
        if self.fget is not None:
            return len(_index_names(self.fget))
        return 1

    @property
    def readable(self) -> bool:
        return self.fget is not None

    @property
    def writable(self) -> bool:
        return self.fset is not None


class BoundIndexer:
    """An indexed property bound to an instance; supports `[...]` access."""

    __slots__ = ("_indexer", "_obj")

    def __init__(self, indexer: IndexedProperty, obj: Any):
        self._indexer = indexer
        self._obj = obj

    def __getitem__(self, key: Any) -> Any:
        fget = self._indexer.fget
        if fget is None:
            raise AttributeError(f"indexed property '{self._indexer.name}' is not readable")
        return fget(self._obj, *normalize_key(key, self._indexer.arity))

    def __setitem__(self, key: Any, value: Any) -> None:
        fset = self._indexer.fset
        if fset is None:
            raise AttributeError(f"indexed property '{self._indexer.name}' is read-only")
        fset(self._obj, *normalize_key(key, self._indexer.arity), value)

    def __repr__(self) -> str:
        return f"<bound {self._indexer!r} of {self._obj!r}>"


def indexer(fget: Callable[..., Any]) -> IndexedProperty:
    """Decorator turning `(self, *index) -> value` into an `IndexedProperty`."""
    return IndexedProperty(fget)


def _index_names(fget: Callable[..., Any]) -> Tuple[str, ...]:
    params = list(inspect.signature(fget).parameters.values())[1:]
    return tuple(p.name for p in params)


def _type_repr(tp: Any) -> str:
    if tp is EMPTY:
        return "?"
    return getattr(tp, "__name__", repr(tp))

