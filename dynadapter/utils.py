"""Utility exceptions and helpers for adapter generation.

This module defines a small hierarchy of rich exceptions used throughout the
resolver, emitter and factory, plus reflection helpers.

Exceptions:
    AdapterError: Base class carrying `suggestions` and `context` metadata.
    InvalidArgumentError: Raised synchronously for bad factory arguments.
    UnsupportedMemberError: Raised when an unresolved member is invoked.
    MappingConfigError: Raised when mapping metadata is malformed.

Helpers:
    get_type_name(cls, qualname=False): Return a human-readable type name.
    is_interface(obj): Return True for Protocol or abstract classes.
    get_hints(obj): Resolve annotations, tolerating unresolved forward refs.
"""

import inspect
import logging
from abc import ABCMeta
from inspect import isclass
from typing import Any, Dict, List, Optional

from typing_extensions import get_type_hints

logger = logging.getLogger(__name__)

__all__ = [
    "AdapterError",
    "InvalidArgumentError",
    "UnsupportedMemberError",
    "MappingConfigError",
    "get_type_name",
    "is_interface",
    "get_hints",
    "EMPTY",
]

EMPTY = inspect.Parameter.empty
"""Marker for a missing annotation."""

# Bases that never contribute interface members.
_FOUNDATION_MODULES = frozenset({"builtins", "typing", "typing_extensions", "abc"})


class AdapterError(Exception):
    """Base exception for adapter generation with structured context.

    Attributes:
        message: Human-readable error text.
        suggestions: List of short, imperative hints for remediation.
        context: Free-form key/value details safe to log and render.
    """

    def __init__(
        self,
        message: str,
        suggestions: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.suggestions = suggestions or []
        self.context = context or {}
        super().__init__(self._build_enhanced_message())

    def _build_enhanced_message(self) -> str:
        """Embed key context and suggestions into the exception string."""
        lines = [self.message]

        if self.context:
            if "interface" in self.context and "wrapped_type" in self.context:
                lines.append(f"  Interface: {self.context['interface']}")
                lines.append(f"  Wrapped: {self.context['wrapped_type']}")
            if "member" in self.context:
                lines.append(f"  Member: {self.context['member']}")

        if self.suggestions:
            lines.append("  Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"    • {suggestion}")

        return "\n".join(lines)


class InvalidArgumentError(AdapterError, ValueError):
    """Raised when a factory argument is absent or of the wrong shape."""


class UnsupportedMemberError(AdapterError, NotImplementedError):
    """Raised when an adapter member without a resolved target is invoked."""


class MappingConfigError(AdapterError):
    """Raised when mapping directives or configuration records are malformed."""


def get_type_name(cls: type, qualname: bool = False) -> str:
    """Return a readable name for a type.

    Args:
        cls: The class or type object.
        qualname: If True, return the qualified name when available.

    Returns:
        The type's `__qualname__`, `__name__`, or a string fallback.
    """
    if not isclass(cls):
        return repr(cls)
    if qualname and hasattr(cls, "__qualname__"):
        return getattr(cls, "__qualname__")
    elif hasattr(cls, "__name__"):
        return getattr(cls, "__name__")
    else:
        return str(cls)


def is_foundation_class(cls: type) -> bool:
    """Return True for `object`, `Protocol`, `Generic`, `ABC` and friends."""
    return getattr(cls, "__module__", None) in _FOUNDATION_MODULES


def is_interface(obj: Any) -> bool:
    """Return True if `obj` is an interface-shaped class.

    Interface-shaped means a `typing.Protocol` subclass or a class built by
    `abc.ABCMeta` that still has abstract members.
    """
    if not isclass(obj) or is_foundation_class(obj):
        return False
    if getattr(obj, "_is_protocol", False):
        return True
    return isinstance(obj, ABCMeta) and inspect.isabstract(obj)


def get_hints(obj: Any) -> Dict[str, Any]:
    """Return resolved annotations of a function or class.

    Falls back to the raw `__annotations__` when a forward reference cannot
    be resolved from the defining module.
    """
    try:
        return get_type_hints(obj)
    except (NameError, TypeError, AttributeError) as e:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Falling back to raw annotations of %r: %s", obj, e)
    if isclass(obj):
        hints: Dict[str, Any] = {}
        for klass in reversed(obj.__mro__):
            hints.update(inspect.get_annotations(klass))
        return hints
    return dict(inspect.get_annotations(obj))
