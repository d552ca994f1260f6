r"""Reflection over interface declarations and wrapped classes.

Interfaces and wrapped classes are both described as `MemberInfo` records.
Two members are interchangeable when they have the same kind and the same
signature key:

  - methods: parameter kinds and annotations (keyword-only parameters also by
    name) plus the return annotation,
  - properties: the value annotation,
  - indexers: the index annotations plus the value annotation.

Annotations are compared with `==`; no subtype or coercion rules apply.
"""

from __future__ import annotations

import inspect
import logging
import types
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, ClassVar, Dict, Optional, Tuple

from typing_extensions import get_args, get_origin

from .annotations import MapsTo, get_directives
from .indexer import IndexedProperty
from .utils import EMPTY, get_hints, get_type_name, is_foundation_class

logger = logging.getLogger(__name__)

__all__ = [
    "MemberKind",
    "MemberInfo",
    "interface_members",
    "wrapped_member",
    "find_member",
    "indexers_of",
]

DEFAULT_INDEXER = "__getitem__"
"""Name under which the anonymous `[]` indexer is known."""

_TYPING_INTERNALS = frozenset({"_is_protocol", "_is_runtime_protocol"})

_ROUTINE_DESCRIPTORS = (
    types.FunctionType,
    types.MethodDescriptorType,
    types.WrapperDescriptorType,
)


class MemberKind(str, Enum):
    METHOD = "method"
    PROPERTY = "property"
    INDEXER = "indexer"


ParamKey = Tuple[Any, ...]


@dataclass(frozen=True)
class MemberInfo:
    """A method, property or indexer of an interface or a wrapped class.

    Attributes:
        name: Attribute name (`__getitem__` for the default indexer).
        kind: What sort of member this is.
        parameters: Method parameter keys, `self` excluded.
        returns: Method return annotation, or the property/indexer value type.
        index_types: Indexer parameter annotations.
        readable: Property/indexer has a getter. Always True for methods.
        writable: Property/indexer has a setter.
        directives: Mapping directives, in evaluation order (interfaces only).
        source: How the member is realized on its class, e.g. `"function"`,
            `"property"`, `"attribute"`, `"indexer"`.
        signature: Declared call signature including `self` (methods only).
    """

    name: str
    kind: MemberKind
    parameters: Tuple[ParamKey, ...] = ()
    returns: Any = EMPTY
    index_types: Tuple[Any, ...] = ()
    readable: bool = True
    writable: bool = False
    directives: Tuple[MapsTo, ...] = ()
    source: str = ""
    signature: Optional[inspect.Signature] = field(default=None, compare=False, repr=False)
    raw: Any = field(default=None, compare=False, repr=False)

    @property
    def signature_key(self) -> Tuple[Any, ...]:
        if self.kind is MemberKind.METHOD:
            return (self.parameters, self.returns)
        if self.kind is MemberKind.INDEXER:
            return (self.index_types, self.returns)
        return (self.returns,)

    @property
    def is_default_indexer(self) -> bool:
        return self.kind is MemberKind.INDEXER and self.name == DEFAULT_INDEXER

    def matches(self, other: "MemberInfo") -> bool:
        """Return True when `other` has the same kind and signature key."""
        return self.kind is other.kind and self.signature_key == other.signature_key

    def describe(self) -> str:
        if self.kind is MemberKind.METHOD:
            params = ", ".join(_annotation_repr(p[-1]) for p in self.parameters)
            return f"{self.name}({params}) -> {_annotation_repr(self.returns)}"
        if self.kind is MemberKind.INDEXER:
            index = ", ".join(map(_annotation_repr, self.index_types))
            return f"{self.name}[{index}] -> {_annotation_repr(self.returns)}"
        return f"{self.name}: {_annotation_repr(self.returns)}"


# -----------------------------------------------------------------------------
# Signature helpers
# -----------------------------------------------------------------------------


def _param_key(param: inspect.Parameter, hints: Dict[str, Any]) -> ParamKey:
    annotation = hints.get(param.name, EMPTY)
    if param.kind is inspect.Parameter.VAR_POSITIONAL:
        return ("*", annotation)
    if param.kind is inspect.Parameter.VAR_KEYWORD:
        return ("**", annotation)
    if param.kind is inspect.Parameter.KEYWORD_ONLY:
        return ("keyword", param.name, annotation)
    return ("positional", annotation)


def _signature_of(func: Callable[..., Any]) -> Optional[inspect.Signature]:
    try:
        return inspect.signature(func)
    except (TypeError, ValueError) as e:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Cannot inspect signature of %r: %s", func, e)
        return None


def _method_info(
    name: str, func: Callable[..., Any], bound: bool, source: str, **kwargs: Any
) -> Optional[MemberInfo]:
    """Describe `func` as a method; `bound` drops its first parameter."""
    signature = _signature_of(func)
    if signature is None:
        return None
    params = list(signature.parameters.values())
    if bound:
        if not params or params[0].kind not in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            return None
        params = params[1:]
    hints = get_hints(func) if inspect.isfunction(func) else {}
    return MemberInfo(
        name=name,
        kind=MemberKind.METHOD,
        parameters=tuple(_param_key(p, hints) for p in params),
        returns=hints.get("return", EMPTY),
        source=source,
        signature=signature,
        raw=func,
        **kwargs,
    )


def _property_info(name: str, prop: property, **kwargs: Any) -> MemberInfo:
    if prop.fget is not None:
        value_type = get_hints(prop.fget).get("return", EMPTY)
    else:
        value_type = _setter_value_type(prop.fset)
    return MemberInfo(
        name=name,
        kind=MemberKind.PROPERTY,
        returns=value_type,
        readable=prop.fget is not None,
        writable=prop.fset is not None,
        source="property",
        raw=prop,
        **kwargs,
    )


def _setter_value_type(fset: Optional[Callable[..., Any]]) -> Any:
    if fset is None:
        return EMPTY
    signature = _signature_of(fset)
    if signature is None or not signature.parameters:
        return EMPTY
    value_param = list(signature.parameters)[-1]
    return get_hints(fset).get(value_param, EMPTY)


def _attribute_info(name: str, annotation: Any, **kwargs: Any) -> MemberInfo:
    return MemberInfo(
        name=name,
        kind=MemberKind.PROPERTY,
        returns=annotation,
        readable=True,
        writable=True,
        source="attribute",
        **kwargs,
    )


def _indexer_info(name: str, prop: IndexedProperty, **kwargs: Any) -> MemberInfo:
    return MemberInfo(
        name=name,
        kind=MemberKind.INDEXER,
        returns=prop.value_type,
        index_types=prop.index_types,
        readable=prop.readable,
        writable=prop.writable,
        source="indexer",
        raw=prop,
        **kwargs,
    )


def _key_index_types(annotation: Any) -> Tuple[Any, ...]:
    """`Tuple[A, B]` keys stand for two indices; anything else for one."""
    if get_origin(annotation) is tuple:
        args = get_args(annotation)
        if args and Ellipsis not in args and args != ((),):
            return tuple(args)
    return (annotation,)


def _default_indexer_info(
    getter: Any, setter: Any, **kwargs: Any
) -> Optional[MemberInfo]:
    """Describe a `__getitem__`/`__setitem__` pair as the default indexer."""
    if getter is None and setter is None:
        return None
    index_types: Tuple[Any, ...] = (EMPTY,)
    value_type: Any = EMPTY
    if inspect.isfunction(getter):
        signature = _signature_of(getter)
        params = list(signature.parameters) if signature is not None else []
        hints = get_hints(getter)
        if len(params) >= 2:
            index_types = _key_index_types(hints.get(params[1], EMPTY))
        value_type = hints.get("return", EMPTY)
    elif inspect.isfunction(setter):
        signature = _signature_of(setter)
        params = list(signature.parameters) if signature is not None else []
        hints = get_hints(setter)
        if len(params) >= 3:
            index_types = _key_index_types(hints.get(params[1], EMPTY))
            value_type = hints.get(params[2], EMPTY)
    return MemberInfo(
        name=DEFAULT_INDEXER,
        kind=MemberKind.INDEXER,
        returns=value_type,
        index_types=index_types,
        readable=getter is not None,
        writable=setter is not None,
        source="item",
        raw=getter,
        **kwargs,
    )


def _is_attribute_hint(annotation: Any) -> bool:
    if isinstance(annotation, str):
        # Unresolved annotations stay strings.
        return not annotation.removeprefix("typing.").startswith("ClassVar")
    return annotation is not ClassVar and get_origin(annotation) is not ClassVar


@lru_cache(maxsize=256)
def _attribute_hints(cls: type) -> Dict[str, Any]:
    """Annotated instance attributes of `cls` (dataclass fields and the like)."""
    hints = get_hints(cls)
    return {
        name: annotation
        for name, annotation in hints.items()
        if _is_attribute_hint(annotation)
    }


# -----------------------------------------------------------------------------
# Interfaces
# -----------------------------------------------------------------------------


def _is_member_name(name: str) -> bool:
    if name.startswith("__") and name.endswith("__"):
        return False
    return not (name.startswith("_abc_") or name in _TYPING_INTERNALS)


def interface_members(declaration: type) -> Tuple[MemberInfo, ...]:
    """Return every method, property and indexer of an interface declaration.

    Members are collected across the declaration's bases; a redefinition in a
    subclass replaces the inherited one. Property accessors are not listed
    separately.
    """
    raw_members: Dict[str, Any] = {}
    own_annotations: Dict[str, None] = {}
    for klass in reversed(declaration.__mro__):
        if is_foundation_class(klass):
            continue
        for name in inspect.get_annotations(klass):
            own_annotations[name] = None
        raw_members.update(klass.__dict__)
    hints = get_hints(declaration)

    members: Dict[str, MemberInfo] = {}

    def directives(name: str, raw: Any = None) -> Tuple[MapsTo, ...]:
        return get_directives(declaration, name, raw)

    for name, raw in raw_members.items():
        if name in (DEFAULT_INDEXER, "__setitem__"):
            if DEFAULT_INDEXER in members:
                continue
            getter = raw_members.get(DEFAULT_INDEXER)
            info = _default_indexer_info(
                getter,
                raw_members.get("__setitem__"),
                directives=directives(DEFAULT_INDEXER, getter),
            )
            if info is not None:
                members[DEFAULT_INDEXER] = info
            continue
        if not _is_member_name(name):
            continue
        if isinstance(raw, IndexedProperty):
            members[name] = _indexer_info(name, raw, directives=directives(name, raw))
        elif isinstance(raw, property):
            members[name] = _property_info(name, raw, directives=directives(name, raw))
        elif isinstance(raw, (staticmethod, classmethod)):
            continue
        elif inspect.isfunction(raw):
            info = _method_info(
                name, raw, bound=True, source="function", directives=directives(name, raw)
            )
            if info is not None:
                members[name] = info
        elif name in own_annotations and _is_attribute_hint(hints.get(name, EMPTY)):
            members[name] = _attribute_info(
                name, hints.get(name, EMPTY), directives=directives(name)
            )

    for name in own_annotations:
        if name in members or name in raw_members or not _is_member_name(name):
            continue
        annotation = hints.get(name, EMPTY)
        if _is_attribute_hint(annotation):
            members[name] = _attribute_info(name, annotation, directives=directives(name))

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Interface %s declares %d member(s): %s",
            get_type_name(declaration),
            len(members),
            ", ".join(members),
        )
    return tuple(members.values())


# -----------------------------------------------------------------------------
# Wrapped classes
# -----------------------------------------------------------------------------

_MISSING = object()


def wrapped_member(wrapped_type: type, name: str) -> Optional[MemberInfo]:
    """Describe what `name` designates on `wrapped_type`, if anything."""
    if name == DEFAULT_INDEXER:
        return _default_indexer_info(
            _static_lookup(wrapped_type, DEFAULT_INDEXER, None),
            _static_lookup(wrapped_type, "__setitem__", None),
        )
    raw = _static_lookup(wrapped_type, name, _MISSING)
    if isinstance(raw, IndexedProperty):
        return _indexer_info(name, raw)
    if isinstance(raw, property):
        return _property_info(name, raw)
    if isinstance(raw, staticmethod):
        return _method_info(name, raw.__func__, bound=False, source="staticmethod")
    if isinstance(raw, classmethod):
        return _method_info(name, raw.__func__, bound=True, source="classmethod")
    if isinstance(raw, _ROUTINE_DESCRIPTORS):
        return _method_info(name, raw, bound=True, source="function")
    attributes = _attribute_hints(wrapped_type)
    if name in attributes and (raw is _MISSING or not callable(raw)):
        return _attribute_info(name, attributes[name])
    if inspect.ismemberdescriptor(raw):
        return _attribute_info(name, EMPTY)
    return None


def _static_lookup(cls: type, name: str, default: Any) -> Any:
    for klass in cls.__mro__:
        if name in klass.__dict__:
            return klass.__dict__[name]
    return default


def find_member(wrapped_type: type, name: str, like: MemberInfo) -> Optional[MemberInfo]:
    """Return member `name` of `wrapped_type` if it matches `like`'s signature."""
    candidate = wrapped_member(wrapped_type, name)
    if candidate is None or not like.matches(candidate):
        if candidate is not None and logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "%s.%s does not match %s",
                get_type_name(wrapped_type),
                candidate.describe(),
                like.describe(),
            )
        return None
    return candidate


def indexers_of(wrapped_type: type) -> Tuple[MemberInfo, ...]:
    """Return every indexed member of `wrapped_type`, the default indexer included."""
    found: Dict[str, MemberInfo] = {}
    default = wrapped_member(wrapped_type, DEFAULT_INDEXER)
    if default is not None:
        found[DEFAULT_INDEXER] = default
    seen = set()
    for klass in wrapped_type.__mro__:
        for name, raw in klass.__dict__.items():
            if name in seen:
                continue
            seen.add(name)
            if isinstance(raw, IndexedProperty):
                found[name] = _indexer_info(name, raw)
    return tuple(found.values())


def _annotation_repr(annotation: Any) -> str:
    if annotation is EMPTY:
        return "?"
    if isinstance(annotation, type):
        return annotation.__name__
    return repr(annotation)
