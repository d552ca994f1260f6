r"""Declarative mapping metadata for interface declarations.

Two directives exist:

  - `@implements_as(Target)` on an interface declaration names the interface
    the generated adapter derives from. It is not inherited by subclasses of
    the declaration.
  - `@maps_to(target=None, entity_type=None)` on a method, property or
    indexer. Repeatable; directives are evaluated top to bottom and the first
    match wins.

Example:

    @implements_as(Recordable)
    class RecordableSpec(Protocol):
        @maps_to("write_line", entity_type=TextSink)
        @maps_to("write")
        def append_text(self, text: str) -> None: ...
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Callable, Dict, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, field_validator

from .indexer import IndexedProperty
from .utils import InvalidArgumentError, MappingConfigError, get_type_name, is_interface

logger = logging.getLogger(__name__)

__all__ = [
    "MapsTo",
    "maps_to",
    "implements_as",
    "get_directives",
    "get_target_interface",
    "resolve_import_path",
]

DIRECTIVES_ATTR = "__adapter_directives__"
"""Attribute holding decorator directives on a member's function."""

MAPPINGS_ATTR = "__adapter_mappings__"
"""Class attribute holding configured directives, keyed by member name."""

TARGET_ATTR = "__adapter_interface__"
"""Class attribute naming the interface an adapter implements."""

M = TypeVar("M")


def resolve_import_path(path: str) -> Any:
    """Import `"package.module:Qualified.Name"` and return the object."""
    module_name, sep, qualname = path.partition(":")
    if not sep or not module_name or not qualname:
        raise MappingConfigError(
            f"Invalid import path: '{path}'",
            ["Use 'package.module:ClassName'"],
            {"path": path},
        )
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise MappingConfigError(
            f"Cannot import module '{module_name}': {e}",
            ["Check the module is installed and importable"],
            {"path": path},
        ) from e
    for part in qualname.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise MappingConfigError(
                f"Module '{module_name}' has no attribute '{qualname}'",
                ["Check the qualified name spelling"],
                {"path": path},
            ) from e
    return obj


class MapsTo(BaseModel):
    """One mapping directive of an interface member.

    Attributes:
        target: Name of the wrapped-type member to forward to. Defaults to
            the interface member's own name.
        entity_type: When set, the directive applies only when the wrapped
            type is exactly this class (subclasses and bases do not match).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    target: Optional[str] = None
    entity_type: Optional[Type[Any]] = None

    @field_validator("target")
    @classmethod
    def _check_target(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.isidentifier():
            raise ValueError(f"target must be an identifier, got {value!r}")
        return value

    @field_validator("entity_type", mode="before")
    @classmethod
    def _import_entity_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return resolve_import_path(value)
        return value

    def applies_to(self, wrapped_type: type) -> bool:
        """Return True unless an entity type is set and differs from `wrapped_type`."""
        return self.entity_type is None or self.entity_type is wrapped_type

    def __repr__(self) -> str:
        parts = []
        if self.target is not None:
            parts.append(repr(self.target))
        if self.entity_type is not None:
            parts.append(f"entity_type={get_type_name(self.entity_type)}")
        return f"MapsTo({', '.join(parts)})"


def _directive_holder(member: Any) -> Any:
    """Return the object a directive is stored on for `member`."""
    if isinstance(member, (property, IndexedProperty)):
        if member.fget is None:
            raise MappingConfigError(
                "Cannot attach a mapping directive to a property without a getter",
                ["Declare the getter before the setter"],
            )
        return member.fget
    if isinstance(member, (staticmethod, classmethod)):
        return member.__func__
    if callable(member):
        return member
    raise MappingConfigError(
        f"{member!r} cannot carry a mapping directive",
        ["Decorate a method, a property or an indexer"],
    )


def maps_to(
    target: Optional[str] = None, *, entity_type: Optional[Any] = None
) -> Callable[[M], M]:
    """Attach a `MapsTo` directive to an interface member.

    Stacked decorators keep their top-to-bottom reading order.
    """
    try:
        directive = MapsTo(target=target, entity_type=entity_type)
    except ValueError as e:
        raise MappingConfigError(
            f"Invalid mapping directive: {e}",
            ["target must be an identifier, entity_type a class"],
            {"target": target, "entity_type": entity_type},
        ) from e

    def decorator(member: M) -> M:
        holder = _directive_holder(member)
        existing: Tuple[MapsTo, ...] = getattr(holder, DIRECTIVES_ATTR, ())
        # Decorators apply bottom-up, so prepend to keep reading order.
        setattr(holder, DIRECTIVES_ATTR, (directive,) + existing)
        return member

    return decorator


def implements_as(target: Any) -> Callable[[Type[M]], Type[M]]:
    """Name the interface generated adapters of the decorated declaration derive from."""
    if target is None:
        raise InvalidArgumentError(
            "implements_as() requires an interface",
            ["Pass the Protocol or ABC the adapter must satisfy"],
        )
    if not is_interface(target):
        raise InvalidArgumentError(
            f"{get_type_name(target)} is not an interface type",
            ["Use a typing.Protocol subclass or an abstract base class"],
            {"interface": get_type_name(target)},
        )

    def decorator(declaration: Type[M]) -> Type[M]:
        setattr(declaration, TARGET_ATTR, target)
        return declaration

    return decorator


def get_target_interface(declaration: type) -> type:
    """Return the interface an adapter for `declaration` implements."""
    # Own namespace only: the directive is not inherited.
    return declaration.__dict__.get(TARGET_ATTR) or declaration


def get_directives(
    declaration: type, name: str, raw: Any = None
) -> Tuple[MapsTo, ...]:
    """Return the ordered directives of member `name` of `declaration`.

    Decorator directives on `raw` come first, configured directives follow.
    """
    directives: Tuple[MapsTo, ...] = ()
    if raw is not None:
        try:
            holder = _directive_holder(raw)
        except MappingConfigError:
            holder = None
        directives = tuple(getattr(holder, DIRECTIVES_ATTR, ()))
    for klass in declaration.__mro__:
        mappings: Dict[str, Tuple[MapsTo, ...]] = klass.__dict__.get(MAPPINGS_ATTR, {})
        if name in mappings:
            directives += mappings[name]
            break
    if directives and logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Directives of %s.%s: %s", get_type_name(declaration), name, directives
        )
    return directives
