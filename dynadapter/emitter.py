r"""Realize an `AdapterDescriptor` as a Python class.

The emitted class derives from the descriptor's target interface and holds
the wrapped object in its single slot. Per member it gets:

  - resolved method: a function forwarding the call to the target method of
    the wrapped object and returning its result unchanged,
  - property: a `property` whose accessors forward to the target attribute,
  - indexer: `__getitem__`/`__setitem__` for the default indexer, or an
    `IndexedProperty` for a named one,
  - unresolved member (or accessor the target lacks): a stub raising
    `UnsupportedMemberError` when called. Emission itself never fails for
    unresolved members.
"""

from __future__ import annotations

import inspect
import logging
import types
from functools import update_wrapper
from typing import Any, Callable, Dict, Optional

from .descriptor import AdapterDescriptor, MemberBinding
from .indexer import IndexedProperty, normalize_key, pack_key
from .members import MemberInfo, MemberKind
from .utils import InvalidArgumentError, UnsupportedMemberError, get_type_name

logger = logging.getLogger(__name__)

__all__ = ["emit", "ADAPTER_SLOT", "DESCRIPTOR_ATTR"]

ADAPTER_SLOT = "__adapter_target__"
"""Name of the slot holding the wrapped object."""

DESCRIPTOR_ATTR = "__adapter_descriptor__"
"""Class attribute carrying the descriptor an adapter class was emitted from."""

_ACCESS = {"call": "called", "get": "read", "set": "assigned"}


def _unsupported(
    descriptor: AdapterDescriptor, member: MemberInfo, access: str
) -> UnsupportedMemberError:
    wrapped = get_type_name(descriptor.wrapped_type)
    return UnsupportedMemberError(
        f"{get_type_name(descriptor.interface)}.{member.name} cannot be "
        f"{_ACCESS[access]}: no matching member on {wrapped}",
        [
            f"Add a member with signature {member.describe()} to {wrapped}",
            "Or map it with @maps_to(target=..., entity_type=...)",
        ],
        {
            "interface": get_type_name(descriptor.interface),
            "wrapped_type": wrapped,
            "member": member.describe(),
            "access": access,
        },
    )


def _stub(descriptor: AdapterDescriptor, member: MemberInfo, access: str) -> Callable[..., Any]:
    def unsupported(self, *args, **kwargs):
        raise _unsupported(descriptor, member, access)

    return unsupported


def _name(func: Callable[..., Any], descriptor: AdapterDescriptor, name: str, module: str):
    func.__name__ = name
    func.__qualname__ = f"{descriptor.class_name}.{name}"
    func.__module__ = module
    return func


# -----------------------------------------------------------------------------
# Members
# -----------------------------------------------------------------------------


def _method(binding: MemberBinding, descriptor: AdapterDescriptor) -> Callable[..., Any]:
    member = binding.member
    if binding.target is None:
        method = _stub(descriptor, member, "call")
    else:
        target_name = binding.target.name
        signature: Optional[inspect.Signature] = member.signature

        def method(self, *args, **kwargs):
            if kwargs and signature is not None:
                # Arguments reach the target by position; only keyword-only
                # parameters keep their names.
                bound = signature.bind(self, *args, **kwargs)
                args, kwargs = bound.args[1:], bound.kwargs
            return getattr(getattr(self, ADAPTER_SLOT), target_name)(*args, **kwargs)

    if inspect.isfunction(member.raw):
        update_wrapper(method, member.raw, assigned=("__doc__",), updated=())
    return method


def _property(binding: MemberBinding, descriptor: AdapterDescriptor) -> property:
    member = binding.member
    fget = fset = None
    if member.readable:
        if binding.readable:
            target_name = binding.target.name

            def fget(self):
                return getattr(getattr(self, ADAPTER_SLOT), target_name)

        else:
            fget = _stub(descriptor, member, "get")
    if member.writable:
        if binding.writable:
            target_name = binding.target.name

            def fset(self, value):
                setattr(getattr(self, ADAPTER_SLOT), target_name, value)

        else:
            fset = _stub(descriptor, member, "set")
    return property(fget, fset, None, _doc(member))


def _index_source(obj: Any, target: MemberInfo) -> Any:
    return obj if target.is_default_indexer else getattr(obj, target.name)


def _indexer_accessors(binding: MemberBinding, descriptor: AdapterDescriptor):
    """Return `(fget(self, *index), fset(self, *index, value))` for an indexer."""
    member = binding.member
    target = binding.target
    fget = fset = None
    if member.readable:
        if binding.readable:

            def fget(self, *index):
                return _index_source(getattr(self, ADAPTER_SLOT), target)[pack_key(index)]

        else:
            fget = _stub(descriptor, member, "get")
    if member.writable:
        if binding.writable:

            def fset(self, *index_and_value):
                *index, value = index_and_value
                source = _index_source(getattr(self, ADAPTER_SLOT), target)
                source[pack_key(tuple(index))] = value

        else:
            fset = _stub(descriptor, member, "set")
    return fget, fset


def _default_indexer(
    binding: MemberBinding, descriptor: AdapterDescriptor
) -> Dict[str, Callable[..., Any]]:
    fget, fset = _indexer_accessors(binding, descriptor)
    arity = len(binding.member.index_types)
    methods: Dict[str, Callable[..., Any]] = {}
    if fget is not None:

        def __getitem__(self, key):
            return fget(self, *normalize_key(key, arity))

        methods["__getitem__"] = __getitem__
    if fset is not None:

        def __setitem__(self, key, value):
            fset(self, *normalize_key(key, arity), value)

        methods["__setitem__"] = __setitem__
    return methods


def _doc(member: MemberInfo) -> Optional[str]:
    raw = member.raw
    if isinstance(raw, (property, IndexedProperty)):
        return raw.__doc__
    return getattr(raw, "__doc__", None) if inspect.isfunction(raw) else None


# -----------------------------------------------------------------------------
# Class
# -----------------------------------------------------------------------------


def _constructor(descriptor: AdapterDescriptor) -> Callable[..., None]:
    wrapped_type = descriptor.wrapped_type

    def __init__(self, target):
        if not isinstance(target, wrapped_type):
            raise InvalidArgumentError(
                f"{descriptor.class_name} wraps {get_type_name(wrapped_type)} "
                f"instances, got {get_type_name(type(target))}",
                [f"Pass an instance of {get_type_name(wrapped_type)}"],
                {
                    "interface": get_type_name(descriptor.interface),
                    "wrapped_type": get_type_name(wrapped_type),
                },
            )
        setattr(self, ADAPTER_SLOT, target)

    return __init__


def _repr(self) -> str:
    return f"<{type(self).__name__} of {getattr(self, ADAPTER_SLOT)!r}>"


def emit(descriptor: AdapterDescriptor, module: str = "dynadapter.generated") -> type:
    """Create the adapter class described by `descriptor`.

    Args:
        descriptor: The resolved plan.
        module: Value for the generated class's `__module__`.

    Returns:
        A new class deriving from `descriptor.target_interface`.
    """
    namespace: Dict[str, Any] = {
        "__slots__": (ADAPTER_SLOT,),
        "__module__": module,
        "__qualname__": descriptor.qualname,
        "__doc__": (
            f"Adapter exposing {get_type_name(descriptor.wrapped_type)} "
            f"as {get_type_name(descriptor.target_interface)}."
        ),
        "__init__": _constructor(descriptor),
        "__repr__": _repr,
        DESCRIPTOR_ATTR: descriptor,
    }

    for binding in descriptor.bindings:
        member = binding.member
        if member.kind is MemberKind.METHOD:
            namespace[member.name] = _method(binding, descriptor)
        elif member.kind is MemberKind.PROPERTY:
            namespace[member.name] = _property(binding, descriptor)
        elif member.is_default_indexer:
            namespace.update(_default_indexer(binding, descriptor))
        else:
            fget, fset = _indexer_accessors(binding, descriptor)
            namespace[member.name] = IndexedProperty(
                fget, fset, _doc(member), arity=len(member.index_types)
            )

    # Abstract members no binding covers (e.g. abstract dunders) fail late too.
    for name in getattr(descriptor.target_interface, "__abstractmethods__", ()):
        if name not in namespace:
            stub = MemberInfo(name=name, kind=MemberKind.METHOD)
            namespace[name] = _stub(descriptor, stub, "call")

    for name, value in namespace.items():
        if inspect.isfunction(value) and value is not _repr:
            _name(value, descriptor, name, module)

    adapter_type = types.new_class(
        descriptor.class_name,
        (descriptor.target_interface,),
        {},
        lambda ns: ns.update(namespace),
    )
    logger.info(
        "Emitted %s (%d forwarded, %d unsupported)",
        descriptor.qualname,
        len(descriptor.resolved),
        len(descriptor.unresolved),
    )
    return adapter_type
