r"""Public entry points: build adapter classes and wrap objects with them.

    from dynadapter import create_adapter, maps_to

    class Greeter(Protocol):
        @maps_to("say_hello")
        def greet(self, name: str) -> str: ...

    class Robot:
        def say_hello(self, name: str) -> str:
            return f"BEEP {name}"

    greeter = create_adapter(Greeter, Robot())
    greeter.greet("Alice")   # -> "BEEP Alice"

Control flow: `create_adapter` -> `get_adapter_type` -> `TypeCache.get_or_build`
-> (on a miss) `build_descriptor` + `emit` -> instantiate with the object.
"""

from __future__ import annotations

import logging
from inspect import isclass
from typing import Any, Optional, Type, TypeVar

from .cache import TypeCache
from .descriptor import AdapterDescriptor, build_descriptor
from .emitter import ADAPTER_SLOT, DESCRIPTOR_ATTR, emit
from .utils import InvalidArgumentError, get_type_name, is_interface

logger = logging.getLogger(__name__)

__all__ = [
    "AdapterFactory",
    "default_factory",
    "get_adapter_type",
    "create_adapter",
    "describe",
    "unwrap",
    "is_adapter",
]

T = TypeVar("T")

DEFAULT_NAMESPACE = "dynadapter.generated"


def _validate_interface(interface: Any) -> type:
    if interface is None:
        raise InvalidArgumentError(
            "interface must not be None",
            ["Pass a typing.Protocol subclass or an abstract base class"],
            {"argument": "interface"},
        )
    if not is_interface(interface):
        raise InvalidArgumentError(
            f"{get_type_name(interface)} is not an interface type",
            [
                "Derive the declaration from typing.Protocol",
                "Or derive it from abc.ABC with at least one abstract member",
            ],
            {"argument": "interface", "actual_type": get_type_name(interface)},
        )
    return interface


def _validate_wrapped_type(wrapped_type: Any) -> type:
    if wrapped_type is None:
        raise InvalidArgumentError(
            "wrapped_type must not be None",
            ["Pass the class whose members the adapter forwards to"],
            {"argument": "wrapped_type"},
        )
    if not isclass(wrapped_type):
        raise InvalidArgumentError(
            f"wrapped_type must be a class, got {wrapped_type!r}",
            ["Pass a class, not an instance"],
            {"argument": "wrapped_type", "actual_type": get_type_name(type(wrapped_type))},
        )
    return wrapped_type


class AdapterFactory:
    """Generates and caches adapter classes.

    Each factory owns one `TypeCache`; adapter classes live as long as the
    factory. Generated classes get `namespace` as their `__module__`.
    """

    def __init__(self, namespace: str = DEFAULT_NAMESPACE):
        if not isinstance(namespace, str) or not namespace:
            raise InvalidArgumentError(
                f"namespace must be a non-empty string, got {namespace!r}",
                ["Use a dotted name such as 'myapp.adapters'"],
            )
        self.namespace = namespace
        self._cache = TypeCache()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(namespace={self.namespace!r}, types={len(self._cache)})"

    @property
    def cache(self) -> TypeCache:
        return self._cache

    def describe(self, interface: Any, wrapped_type: Any) -> AdapterDescriptor:
        """Return the resolution plan for `(wrapped_type, interface)` without emitting."""
        return build_descriptor(
            _validate_interface(interface), _validate_wrapped_type(wrapped_type)
        )

    def get_adapter_type(self, interface: Type[T], wrapped_type: Any) -> Type[T]:
        """Return the adapter class exposing `wrapped_type` objects as `interface`.

        Raises:
            InvalidArgumentError: if either argument is None, `wrapped_type` is
                not a class, or `interface` is not interface-shaped.
        """
        interface = _validate_interface(interface)
        wrapped_type = _validate_wrapped_type(wrapped_type)

        def build() -> type:
            return emit(build_descriptor(interface, wrapped_type), module=self.namespace)

        return self._cache.get_or_build(wrapped_type, interface, build)

    def create_adapter(
        self, interface: Type[T], instance: Any, wrapped_type: Optional[type] = None
    ) -> T:
        """Wrap `instance` in an adapter implementing `interface`.

        Args:
            interface: The interface declaration.
            instance: The object to adapt; the adapter keeps a live reference.
            wrapped_type: Class to resolve members against. Defaults to
                `type(instance)`; pass a base class to adapt against its
                member set.

        Raises:
            InvalidArgumentError: if `instance` is None, or not an instance
                of `wrapped_type`.
        """
        if instance is None:
            raise InvalidArgumentError(
                "instance must not be None",
                ["Pass the object to adapt"],
                {"argument": "instance"},
            )
        if wrapped_type is None:
            wrapped_type = type(instance)
        adapter_type = self.get_adapter_type(interface, wrapped_type)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Wrapping %r in %s", instance, adapter_type.__qualname__)
        return adapter_type(instance)


def is_adapter(obj: Any) -> bool:
    """Return True if `obj` is an instance of a generated adapter class."""
    return isinstance(getattr(type(obj), DESCRIPTOR_ATTR, None), AdapterDescriptor)


def unwrap(adapter: Any) -> Any:
    """Return the object wrapped by an adapter instance."""
    if not is_adapter(adapter):
        raise InvalidArgumentError(
            f"{adapter!r} is not an adapter",
            ["Pass an object returned by create_adapter()"],
            {"actual_type": get_type_name(type(adapter))},
        )
    return getattr(adapter, ADAPTER_SLOT)


default_factory = AdapterFactory()
"""Process-wide factory used by the module-level functions."""


def get_adapter_type(interface: Type[T], wrapped_type: Any) -> Type[T]:
    """`AdapterFactory.get_adapter_type` on the default factory."""
    return default_factory.get_adapter_type(interface, wrapped_type)


def create_adapter(
    interface: Type[T], instance: Any, wrapped_type: Optional[type] = None
) -> T:
    """`AdapterFactory.create_adapter` on the default factory."""
    return default_factory.create_adapter(interface, instance, wrapped_type)


def describe(interface: Any, wrapped_type: Any) -> AdapterDescriptor:
    """`AdapterFactory.describe` on the default factory."""
    return default_factory.describe(interface, wrapped_type)
