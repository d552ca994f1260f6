r"""Adapter descriptors: the resolved plan for one (wrapped type, interface) pair."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .annotations import get_target_interface
from .members import MemberInfo, interface_members
from .resolver import resolve
from .utils import get_type_name

logger = logging.getLogger(__name__)

__all__ = ["MemberBinding", "AdapterDescriptor", "build_descriptor"]


@dataclass(frozen=True)
class MemberBinding:
    """An interface member and the wrapped-class member it forwards to.

    `target` is None for unresolved members. `declared` is False for members
    that only exist on the target interface.
    """

    member: MemberInfo
    target: Optional[MemberInfo]
    declared: bool = True

    @property
    def resolved(self) -> bool:
        return self.target is not None

    @property
    def readable(self) -> bool:
        """Reads forward to the target (methods are always callable)."""
        return self.target is not None and self.target.readable

    @property
    def writable(self) -> bool:
        """Writes forward to the target."""
        return self.target is not None and self.target.writable


@dataclass(frozen=True)
class AdapterDescriptor:
    """Immutable description of the adapter class to emit."""

    interface: type
    target_interface: type
    wrapped_type: type
    bindings: Tuple[MemberBinding, ...]

    @property
    def resolved(self) -> Tuple[MemberBinding, ...]:
        return tuple(b for b in self.bindings if b.resolved)

    @property
    def unresolved(self) -> Tuple[MemberBinding, ...]:
        return tuple(b for b in self.bindings if not b.resolved)

    @property
    def class_name(self) -> str:
        return f"{get_type_name(self.wrapped_type)}{get_type_name(self.target_interface)}Adapter"

    @property
    def qualname(self) -> str:
        return ".".join(
            (
                get_type_name(self.target_interface, qualname=True),
                get_type_name(self.wrapped_type, qualname=True),
                self.class_name,
            )
        )

    def binding(self, name: str) -> MemberBinding:
        for binding in self.bindings:
            if binding.member.name == name:
                return binding
        raise KeyError(name)


def build_descriptor(interface: type, wrapped_type: type) -> AdapterDescriptor:
    """Resolve every member of `interface` against `wrapped_type`.

    Unresolved members are recorded, never reported as errors: the adapter
    fails only when such a member is used. Members of the target interface
    that the declaration does not mention get the default same-name mapping.
    """
    target_interface = get_target_interface(interface)

    bindings = [
        MemberBinding(member, resolve(member, wrapped_type))
        for member in interface_members(interface)
    ]
    if target_interface is not interface:
        declared = {b.member.name for b in bindings}
        for member in interface_members(target_interface):
            if member.name in declared:
                continue
            # Directives belong to the declaration, not to the target.
            member = replace(member, directives=())
            bindings.append(MemberBinding(member, resolve(member, wrapped_type), False))

    descriptor = AdapterDescriptor(
        interface=interface,
        target_interface=target_interface,
        wrapped_type=wrapped_type,
        bindings=tuple(bindings),
    )
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Descriptor %s: %d resolved, %d unresolved (%s)",
            descriptor.qualname,
            len(descriptor.resolved),
            len(descriptor.unresolved),
            ", ".join(b.member.name for b in descriptor.unresolved) or "none",
        )
    return descriptor
