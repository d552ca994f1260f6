r"""Member resolution: pick the wrapped-class member an interface member forwards to.

Resolution order for an interface member `M` against wrapped class `W`:

  1. Each directive of `M`, in order: look up `directive.target or M.name`
     on `W` with a signature identical to `M`'s. The directive matches when
     the lookup succeeds and its entity type is unset or *is* `W`.
  2. Indexers only: when that lookup failed and the directive names no
     target, the unique indexer of `W` with `M`'s index signature is used
     instead (indexer names are free to differ from the interface's).
  3. Without a matching directive, a same-name, same-signature member of `W`.
  4. Otherwise the member stays unresolved.

The entity type check is identity, not `issubclass`: a directive scoped to
`A` never applies to a subclass or a base of `A`.
"""

from __future__ import annotations

import logging
from typing import Optional

from .annotations import MapsTo
from .members import MemberInfo, MemberKind, find_member, indexers_of
from .utils import get_type_name

logger = logging.getLogger(__name__)

__all__ = ["resolve", "resolve_directive"]


def _unique_indexer(member: MemberInfo, wrapped_type: type) -> Optional[MemberInfo]:
    candidates = [ix for ix in indexers_of(wrapped_type) if member.matches(ix)]
    if len(candidates) == 1:
        return candidates[0]
    if len(candidates) > 1:
        logger.warning(
            "Ambiguous indexer for %s on %s: %s; leaving it unresolved",
            member.describe(),
            get_type_name(wrapped_type),
            ", ".join(ix.name for ix in candidates),
        )
    return None


def resolve_directive(
    member: MemberInfo, directive: MapsTo, wrapped_type: type
) -> Optional[MemberInfo]:
    """Return the member `directive` selects on `wrapped_type`, or None."""
    if not directive.applies_to(wrapped_type):
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Skipping %r for %s: wrapped type is %s",
                directive,
                member.name,
                get_type_name(wrapped_type),
            )
        return None
    target = find_member(wrapped_type, directive.target or member.name, member)
    if (
        target is None
        and directive.target is None
        and member.kind is MemberKind.INDEXER
    ):
        target = _unique_indexer(member, wrapped_type)
    return target


def resolve(member: MemberInfo, wrapped_type: type) -> Optional[MemberInfo]:
    """Resolve an interface member against a wrapped class.

    Args:
        member: The interface member, carrying its directives.
        wrapped_type: The static class of the objects to adapt.

    Returns:
        The wrapped-class member to forward to, or None when unresolved.
    """
    for directive in member.directives:
        target = resolve_directive(member, directive, wrapped_type)
        if target is not None:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "%s -> %s.%s via %r",
                    member.name,
                    get_type_name(wrapped_type),
                    target.name,
                    directive,
                )
            return target
    target = find_member(wrapped_type, member.name, member)
    if target is None and logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "%s is unresolved on %s", member.describe(), get_type_name(wrapped_type)
        )
    return target
