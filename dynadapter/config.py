r"""Structured mapping configuration.

Mapping directives can be supplied as plain data instead of decorators, e.g.
loaded from a JSON or YAML file:

    {
        "implements_as": "myapp.contracts:Recordable",
        "members": {
            "append_text": [
                {"target": "write_line", "entity_type": "myapp.sinks:TextSink"},
                {"target": "write"}
            ],
            "name": [{"target": "full_name"}]
        }
    }

`configure_interface` validates such a record and attaches it to the
interface declaration. Configured directives follow any decorator
directives of the same member. Adapter classes that were already generated
are not affected.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .annotations import (
    MAPPINGS_ATTR,
    TARGET_ATTR,
    MapsTo,
    implements_as,
    resolve_import_path,
)
from .utils import InvalidArgumentError, MappingConfigError, get_type_name, is_interface

logger = logging.getLogger(__name__)

__all__ = [
    "InterfaceMappingCfg",
    "normalize_mapping_cfg",
    "configure_interface",
]


class InterfaceMappingCfg(BaseModel):
    """Mapping configuration of one interface declaration.

    Attributes:
        implements_as: Interface the adapter derives from (class or
            `"module:Qualname"` path). Optional.
        members: Ordered directives per member name.
    """

    model_config = ConfigDict(extra="forbid")

    implements_as: Optional[Any] = None
    members: Dict[str, List[MapsTo]] = Field(default_factory=dict)

    @field_validator("implements_as", mode="before")
    @classmethod
    def _import_interface(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = resolve_import_path(value)
        if value is not None and not is_interface(value):
            raise ValueError(f"{get_type_name(value)} is not an interface type")
        return value

    @field_validator("members", mode="before")
    @classmethod
    def _listify(cls, value: Any) -> Any:
        # A single directive may be given without the surrounding list.
        if isinstance(value, dict):
            return {
                name: [entry] if isinstance(entry, (dict, MapsTo)) else entry
                for name, entry in value.items()
            }
        return value


def normalize_mapping_cfg(
    cfg: Union[Dict[str, Any], InterfaceMappingCfg],
) -> InterfaceMappingCfg:
    """Validate a raw mapping dict into an `InterfaceMappingCfg`.

    Raises:
        MappingConfigError: if `cfg` does not match the schema.
    """
    if isinstance(cfg, InterfaceMappingCfg):
        return cfg
    try:
        return InterfaceMappingCfg.model_validate(cfg)
    except PydanticValidationError as e:
        raise MappingConfigError(
            f"Invalid mapping configuration: {e.error_count()} error(s)",
            [
                f"{'.'.join(map(str, err['loc']))}: {err['msg']}"
                for err in e.errors()
            ],
            {"operation": "normalize_mapping_cfg"},
        ) from e


def configure_interface(
    interface: type, cfg: Union[Dict[str, Any], InterfaceMappingCfg]
) -> type:
    """Attach configured mapping directives to `interface` and return it."""
    if not is_interface(interface):
        raise InvalidArgumentError(
            f"{get_type_name(interface)} is not an interface type",
            ["Configure a typing.Protocol subclass or an abstract base class"],
            {"interface": get_type_name(interface)},
        )
    mapping = normalize_mapping_cfg(cfg)

    configured = dict(interface.__dict__.get(MAPPINGS_ATTR, {}))
    for name, directives in mapping.members.items():
        configured[name] = configured.get(name, ()) + tuple(directives)
    setattr(interface, MAPPINGS_ATTR, configured)

    if mapping.implements_as is not None:
        implements_as(mapping.implements_as)(interface)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Configured %s: members=%s, implements_as=%s",
            get_type_name(interface),
            list(mapping.members),
            get_type_name(interface.__dict__.get(TARGET_ATTR, interface)),
        )
    return interface
