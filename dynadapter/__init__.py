from ._version import __version__
from .annotations import MapsTo, get_directives, get_target_interface, implements_as, maps_to
from .cache import TypeCache
from .config import InterfaceMappingCfg, configure_interface, normalize_mapping_cfg
from .descriptor import AdapterDescriptor, MemberBinding, build_descriptor
from .emitter import emit
from .factory import (
    AdapterFactory,
    create_adapter,
    default_factory,
    describe,
    get_adapter_type,
    is_adapter,
    unwrap,
)
from .indexer import IndexedProperty, indexer
from .members import MemberInfo, MemberKind, interface_members
from .resolver import resolve
from .utils import (
    AdapterError,
    InvalidArgumentError,
    MappingConfigError,
    UnsupportedMemberError,
)

__all__ = [
    "AdapterFactory",
    "get_adapter_type",
    "create_adapter",
    "describe",
    "unwrap",
    "is_adapter",
    "default_factory",
    "maps_to",
    "implements_as",
    "indexer",
    "MapsTo",
    "IndexedProperty",
    "InterfaceMappingCfg",
    "configure_interface",
    "normalize_mapping_cfg",
    "get_directives",
    "get_target_interface",
    "AdapterDescriptor",
    "MemberBinding",
    "MemberInfo",
    "MemberKind",
    "TypeCache",
    "build_descriptor",
    "interface_members",
    "resolve",
    "emit",
    "AdapterError",
    "InvalidArgumentError",
    "UnsupportedMemberError",
    "MappingConfigError",
    "__version__",
]
