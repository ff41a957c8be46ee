"""
Core schema representation for client SDK generation.

Holds the entity definition model the generators walk: data types,
entity modules with their properties and methods, and the ordered
registry that hands them out.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple
from enum import Enum

from .errors import SchemaError
from ...logging_config import get_logger

logger = get_logger(__name__)


class DataTypeKind(Enum):
    """Every data type kind an entity definition can use."""

    INT8 = "INT8"
    INT16 = "INT16"
    INT32 = "INT32"
    INT64 = "INT64"
    UINT8 = "UINT8"
    UINT16 = "UINT16"
    UINT32 = "UINT32"
    UINT64 = "UINT64"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    STRING = "STRING"
    UNICODE = "UNICODE"
    BLOB = "BLOB"
    PYTHON = "PYTHON"  # dynamic value
    PY_DICT = "PY_DICT"
    PY_TUPLE = "PY_TUPLE"
    PY_LIST = "PY_LIST"
    VECTOR2 = "VECTOR2"
    VECTOR3 = "VECTOR3"
    VECTOR4 = "VECTOR4"
    MAILBOX = "MAILBOX"  # remote entity reference
    ARRAY = "ARRAY"
    FIXED_DICT = "FIXED_DICT"

    @property
    def is_integer(self) -> bool:
        return self in _INTEGER_KINDS

    @property
    def is_digit(self) -> bool:
        """Numeric kinds, always passed by value."""
        return self in _INTEGER_KINDS or self in (DataTypeKind.FLOAT, DataTypeKind.DOUBLE)

    @property
    def is_vector(self) -> bool:
        return self in (DataTypeKind.VECTOR2, DataTypeKind.VECTOR3, DataTypeKind.VECTOR4)

    @property
    def is_composite(self) -> bool:
        return self in (DataTypeKind.ARRAY, DataTypeKind.FIXED_DICT)

    @classmethod
    def from_name(cls, name: str) -> Optional["DataTypeKind"]:
        """Look up a kind by its canonical or legacy name."""
        key = name.upper()
        if key in _LEGACY_KIND_NAMES:
            return _LEGACY_KIND_NAMES[key]
        try:
            return cls(key)
        except ValueError:
            return None


_INTEGER_KINDS = frozenset(
    {
        DataTypeKind.INT8,
        DataTypeKind.INT16,
        DataTypeKind.INT32,
        DataTypeKind.INT64,
        DataTypeKind.UINT8,
        DataTypeKind.UINT16,
        DataTypeKind.UINT32,
        DataTypeKind.UINT64,
    }
)

_LEGACY_KIND_NAMES = {
    "ENTITYCALL": DataTypeKind.MAILBOX,
    "ENTITY_CALL": DataTypeKind.MAILBOX,
}


@dataclass(frozen=True)
class DataType:
    """
    Immutable description of a schema type.

    ``alias_name`` is the identifier generated code uses for the type; it
    defaults to the canonical kind name. ``named`` marks types registered
    under their own name, i.e. types the type-declaration file declares.
    """

    kind: DataTypeKind
    alias_name: str = field(default="")
    named: bool = field(default=False)

    def __post_init__(self):
        if not self.alias_name:
            object.__setattr__(self, "alias_name", self.kind.value)

    @property
    def name(self) -> str:
        """Canonical kind name (e.g. ``UINT16``)."""
        return self.kind.value

    def dependencies(self) -> List["DataType"]:
        """Directly nested types."""
        return []


@dataclass(frozen=True)
class FixedArrayType(DataType):
    """Array type with exactly one element type."""

    element_type: Optional[DataType] = None

    def __post_init__(self):
        if self.kind is not DataTypeKind.ARRAY:
            raise SchemaError(f"FixedArrayType requires kind ARRAY, got {self.kind.value}")
        if self.element_type is None:
            raise SchemaError(f"Array type '{self.alias_name or 'ARRAY'}' has no element type")
        super().__post_init__()

    def dependencies(self) -> List[DataType]:
        return [self.element_type]


@dataclass(frozen=True)
class FixedDictType(DataType):
    """Struct-like type with named members kept in declaration order."""

    key_types: Tuple[Tuple[str, DataType], ...] = ()

    def __post_init__(self):
        if self.kind is not DataTypeKind.FIXED_DICT:
            raise SchemaError(
                f"FixedDictType requires kind FIXED_DICT, got {self.kind.value}"
            )
        object.__setattr__(self, "key_types", tuple(self.key_types))
        keys = [key for key, _ in self.key_types]
        if len(keys) != len(set(keys)):
            raise SchemaError(f"Duplicate member names in '{self.alias_name}': {keys}")
        super().__post_init__()

    def items(self) -> Iterator[Tuple[str, DataType]]:
        return iter(self.key_types)

    def keys(self) -> List[str]:
        return [key for key, _ in self.key_types]

    def dependencies(self) -> List[DataType]:
        return [member for _, member in self.key_types]


def array_of(element_type: DataType, alias_name: str = "", named: bool = False) -> FixedArrayType:
    """Build an ARRAY type around an element type."""
    return FixedArrayType(
        kind=DataTypeKind.ARRAY,
        alias_name=alias_name,
        named=named,
        element_type=element_type,
    )


def fixed_dict(
    key_types, alias_name: str = "", named: bool = False
) -> FixedDictType:
    """Build a FIXED_DICT type from ``(key, type)`` pairs or an ordered dict."""
    if isinstance(key_types, dict):
        key_types = list(key_types.items())
    return FixedDictType(
        kind=DataTypeKind.FIXED_DICT,
        alias_name=alias_name,
        named=named,
        key_types=tuple(key_types),
    )


@dataclass(frozen=True)
class PropertyDescription:
    """A single entity property."""

    name: str
    data_type: DataType
    client: bool = True


@dataclass(frozen=True)
class MethodDescription:
    """A remote-callable entity method and its ordered argument types."""

    name: str
    arg_types: Tuple[DataType, ...] = ()
    client: bool = True

    def __post_init__(self):
        object.__setattr__(self, "arg_types", tuple(self.arg_types))


@dataclass
class EntityModule:
    """An entity script module; each client-visible one becomes one output file."""

    name: str
    properties: List[PropertyDescription] = field(default_factory=list)
    methods: List[MethodDescription] = field(default_factory=list)
    has_client: bool = True

    @property
    def client_properties(self) -> List[PropertyDescription]:
        return [prop for prop in self.properties if prop.client]

    @property
    def client_methods(self) -> List[MethodDescription]:
        return [method for method in self.methods if method.client]


class SchemaRegistry:
    """
    Ordered registry of data types and entity modules.

    Types come back in registration order. Registration refuses a composite
    type whose named dependencies are not registered yet, so iterating
    ``data_types()`` always reaches a dependency before its users.
    """

    def __init__(self):
        self._types: Dict[str, DataType] = {}
        self._modules: Dict[str, EntityModule] = {}

    def register_type(self, name: str, data_type: DataType) -> DataType:
        """
        Register a data type under a name.

        Args:
            name: Type name as written in the schema
            data_type: Type to register

        Returns:
            The registered type

        Raises:
            SchemaError: On duplicate names or unregistered named dependencies
        """
        if name in self._types:
            raise SchemaError(f"Data type '{name}' is already registered")

        for dependency in _walk_dependencies(data_type):
            if dependency.named and dependency.alias_name not in self._types:
                raise SchemaError(
                    f"Data type '{name}' depends on '{dependency.alias_name}' "
                    f"which is not registered yet"
                )

        self._types[name] = data_type
        logger.debug("Registered data type %s (%s)", name, data_type.name)
        return data_type

    def get_type(self, name: str) -> Optional[DataType]:
        return self._types.get(name)

    def has_type(self, name: str) -> bool:
        return name in self._types

    def data_types(self) -> Iterator[Tuple[str, DataType]]:
        """Yield ``(name, type)`` pairs in dependency-respecting order."""
        return iter(list(self._types.items()))

    def add_module(self, module: EntityModule) -> EntityModule:
        if module.name in self._modules:
            raise SchemaError(f"Entity module '{module.name}' is already registered")
        self._modules[module.name] = module
        return module

    def get_module(self, name: str) -> Optional[EntityModule]:
        return self._modules.get(name)

    def entity_modules(self) -> List[EntityModule]:
        return list(self._modules.values())

    def client_modules(self) -> List[EntityModule]:
        return [module for module in self._modules.values() if module.has_client]

    def is_empty(self) -> bool:
        return not self._types and not self._modules

    def __len__(self) -> int:
        return len(self._types) + len(self._modules)


def _walk_dependencies(data_type: DataType) -> Iterator[DataType]:
    """Yield nested types, stopping at named ones (they are declared elsewhere)."""
    for dependency in data_type.dependencies():
        yield dependency
        if not dependency.named:
            yield from _walk_dependencies(dependency)
