"""
Backend-neutral type mapping contract.

A backend's type mapper turns a schema ``DataType`` into a ``TargetType``:
the type name written into generated code plus the convention used when the
type appears in an argument list.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from .schema import DataType, DataTypeKind


class PassConvention(Enum):
    """How a type is passed in generated method signatures."""

    BY_VALUE = "by_value"
    BY_REFERENCE = "by_reference"


class VectorEncoding(Enum):
    """How VECTOR2/3/4 are represented on the client."""

    FLOATING = "floating"
    FIXED_POINT = "fixed_point"


class UnresolvedPolicy(Enum):
    """What happens when a type has no backend mapping."""

    FALLBACK = "fallback"  # use the backend's generic fallback type
    STRICT = "strict"  # raise UnsupportedTypeError


@dataclass(frozen=True)
class TargetType:
    """A resolved target-language type."""

    name: str
    pass_convention: PassConvention = PassConvention.BY_VALUE
    is_fallback: bool = field(default=False)

    @property
    def by_reference(self) -> bool:
        return self.pass_convention is PassConvention.BY_REFERENCE


@dataclass
class TypeMapperConfig:
    """Configuration for type mapping behavior, fixed at the start of a run."""

    vector_encoding: VectorEncoding = VectorEncoding.FLOATING
    unresolved_policy: UnresolvedPolicy = UnresolvedPolicy.STRICT

    # Per-kind name overrides, e.g. {DataTypeKind.UNICODE: "FText"}
    type_overrides: Dict[DataTypeKind, str] = field(default_factory=dict)


class TypeMapper(ABC):
    """
    Pure mapping from schema types to target types for one backend.

    Subclasses provide the primitive name tables; composite handling is
    shared. ``resolve`` returns ``None`` for types the backend cannot
    express; callers apply ``config.unresolved_policy`` to that outcome.
    """

    #: Generic type used when an unresolved type falls back
    fallback_type_name: str = "object"

    def __init__(self, config: Optional[TypeMapperConfig] = None):
        self.config = config or TypeMapperConfig()
        self._primitive_types = self._build_primitive_type_map()

    @abstractmethod
    def _primitive_names(self) -> Dict[DataTypeKind, str]:
        """Target names for every non-composite kind the backend supports."""

    @abstractmethod
    def _vector_names(self, encoding: VectorEncoding) -> Dict[DataTypeKind, str]:
        """Target names for vector kinds under the given encoding."""

    @abstractmethod
    def array_of(self, element: TargetType) -> TargetType:
        """Inline generic array type holding ``element``."""

    def array_element_text(self, element_name: str) -> str:
        """Spelling of an element name between the array type's brackets."""
        return element_name

    @abstractmethod
    def format_argument(self, target: TargetType) -> str:
        """Type text used in a method parameter declaration."""

    @abstractmethod
    def default_value(self, data_type: DataType, target: TargetType) -> Optional[str]:
        """Initializer literal for a field of this type, or None for none."""

    def _build_primitive_type_map(self) -> Dict[DataTypeKind, TargetType]:
        names = dict(self._primitive_names())
        names.update(self._vector_names(self.config.vector_encoding))
        names.update(
            {
                kind: name
                for kind, name in self.config.type_overrides.items()
                if not kind.is_composite
            }
        )

        primitive_types = {}
        for kind, name in names.items():
            convention = (
                PassConvention.BY_VALUE if kind.is_digit else PassConvention.BY_REFERENCE
            )
            primitive_types[kind] = TargetType(name=name, pass_convention=convention)
        return primitive_types

    def resolve(self, data_type: DataType) -> Optional[TargetType]:
        """
        Map a data type to its target type.

        FIXED_DICT and named ARRAY types resolve to their alias name. An
        anonymous ARRAY has no name of its own; resolving it needs the
        element, which the generator resolves first and hands to
        ``array_of``.

        Args:
            data_type: Type to map

        Returns:
            The target type, or None when the backend cannot express it
        """
        kind = data_type.kind

        if kind is DataTypeKind.FIXED_DICT:
            return TargetType(name=data_type.alias_name, pass_convention=PassConvention.BY_REFERENCE)

        if kind is DataTypeKind.ARRAY:
            if data_type.named:
                return TargetType(
                    name=data_type.alias_name, pass_convention=PassConvention.BY_REFERENCE
                )
            return None

        return self._primitive_types.get(kind)

    def fallback(self) -> TargetType:
        """The generic type substituted for unresolved types."""
        return TargetType(
            name=self.fallback_type_name,
            pass_convention=PassConvention.BY_REFERENCE,
            is_fallback=True,
        )

    def supported_kinds(self):
        """Non-composite kinds this mapper can resolve with its configuration."""
        return sorted(self._primitive_types, key=lambda kind: kind.value)
