"""
C# type system for the Unity client.

Maps schema types onto the names the Unity client plugin uses.
"""

from typing import Dict, Optional

from ...core.schema import DataType, DataTypeKind
from ...core.types import (
    PassConvention,
    TargetType,
    TypeMapper,
    VectorEncoding,
)


UNITY_PRIMITIVE_TYPES = {
    DataTypeKind.INT8: "SByte",
    DataTypeKind.INT16: "Int16",
    DataTypeKind.INT32: "Int32",
    DataTypeKind.INT64: "Int64",
    DataTypeKind.UINT8: "Byte",
    DataTypeKind.UINT16: "UInt16",
    DataTypeKind.UINT32: "UInt32",
    DataTypeKind.UINT64: "UInt64",
    DataTypeKind.FLOAT: "float",
    DataTypeKind.DOUBLE: "double",
    DataTypeKind.STRING: "string",
    DataTypeKind.UNICODE: "string",
    DataTypeKind.BLOB: "byte[]",
    DataTypeKind.PYTHON: "byte[]",
    DataTypeKind.PY_DICT: "byte[]",
    DataTypeKind.PY_TUPLE: "byte[]",
    DataTypeKind.PY_LIST: "byte[]",
    DataTypeKind.MAILBOX: "byte[]",
}

UNITY_FLOAT_VECTORS = {
    DataTypeKind.VECTOR2: "Vector2",
    DataTypeKind.VECTOR3: "Vector3",
    DataTypeKind.VECTOR4: "Vector4",
}

# UnityEngine has no four-component integer vector
UNITY_FIXED_POINT_VECTORS = {
    DataTypeKind.VECTOR2: "Vector2Int",
    DataTypeKind.VECTOR3: "Vector3Int",
}

_VECTOR_COMPONENTS = {
    DataTypeKind.VECTOR2: 2,
    DataTypeKind.VECTOR3: 3,
    DataTypeKind.VECTOR4: 4,
}


class UnityTypeMapper(TypeMapper):
    """Type mapper producing C# type names."""

    fallback_type_name = "object"

    def _primitive_names(self) -> Dict[DataTypeKind, str]:
        return UNITY_PRIMITIVE_TYPES

    def _vector_names(self, encoding: VectorEncoding) -> Dict[DataTypeKind, str]:
        if encoding is VectorEncoding.FIXED_POINT:
            return UNITY_FIXED_POINT_VECTORS
        return UNITY_FLOAT_VECTORS

    def array_of(self, element: TargetType) -> TargetType:
        return TargetType(
            name=f"List<{element.name}>",
            pass_convention=PassConvention.BY_REFERENCE,
        )

    def format_argument(self, target: TargetType) -> str:
        # C# reference types carry no const qualifier
        return target.name

    def default_value(self, data_type: DataType, target: TargetType) -> Optional[str]:
        if target.is_fallback:
            return "null"

        kind = data_type.kind

        if kind.is_integer or kind is DataTypeKind.DOUBLE:
            return "0"
        if kind is DataTypeKind.FLOAT:
            return "0f"
        if kind in (DataTypeKind.STRING, DataTypeKind.UNICODE):
            return '""'
        if target.name == "byte[]":
            return "new byte[0]"
        if kind.is_vector:
            zero = "0" if self.config.vector_encoding is VectorEncoding.FIXED_POINT else "0f"
            components = ", ".join([zero] * _VECTOR_COMPONENTS[kind])
            return f"new {target.name}({components})"
        if kind.is_composite:
            return f"new {target.name}()"
        return None
