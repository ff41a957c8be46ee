"""
C++ type system for the Unreal Engine 4 client.

Maps schema types onto UE4 core types. Reference-passed types are
declared as ``const T&`` in method signatures.
"""

from typing import Dict, Optional

from ...core.schema import DataType, DataTypeKind
from ...core.types import PassConvention, TargetType, TypeMapper, VectorEncoding


UE4_PRIMITIVE_TYPES = {
    DataTypeKind.INT8: "int8",
    DataTypeKind.INT16: "int16",
    DataTypeKind.INT32: "int32",
    DataTypeKind.INT64: "int64",
    DataTypeKind.UINT8: "uint8",
    DataTypeKind.UINT16: "uint16",
    DataTypeKind.UINT32: "uint32",
    DataTypeKind.UINT64: "uint64",
    DataTypeKind.FLOAT: "float",
    DataTypeKind.DOUBLE: "double",
    DataTypeKind.STRING: "FString",
    DataTypeKind.UNICODE: "FString",
    DataTypeKind.BLOB: "TArray<uint8>",
    DataTypeKind.PYTHON: "TArray<uint8>",
    DataTypeKind.PY_DICT: "TArray<uint8>",
    DataTypeKind.PY_TUPLE: "TArray<uint8>",
    DataTypeKind.PY_LIST: "TArray<uint8>",
    DataTypeKind.MAILBOX: "TArray<uint8>",
}

UE4_FLOAT_VECTORS = {
    DataTypeKind.VECTOR2: "FVector2D",
    DataTypeKind.VECTOR3: "FVector",
    DataTypeKind.VECTOR4: "FVector4",
}

# UE4 core has no four-component integer vector
UE4_FIXED_POINT_VECTORS = {
    DataTypeKind.VECTOR2: "FIntPoint",
    DataTypeKind.VECTOR3: "FIntVector",
}


class UE4TypeMapper(TypeMapper):
    """Type mapper producing UE4 C++ type names."""

    fallback_type_name = "TArray<uint8>"

    def _primitive_names(self) -> Dict[DataTypeKind, str]:
        return UE4_PRIMITIVE_TYPES

    def _vector_names(self, encoding: VectorEncoding) -> Dict[DataTypeKind, str]:
        if encoding is VectorEncoding.FIXED_POINT:
            return UE4_FIXED_POINT_VECTORS
        return UE4_FLOAT_VECTORS

    def array_element_text(self, element_name: str) -> str:
        # Keep a space before the closing bracket of nested templates
        return f"{element_name} " if element_name.endswith(">") else element_name

    def array_of(self, element: TargetType) -> TargetType:
        return TargetType(
            name=f"TArray<{self.array_element_text(element.name)}>",
            pass_convention=PassConvention.BY_REFERENCE,
        )

    def format_argument(self, target: TargetType) -> str:
        if target.by_reference:
            return f"const {target.name}&"
        return target.name

    def default_value(self, data_type: DataType, target: TargetType) -> Optional[str]:
        if target.is_fallback:
            return None

        kind = data_type.kind
        if kind.is_integer:
            return "0"
        if kind is DataTypeKind.FLOAT:
            return "0.f"
        if kind is DataTypeKind.DOUBLE:
            return "0.0"
        return None
