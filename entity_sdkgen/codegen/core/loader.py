"""
Build a ``SchemaRegistry`` from a JSON entity-definition document.

Document layout::

    {
      "types": {
        "ENTITY_ID": "INT32",
        "AVATAR_INFO": {"type": "FIXED_DICT", "keys": {"dbid": "UINT64", "name": "UNICODE"}},
        "AVATAR_INFO_LIST": {"type": "ARRAY", "of": "AVATAR_INFO"}
      },
      "entities": {
        "Avatar": {
          "hasClient": true,
          "properties": {"hp": {"type": "UINT16", "flags": "ALL_CLIENTS"}},
          "client_methods": {"say": ["UNICODE"]},
          "base_methods": {"reqLogout": []}
        }
      }
    }

Types are registered in document order, so a type may only refer to
types listed before it. Anonymous FIXED_DICT types get an alias built
from where they appear (``AVATAR_INFO_pos``).
"""

import dataclasses
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .errors import SchemaError, SchemaUnavailableError
from .naming import NameSanitizer
from .schema import (
    DataType,
    DataTypeKind,
    EntityModule,
    MethodDescription,
    PropertyDescription,
    SchemaRegistry,
    array_of,
    fixed_dict,
)
from ...logging_config import get_logger
from ...utils import JSONLoaderError, load_json

logger = get_logger(__name__)

# Property flags that make a property visible to some client
CLIENT_PROPERTY_FLAGS = {
    "ALL_CLIENTS",
    "OWN_CLIENT",
    "OTHER_CLIENTS",
    "CELL_PUBLIC_AND_OWN",
    "BASE_AND_CLIENT",
}

SERVER_METHOD_SECTIONS = ("base_methods", "cell_methods")

TYPE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SchemaLoader:
    """Converts a parsed schema document into a registry."""

    def __init__(self):
        self.registry = SchemaRegistry()
        # Anonymous aliases are built from raw keys and become type names
        self._aliases = NameSanitizer()

    def load(self, document: Dict[str, Any]) -> SchemaRegistry:
        if not isinstance(document, dict):
            raise SchemaError("Schema document must be a JSON object")

        types = document.get("types", {})
        entities = document.get("entities", {})
        if not isinstance(types, dict) or not isinstance(entities, dict):
            raise SchemaError("'types' and 'entities' must be JSON objects")

        for name, definition in types.items():
            self._load_named_type(name, definition)

        for name, definition in entities.items():
            self.registry.add_module(self._load_entity(name, definition))

        logger.info(
            "Loaded schema: %d data types, %d entity modules",
            len(types),
            len(entities),
        )
        return self.registry

    def _load_named_type(self, name: str, definition: Any):
        if not TYPE_NAME_PATTERN.match(name):
            raise SchemaError(f"Type name '{name}' is not a valid identifier")

        data_type = self.parse_type(definition, alias_hint=name)

        if data_type.named:
            # Alias of another registered type
            data_type = dataclasses.replace(data_type, alias_name=name)
        else:
            data_type = dataclasses.replace(data_type, alias_name=name, named=True)

        self.registry.register_type(name, data_type)

    def parse_type(self, definition: Any, alias_hint: str) -> DataType:
        """
        Parse a type reference or inline type definition.

        Args:
            definition: Type name string or an object with a ``type`` key
            alias_hint: Alias given to anonymous composite types

        Returns:
            The parsed type
        """
        if isinstance(definition, str):
            return self._lookup(definition, alias_hint)

        if not isinstance(definition, dict) or "type" not in definition:
            raise SchemaError(f"Invalid type definition for '{alias_hint}': {definition!r}")

        type_name = str(definition["type"])
        kind = DataTypeKind.from_name(type_name)

        if kind is DataTypeKind.ARRAY:
            if "of" not in definition:
                raise SchemaError(f"Array '{alias_hint}' has no element type ('of')")
            alias = self._aliases.sanitize_name(alias_hint)
            element = self.parse_type(definition["of"], f"{alias}_ChildArray")
            return array_of(element, alias_name=alias)

        if kind is DataTypeKind.FIXED_DICT:
            keys = definition.get("keys")
            if not isinstance(keys, dict) or not keys:
                raise SchemaError(f"FIXED_DICT '{alias_hint}' needs a non-empty 'keys' object")
            alias = self._aliases.sanitize_name(alias_hint)
            members = [
                (key, self.parse_type(member, f"{alias}_{key}"))
                for key, member in keys.items()
            ]
            return fixed_dict(members, alias_name=alias)

        return self._lookup(type_name, alias_hint)

    def _lookup(self, type_name: str, alias_hint: str) -> DataType:
        registered = self.registry.get_type(type_name)
        if registered is not None:
            return registered

        kind = DataTypeKind.from_name(type_name)
        if kind is None:
            raise SchemaError(f"Unknown data type '{type_name}' (used by '{alias_hint}')")
        if kind.is_composite:
            raise SchemaError(f"'{alias_hint}': {kind.value} needs an inline definition")
        return DataType(kind)

    def _load_entity(self, name: str, definition: Dict[str, Any]) -> EntityModule:
        if not isinstance(definition, dict):
            raise SchemaError(f"Entity '{name}' must be a JSON object")

        property_section = definition.get("properties", {})
        if not isinstance(property_section, dict):
            raise SchemaError(f"Properties of '{name}' must be a JSON object")

        properties = [
            self._load_property(name, prop_name, prop_definition)
            for prop_name, prop_definition in property_section.items()
        ]

        methods = self._load_methods(name, definition.get("client_methods", {}), client=True)
        for section in SERVER_METHOD_SECTIONS:
            methods.extend(self._load_methods(name, definition.get(section, {}), client=False))

        return EntityModule(
            name=name,
            properties=properties,
            methods=methods,
            has_client=bool(definition.get("hasClient", True)),
        )

    def _load_property(self, entity: str, name: str, definition: Any) -> PropertyDescription:
        hint = f"{entity}_{name}"

        if isinstance(definition, str):
            return PropertyDescription(name, self.parse_type(definition, hint), client=True)

        if not isinstance(definition, dict) or "type" not in definition:
            raise SchemaError(f"Invalid property '{entity}.{name}': {definition!r}")

        if "client" in definition:
            client = bool(definition["client"])
        else:
            client = str(definition.get("flags", "ALL_CLIENTS")).upper() in CLIENT_PROPERTY_FLAGS

        return PropertyDescription(name, self.parse_type(definition["type"], hint), client=client)

    def _load_methods(self, entity: str, section: Any, client: bool) -> List[MethodDescription]:
        if not isinstance(section, dict):
            raise SchemaError(f"Method section of '{entity}' must be a JSON object")

        methods = []
        for method_name, definition in section.items():
            args = definition.get("args", []) if isinstance(definition, dict) else definition
            if not isinstance(args, list):
                raise SchemaError(f"Arguments of '{entity}.{method_name}' must be a list")
            arg_types = [
                self.parse_type(arg, f"{entity}_{method_name}_Arg{index}")
                for index, arg in enumerate(args, start=1)
            ]
            methods.append(MethodDescription(method_name, tuple(arg_types), client=client))
        return methods


def load_schema(document: Dict[str, Any]) -> SchemaRegistry:
    """Build a registry from an already parsed schema document."""
    return SchemaLoader().load(document)


def load_schema_source(
    file_path: Optional[Union[str, Path]] = None,
    url: Optional[str] = None,
    timeout: int = 30,
) -> SchemaRegistry:
    """
    Load a schema document from a file or URL and build a registry.

    Raises:
        SchemaUnavailableError: If the document cannot be fetched or parsed
        SchemaError: If the document's content is malformed
    """
    try:
        source, document = load_json(file_path=file_path, url=url, timeout=timeout)
    except (JSONLoaderError, FileNotFoundError) as e:
        logger.error("Schema unavailable: %s", e)
        raise SchemaUnavailableError(f"Cannot read entity schema: {e}") from e

    logger.debug("Schema document loaded from %s", source)
    return load_schema(document)
