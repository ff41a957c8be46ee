"""
Pytest configuration and shared fixtures for entity-sdkgen tests.

Provides sample schemas (as registries and as JSON documents) and
generators configured without header comments so tests can compare
exact output text.
"""

import json
import logging

import pytest

from entity_sdkgen.codegen.core.config import load_config
from entity_sdkgen.codegen.core.schema import (
    DataType,
    DataTypeKind,
    EntityModule,
    MethodDescription,
    PropertyDescription,
    SchemaRegistry,
    array_of,
    fixed_dict,
)
from entity_sdkgen.codegen.languages.ue4 import UE4Generator
from entity_sdkgen.codegen.languages.unity import UnityGenerator
from entity_sdkgen.logging_config import PACKAGE_LOGGER


def prim(kind_name):
    """Anonymous primitive type by kind name."""
    return DataType(DataTypeKind[kind_name])


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo any setup_logging() call made by a test."""
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def avatar_info():
    return fixed_dict(
        [
            ("dbid", prim("UINT64")),
            ("name", prim("UNICODE")),
            ("level", prim("UINT8")),
        ],
        alias_name="AVATAR_INFO",
        named=True,
    )


@pytest.fixture
def sample_registry(avatar_info):
    """Account/Avatar schema with one server-only module."""
    registry = SchemaRegistry()
    registry.register_type("ENTITY_ID", DataType(DataTypeKind.INT32, "ENTITY_ID", named=True))
    registry.register_type("AVATAR_INFO", avatar_info)
    avatar_list = array_of(avatar_info, alias_name="AVATAR_INFO_LIST", named=True)
    registry.register_type("AVATAR_INFO_LIST", avatar_list)
    registry.register_type(
        "_INTERNAL",
        fixed_dict([("x", prim("INT8"))], alias_name="_INTERNAL", named=True),
    )

    registry.add_module(
        EntityModule(
            name="Account",
            properties=[
                PropertyDescription("lastSelCharacter", prim("UINT64")),
                PropertyDescription("characters", avatar_list),
                PropertyDescription("secret", prim("UNICODE"), client=False),
            ],
            methods=[
                MethodDescription("onReqAvatarList", (avatar_list,)),
                MethodDescription("onCreateAvatarResult", (prim("UINT8"), avatar_info)),
                MethodDescription("reqCreateAvatar", (prim("UINT8"), prim("UNICODE")), client=False),
            ],
        )
    )
    registry.add_module(
        EntityModule(
            name="Avatar",
            properties=[
                PropertyDescription("hp", prim("UINT16")),
                PropertyDescription("position", prim("VECTOR3")),
            ],
            methods=[MethodDescription("say", (prim("UNICODE"),))],
        )
    )
    registry.add_module(
        EntityModule(
            name="Space",
            properties=[PropertyDescription("spaceKey", prim("UINT32"))],
            has_client=False,
        )
    )
    return registry


@pytest.fixture
def sample_document():
    """JSON schema document equivalent to a small game."""
    return {
        "types": {
            "ENTITY_ID": "INT32",
            "AVATAR_INFO": {
                "type": "FIXED_DICT",
                "keys": {
                    "dbid": "UINT64",
                    "name": "UNICODE",
                    "pos": {
                        "type": "FIXED_DICT",
                        "keys": {"x": "FLOAT", "y": "FLOAT"},
                    },
                },
            },
            "AVATAR_INFO_LIST": {"type": "ARRAY", "of": "AVATAR_INFO"},
        },
        "entities": {
            "Account": {
                "hasClient": True,
                "properties": {
                    "lastSelCharacter": {"type": "UINT64", "flags": "BASE_AND_CLIENT"},
                    "password": {"type": "UNICODE", "flags": "BASE"},
                    "characters": {"type": "AVATAR_INFO_LIST", "flags": "OWN_CLIENT"},
                },
                "client_methods": {
                    "onReqAvatarList": ["AVATAR_INFO_LIST"],
                    "onCreateAvatarResult": {"args": ["UINT8", "AVATAR_INFO"]},
                },
                "base_methods": {"reqCreateAvatar": ["UINT8", "UNICODE"]},
            },
            "Avatar": {
                "properties": {
                    "hp": {"type": "UINT16", "flags": "ALL_CLIENTS"},
                    "buffs": {
                        "type": {"type": "ARRAY", "of": "UINT32"},
                        "flags": "OWN_CLIENT",
                    },
                },
                "client_methods": {"say": ["UNICODE"]},
            },
            "Spaces": {"hasClient": False},
        },
    }


@pytest.fixture
def schema_file(tmp_path, sample_document):
    path = tmp_path / "entities.json"
    path.write_text(json.dumps(sample_document), encoding="utf-8")
    return path


@pytest.fixture
def unity_generator():
    return UnityGenerator(load_config("unity", {"add_comments": False}))


@pytest.fixture
def ue4_generator():
    return UE4Generator(load_config("ue4", {"add_comments": False}))
