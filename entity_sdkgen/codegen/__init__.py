"""
Client SDK code generation.

Generates client-side entity stubs and type declarations from an entity
schema, for the Unity (C#) and Unreal Engine 4 (C++) client plugins.
"""

from pathlib import Path
from typing import Union

from .registry import (
    BackendNotFoundError,
    BackendRegistry,
    ConfigSource,
    RegistryError,
    get_backend_info,
    get_generator,
    get_registry,
    is_backend_supported,
    list_all_backend_info,
    list_supported_backends,
)
from .core.errors import GeneratorError, SchemaUnavailableError
from .core.generator import ClientSDKGenerator, GenerationResult
from .core.schema import SchemaRegistry
from .core.loader import load_schema, load_schema_source
from .core.config import GeneratorConfig, ConfigError, load_config


def generate_sdk(
    backend: str,
    schema: SchemaRegistry,
    output_dir: Union[str, Path],
    config: ConfigSource = None,
) -> GenerationResult:
    """
    Generate a complete client SDK for one backend.

    Args:
        backend: Backend name or alias ('unity', 'ue4')
        schema: Entity schema to generate from
        output_dir: Directory receiving the generated files
        config: GeneratorConfig, dict of overrides, or config file path

    Returns:
        GenerationResult listing the written files

    Raises:
        BackendNotFoundError: If the backend is unknown
    """
    generator = get_generator(backend, config)
    return generator.run(schema, output_dir)


__all__ = [
    "BackendNotFoundError",
    "BackendRegistry",
    "ClientSDKGenerator",
    "ConfigError",
    "GenerationResult",
    "GeneratorConfig",
    "GeneratorError",
    "RegistryError",
    "SchemaRegistry",
    "SchemaUnavailableError",
    "generate_sdk",
    "get_backend_info",
    "get_generator",
    "get_registry",
    "is_backend_supported",
    "list_all_backend_info",
    "list_supported_backends",
    "load_config",
    "load_schema",
    "load_schema_source",
]
