"""
Unity client generator implementation.

Generates C# entity base classes and type declarations for the
Unity client plugin.
"""

from pathlib import Path

from ...core.generator import ClientSDKGenerator
from ...core.naming import NameSanitizer
from ...core.types import TypeMapper, TypeMapperConfig, UnresolvedPolicy
from .naming import create_csharp_sanitizer
from .types import UnityTypeMapper


class UnityGenerator(ClientSDKGenerator):
    """Client SDK generator for Unity (C#)."""

    default_unresolved_policy = UnresolvedPolicy.FALLBACK

    @property
    def backend_name(self) -> str:
        return "unity"

    @property
    def file_extension(self) -> str:
        return ".cs"

    def get_template_directory(self) -> Path:
        """Return the Unity templates directory."""
        return Path(__file__).parent / "templates"

    def create_type_mapper(self, type_config: TypeMapperConfig) -> TypeMapper:
        return UnityTypeMapper(type_config)

    def create_sanitizer(self) -> NameSanitizer:
        return create_csharp_sanitizer()
