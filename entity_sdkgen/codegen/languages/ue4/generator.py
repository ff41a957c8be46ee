"""
Unreal Engine 4 client generator implementation.

Generates C++ headers with entity base classes and type declarations
for the UE4 client plugin.
"""

from pathlib import Path
from typing import Any, Dict

from ...core.generator import ClientSDKGenerator
from ...core.naming import NameSanitizer
from ...core.types import TypeMapper, TypeMapperConfig, UnresolvedPolicy
from .naming import create_cpp_sanitizer
from .types import UE4TypeMapper


class UE4Generator(ClientSDKGenerator):
    """Client SDK generator for Unreal Engine 4 (C++)."""

    default_unresolved_policy = UnresolvedPolicy.STRICT

    @property
    def backend_name(self) -> str:
        return "ue4"

    @property
    def file_extension(self) -> str:
        return ".h"

    def get_template_directory(self) -> Path:
        """Return the UE4 templates directory."""
        return Path(__file__).parent / "templates"

    def create_type_mapper(self, type_config: TypeMapperConfig) -> TypeMapper:
        return UE4TypeMapper(type_config)

    def create_sanitizer(self) -> NameSanitizer:
        return create_cpp_sanitizer()

    def template_context(self, **extra) -> Dict[str, Any]:
        context = super().template_context(**extra)
        context["api_macro"] = self.config.get("api_macro", "")
        context["includes"] = list(self.config.get("includes", []))
        context["types_includes"] = list(self.config.get("types_includes", ["KBECommon.h"]))
        return context
