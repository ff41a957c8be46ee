"""
Configuration management for client SDK generation.

Handles loading and merging configuration from JSON files,
providing per-backend defaults and validation for generator settings.
"""

import json
from pathlib import Path
from typing import Dict, Any, List, Optional, Union
from dataclasses import dataclass, field, asdict

from .types import UnresolvedPolicy, VectorEncoding


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""

    pass


@dataclass
class GeneratorConfig:
    """Base configuration for client SDK generators."""

    # Output naming
    namespace: str = "KBEngine"
    types_file_name: str = "KBETypes"
    class_suffix: str = "Base"
    entity_base_class: str = "Entity"

    # Schema handling
    reserved_prefix: str = "_"

    # Type handling
    vector_encoding: str = "floating"  # floating, fixed_point
    unresolved_policy: Optional[str] = None  # fallback, strict; None = backend default

    # Additional metadata
    add_comments: bool = True

    # Custom settings (backend-specific)
    custom: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a known field or a custom setting."""
        if key in self.__dataclass_fields__ and key != "custom":
            return getattr(self, key)
        return self.custom.get(key, default)


class ConfigManager:
    """Manages configuration loading and merging."""

    def __init__(self):
        """Initialize configuration manager."""
        self._configs: Dict[str, Dict[str, Any]] = {}
        self._load_defaults()

    def _load_defaults(self):
        """Load default configurations for supported backends."""
        self._configs["unity"] = {
            "namespace": "KBEngine",
            "types_file_name": "KBETypes",
            "class_suffix": "Base",
            "entity_base_class": "Entity",
            "unresolved_policy": UnresolvedPolicy.FALLBACK.value,
            "custom": {
                "usings": [
                    "UnityEngine",
                    "System",
                    "System.Collections",
                    "System.Collections.Generic",
                ],
            },
        }

        self._configs["ue4"] = {
            "namespace": "",
            "types_file_name": "KBETypes",
            "class_suffix": "Base",
            "entity_base_class": "Entity",
            "unresolved_policy": UnresolvedPolicy.STRICT.value,
            "custom": {
                "api_macro": "KBENGINEPLUGINS_API",
                "includes": ["KBECommon.h", "Entity.h"],
                "types_includes": ["KBECommon.h"],
            },
        }

    def get_config(
        self,
        backend: str,
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
    ) -> GeneratorConfig:
        """
        Get complete configuration for a backend.

        Args:
            backend: Target backend name
            custom_config: Custom configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Merged configuration for the backend
        """
        base_config = self._copy_defaults(backend)

        if config_file:
            file_config = self._load_config_file(config_file)
            self._merge(base_config, file_config)

        if custom_config:
            self._merge(base_config, custom_config)

        config = self._dict_to_config(base_config)

        for problem in self.validate_config(config, backend):
            if problem.startswith("Invalid"):
                raise ConfigError(problem)

        return config

    def _copy_defaults(self, backend: str) -> Dict[str, Any]:
        defaults = self._configs.get(backend.lower(), {})
        copied = dict(defaults)
        copied["custom"] = dict(defaults.get("custom", {}))
        return copied

    def _merge(self, base: Dict[str, Any], overrides: Dict[str, Any]):
        """Merge overrides in place; ``custom`` dicts merge key by key."""
        for key, value in overrides.items():
            if key == "custom" and isinstance(value, dict):
                base.setdefault("custom", {}).update(value)
            else:
                base[key] = value

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == ".json":
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {str(e)}")
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {str(e)}")

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Convert dictionary to GeneratorConfig instance."""
        known_fields = {f.name for f in GeneratorConfig.__dataclass_fields__.values()}

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        if custom_args:
            existing_custom = dict(config_args.get("custom", {}))
            existing_custom.update(custom_args)
            config_args["custom"] = existing_custom

        return GeneratorConfig(**config_args)

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)

        config_dict = asdict(config)
        custom = config_dict.pop("custom")
        config_dict.update(custom)

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {str(e)}")

    def list_backends(self) -> List[str]:
        """Get list of backends with default configurations."""
        return list(self._configs.keys())

    def validate_config(self, config: GeneratorConfig, backend: str) -> List[str]:
        """
        Validate configuration for a backend.

        Returns:
            List of validation warnings/errors; errors start with "Invalid"
        """
        warnings = []

        valid_encodings = {encoding.value for encoding in VectorEncoding}
        if config.vector_encoding not in valid_encodings:
            warnings.append(
                f"Invalid vector_encoding: {config.vector_encoding} "
                f"(expected one of {sorted(valid_encodings)})"
            )

        valid_policies = {policy.value for policy in UnresolvedPolicy}
        if config.unresolved_policy is not None and config.unresolved_policy not in valid_policies:
            warnings.append(
                f"Invalid unresolved_policy: {config.unresolved_policy} "
                f"(expected one of {sorted(valid_policies)})"
            )

        if not config.types_file_name:
            warnings.append("Invalid types_file_name: must not be empty")

        if config.namespace and not all(
            part.isidentifier() for part in config.namespace.split(".")
        ):
            warnings.append(f"Invalid namespace: {config.namespace}")

        if backend.lower() == "unity" and not config.namespace:
            warnings.append("Invalid namespace: Unity output requires a namespace")

        if backend.lower() == "ue4" and config.namespace:
            warnings.append("UE4 output ignores namespace; types are declared globally")

        return warnings


# Global configuration manager instance
_config_manager = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(
    backend: str,
    custom_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[Union[str, Path]] = None,
) -> GeneratorConfig:
    """
    Convenience function to load configuration.

    Args:
        backend: Target backend name
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged configuration for the backend
    """
    manager = get_config_manager()
    return manager.get_config(backend, custom_config, config_file)
