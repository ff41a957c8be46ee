"""
Backend registry for the client SDK generators.

Maps backend names and aliases to generator classes and builds
configured generator instances.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Type, Union

from .core.config import ConfigError, GeneratorConfig, load_config
from .core.errors import GeneratorError
from .core.generator import ClientSDKGenerator
from ..logging_config import get_logger

logger = get_logger(__name__)

ConfigSource = Optional[Union[GeneratorConfig, Dict[str, Any], str, Path]]


class RegistryError(GeneratorError):
    """Exception raised for registry-related errors."""

    pass


class BackendNotFoundError(RegistryError):
    """Raised when no generator is registered under a backend name."""

    def __init__(self, backend: str, available: List[str]):
        self.backend = backend
        self.available = available
        super().__init__(
            f"Unknown backend: {backend}. Available: {', '.join(available) or 'none'}"
        )


class BackendRegistry:
    """Registry for managing available client SDK backends."""

    def __init__(self):
        self._generators: Dict[str, Type[ClientSDKGenerator]] = {}
        self._aliases: Dict[str, str] = {}

    def register(
        self,
        backend: str,
        generator_class: Type[ClientSDKGenerator],
        aliases: Optional[List[str]] = None,
        replace: bool = False,
    ):
        """
        Register a generator for a backend.

        Args:
            backend: Primary backend name (e.g. 'unity', 'ue4')
            generator_class: Generator class implementing ClientSDKGenerator
            aliases: Alternative names for this backend
            replace: Replace an existing registration instead of skipping it

        Raises:
            RegistryError: If the class is invalid or an alias conflicts
        """
        if not (isinstance(generator_class, type) and issubclass(generator_class, ClientSDKGenerator)):
            raise RegistryError("Generator class must inherit from ClientSDKGenerator")

        backend_key = backend.lower()

        if backend_key in self._generators and not replace:
            logger.debug("Backend %s already registered, skipping", backend_key)
            return

        for alias in aliases or []:
            alias_key = alias.lower()
            if alias_key == backend_key:
                continue
            if not replace:
                if alias_key in self._generators:
                    raise RegistryError(f"Alias '{alias}' conflicts with existing backend")
                if self._aliases.get(alias_key, backend_key) != backend_key:
                    raise RegistryError(
                        f"Alias '{alias}' already points to '{self._aliases[alias_key]}'"
                    )

        self._generators[backend_key] = generator_class
        for alias in aliases or []:
            if alias.lower() != backend_key:
                self._aliases[alias.lower()] = backend_key

    def unregister(self, backend: str):
        """Remove a backend and every alias pointing at it."""
        backend_key = self.canonical_name(backend)
        self._generators.pop(backend_key, None)
        for alias in [a for a, target in self._aliases.items() if target == backend_key]:
            del self._aliases[alias]

    def canonical_name(self, backend: str) -> str:
        """Resolve an alias to its primary backend name."""
        backend_key = backend.lower()
        return self._aliases.get(backend_key, backend_key)

    def get_generator_class(self, backend: str) -> Type[ClientSDKGenerator]:
        """
        Get the generator class for a backend name or alias.

        Raises:
            BackendNotFoundError: If nothing is registered under that name
        """
        backend_key = self.canonical_name(backend)
        if backend_key not in self._generators:
            raise BackendNotFoundError(backend, self.list_backends())
        return self._generators[backend_key]

    def create_generator(self, backend: str, config: ConfigSource = None) -> ClientSDKGenerator:
        """
        Create a configured generator instance.

        Args:
            backend: Backend name or alias
            config: GeneratorConfig, dict of overrides, or path to a JSON file

        Returns:
            Configured generator instance

        Raises:
            BackendNotFoundError: If the backend is unknown
            RegistryError: If the configuration is invalid
        """
        generator_class = self.get_generator_class(backend)
        backend_key = self.canonical_name(backend)

        try:
            if isinstance(config, GeneratorConfig):
                final_config = config
            elif isinstance(config, (str, Path)):
                final_config = load_config(backend_key, config_file=config)
            elif isinstance(config, dict):
                final_config = load_config(backend_key, custom_config=config)
            elif config is None:
                final_config = load_config(backend_key)
            else:
                raise RegistryError(f"Invalid config type: {type(config)}")
        except ConfigError as e:
            raise RegistryError(f"Failed to configure {backend_key} generator: {e}") from e

        return generator_class(final_config)

    def list_backends(self) -> List[str]:
        """Get the sorted primary backend names."""
        return sorted(self._generators.keys())

    def get_aliases(self, backend: str) -> List[str]:
        backend_key = self.canonical_name(backend)
        return sorted(alias for alias, target in self._aliases.items() if target == backend_key)

    def is_supported(self, backend: str) -> bool:
        return self.canonical_name(backend) in self._generators

    def get_backend_info(self, backend: str) -> Dict[str, Any]:
        """
        Describe a registered backend.

        Raises:
            BackendNotFoundError: If the backend is unknown
        """
        generator = self.create_generator(backend)
        info = generator.get_backend_info()
        info["aliases"] = self.get_aliases(backend)
        info["module"] = type(generator).__module__
        return info


_global_registry: Optional[BackendRegistry] = None


def get_registry() -> BackendRegistry:
    """Get the global backend registry, initializing it if needed."""
    global _global_registry
    if _global_registry is None:
        _global_registry = BackendRegistry()
        _register_builtin_backends(_global_registry)
    return _global_registry


def _register_builtin_backends(registry: BackendRegistry):
    from .languages.ue4 import UE4Generator
    from .languages.unity import UnityGenerator

    registry.register("unity", UnityGenerator, aliases=["unity3d"])
    registry.register("ue4", UE4Generator, aliases=["unreal"])


def get_generator(backend: str, config: ConfigSource = None) -> ClientSDKGenerator:
    """Create a generator from the global registry."""
    return get_registry().create_generator(backend, config)


def list_supported_backends() -> List[str]:
    return get_registry().list_backends()


def is_backend_supported(backend: str) -> bool:
    return get_registry().is_supported(backend)


def get_backend_info(backend: str) -> Dict[str, Any]:
    return get_registry().get_backend_info(backend)


def list_all_backend_info() -> Dict[str, Dict[str, Any]]:
    """Describe every registered backend."""
    return {backend: get_backend_info(backend) for backend in list_supported_backends()}
