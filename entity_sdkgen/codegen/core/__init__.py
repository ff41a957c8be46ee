"""
Core client SDK generation components.

Provides the schema model, type mapping, output emitter and the base
generator shared by every backend.
"""

from .errors import (
    GeneratorError,
    OutputWriteError,
    PlaceholderMismatchError,
    SchemaError,
    SchemaUnavailableError,
    UnsupportedTypeError,
)
from .schema import (
    DataType,
    DataTypeKind,
    EntityModule,
    FixedArrayType,
    FixedDictType,
    MethodDescription,
    PropertyDescription,
    SchemaRegistry,
    array_of,
    fixed_dict,
)
from .types import (
    PassConvention,
    TargetType,
    TypeMapper,
    TypeMapperConfig,
    UnresolvedPolicy,
    VectorEncoding,
)
from .emitter import Emitter, GenerationBuffer
from .generator import ClientSDKGenerator, GenerationResult
from .loader import SchemaLoader, load_schema, load_schema_source
from .naming import NameSanitizer
from .config import GeneratorConfig, ConfigManager, ConfigError, load_config
from .templates import TemplateEngine, TemplateError, create_template_engine

__all__ = [
    # Errors
    "GeneratorError",
    "OutputWriteError",
    "PlaceholderMismatchError",
    "SchemaError",
    "SchemaUnavailableError",
    "UnsupportedTypeError",
    # Schema model
    "DataType",
    "DataTypeKind",
    "EntityModule",
    "FixedArrayType",
    "FixedDictType",
    "MethodDescription",
    "PropertyDescription",
    "SchemaRegistry",
    "array_of",
    "fixed_dict",
    "SchemaLoader",
    "load_schema",
    "load_schema_source",
    # Type mapping
    "PassConvention",
    "TargetType",
    "TypeMapper",
    "TypeMapperConfig",
    "UnresolvedPolicy",
    "VectorEncoding",
    # Generation
    "ClientSDKGenerator",
    "GenerationResult",
    "Emitter",
    "GenerationBuffer",
    "NameSanitizer",
    # Configuration
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Templates
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
]
