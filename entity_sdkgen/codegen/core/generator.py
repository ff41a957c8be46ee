"""
Base generator for all client SDK backends.

``ClientSDKGenerator`` walks the entity schema, dispatches every data type
on its kind, and assembles one type-declaration file plus one file per
client-visible entity module. Backends supply the type mapper, the name
sanitizer and the Jinja2 templates that produce the actual text.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from .config import GeneratorConfig, load_config
from .emitter import Emitter, GenerationBuffer
from .errors import GeneratorError, SchemaError, SchemaUnavailableError, UnsupportedTypeError
from .naming import NameSanitizer
from .schema import (
    DataType,
    DataTypeKind,
    EntityModule,
    FixedArrayType,
    FixedDictType,
    MethodDescription,
    PropertyDescription,
    SchemaRegistry,
)
from .templates import TemplateEngine, TemplateError, create_template_engine
from .types import (
    PassConvention,
    TargetType,
    TypeMapper,
    TypeMapperConfig,
    UnresolvedPolicy,
    VectorEncoding,
)
from ...logging_config import get_logger

logger = get_logger(__name__)

ARGUMENT_SEPARATOR = ", "

Resolver = Callable[[DataType, str], TargetType]


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(
        self,
        files: List[Path] = None,
        warnings: List[str] = None,
        metadata: Dict[str, Any] = None,
    ):
        """
        Initialize generation result.

        Args:
            files: Files written, in the order they were written
            warnings: Any warnings from generation
            metadata: Additional metadata about generation
        """
        self.files = files or []
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.success = True
        self.error_message = None
        self.exception = None

    @classmethod
    def error(
        cls, message: str, exception: Exception = None, files: List[Path] = None
    ) -> "GenerationResult":
        """Create a failed generation result."""
        result = cls(files=files)
        result.success = False
        result.error_message = message
        result.exception = exception
        return result

    def __bool__(self) -> bool:
        return self.success


class ClientSDKGenerator(ABC):
    """Abstract base class for all client SDK generators."""

    #: Policy used when the configuration does not name one
    default_unresolved_policy = UnresolvedPolicy.STRICT

    TYPES_BEGIN_TEMPLATE = "types_begin.j2"
    TYPES_END_TEMPLATE = "types_end.j2"
    FIXED_DICT_BEGIN_TEMPLATE = "fixed_dict_begin.j2"
    FIXED_DICT_MEMBER_TEMPLATE = "fixed_dict_member.j2"
    FIXED_DICT_END_TEMPLATE = "fixed_dict_end.j2"
    FIXED_ARRAY_BEGIN_TEMPLATE = "fixed_array_begin.j2"
    FIXED_ARRAY_END_TEMPLATE = "fixed_array_end.j2"
    MODULE_BEGIN_TEMPLATE = "module_begin.j2"
    PROPERTY_TEMPLATE = "property.j2"
    METHOD_TEMPLATE = "method.j2"
    MODULE_END_TEMPLATE = "module_end.j2"

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize generator with optional configuration."""
        self.config = config if config is not None else load_config(self.backend_name)
        self._template_engine = None
        self._setup_templates()

        self.sanitizer = self.create_sanitizer()
        self.type_config = self._build_type_config()
        self.type_mapper = self.create_type_mapper(self.type_config)

        self._resolvers = self._build_dispatch_table()
        self._check_dispatch_coverage()

        self._warnings: List[str] = []

    def _setup_templates(self):
        """Setup template engine for this generator."""
        self._template_engine = create_template_engine(self.get_template_directory())

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Canonical backend identifier (e.g. 'unity', 'ue4')."""
        pass

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """File extension of generated files, including the dot."""
        pass

    @abstractmethod
    def get_template_directory(self) -> Optional[Path]:
        """Directory holding this backend's templates."""
        pass

    @abstractmethod
    def create_type_mapper(self, type_config: TypeMapperConfig) -> TypeMapper:
        """Create the backend's type mapper."""
        pass

    @abstractmethod
    def create_sanitizer(self) -> NameSanitizer:
        """Create the backend's identifier sanitizer."""
        pass

    @property
    def template_engine(self) -> TemplateEngine:
        """Get the template engine for this generator."""
        if self._template_engine is None:
            self._setup_templates()
        return self._template_engine

    @property
    def unresolved_policy(self) -> UnresolvedPolicy:
        return self.type_config.unresolved_policy

    def _build_type_config(self) -> TypeMapperConfig:
        """Build TypeMapperConfig from generator config."""
        policy_name = self.config.get("unresolved_policy")
        try:
            policy = (
                UnresolvedPolicy(policy_name)
                if policy_name
                else self.default_unresolved_policy
            )
            encoding = VectorEncoding(self.config.get("vector_encoding") or "floating")
        except ValueError as e:
            raise GeneratorError(f"Invalid {self.backend_name} configuration: {e}") from e

        overrides = {}
        for kind_name, target_name in (self.config.get("type_overrides") or {}).items():
            kind = DataTypeKind.from_name(kind_name)
            if kind is None:
                raise GeneratorError(f"Unknown data type in type_overrides: {kind_name}")
            overrides[kind] = target_name

        return TypeMapperConfig(
            vector_encoding=encoding,
            unresolved_policy=policy,
            type_overrides=overrides,
        )

    # Kind dispatch

    def _build_dispatch_table(self) -> Dict[DataTypeKind, Resolver]:
        """One resolver per data type kind."""
        return {
            DataTypeKind.INT8: self._resolve_primitive,
            DataTypeKind.INT16: self._resolve_primitive,
            DataTypeKind.INT32: self._resolve_primitive,
            DataTypeKind.INT64: self._resolve_primitive,
            DataTypeKind.UINT8: self._resolve_primitive,
            DataTypeKind.UINT16: self._resolve_primitive,
            DataTypeKind.UINT32: self._resolve_primitive,
            DataTypeKind.UINT64: self._resolve_primitive,
            DataTypeKind.FLOAT: self._resolve_primitive,
            DataTypeKind.DOUBLE: self._resolve_primitive,
            DataTypeKind.STRING: self._resolve_primitive,
            DataTypeKind.UNICODE: self._resolve_primitive,
            DataTypeKind.BLOB: self._resolve_primitive,
            DataTypeKind.PYTHON: self._resolve_primitive,
            DataTypeKind.PY_DICT: self._resolve_primitive,
            DataTypeKind.PY_TUPLE: self._resolve_primitive,
            DataTypeKind.PY_LIST: self._resolve_primitive,
            DataTypeKind.VECTOR2: self._resolve_vector,
            DataTypeKind.VECTOR3: self._resolve_vector,
            DataTypeKind.VECTOR4: self._resolve_vector,
            DataTypeKind.MAILBOX: self._resolve_primitive,
            DataTypeKind.ARRAY: self._resolve_array,
            DataTypeKind.FIXED_DICT: self._resolve_fixed_dict,
        }

    def _check_dispatch_coverage(self):
        missing = [kind.value for kind in DataTypeKind if kind not in self._resolvers]
        if missing:
            raise UnsupportedTypeError(
                f"{type(self).__name__} has no resolver for: {', '.join(missing)}",
                type_name=missing[0],
            )

    def resolve_type(self, data_type: DataType, context: str = "") -> TargetType:
        """
        Resolve any data type to its target type.

        Args:
            data_type: Type to resolve
            context: Where the type is used, for diagnostics

        Returns:
            The resolved (or fallback) target type

        Raises:
            UnsupportedTypeError: If the type cannot be expressed and the
                backend policy is strict
        """
        resolver = self._resolvers.get(data_type.kind)
        if resolver is None:
            raise UnsupportedTypeError(
                f"No resolver for data type {data_type.name} ({context})",
                type_name=data_type.name,
                context=context,
            )
        return resolver(data_type, context)

    def _resolve_primitive(self, data_type: DataType, context: str) -> TargetType:
        return self._apply_policy(data_type, self.type_mapper.resolve(data_type), context)

    def _resolve_vector(self, data_type: DataType, context: str) -> TargetType:
        target = self.type_mapper.resolve(data_type)
        if target is None:
            logger.debug(
                "%s has no %s encoding on %s",
                data_type.name,
                self.type_config.vector_encoding.value,
                self.backend_name,
            )
        return self._apply_policy(data_type, target, context)

    def _resolve_array(self, data_type: FixedArrayType, context: str) -> TargetType:
        return self.resolve_array_type(data_type, data_type.alias_name, context)

    def _resolve_fixed_dict(self, data_type: FixedDictType, context: str) -> TargetType:
        for key, member in data_type.items():
            self.resolve_type(member, f"{context}.{key}" if context else key)
        return self._apply_policy(data_type, self.type_mapper.resolve(data_type), context)

    def resolve_array_type(
        self, array_type: FixedArrayType, alias_name: str = "", context: str = ""
    ) -> TargetType:
        """
        Resolve an ARRAY type wherever it is used.

        Type declarations, struct members, properties and method arguments
        all come through here, so a named array is always referenced by its
        alias and an anonymous one by the backend's inline generic form.

        Args:
            array_type: The array type
            alias_name: Name to reference a named array by
            context: Where the type is used, for diagnostics

        Returns:
            The array's target type
        """
        element = self.resolve_type(array_type.element_type, f"{context}[]")

        if array_type.named:
            return TargetType(
                name=alias_name or array_type.alias_name,
                pass_convention=PassConvention.BY_REFERENCE,
            )
        return self.type_mapper.array_of(element)

    def _apply_policy(
        self, data_type: DataType, target: Optional[TargetType], context: str
    ) -> TargetType:
        if target is not None:
            return target

        if self.unresolved_policy is UnresolvedPolicy.FALLBACK:
            fallback = self.type_mapper.fallback()
            message = (
                f"{data_type.alias_name} ({data_type.name}) at {context or '?'} has no "
                f"{self.backend_name} mapping, using {fallback.name}"
            )
            logger.warning(message)
            self._warnings.append(message)
            return fallback

        logger.error(
            "Unsupported type %s (%s) at %s for backend %s",
            data_type.alias_name,
            data_type.name,
            context,
            self.backend_name,
        )
        raise UnsupportedTypeError(
            f"{data_type.alias_name} ({data_type.name}) at {context or '?'} "
            f"has no {self.backend_name} mapping",
            type_name=data_type.name,
            context=context,
        )

    # Whole run

    def run(self, schema: Optional[SchemaRegistry], output_dir: Union[str, Path]) -> GenerationResult:
        """
        Generate the complete output set into a directory.

        Args:
            schema: Entity schema to generate from
            output_dir: Directory receiving the files; created if missing

        Returns:
            GenerationResult listing written files, or describing the failure
        """
        self._warnings = []
        files: List[Path] = []
        emitter = Emitter(output_dir)

        logger.info("Generating %s client SDK into %s", self.backend_name, emitter.output_dir)

        try:
            self._check_schema(schema)
            emitter.ensure_directory()

            files.append(self.write_types_file(schema, emitter))

            for module in schema.client_modules():
                files.append(self.write_module_file(module, emitter))

        except GeneratorError as e:
            logger.error("%s generation aborted: %s", self.backend_name, e)
            return GenerationResult.error(str(e), exception=e, files=files)

        metadata = {
            "backend": self.backend_name,
            "file_extension": self.file_extension,
            "output_dir": str(emitter.output_dir),
            "module_count": len(files) - 1,
            "vector_encoding": self.type_config.vector_encoding.value,
            "unresolved_policy": self.unresolved_policy.value,
        }
        return GenerationResult(files=files, warnings=list(self._warnings), metadata=metadata)

    def _check_schema(self, schema: Optional[SchemaRegistry]):
        if schema is None:
            raise SchemaUnavailableError("No entity schema available")
        if schema.is_empty():
            raise SchemaUnavailableError("Entity schema holds no data types and no modules")

    # Type-declaration file

    def types_file_name(self) -> str:
        return f"{self.config.types_file_name}{self.file_extension}"

    def write_types_file(self, schema: SchemaRegistry, emitter: Emitter) -> Path:
        """
        Write the file declaring every composite type.

        Registered types are declared in registry order. Anonymous
        FIXED_DICT types nested in them, or used by client-visible entity
        members, are declared right before their first user.

        Returns:
            Path of the written file
        """
        self._check_schema(schema)

        out = emitter.new_buffer(self.types_file_name())
        declared: Dict[str, DataType] = {}

        self.write_types_begin(out, schema)

        for name, data_type in schema.data_types():
            if name.startswith(self.config.reserved_prefix):
                logger.debug("Skipping reserved type %s", name)
                continue
            if not data_type.kind.is_composite:
                continue
            self._declare_type(out, name, data_type, declared)

        for module in schema.client_modules():
            for prop in module.client_properties:
                self._declare_nested_dicts(out, prop.data_type, declared, include_self=True)
            for method in module.client_methods:
                for arg_type in method.arg_types:
                    self._declare_nested_dicts(out, arg_type, declared, include_self=True)

        self.write_types_end(out, schema)

        logger.debug("Declared %d composite types", len(declared))
        return emitter.flush(out)

    def _declare_type(
        self,
        out: GenerationBuffer,
        name: str,
        data_type: DataType,
        declared: Dict[str, DataType],
    ):
        existing = declared.get(name)
        if existing is not None:
            if existing != data_type:
                raise SchemaError(f"Conflicting declarations for type '{name}'")
            return

        self._declare_nested_dicts(out, data_type, declared)
        declared[name] = data_type

        if data_type.kind is DataTypeKind.FIXED_DICT:
            self._write_fixed_dict(out, name, data_type)
        elif data_type.kind is DataTypeKind.ARRAY:
            self._write_fixed_array(out, name, data_type)

    def _declare_nested_dicts(
        self,
        out: GenerationBuffer,
        data_type: DataType,
        declared: Dict[str, DataType],
        include_self: bool = False,
    ):
        """Declare anonymous FIXED_DICT types reachable from ``data_type``."""
        if include_self and not data_type.named and data_type.kind is DataTypeKind.FIXED_DICT:
            self._declare_type(out, data_type.alias_name, data_type, declared)
            return

        for dependency in data_type.dependencies():
            if dependency.named:
                continue
            if dependency.kind is DataTypeKind.FIXED_DICT:
                self._declare_type(out, dependency.alias_name, dependency, declared)
            else:
                self._declare_nested_dicts(out, dependency, declared)

    def _write_fixed_dict(self, out: GenerationBuffer, name: str, dict_type: FixedDictType):
        self.sanitizer.reset_used_names()
        self.write_fixed_dict_begin(out, name, dict_type)

        for key, member in dict_type.items():
            target = self.resolve_type(member, f"{name}.{key}")
            default = self.type_mapper.default_value(member, target)
            self.write_fixed_dict_member(out, name, key, member, target, default)

        self.write_fixed_dict_end(out, name, dict_type)

    def _write_fixed_array(self, out: GenerationBuffer, name: str, array_type: FixedArrayType):
        token = out.reserve_placeholder()
        base_type = self.type_mapper.array_of(TargetType(name=token))

        self.write_fixed_array_begin(out, name, array_type, base_type)

        element = self.resolve_type(array_type.element_type, f"{name}[]")
        out.substitute(token, self.type_mapper.array_element_text(element.name))

        self.write_fixed_array_end(out, name, array_type)

    # Entity module files

    def module_file_name(self, module: EntityModule) -> str:
        return f"{module.name}{self.file_extension}"

    def module_class_name(self, module: EntityModule) -> str:
        return self.sanitizer.sanitize_name(f"{module.name}{self.config.class_suffix}")

    def write_module_file(self, module: EntityModule, emitter: Emitter) -> Path:
        """
        Write the file for one entity module.

        Returns:
            Path of the written file
        """
        logger.debug("Writing entity module %s", module.name)
        out = emitter.new_buffer(self.module_file_name(module))
        self.sanitizer.reset_used_names()

        self.write_module_begin(out, module)

        properties = module.client_properties
        for prop in properties:
            self.write_property(out, module, prop)

        methods = module.client_methods
        if properties and methods:
            out.write("\n")

        for method in methods:
            self.write_method(out, module, method)

        self.write_module_end(out, module)
        return emitter.flush(out)

    def write_property(self, out: GenerationBuffer, module: EntityModule, prop: PropertyDescription):
        target = self.resolve_type(prop.data_type, f"{module.name}.{prop.name}")
        default = self.type_mapper.default_value(prop.data_type, target)
        self.write_property_declaration(out, module, prop, target, default)

    def write_method(self, out: GenerationBuffer, module: EntityModule, method: MethodDescription):
        arguments = self.build_argument_list(module, method)
        self.write_method_stub(out, module, method, arguments)

    def build_arguments(self, module: EntityModule, method: MethodDescription) -> List[str]:
        """
        Resolve a method's argument types into parameter declarations.

        Returns:
            ``"<type> paramN"`` strings, numbered from 1 in argument order
        """
        context = f"{module.name}.{method.name}"
        arguments = []
        for index, arg_type in enumerate(method.arg_types, start=1):
            target = self.resolve_type(arg_type, f"{context}(param{index})")
            arguments.append(f"{self.type_mapper.format_argument(target)} param{index}")
        return arguments

    def build_argument_list(self, module: EntityModule, method: MethodDescription) -> str:
        return ARGUMENT_SEPARATOR.join(self.build_arguments(module, method))

    # Text hooks; each renders the backend template of the same name

    def template_context(self, **extra) -> Dict[str, Any]:
        """Context shared by every template."""
        context = {
            "backend": self.backend_name,
            "namespace": self.config.namespace,
            "types_file": self.types_file_name(),
            "types_file_stem": self.config.types_file_name,
            "entity_base_class": self.config.entity_base_class,
            "add_comments": self.config.add_comments,
            "custom": self.config.custom,
        }
        context.update(extra)
        return context

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        try:
            return self.template_engine.render_template(template_name, context)
        except TemplateError as e:
            raise GeneratorError(f"{self.backend_name}: {e}") from e

    def _emit(self, out: GenerationBuffer, template_name: str, **context):
        out.write(self.render_template(template_name, self.template_context(**context)))

    def write_types_begin(self, out: GenerationBuffer, schema: SchemaRegistry):
        self._emit(out, self.TYPES_BEGIN_TEMPLATE)

    def write_types_end(self, out: GenerationBuffer, schema: SchemaRegistry):
        self._emit(out, self.TYPES_END_TEMPLATE)

    def write_fixed_dict_begin(self, out: GenerationBuffer, name: str, dict_type: FixedDictType):
        self._emit(
            out,
            self.FIXED_DICT_BEGIN_TEMPLATE,
            type_name=name,
            data_type=dict_type,
        )

    def write_fixed_dict_member(
        self,
        out: GenerationBuffer,
        owner: str,
        key: str,
        member: DataType,
        target: TargetType,
        default: Optional[str],
    ):
        self._emit(
            out,
            self.FIXED_DICT_MEMBER_TEMPLATE,
            owner=owner,
            name=self.sanitizer.claim_name(key),
            type_name=target.name,
            data_type=member,
            default=default,
        )

    def write_fixed_dict_end(self, out: GenerationBuffer, name: str, dict_type: FixedDictType):
        self._emit(
            out,
            self.FIXED_DICT_END_TEMPLATE,
            type_name=name,
            data_type=dict_type,
        )

    def write_fixed_array_begin(
        self, out: GenerationBuffer, name: str, array_type: FixedArrayType, base_type: TargetType
    ):
        self._emit(
            out,
            self.FIXED_ARRAY_BEGIN_TEMPLATE,
            type_name=name,
            base_type=base_type.name,
            data_type=array_type,
        )

    def write_fixed_array_end(self, out: GenerationBuffer, name: str, array_type: FixedArrayType):
        self._emit(
            out,
            self.FIXED_ARRAY_END_TEMPLATE,
            type_name=name,
            data_type=array_type,
        )

    def write_module_begin(self, out: GenerationBuffer, module: EntityModule):
        self._emit(
            out,
            self.MODULE_BEGIN_TEMPLATE,
            module=module,
            class_name=self.module_class_name(module),
        )

    def write_property_declaration(
        self,
        out: GenerationBuffer,
        module: EntityModule,
        prop: PropertyDescription,
        target: TargetType,
        default: Optional[str],
    ):
        self._emit(
            out,
            self.PROPERTY_TEMPLATE,
            module=module,
            name=self.sanitizer.claim_name(prop.name),
            type_name=target.name,
            data_type=prop.data_type,
            default=default,
        )

    def write_method_stub(
        self,
        out: GenerationBuffer,
        module: EntityModule,
        method: MethodDescription,
        arguments: str,
    ):
        self._emit(
            out,
            self.METHOD_TEMPLATE,
            module=module,
            name=self.sanitizer.claim_name(method.name),
            arguments=arguments,
        )

    def write_module_end(self, out: GenerationBuffer, module: EntityModule):
        self._emit(
            out,
            self.MODULE_END_TEMPLATE,
            module=module,
            class_name=self.module_class_name(module),
        )

    def get_backend_info(self) -> Dict[str, Any]:
        """Describe this backend for listings."""
        return {
            "name": self.backend_name,
            "class": type(self).__name__,
            "file_extension": self.file_extension,
            "types_file": self.types_file_name(),
            "unresolved_policy": self.unresolved_policy.value,
            "vector_encoding": self.type_config.vector_encoding.value,
            "fallback_type": self.type_mapper.fallback_type_name,
        }
