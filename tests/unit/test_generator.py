"""
Unit tests for the client SDK generators.

Exercises the shared generation walk through both backends: output
ordering, type declarations, member filtering, argument lists and the
unresolved-type policies.
"""

import pytest

from entity_sdkgen.codegen.core.config import load_config
from entity_sdkgen.codegen.core.errors import (
    PlaceholderMismatchError,
    SchemaError,
    SchemaUnavailableError,
    UnsupportedTypeError,
)
from entity_sdkgen.codegen.core.generator import GenerationResult
from entity_sdkgen.codegen.core.loader import load_schema
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
from entity_sdkgen.codegen.core.types import UnresolvedPolicy, VectorEncoding
from entity_sdkgen.codegen.languages.ue4 import UE4Generator
from entity_sdkgen.codegen.languages.unity import UnityGenerator


def prim(kind_name):
    return DataType(DataTypeKind[kind_name])


def single_module_registry(properties=(), methods=(), types=()):
    registry = SchemaRegistry()
    for name, data_type in types:
        registry.register_type(name, data_type)
    registry.add_module(EntityModule("Avatar", list(properties), list(methods)))
    return registry


UNITY_USINGS = (
    "namespace KBEngine\n"
    "{\n"
    "    using UnityEngine;\n"
    "    using System;\n"
    "    using System.Collections;\n"
    "    using System.Collections.Generic;\n"
    "\n"
)


class TestRun:
    """Test a whole generation run."""

    def test_writes_types_file_then_client_modules(self, unity_generator, sample_registry, tmp_path):
        result = unity_generator.run(sample_registry, tmp_path)

        assert result.success, result.error_message
        assert [path.name for path in result.files] == ["KBETypes.cs", "Account.cs", "Avatar.cs"]
        assert not (tmp_path / "Space.cs").exists()
        assert result.metadata["module_count"] == 2
        assert result.metadata["backend"] == "unity"

    def test_creates_nested_output_directory(self, ue4_generator, sample_registry, tmp_path):
        output = tmp_path / "Source" / "Plugins" / "Scripts"
        result = ue4_generator.run(sample_registry, output)

        assert result
        assert (output / "KBETypes.h").is_file()
        assert (output / "Account.h").is_file()

    def test_missing_schema(self, unity_generator, tmp_path):
        result = unity_generator.run(None, tmp_path)

        assert not result.success
        assert isinstance(result.exception, SchemaUnavailableError)
        assert result.files == []

    def test_empty_schema(self, unity_generator, tmp_path):
        result = unity_generator.run(SchemaRegistry(), tmp_path / "out")

        assert not result
        assert isinstance(result.exception, SchemaUnavailableError)
        assert not (tmp_path / "out" / "KBETypes.cs").exists()

    def test_error_result(self):
        result = GenerationResult.error("boom")
        assert not result
        assert result.error_message == "boom"


class TestUnityOutput:
    """Test exact C# output for the sample schema."""

    def test_types_file(self, unity_generator, sample_registry, tmp_path):
        unity_generator.run(sample_registry, tmp_path)

        assert (tmp_path / "KBETypes.cs").read_text(encoding="utf-8") == (
            UNITY_USINGS
            + "    public class AVATAR_INFO\n"
            "    {\n"
            "        public UInt64 dbid = 0;\n"
            '        public string name = "";\n'
            "        public Byte level = 0;\n"
            "    }\n"
            "\n"
            "    public class AVATAR_INFO_LIST : List<AVATAR_INFO>\n"
            "    {\n"
            "    }\n"
            "\n"
            "}\n"
        )

    def test_module_file(self, unity_generator, sample_registry, tmp_path):
        unity_generator.run(sample_registry, tmp_path)

        assert (tmp_path / "Account.cs").read_text(encoding="utf-8") == (
            UNITY_USINGS
            + "    public abstract class AccountBase : Entity\n"
            "    {\n"
            "        public UInt64 lastSelCharacter = 0;\n"
            "        public AVATAR_INFO_LIST characters = new AVATAR_INFO_LIST();\n"
            "\n"
            "        public virtual void onReqAvatarList(AVATAR_INFO_LIST param1) {}\n"
            "        public virtual void onCreateAvatarResult(Byte param1, AVATAR_INFO param2) {}\n"
            "    }\n"
            "}\n"
        )

    def test_vectors_and_strings(self, unity_generator, sample_registry, tmp_path):
        unity_generator.run(sample_registry, tmp_path)
        text = (tmp_path / "Avatar.cs").read_text(encoding="utf-8")

        assert "        public UInt16 hp = 0;\n" in text
        assert "        public Vector3 position = new Vector3(0f, 0f, 0f);\n" in text
        assert "        public virtual void say(string param1) {}\n" in text

    def test_header_comment(self, sample_registry, tmp_path):
        UnityGenerator().run(sample_registry, tmp_path)
        text = (tmp_path / "Avatar.cs").read_text(encoding="utf-8")

        assert text.startswith(
            "// Generated by entity-sdkgen (unity backend) for entity module Avatar.\n"
            "// Do not edit: this file is rewritten on every run.\n"
            "\n"
            "namespace KBEngine\n"
        )

    def test_ue4_header_comment(self, sample_registry, tmp_path):
        UE4Generator().run(sample_registry, tmp_path)
        text = (tmp_path / "KBETypes.h").read_text(encoding="utf-8")

        assert text.startswith("/*\n    Generated by entity-sdkgen (ue4 backend).\n")
        assert "\n*/\n#pragma once\n" in text

    def test_custom_namespace(self, sample_registry, tmp_path):
        generator = UnityGenerator(load_config("unity", {"namespace": "Game.Client"}))
        generator.run(sample_registry, tmp_path)

        assert "namespace Game.Client\n" in (tmp_path / "KBETypes.cs").read_text(encoding="utf-8")


class TestUE4Output:
    """Test exact C++ output for the sample schema."""

    def test_types_file(self, ue4_generator, sample_registry, tmp_path):
        ue4_generator.run(sample_registry, tmp_path)

        assert (tmp_path / "KBETypes.h").read_text(encoding="utf-8") == (
            "#pragma once\n"
            "\n"
            '#include "KBECommon.h"\n'
            "\n"
            "class AVATAR_INFO\n"
            "{\n"
            "public:\n"
            "    uint64 dbid = 0;\n"
            "    FString name;\n"
            "    uint8 level = 0;\n"
            "};\n"
            "\n"
            "class AVATAR_INFO_LIST : public TArray<AVATAR_INFO>\n"
            "{\n"
            "public:\n"
            "};\n"
            "\n"
        )

    def test_module_file(self, ue4_generator, sample_registry, tmp_path):
        ue4_generator.run(sample_registry, tmp_path)

        assert (tmp_path / "Account.h").read_text(encoding="utf-8") == (
            "#pragma once\n"
            "\n"
            '#include "KBECommon.h"\n'
            '#include "Entity.h"\n'
            '#include "KBETypes.h"\n'
            "\n"
            "class KBENGINEPLUGINS_API AccountBase : public Entity\n"
            "{\n"
            "public:\n"
            "    uint64 lastSelCharacter = 0;\n"
            "    AVATAR_INFO_LIST characters;\n"
            "\n"
            "    virtual void onReqAvatarList(const AVATAR_INFO_LIST& param1) {}\n"
            "    virtual void onCreateAvatarResult(uint8 param1, const AVATAR_INFO& param2) {}\n"
            "};\n"
        )

    def test_reference_arguments(self, ue4_generator, sample_registry, tmp_path):
        ue4_generator.run(sample_registry, tmp_path)
        text = (tmp_path / "Avatar.h").read_text(encoding="utf-8")

        assert "    FVector position;\n" in text
        assert "    virtual void say(const FString& param1) {}\n" in text

    def test_type_overrides(self, sample_registry, tmp_path):
        config = load_config("ue4", {"type_overrides": {"UNICODE": "FText"}})
        UE4Generator(config).run(sample_registry, tmp_path)

        assert "const FText& param1" in (tmp_path / "Avatar.h").read_text(encoding="utf-8")


class TestTypeDeclarations:
    """Test which composite types get declared, and in what order."""

    def test_reserved_names_skipped(self, unity_generator, sample_registry, tmp_path):
        unity_generator.run(sample_registry, tmp_path)
        assert "_INTERNAL" not in (tmp_path / "KBETypes.cs").read_text(encoding="utf-8")

    def test_primitive_aliases_not_declared(self, unity_generator, sample_registry, tmp_path):
        unity_generator.run(sample_registry, tmp_path)
        assert "ENTITY_ID" not in (tmp_path / "KBETypes.cs").read_text(encoding="utf-8")

    def test_nested_anonymous_dict_declared_first(self, unity_generator, tmp_path):
        pos = fixed_dict([("x", prim("FLOAT")), ("y", prim("FLOAT"))], alias_name="AVATAR_pos")
        avatar = fixed_dict([("pos", pos), ("hp", prim("INT32"))], alias_name="AVATAR", named=True)
        registry = single_module_registry(types=[("AVATAR", avatar)])

        unity_generator.run(registry, tmp_path)
        text = (tmp_path / "KBETypes.cs").read_text(encoding="utf-8")

        assert "    public class AVATAR_pos\n" in text
        assert text.index("class AVATAR_pos") < text.index("class AVATAR\n")
        assert "        public float x = 0f;\n" in text
        assert "        public AVATAR_pos pos = new AVATAR_pos();\n" in text

    def test_anonymous_dict_used_by_property(self, ue4_generator, tmp_path):
        stats = fixed_dict([("str", prim("UINT8"))], alias_name="Avatar_stats")
        registry = single_module_registry(
            properties=[PropertyDescription("stats", stats)],
        )

        ue4_generator.run(registry, tmp_path)

        assert "class Avatar_stats\n" in (tmp_path / "KBETypes.h").read_text(encoding="utf-8")
        assert "    Avatar_stats stats;\n" in (tmp_path / "Avatar.h").read_text(encoding="utf-8")

    def test_anonymous_array_member(self, unity_generator, tmp_path):
        bag = fixed_dict([("items", array_of(prim("UINT32")))], alias_name="BAG", named=True)
        registry = single_module_registry(types=[("BAG", bag)])

        unity_generator.run(registry, tmp_path)

        assert "        public List<UInt32> items = new List<UInt32>();\n" in (
            tmp_path / "KBETypes.cs"
        ).read_text(encoding="utf-8")

    def test_array_of_anonymous_array(self, unity_generator, ue4_generator, tmp_path):
        grid = array_of(array_of(prim("INT32")), alias_name="GRID", named=True)
        registry = single_module_registry(types=[("GRID", grid)])

        unity_generator.run(registry, tmp_path / "unity")
        ue4_generator.run(registry, tmp_path / "ue4")

        unity_text = (tmp_path / "unity" / "KBETypes.cs").read_text(encoding="utf-8")
        ue4_text = (tmp_path / "ue4" / "KBETypes.h").read_text(encoding="utf-8")
        assert "    public class GRID : List<List<Int32>>\n" in unity_text
        assert "class GRID : public TArray<TArray<int32> >\n" in ue4_text
        assert "#REPLACE" not in unity_text + ue4_text

    def test_nested_array_spelled_alike_everywhere(self, ue4_generator, tmp_path):
        grid = array_of(array_of(prim("INT32")), alias_name="GRID", named=True)
        registry = single_module_registry(
            properties=[PropertyDescription("cells", array_of(array_of(prim("INT32"))))],
            types=[("GRID", grid)],
        )

        ue4_generator.run(registry, tmp_path)

        declaration = (tmp_path / "KBETypes.h").read_text(encoding="utf-8")
        module = (tmp_path / "Avatar.h").read_text(encoding="utf-8")
        assert "public TArray<TArray<int32> >\n" in declaration
        assert "TArray<TArray<int32> > cells;" in module

    def test_conflicting_anonymous_dicts(self, unity_generator, tmp_path):
        first = fixed_dict([("a", prim("INT8"))], alias_name="DUP")
        second = fixed_dict([("b", prim("INT8"))], alias_name="DUP")
        registry = single_module_registry(
            properties=[PropertyDescription("one", first), PropertyDescription("two", second)],
        )

        result = unity_generator.run(registry, tmp_path)

        assert not result
        assert isinstance(result.exception, SchemaError)

    def test_member_names_escaped(self, unity_generator, ue4_generator, tmp_path):
        data = fixed_dict([("class", prim("INT8"))], alias_name="DATA", named=True)
        registry = single_module_registry(types=[("DATA", data)])

        unity_generator.run(registry, tmp_path / "unity")
        ue4_generator.run(registry, tmp_path / "ue4")

        assert "public SByte @class = 0;" in (tmp_path / "unity" / "KBETypes.cs").read_text(encoding="utf-8")
        assert "int8 class_ = 0;" in (tmp_path / "ue4" / "KBETypes.h").read_text(encoding="utf-8")

    def test_array_placeholder_must_be_written(self, tmp_path):
        """A begin hook that drops the base type leaves nothing to substitute."""

        class ForgetfulGenerator(UnityGenerator):
            def write_fixed_array_begin(self, out, name, array_type, base_type):
                out.write(f"    public class {name}\n    {{\n")

        grid = array_of(prim("INT32"), alias_name="IDS", named=True)
        registry = single_module_registry(types=[("IDS", grid)])

        result = ForgetfulGenerator(load_config("unity")).run(registry, tmp_path)

        assert not result
        assert isinstance(result.exception, PlaceholderMismatchError)
        assert not (tmp_path / "KBETypes.cs").exists()

    def test_inline_dict_alias_matches_field(self, unity_generator, tmp_path):
        registry = load_schema(
            {
                "entities": {
                    "Avatar": {
                        "properties": {
                            "my-pos": {"type": {"type": "FIXED_DICT", "keys": {"x": "FLOAT"}}}
                        }
                    }
                }
            }
        )

        assert unity_generator.run(registry, tmp_path)

        types_text = (tmp_path / "KBETypes.cs").read_text(encoding="utf-8")
        module_text = (tmp_path / "Avatar.cs").read_text(encoding="utf-8")
        assert "    public class Avatar_my_pos\n" in types_text
        assert "public Avatar_my_pos my_pos = new Avatar_my_pos();" in module_text
        assert "my-pos" not in types_text + module_text


class TestNameCollisions:
    """Distinct schema names must stay distinct in generated code."""

    def test_dict_members_colliding(self, unity_generator, tmp_path):
        data = fixed_dict(
            [("a-b", prim("UINT8")), ("a_b", prim("UINT16"))], alias_name="DATA", named=True
        )
        registry = single_module_registry(types=[("DATA", data)])

        result = unity_generator.run(registry, tmp_path)

        assert not result
        assert isinstance(result.exception, SchemaError)
        assert "'a_b'" in result.error_message
        assert not (tmp_path / "KBETypes.cs").exists()

    def test_properties_colliding(self, ue4_generator, tmp_path):
        registry = single_module_registry(
            properties=[
                PropertyDescription("x.y", prim("UINT8")),
                PropertyDescription("x_y", prim("UINT16")),
            ]
        )

        result = ue4_generator.run(registry, tmp_path)

        assert not result
        assert isinstance(result.exception, SchemaError)
        assert (tmp_path / "KBETypes.h").exists()
        assert not (tmp_path / "Avatar.h").exists()

    def test_same_name_in_separate_scopes(self, unity_generator, tmp_path):
        data = fixed_dict([("hp", prim("UINT8"))], alias_name="DATA", named=True)
        registry = single_module_registry(
            properties=[PropertyDescription("hp", prim("UINT16"))],
            types=[("DATA", data)],
        )
        registry.add_module(EntityModule("Monster", [PropertyDescription("hp", prim("UINT16"))], []))

        result = unity_generator.run(registry, tmp_path)

        assert result, result.error_message
        assert "public UInt16 hp = 0;" in (tmp_path / "Monster.cs").read_text(encoding="utf-8")


class TestModuleFiles:
    """Test entity module output."""

    def test_server_only_members_filtered(self, unity_generator, sample_registry, tmp_path):
        unity_generator.run(sample_registry, tmp_path)
        text = (tmp_path / "Account.cs").read_text(encoding="utf-8")

        assert "secret" not in text
        assert "reqCreateAvatar" not in text

    def test_member_order_follows_schema(self, unity_generator, sample_registry, tmp_path):
        unity_generator.run(sample_registry, tmp_path)
        text = (tmp_path / "Account.cs").read_text(encoding="utf-8")

        assert text.index("lastSelCharacter") < text.index("characters")
        assert text.index("onReqAvatarList") < text.index("onCreateAvatarResult")

    def test_no_blank_line_without_methods(self, unity_generator, tmp_path):
        registry = single_module_registry(properties=[PropertyDescription("hp", prim("UINT16"))])
        unity_generator.run(registry, tmp_path)

        text = (tmp_path / "Avatar.cs").read_text(encoding="utf-8")
        assert "        public UInt16 hp = 0;\n    }\n}\n" in text

    def test_no_blank_line_without_properties(self, ue4_generator, tmp_path):
        registry = single_module_registry(methods=[MethodDescription("onReady", ())])
        ue4_generator.run(registry, tmp_path)

        text = (tmp_path / "Avatar.h").read_text(encoding="utf-8")
        assert "public:\n    virtual void onReady() {}\n};\n" in text

    def test_argument_numbering(self, ue4_generator):
        module = EntityModule("Avatar")
        method = MethodDescription(
            "onMove",
            (prim("VECTOR3"), prim("FLOAT"), prim("UINT8"), prim("UNICODE")),
        )

        assert ue4_generator.build_arguments(module, method) == [
            "const FVector& param1",
            "float param2",
            "uint8 param3",
            "const FString& param4",
        ]
        assert ue4_generator.build_argument_list(module, method) == (
            "const FVector& param1, float param2, uint8 param3, const FString& param4"
        )

    def test_empty_argument_list(self, unity_generator):
        assert unity_generator.build_argument_list(EntityModule("A"), MethodDescription("f")) == ""

    def test_class_name(self, unity_generator):
        assert unity_generator.module_class_name(EntityModule("Monster")) == "MonsterBase"
        assert unity_generator.module_file_name(EntityModule("Monster")) == "Monster.cs"


class TestUnresolvedPolicy:
    """Test fallback and strict handling of unmappable types."""

    def broken_registry(self):
        registry = SchemaRegistry()
        registry.add_module(EntityModule("Account", [PropertyDescription("level", prim("UINT8"))]))
        registry.add_module(EntityModule("Broken", [PropertyDescription("rot", prim("VECTOR4"))]))
        return registry

    def test_backend_defaults(self, unity_generator, ue4_generator):
        assert unity_generator.unresolved_policy is UnresolvedPolicy.FALLBACK
        assert ue4_generator.unresolved_policy is UnresolvedPolicy.STRICT

    def test_fallback_uses_generic_type(self, tmp_path):
        config = load_config("unity", {"vector_encoding": "fixed_point", "add_comments": False})
        generator = UnityGenerator(config)

        result = generator.run(self.broken_registry(), tmp_path)

        assert result.success
        assert "        public object rot = null;\n" in (tmp_path / "Broken.cs").read_text(encoding="utf-8")
        assert any("VECTOR4" in warning for warning in result.warnings)
        assert result.metadata["vector_encoding"] == VectorEncoding.FIXED_POINT.value

    def test_strict_fails_and_keeps_earlier_files(self, tmp_path):
        config = load_config("ue4", {"vector_encoding": "fixed_point"})
        result = UE4Generator(config).run(self.broken_registry(), tmp_path)

        assert not result.success
        assert isinstance(result.exception, UnsupportedTypeError)
        assert result.exception.type_name == "VECTOR4"
        assert [path.name for path in result.files] == ["KBETypes.h", "Account.h"]
        assert (tmp_path / "Account.h").exists()
        assert not (tmp_path / "Broken.h").exists()
        assert not (tmp_path / ".Broken.h.tmp").exists()

    def test_strict_override_on_unity(self, tmp_path):
        config = load_config("unity", {"vector_encoding": "fixed_point", "unresolved_policy": "strict"})
        result = UnityGenerator(config).run(self.broken_registry(), tmp_path)

        assert not result
        assert isinstance(result.exception, UnsupportedTypeError)


class TestDispatch:
    """Test kind dispatch coverage."""

    def test_every_kind_has_a_resolver(self, unity_generator):
        assert set(unity_generator._resolvers) == set(DataTypeKind)

    def test_incomplete_dispatch_rejected_at_construction(self):
        class PartialGenerator(UnityGenerator):
            def _build_dispatch_table(self):
                table = super()._build_dispatch_table()
                del table[DataTypeKind.MAILBOX]
                return table

        with pytest.raises(UnsupportedTypeError, match="MAILBOX"):
            PartialGenerator(load_config("unity"))

    def test_backend_info(self, ue4_generator):
        info = ue4_generator.get_backend_info()
        assert info["name"] == "ue4"
        assert info["file_extension"] == ".h"
        assert info["types_file"] == "KBETypes.h"
        assert info["fallback_type"] == "TArray<uint8>"
