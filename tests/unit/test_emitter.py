"""
Unit tests for generation buffers and file emission.

Tests placeholder bookkeeping, exactly-once substitution and the
atomic write behaviour of the emitter.
"""

import os

import pytest

from entity_sdkgen.codegen.core.emitter import Emitter, GenerationBuffer, normalize_path
from entity_sdkgen.codegen.core.errors import OutputWriteError, PlaceholderMismatchError


class TestGenerationBuffer:
    """Test text accumulation and placeholders."""

    def test_write_appends(self):
        out = GenerationBuffer("A.cs")
        out.write("class A\n").write("{\n")
        assert out.getvalue() == "class A\n{\n"
        assert len(out) == len("class A\n{\n")

    def test_placeholder_tokens_are_unique(self):
        out = GenerationBuffer("A.cs")
        first = out.reserve_placeholder()
        second = out.reserve_placeholder()
        assert first != second
        assert out.pending_placeholders == [first, second]

    def test_substitute_exactly_once(self):
        out = GenerationBuffer("A.cs")
        token = out.reserve_placeholder()
        out.write(f"class A : List<{token}>\n")

        assert out.substitute(token, "Int32") == 1
        assert out.getvalue() == "class A : List<Int32>\n"
        assert out.pending_placeholders == []

    def test_substitute_missing_token(self):
        """A reserved token never written cannot be substituted."""
        out = GenerationBuffer("A.cs")
        token = out.reserve_placeholder()
        out.write("class A\n")

        with pytest.raises(PlaceholderMismatchError) as excinfo:
            out.substitute(token, "Int32")
        assert excinfo.value.occurrences == 0

    def test_substitute_duplicated_token(self):
        out = GenerationBuffer("A.cs")
        token = out.insert_placeholder()
        out.write(token)

        with pytest.raises(PlaceholderMismatchError) as excinfo:
            out.substitute(token, "Int32")
        assert excinfo.value.occurrences == 2

    def test_substitute_twice(self):
        out = GenerationBuffer("A.cs")
        token = out.insert_placeholder()
        out.substitute(token, "Int32")

        with pytest.raises(PlaceholderMismatchError, match="not pending"):
            out.substitute(token, "Int32")

    def test_substitute_unknown_token(self):
        out = GenerationBuffer("A.cs")
        out.write("#REPLACE_0042#")
        with pytest.raises(PlaceholderMismatchError):
            out.substitute("#REPLACE_0042#", "x")

    def test_reset(self):
        out = GenerationBuffer("A.cs")
        out.insert_placeholder()
        out.reset()
        assert out.getvalue() == ""
        assert out.pending_placeholders == []


class TestEmitter:
    """Test writing buffers to disk."""

    def test_creates_missing_directories(self, tmp_path):
        emitter = Emitter(tmp_path / "a" / "b" / "c")
        emitter.ensure_directory()
        assert (tmp_path / "a" / "b" / "c").is_dir()

    def test_flush_writes_utf8_with_lf(self, tmp_path):
        emitter = Emitter(tmp_path)
        out = emitter.new_buffer("Avatar.cs")
        out.write("// héllo\nclass Avatar {}\n")

        path = emitter.flush(out)

        assert path == tmp_path / "Avatar.cs"
        assert path.read_bytes() == "// héllo\nclass Avatar {}\n".encode("utf-8")
        assert not (tmp_path / ".Avatar.cs.tmp").exists()

    def test_flush_replaces_existing_file(self, tmp_path):
        (tmp_path / "Avatar.cs").write_text("old", encoding="utf-8")
        emitter = Emitter(tmp_path)
        out = emitter.new_buffer("Avatar.cs").write("new")
        emitter.flush(out)
        assert (tmp_path / "Avatar.cs").read_text(encoding="utf-8") == "new"

    def test_flush_refuses_pending_placeholders(self, tmp_path):
        emitter = Emitter(tmp_path)
        out = emitter.new_buffer("Avatar.cs")
        out.insert_placeholder()

        with pytest.raises(PlaceholderMismatchError, match="unsubstituted"):
            emitter.flush(out)
        assert not (tmp_path / "Avatar.cs").exists()

    def test_directory_creation_failure(self, tmp_path):
        blocker = tmp_path / "file.txt"
        blocker.write_text("x", encoding="utf-8")

        with pytest.raises(OutputWriteError) as excinfo:
            Emitter(blocker / "out").ensure_directory()
        assert "out" in excinfo.value.path

    def test_write_failure_leaves_no_file(self, tmp_path):
        # A directory standing where the file should go makes the rename fail
        (tmp_path / "Avatar.cs").mkdir()
        emitter = Emitter(tmp_path)
        out = emitter.new_buffer("Avatar.cs").write("class Avatar {}\n")

        with pytest.raises(OutputWriteError):
            emitter.flush(out)
        assert not (tmp_path / ".Avatar.cs.tmp").exists()
        assert (tmp_path / "Avatar.cs").is_dir()

    @pytest.mark.skipif(os.name == "nt", reason="POSIX separator handling")
    def test_backslashes_normalized(self):
        assert normalize_path("out\\unity\\Scripts") == normalize_path("out/unity/Scripts")
