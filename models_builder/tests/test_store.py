"""
Tests for the file store and the atomic writer.
"""

from __future__ import annotations

import pytest

from models_builder.pipeline.atomic_writer import AtomicWriter
from models_builder.pipeline.errors import EmitIOError
from models_builder.pipeline.store import LocalFileStore, is_generated

VALID = "namespace N\n{\n    public partial class Article { }\n}\n"


class TestAtomicWriter:
    """Tests for AtomicWriter."""

    def test_write_creates_parent_directories(self, tmp_path):
        path = tmp_path / "a" / "b" / "Article.generated.cs"
        AtomicWriter().write(path, VALID)
        assert path.read_text(encoding="utf-8") == VALID

    def test_line_endings_are_kept(self, tmp_path):
        path = tmp_path / "Article.generated.cs"
        AtomicWriter().write(path, VALID.replace("\n", "\r\n"))
        assert path.read_bytes().count(b"\r\n") == 4

    def test_invalid_csharp_leaves_target_untouched(self, tmp_path):
        path = tmp_path / "Article.generated.cs"
        path.write_text(VALID, encoding="utf-8")
        with pytest.raises(EmitIOError):
            AtomicWriter().write(path, "not code")
        assert path.read_text(encoding="utf-8") == VALID
        assert list(tmp_path.iterdir()) == [path]

    def test_other_files_are_not_validated(self, tmp_path):
        path = tmp_path / "models.err"
        AtomicWriter().write(path, "not code")
        assert path.read_text(encoding="utf-8") == "not code"

    def test_custom_validator(self, tmp_path):
        def reject(content):
            raise EmitIOError("rejected")

        with pytest.raises(EmitIOError):
            AtomicWriter(validate_csharp=reject).write(tmp_path / "X.cs", VALID)
        assert list(tmp_path.iterdir()) == []


class TestLocalFileStore:
    """Tests for LocalFileStore."""

    def test_list_files_sorted_and_filtered(self, tmp_path):
        for name in ["b.cs", "a.cs", "a.generated.cs", "notes.txt"]:
            (tmp_path / name).write_text("", encoding="utf-8")
        (tmp_path / "dir.cs").mkdir()
        store = LocalFileStore()
        assert [p.name for p in store.list_files(tmp_path, "*.cs")] == ["a.cs", "a.generated.cs", "b.cs"]
        assert [p.name for p in store.list_files(tmp_path, "*.generated.cs")] == ["a.generated.cs"]

    def test_list_missing_directory(self, tmp_path):
        assert LocalFileStore().list_files(tmp_path / "missing", "*.cs") == []

    def test_read_strips_bom(self, tmp_path):
        path = tmp_path / "Article.cs"
        path.write_bytes("\ufeffpublic partial class Article { }".encode())
        assert LocalFileStore().read_text(path) == "public partial class Article { }"

    def test_write_delete_and_ensure_directory(self, tmp_path):
        store = LocalFileStore()
        directory = tmp_path / "Models"
        store.ensure_directory(directory)
        store.ensure_directory(directory)
        path = directory / "Article.generated.cs"
        store.write_text(path, VALID)
        assert store.read_text(path) == VALID
        store.delete(path)
        store.delete(path)
        assert not path.exists()

    def test_is_generated(self):
        assert is_generated("Models/Article.generated.cs")
        assert not is_generated("Models/Article.cs")
        assert not is_generated("Models/generated.cs")
