"""Tests for file utilities."""

from __future__ import annotations

import hashlib
from pathlib import Path

from docanswer.utils.files import compute_sha256, iter_document_paths


class TestIterDocumentPaths:
    """Test iter_document_paths function."""

    def test_single_file(self, tmp_path: Path) -> None:
        """Should yield a supported file."""
        path = tmp_path / "a.md"
        path.write_text("x")
        assert list(iter_document_paths([path])) == [path]

    def test_unsupported_file(self, tmp_path: Path) -> None:
        """Should skip unsupported suffixes."""
        path = tmp_path / "a.docx"
        path.write_text("x")
        assert list(iter_document_paths([path])) == []

    def test_directory_recursive(self, tmp_path: Path) -> None:
        """Should descend into folders in sorted order."""
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "b.PDF").write_bytes(b"x")
        (tmp_path / "a.json").write_text("{}")
        (tmp_path / "c.txt").write_text("x")

        names = [path.name for path in iter_document_paths([tmp_path])]
        assert names == ["a.json", "c.txt", "b.PDF"]

    def test_missing_path(self, tmp_path: Path) -> None:
        """Should ignore paths that do not exist."""
        assert list(iter_document_paths([tmp_path / "missing.txt"])) == []


def test_compute_sha256(tmp_path: Path) -> None:
    """Should match hashlib digest."""
    path = tmp_path / "a.txt"
    path.write_bytes(b"hello")
    assert compute_sha256(path) == hashlib.sha256(b"hello").hexdigest()
