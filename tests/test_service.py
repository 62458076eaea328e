from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from nixdoc.errors import NixParseError, SourceReadError
from nixdoc.service import build_manual, generate_document, load_tree, read_source
from nixdoc.tree import NodeKind


def test_load_tree_parses_file(lib_file: Path) -> None:
    tree = load_tree(lib_file)

    assert tree[tree.root].kind == NodeKind.ROOT


def test_build_manual_uses_category(lib_file: Path) -> None:
    entries = build_manual(lib_file, "lists")

    assert len(entries) == 5
    assert {e.category for e in entries} == {"lists"}


def test_generate_document_returns_entry_count(lib_file: Path) -> None:
    document, count = generate_document(lib_file, "strings", "Strings")

    assert count == 5
    assert document.count(b"<varname>") == 4


def test_generate_document_without_documented_entries(
    write_nix: Callable[[str], Path],
) -> None:
    source = write_nix("{ foo = a: a; }")

    document, count = generate_document(source, "misc", "Misc")

    assert count == 0
    assert b"sec-functions-library-misc" in document


def test_read_source_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(SourceReadError, match="Could not read"):
        read_source(tmp_path / "missing.nix")


def test_read_source_rejects_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "bad.nix"
    path.write_bytes(b"\xff\xfe{")

    with pytest.raises(SourceReadError):
        read_source(path)


def test_unparsable_file_raises(write_nix: Callable[[str], Path]) -> None:
    with pytest.raises(NixParseError):
        load_tree(write_nix("{ a = 1"))
