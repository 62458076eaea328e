"""Source-to-document pipeline."""

from __future__ import annotations

from pathlib import Path

from .constants import DEFAULT_PREFIX, SOURCE_ENCODING
from .errors import SourceReadError
from .extract import collect_manual_entries
from .models import ManualEntry
from .parser import parse
from .renderer import render_document
from .tree import Tree


def read_source(path: Path) -> str:
    try:
        return path.read_text(encoding=SOURCE_ENCODING)
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceReadError(f"Could not read {path}: {exc}") from exc


def load_tree(path: Path) -> Tree:
    """Read and parse one Nix file. Raises SourceReadError or NixParseError."""
    return parse(read_source(path))


def build_manual(path: Path, category: str) -> list[ManualEntry]:
    return collect_manual_entries(load_tree(path), category)


def generate_document(
    path: Path,
    category: str,
    description: str,
    prefix: str = DEFAULT_PREFIX,
) -> tuple[bytes, int]:
    """Return the rendered DocBook document and its entry count."""
    entries = build_manual(path, category)
    return render_document(entries, category, description, prefix), len(entries)
