"""Shared fixtures for nixdoc tests."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from nix_samples import LIB_SOURCE


@pytest.fixture
def write_nix(tmp_path: Path) -> Callable[[str], Path]:
    """Return a helper that writes Nix source into a temporary file."""

    def _write(source: str, name: str = "lib.nix") -> Path:
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def lib_file(write_nix: Callable[[str], Path]) -> Path:
    return write_nix(LIB_SOURCE)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    yield
    logging.disable(logging.NOTSET)
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
