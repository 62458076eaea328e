"""Typed exceptions for nixdoc."""


class NixdocError(Exception):
    """Base exception for nixdoc failures."""


class PathMappingError(NixdocError):
    """Raised when a path argument cannot be safely mapped."""


class SourceReadError(NixdocError):
    """Raised when the Nix source file cannot be read."""


class NixParseError(NixdocError):
    """Raised when Nix source text cannot be turned into a syntax tree."""

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"{message} at line {line}, column {column}")
        self.line = line
        self.column = column


class MarkupError(NixdocError):
    """Raised when markup writer calls are not properly nested."""


class RenderError(NixdocError):
    """Raised when the output document cannot be written."""
