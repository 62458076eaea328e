"""Nix tokenizer.

Comments and whitespace are not emitted as tokens; they are collected as the
leading trivia of the token that follows them. String interpolations are lexed
recursively, so a string token carries the tokens of each `${ ... }` part.
"""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass
from enum import StrEnum

from .errors import NixParseError
from .tree import Trivia, TriviaKind


class TokenKind(StrEnum):
    IDENT = "ident"
    INT = "int"
    FLOAT = "float"
    PATH = "path"
    URI = "uri"
    STRING = "string"
    IND_STRING = "ind_string"
    # keywords
    IF = "if"
    THEN = "then"
    ELSE = "else"
    ASSERT = "assert"
    WITH = "with"
    LET = "let"
    IN = "in"
    REC = "rec"
    INHERIT = "inherit"
    # punctuation
    LBRACE = "{"
    RBRACE = "}"
    LBRACK = "["
    RBRACK = "]"
    LPAREN = "("
    RPAREN = ")"
    ASSIGN = "="
    SEMI = ";"
    COLON = ":"
    COMMA = ","
    AT = "@"
    DOT = "."
    ELLIPSIS = "..."
    QUESTION = "?"
    DOLLAR_CURLY = "${"
    # operators
    IMPL = "->"
    OR_OP = "||"
    AND_OP = "&&"
    EQ = "=="
    NEQ = "!="
    LT = "<"
    LEQ = "<="
    GT = ">"
    GEQ = ">="
    UPDATE = "//"
    NOT = "!"
    PLUS = "+"
    MINUS = "-"
    MUL = "*"
    DIV = "/"
    CONCAT = "++"
    PIPE_LEFT = "<|"
    PIPE_RIGHT = "|>"
    EOF = "eof"


KEYWORDS = {
    "if": TokenKind.IF,
    "then": TokenKind.THEN,
    "else": TokenKind.ELSE,
    "assert": TokenKind.ASSERT,
    "with": TokenKind.WITH,
    "let": TokenKind.LET,
    "in": TokenKind.IN,
    "rec": TokenKind.REC,
    "inherit": TokenKind.INHERIT,
}

# Longest operators first so that e.g. `//` wins over `/`.
_OPERATORS = sorted(
    (
        kind
        for kind in TokenKind
        if not kind.value.replace("_", "").isalpha() and kind != TokenKind.DOLLAR_CURLY
    ),
    key=lambda kind: len(kind.value),
    reverse=True,
)

_PATH_CHAR = r"[a-zA-Z0-9._\-+]"
_URI_RE = re.compile(r"[a-zA-Z][a-zA-Z0-9+\-.]*:[a-zA-Z0-9%/?:@&=+$,\-_.!~*']+")
_SEARCH_PATH_RE = re.compile(rf"<{_PATH_CHAR}+(/{_PATH_CHAR}+)*>")
_HOME_PATH_RE = re.compile(rf"~(/{_PATH_CHAR}+)+")
_PATH_RE = re.compile(rf"{_PATH_CHAR}*(/{_PATH_CHAR}+)+")
_FLOAT_RE = re.compile(r"(([1-9][0-9]*\.[0-9]*)|(0?\.[0-9]+))([Ee][+-]?[0-9]+)?")
_INT_RE = re.compile(r"[0-9]+")
_IDENT_RE = re.compile(r"[a-zA-Z_][a-zA-Z0-9_'\-]*")
_WHITESPACE_RE = re.compile(r"\s+")

StringPart = str | tuple["Token", ...]


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line: int
    column: int
    leading: tuple[Trivia, ...] = ()
    parts: tuple[StringPart, ...] = ()


def tokenize(text: str) -> list[Token]:
    """Split Nix source *text* into tokens, ending with an EOF token."""
    return _Lexer(text).run()


class _Lexer:
    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0
        self._line_starts = [0] + [m.end() for m in re.finditer("\n", text)]

    def run(self) -> list[Token]:
        return self._lex_until(closing_brace=False)

    def _position(self, offset: int) -> tuple[int, int]:
        line_index = bisect.bisect_right(self._line_starts, offset) - 1
        return line_index + 1, offset - self._line_starts[line_index] + 1

    def _error(self, message: str, offset: int | None = None) -> NixParseError:
        line, column = self._position(self._pos if offset is None else offset)
        return NixParseError(message, line, column)

    def _lex_until(self, *, closing_brace: bool) -> list[Token]:
        """Lex tokens until EOF, or until the `}` closing an interpolation."""
        tokens: list[Token] = []
        depth = 0
        while True:
            leading = self._read_trivia()
            start = self._pos
            if start >= len(self._text):
                if closing_brace:
                    raise self._error("Unterminated string interpolation")
                tokens.append(self._make(TokenKind.EOF, "", start, leading))
                return tokens

            if closing_brace and depth == 0 and self._text[start] == "}":
                self._pos += 1
                return tokens

            token = self._next_token(start, leading)
            if token.kind in (TokenKind.LBRACE, TokenKind.DOLLAR_CURLY):
                depth += 1
            elif token.kind == TokenKind.RBRACE:
                depth -= 1
            tokens.append(token)

    def _make(
        self,
        kind: TokenKind,
        text: str,
        start: int,
        leading: tuple[Trivia, ...],
        parts: tuple[StringPart, ...] = (),
    ) -> Token:
        line, column = self._position(start)
        return Token(kind=kind, text=text, line=line, column=column, leading=leading, parts=parts)

    def _read_trivia(self) -> tuple[Trivia, ...]:
        trivia: list[Trivia] = []
        text = self._text
        while self._pos < len(text):
            match = _WHITESPACE_RE.match(text, self._pos)
            if match:
                trivia.append(Trivia(TriviaKind.WHITESPACE, match.group()))
                self._pos = match.end()
                continue
            if text.startswith("#", self._pos):
                end = text.find("\n", self._pos)
                end = len(text) if end == -1 else end
                trivia.append(Trivia(TriviaKind.COMMENT, text[self._pos + 1 : end]))
                self._pos = end
                continue
            if text.startswith("/*", self._pos):
                end = text.find("*/", self._pos + 2)
                if end == -1:
                    raise self._error("Unterminated comment")
                trivia.append(
                    Trivia(TriviaKind.COMMENT, text[self._pos + 2 : end], multiline=True)
                )
                self._pos = end + 2
                continue
            break
        return tuple(trivia)

    def _next_token(self, start: int, leading: tuple[Trivia, ...]) -> Token:
        text = self._text

        if text.startswith("''", start):
            self._pos = start + 2
            parts = self._lex_indented_string()
            return self._make(TokenKind.IND_STRING, text[start : self._pos], start, leading, parts)

        if text[start] == '"':
            self._pos = start + 1
            parts = self._lex_string()
            return self._make(TokenKind.STRING, text[start : self._pos], start, leading, parts)

        if text.startswith("${", start):
            self._pos = start + 2
            return self._make(TokenKind.DOLLAR_CURLY, "${", start, leading)

        for regex, kind in (
            (_URI_RE, TokenKind.URI),
            (_SEARCH_PATH_RE, TokenKind.PATH),
            (_HOME_PATH_RE, TokenKind.PATH),
            (_PATH_RE, TokenKind.PATH),
            (_FLOAT_RE, TokenKind.FLOAT),
            (_INT_RE, TokenKind.INT),
        ):
            match = regex.match(text, start)
            if match:
                self._pos = match.end()
                return self._make(kind, match.group(), start, leading)

        match = _IDENT_RE.match(text, start)
        if match:
            self._pos = match.end()
            word = match.group()
            return self._make(KEYWORDS.get(word, TokenKind.IDENT), word, start, leading)

        for kind in _OPERATORS:
            if text.startswith(kind.value, start):
                self._pos = start + len(kind.value)
                return self._make(kind, kind.value, start, leading)

        raise self._error(f"Unexpected character {text[start]!r}", start)

    def _lex_interpolation(self) -> tuple[Token, ...]:
        return tuple(self._lex_until(closing_brace=True))

    def _lex_string(self) -> tuple[StringPart, ...]:
        parts: list[StringPart] = []
        buffer: list[str] = []
        text = self._text
        start = self._pos - 1
        while True:
            if self._pos >= len(text):
                raise self._error("Unterminated string", start)
            char = text[self._pos]
            if char == '"':
                self._pos += 1
                break
            if char == "\\" and self._pos + 1 < len(text):
                buffer.append(_unescape(text[self._pos + 1]))
                self._pos += 2
            elif text.startswith("$${", self._pos):
                buffer.append("$${")
                self._pos += 3
            elif text.startswith("${", self._pos):
                self._pos += 2
                if buffer:
                    parts.append("".join(buffer))
                    buffer = []
                parts.append(self._lex_interpolation())
            else:
                buffer.append(char)
                self._pos += 1
        if buffer:
            parts.append("".join(buffer))
        return tuple(parts)

    def _lex_indented_string(self) -> tuple[StringPart, ...]:
        parts: list[StringPart] = []
        buffer: list[str] = []
        text = self._text
        start = self._pos - 2
        while True:
            if self._pos >= len(text):
                raise self._error("Unterminated indented string", start)
            if text.startswith("'''", self._pos):
                buffer.append("''")
                self._pos += 3
            elif text.startswith("''$", self._pos):
                buffer.append("$")
                self._pos += 3
            elif text.startswith("''\\", self._pos) and self._pos + 3 < len(text):
                buffer.append(_unescape(text[self._pos + 3]))
                self._pos += 4
            elif text.startswith("''", self._pos):
                self._pos += 2
                break
            elif text.startswith("$${", self._pos):
                buffer.append("$${")
                self._pos += 3
            elif text.startswith("${", self._pos):
                self._pos += 2
                if buffer:
                    parts.append("".join(buffer))
                    buffer = []
                parts.append(self._lex_interpolation())
            else:
                buffer.append(text[self._pos])
                self._pos += 1
        if buffer:
            parts.append("".join(buffer))
        return tuple(parts)


def _unescape(char: str) -> str:
    return {"n": "\n", "r": "\r", "t": "\t"}.get(char, char)
