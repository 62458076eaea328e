"""Recursive-descent parser turning Nix source into an arena `Tree`.

Node shapes that the extractor depends on:

    SetEntry  -> Attribute, Token(=), <value>, Token(;)
    Attribute -> Ident | String | Dynamic, (Token(.), ...)*
    Lambda    -> Ident | Pattern, Token(:), <body>

Every node built from a token carries that token's leading trivia.
"""

from __future__ import annotations

from collections.abc import Sequence

from .errors import NixParseError
from .lexer import Token, TokenKind, tokenize
from .tree import NodeKind, Tree, TreeBuilder


def parse(text: str) -> Tree:
    """Parse Nix source *text*. Raises NixParseError on malformed input."""
    builder = TreeBuilder()
    parser = _Parser(tokenize(text), builder)
    try:
        expr = parser.parse_expr()
    except RecursionError:
        token = parser.current
        raise NixParseError("Expression nested too deeply", token.line, token.column) from None
    parser.expect(TokenKind.EOF, "end of input")
    root = builder.add(NodeKind.ROOT, [expr])
    return builder.finish(root)


# Binary operators: token kind -> (precedence, associativity). Higher binds
# tighter. Prefix `!` sits between `//` and `+`.
_RIGHT = "right"
_LEFT = "left"
_NOT_PRECEDENCE = 8
_BINARY: dict[TokenKind, tuple[int, str]] = {
    TokenKind.PIPE_RIGHT: (1, _LEFT),
    TokenKind.PIPE_LEFT: (1, _LEFT),
    TokenKind.IMPL: (2, _RIGHT),
    TokenKind.OR_OP: (3, _LEFT),
    TokenKind.AND_OP: (4, _LEFT),
    TokenKind.EQ: (5, _LEFT),
    TokenKind.NEQ: (5, _LEFT),
    TokenKind.LT: (6, _LEFT),
    TokenKind.LEQ: (6, _LEFT),
    TokenKind.GT: (6, _LEFT),
    TokenKind.GEQ: (6, _LEFT),
    TokenKind.UPDATE: (7, _RIGHT),
    TokenKind.PLUS: (9, _LEFT),
    TokenKind.MINUS: (9, _LEFT),
    TokenKind.MUL: (10, _LEFT),
    TokenKind.DIV: (10, _LEFT),
    TokenKind.CONCAT: (11, _RIGHT),
}

_VALUE_TOKENS = frozenset({TokenKind.INT, TokenKind.FLOAT, TokenKind.PATH, TokenKind.URI})
_STRING_TOKENS = frozenset({TokenKind.STRING, TokenKind.IND_STRING})
_ARGUMENT_START = (
    _VALUE_TOKENS
    | _STRING_TOKENS
    | {TokenKind.IDENT, TokenKind.LPAREN, TokenKind.LBRACK, TokenKind.LBRACE, TokenKind.REC}
)
_OR_KEYWORD = "or"


class _Parser:
    def __init__(self, tokens: Sequence[Token], builder: TreeBuilder) -> None:
        self._tokens = tokens
        self._pos = 0
        self._builder = builder

    # -- token helpers -----------------------------------------------------

    def _peek(self, offset: int = 0) -> Token:
        index = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[index]

    @property
    def current(self) -> Token:
        return self._peek()

    def _advance(self) -> Token:
        token = self._peek()
        if token.kind != TokenKind.EOF:
            self._pos += 1
        return token

    def _at(self, *kinds: TokenKind) -> bool:
        return self._peek().kind in kinds

    def _at_or_keyword(self) -> bool:
        token = self._peek()
        return token.kind == TokenKind.IDENT and token.text == _OR_KEYWORD

    def expect(self, kind: TokenKind, what: str) -> int:
        token = self._peek()
        if token.kind != kind:
            raise _unexpected(token, what)
        return self._token(self._advance())

    def _token(self, token: Token) -> int:
        return self._builder.add(NodeKind.TOKEN, text=token.text, leading=token.leading)

    def _ident(self, token: Token) -> int:
        return self._builder.add(
            NodeKind.IDENT, name=token.text, text=token.text, leading=token.leading
        )

    def _expect_ident(self) -> int:
        token = self._peek()
        if token.kind != TokenKind.IDENT:
            raise _unexpected(token, "identifier")
        return self._ident(self._advance())

    # -- expressions -------------------------------------------------------

    def parse_expr(self) -> int:
        token = self._peek()
        kind = token.kind

        if kind == TokenKind.IDENT and self._peek(1).kind == TokenKind.COLON:
            param = self._ident(self._advance())
            return self._lambda(param)
        if kind == TokenKind.IDENT and self._peek(1).kind == TokenKind.AT:
            bind = self._builder.add(
                NodeKind.PAT_BIND, [self._ident(self._advance()), self._token(self._advance())]
            )
            return self._lambda(self._pattern(leading_bind=bind))
        if kind == TokenKind.LBRACE and self._looks_like_pattern():
            return self._lambda(self._pattern(leading_bind=None))
        if kind == TokenKind.ASSERT:
            return self._keyword_body(NodeKind.ASSERT)
        if kind == TokenKind.WITH:
            return self._keyword_body(NodeKind.WITH)
        if kind == TokenKind.LET:
            if self._peek(1).kind == TokenKind.LBRACE:
                let = self._token(self._advance())
                bindings = self._bindings(TokenKind.RBRACE, braced=True)
                return self._builder.add(NodeKind.LET, [let, *bindings])
            return self._let_in()
        if kind == TokenKind.IF:
            children = [self._token(self._advance()), self.parse_expr()]
            children += [self.expect(TokenKind.THEN, "'then'"), self.parse_expr()]
            children += [self.expect(TokenKind.ELSE, "'else'"), self.parse_expr()]
            return self._builder.add(NodeKind.IF_ELSE, children)
        return self._climb(0)

    def _lambda(self, param: int) -> int:
        colon = self.expect(TokenKind.COLON, "':'")
        body = self.parse_expr()
        return self._builder.add(NodeKind.LAMBDA, [param, colon, body])

    def _keyword_body(self, kind: NodeKind) -> int:
        keyword = self._token(self._advance())
        condition = self.parse_expr()
        semi = self.expect(TokenKind.SEMI, "';'")
        body = self.parse_expr()
        return self._builder.add(kind, [keyword, condition, semi, body])

    def _let_in(self) -> int:
        children = [self._token(self._advance())]
        children += self._bindings(TokenKind.IN)
        children.append(self.expect(TokenKind.IN, "'in'"))
        children.append(self.parse_expr())
        return self._builder.add(NodeKind.LET_IN, children)

    def _climb(self, min_precedence: int) -> int:
        """Parse binary operators binding at least as tight as *min_precedence*."""
        lhs = self._operand()
        while True:
            level = _BINARY.get(self._peek().kind)
            if level is None or level[0] < min_precedence:
                return lhs
            precedence, assoc = level
            operator = self._token(self._advance())
            rhs = self._climb(precedence if assoc == _RIGHT else precedence + 1)
            lhs = self._builder.add(NodeKind.OPERATION, [lhs, operator, rhs])

    def _operand(self) -> int:
        if self._at(TokenKind.NOT):
            operator = self._token(self._advance())
            return self._builder.add(NodeKind.UNARY, [operator, self._climb(_NOT_PRECEDENCE + 1)])

        negations: list[int] = []
        while self._at(TokenKind.MINUS):
            negations.append(self._token(self._advance()))

        expr = self._select()
        while self._peek().kind in _ARGUMENT_START and not self._at_or_keyword():
            expr = self._builder.add(NodeKind.APPLY, [expr, self._select()])
        for operator in reversed(negations):
            expr = self._builder.add(NodeKind.UNARY, [operator, expr])

        while self._at(TokenKind.QUESTION):
            operator = self._token(self._advance())
            expr = self._builder.add(NodeKind.OPERATION, [expr, operator, self._attrpath()])
        return expr

    def _select(self) -> int:
        expr = self._simple()
        if not self._at(TokenKind.DOT):
            return expr
        dot = self._token(self._advance())
        expr = self._builder.add(NodeKind.SELECT, [expr, dot, self._attrpath()])
        if self._at_or_keyword():
            keyword = self._token(self._advance())
            default = self._select()
            expr = self._builder.add(NodeKind.OR_DEFAULT, [expr, keyword, default])
        return expr

    def _simple(self) -> int:
        token = self._peek()
        kind = token.kind
        if kind == TokenKind.IDENT:
            return self._ident(self._advance())
        if kind in _VALUE_TOKENS:
            self._advance()
            return self._builder.add(NodeKind.VALUE, text=token.text, leading=token.leading)
        if kind in _STRING_TOKENS:
            return self._string(self._advance())
        if kind == TokenKind.LPAREN:
            children = [self._token(self._advance()), self.parse_expr()]
            children.append(self.expect(TokenKind.RPAREN, "')'"))
            return self._builder.add(NodeKind.PAREN, children)
        if kind == TokenKind.LBRACK:
            children = [self._token(self._advance())]
            while not self._at(TokenKind.RBRACK, TokenKind.EOF):
                children.append(self._select())
            children.append(self.expect(TokenKind.RBRACK, "']'"))
            return self._builder.add(NodeKind.LIST, children)
        if kind == TokenKind.REC:
            rec = self._token(self._advance())
            if not self._at(TokenKind.LBRACE):
                raise _unexpected(self._peek(), "'{'")
            bindings = self._bindings(TokenKind.RBRACE, braced=True)
            return self._builder.add(NodeKind.SET, [rec, *bindings])
        if kind == TokenKind.LBRACE:
            return self._builder.add(NodeKind.SET, self._bindings(TokenKind.RBRACE, braced=True))
        raise _unexpected(token, "expression")

    # -- strings -----------------------------------------------------------

    def _string(self, token: Token) -> int:
        children: list[int] = []
        for part in token.parts:
            if isinstance(part, str):
                continue
            eof = Token(TokenKind.EOF, "", token.line, token.column)
            nested = _Parser([*part, eof], self._builder)
            expr = nested.parse_expr()
            nested.expect(TokenKind.EOF, "'}'")
            open_node = self._builder.add(NodeKind.TOKEN, text="${")
            close_node = self._builder.add(NodeKind.TOKEN, text="}")
            children.append(self._builder.add(NodeKind.INTERPOL, [open_node, expr, close_node]))
        return self._builder.add(
            NodeKind.STRING, children, text=token.text, leading=token.leading
        )

    # -- sets and bindings -------------------------------------------------

    def _bindings(self, terminator: TokenKind, *, braced: bool = False) -> list[int]:
        """Parse bindings up to *terminator*; with *braced*, also the `{` and `}`."""
        entries = [self.expect(TokenKind.LBRACE, "'{'")] if braced else []
        while not self._at(terminator, TokenKind.EOF):
            if self._at(TokenKind.INHERIT):
                entries.append(self._inherit())
                continue
            attribute = self._attrpath()
            assign = self.expect(TokenKind.ASSIGN, "'='")
            value = self.parse_expr()
            semi = self.expect(TokenKind.SEMI, "';'")
            entries.append(
                self._builder.add(NodeKind.SET_ENTRY, [attribute, assign, value, semi])
            )
        if braced:
            entries.append(self.expect(TokenKind.RBRACE, "'}'"))
        return entries

    def _inherit(self) -> int:
        children = [self._token(self._advance())]
        if self._at(TokenKind.LPAREN):
            source = [self._token(self._advance()), self.parse_expr()]
            source.append(self.expect(TokenKind.RPAREN, "')'"))
            children.append(self._builder.add(NodeKind.INHERIT_FROM, source))
        while not self._at(TokenKind.SEMI, TokenKind.EOF):
            children.append(self._attr_name())
        children.append(self.expect(TokenKind.SEMI, "';'"))
        return self._builder.add(NodeKind.INHERIT, children)

    def _attrpath(self) -> int:
        children = [self._attr_name()]
        while self._at(TokenKind.DOT):
            children.append(self._token(self._advance()))
            children.append(self._attr_name())
        return self._builder.add(NodeKind.ATTRIBUTE, children)

    def _attr_name(self) -> int:
        token = self._peek()
        if token.kind == TokenKind.IDENT:
            return self._ident(self._advance())
        if token.kind in _STRING_TOKENS:
            return self._string(self._advance())
        if token.kind == TokenKind.DOLLAR_CURLY:
            children = [self._token(self._advance()), self.parse_expr()]
            children.append(self.expect(TokenKind.RBRACE, "'}'"))
            return self._builder.add(NodeKind.DYNAMIC, children)
        raise _unexpected(token, "attribute name")

    # -- patterns ----------------------------------------------------------

    def _looks_like_pattern(self) -> bool:
        first = self._peek(1).kind
        if first == TokenKind.ELLIPSIS:
            return True
        if first == TokenKind.RBRACE:
            return self._peek(2).kind in (TokenKind.COLON, TokenKind.AT)
        if first == TokenKind.IDENT:
            second = self._peek(2).kind
            if second in (TokenKind.COMMA, TokenKind.QUESTION):
                return True
            if second == TokenKind.RBRACE:
                return self._peek(3).kind in (TokenKind.COLON, TokenKind.AT)
        return False

    def _pattern(self, leading_bind: int | None) -> int:
        children = [] if leading_bind is None else [leading_bind]
        children.append(self.expect(TokenKind.LBRACE, "'{'"))
        while not self._at(TokenKind.RBRACE, TokenKind.EOF):
            if self._at(TokenKind.ELLIPSIS):
                children.append(self._token(self._advance()))
            else:
                entry = [self._expect_ident()]
                if self._at(TokenKind.QUESTION):
                    entry += [self._token(self._advance()), self.parse_expr()]
                children.append(self._builder.add(NodeKind.PAT_ENTRY, entry))
            if not self._at(TokenKind.COMMA):
                break
            children.append(self._token(self._advance()))
        children.append(self.expect(TokenKind.RBRACE, "'}'"))
        if leading_bind is None and self._at(TokenKind.AT):
            at = self._token(self._advance())
            children.append(self._builder.add(NodeKind.PAT_BIND, [at, self._expect_ident()]))
        return self._builder.add(NodeKind.PATTERN, children)


def _unexpected(token: Token, what: str) -> NixParseError:
    found = "end of input" if token.kind == TokenKind.EOF else repr(token.text)
    return NixParseError(f"Expected {what}, found {found}", token.line, token.column)
