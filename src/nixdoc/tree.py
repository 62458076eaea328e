"""Arena-backed Nix syntax tree.

Nodes live in one flat tuple and point at each other by index. Every node has at
most one first child and one next sibling; a node's children are the chain
`child -> sibling -> sibling ...`.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import StrEnum


class NodeKind(StrEnum):
    ROOT = "root"
    APPLY = "apply"
    ASSERT = "assert"
    ATTRIBUTE = "attribute"
    DYNAMIC = "dynamic"
    IDENT = "ident"
    IF_ELSE = "if_else"
    INHERIT = "inherit"
    INHERIT_FROM = "inherit_from"
    INTERPOL = "interpol"
    LAMBDA = "lambda"
    LET = "let"
    LET_IN = "let_in"
    LIST = "list"
    OPERATION = "operation"
    OR_DEFAULT = "or_default"
    PAREN = "paren"
    PAT_BIND = "pat_bind"
    PAT_ENTRY = "pat_entry"
    PATTERN = "pattern"
    SELECT = "select"
    SET = "set"
    SET_ENTRY = "set_entry"
    STRING = "string"
    TOKEN = "token"
    UNARY = "unary"
    VALUE = "value"
    WITH = "with"


class TriviaKind(StrEnum):
    WHITESPACE = "whitespace"
    COMMENT = "comment"


@dataclass(frozen=True)
class Trivia:
    kind: TriviaKind
    content: str
    multiline: bool = False

    @property
    def is_comment(self) -> bool:
        return self.kind == TriviaKind.COMMENT


@dataclass(frozen=True)
class Node:
    index: int
    kind: NodeKind
    child: int | None = None
    sibling: int | None = None
    name: str | None = None
    text: str | None = None
    leading: tuple[Trivia, ...] = ()


@dataclass(frozen=True)
class Tree:
    nodes: tuple[Node, ...]
    root: int

    def __getitem__(self, index: int) -> Node:
        return self.nodes[index]

    def child(self, node: Node) -> Node | None:
        """Return the first child of *node*, or None."""
        return None if node.child is None else self.nodes[node.child]

    def sibling(self, node: Node) -> Node | None:
        """Return the next sibling of *node*, or None."""
        return None if node.sibling is None else self.nodes[node.sibling]

    def children(self, node: Node) -> Iterator[Node]:
        current = self.child(node)
        while current is not None:
            yield current
            current = self.sibling(current)

    def walk(self) -> Iterator[Node]:
        """Yield every node reachable from the root in pre-order (source order)."""
        stack = [self.nodes[self.root]]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(self.children(node))))


@dataclass
class _Draft:
    kind: NodeKind
    children: list[int]
    name: str | None
    text: str | None
    leading: tuple[Trivia, ...]


class TreeBuilder:
    """Collects nodes bottom-up and freezes them into a `Tree`.

    Children are allocated before their parent, so links are resolved only in
    `finish()`.
    """

    def __init__(self) -> None:
        self._drafts: list[_Draft] = []

    def add(
        self,
        kind: NodeKind,
        children: Sequence[int] = (),
        *,
        name: str | None = None,
        text: str | None = None,
        leading: tuple[Trivia, ...] = (),
    ) -> int:
        self._drafts.append(
            _Draft(kind=kind, children=list(children), name=name, text=text, leading=leading)
        )
        return len(self._drafts) - 1

    def finish(self, root: int) -> Tree:
        first_child: dict[int, int] = {}
        next_sibling: dict[int, int] = {}
        for parent, draft in enumerate(self._drafts):
            if draft.children:
                first_child[parent] = draft.children[0]
            for left, right in zip(draft.children, draft.children[1:]):
                next_sibling[left] = right

        nodes = tuple(
            Node(
                index=index,
                kind=draft.kind,
                child=first_child.get(index),
                sibling=next_sibling.get(index),
                name=draft.name,
                text=draft.text,
                leading=draft.leading,
            )
            for index, draft in enumerate(self._drafts)
        )
        return Tree(nodes=nodes, root=root)
