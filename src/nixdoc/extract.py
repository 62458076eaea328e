"""Collect documented set entries from a parsed Nix tree."""

from __future__ import annotations

import logging

from .comments import parse_doc_comment
from .constants import PARAGRAPH_SEPARATOR
from .logging import log_event
from .models import DocItem, ManualEntry
from .tree import Node, NodeKind, Trivia, Tree


def retrieve_doc_comment(leading: tuple[Trivia, ...]) -> str | None:
    """Return the first multiline comment in *leading* trivia, if any."""
    for trivia in leading:
        if trivia.is_comment and trivia.multiline:
            return trivia.content
    return None


def collect_lambda_args(tree: Tree, lambda_node: Node, args: list[str]) -> None:
    """Append the argument names of a curried lambda chain to *args*.

    Handles `a: b: c: ...` chains. Pattern lambdas (`{ a, b }: ...`) end the
    chain without contributing names, and so does any unexpected node shape;
    names collected up to that point are kept.
    """
    node: Node | None = lambda_node
    while node is not None and node.kind == NodeKind.LAMBDA:
        param = tree.child(node)
        if param is None or param.kind != NodeKind.IDENT or param.name is None:
            return
        args.append(param.name)

        # The body sits two steps to the right of the parameter, past the `:`.
        colon = tree.sibling(param)
        node = tree.sibling(colon) if colon is not None else None


def collect_entry_information(tree: Tree, entry_node: Node) -> DocItem | None:
    """Build a DocItem from one `SetEntry` node.

    Returns None if the entry is undocumented or not shaped like
    `SetEntry -> Attribute -> Ident`.
    """
    attribute = tree.child(entry_node)
    if attribute is None or attribute.kind != NodeKind.ATTRIBUTE:
        return None
    ident = tree.child(attribute)
    if ident is None or ident.kind != NodeKind.IDENT or ident.name is None:
        return None

    raw_comment = retrieve_doc_comment(ident.leading)
    if raw_comment is None:
        return None

    assign = tree.sibling(attribute)
    value = tree.sibling(assign) if assign is not None else None
    if value is None:
        return None

    args: list[str] = []
    if value.kind == NodeKind.LAMBDA:
        collect_lambda_args(tree, value, args)

    return DocItem(name=ident.name, comment=parse_doc_comment(raw_comment), args=tuple(args))


def collect_doc_items(tree: Tree) -> list[DocItem]:
    """Return a DocItem for every documented set entry, in source order."""
    items: list[DocItem] = []
    for node in tree.walk():
        if node.kind != NodeKind.SET_ENTRY:
            continue
        item = collect_entry_information(tree, node)
        if item is None:
            log_event("entry_skipped", level=logging.DEBUG, node_index=node.index)
            continue
        items.append(item)
    return items


def to_manual_entry(item: DocItem, category: str) -> ManualEntry:
    return ManualEntry(
        category=category,
        name=item.name,
        fn_type=item.comment.doc_type,
        description=tuple(item.comment.doc.split(PARAGRAPH_SEPARATOR)),
        example=item.comment.example,
        args=item.args,
    )


def collect_manual_entries(tree: Tree, category: str) -> list[ManualEntry]:
    """Turn every documented set entry of *tree* into a ManualEntry.

    Order follows the source; duplicate names are kept.
    """
    entries = [to_manual_entry(item, category) for item in collect_doc_items(tree)]
    log_event("entries_collected", category=category, entry_count=len(entries))
    return entries
