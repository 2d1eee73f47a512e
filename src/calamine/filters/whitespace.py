# src/calamine/filters/whitespace.py
import re
from typing import Optional

from calamine.dom.core import DocumentTree, NodeKind

# Text inside these elements keeps its whitespace
WHITESPACE_SENSITIVE_TAGS = frozenset({"code", "pre", "ruby", "script", "style", "textarea", "xmp"})
TRIMMABLE_TAGS = frozenset({"br", "hr", "nobr"})

_WHITESPACE_RUN = re.compile(r"\s{2,}")


def condense_whitespace(tree: DocumentTree, scope: Optional[int] = None) -> int:
    """
    Collapses runs of two or more whitespace characters in text nodes to a
    single space, leaving whitespace-sensitive subtrees untouched.

    Returns:
        int: The number of modified text nodes.
    """
    scope = tree.body if scope is None else scope
    if scope is None or tree.tag(scope) in WHITESPACE_SENSITIVE_TAGS:
        return 0

    changed = 0
    stack = list(reversed(tree.children(scope)))
    while stack:
        current = stack.pop()
        node = tree.node(current)
        if node.kind is NodeKind.TEXT:
            condensed = _WHITESPACE_RUN.sub(" ", node.text)
            if condensed != node.text:
                node.text = condensed
                changed += 1
        elif node.kind is NodeKind.ELEMENT and node.tag not in WHITESPACE_SENSITIVE_TAGS:
            stack.extend(reversed(node.children))
    return changed


def _is_trimmable(tree: DocumentTree, index: int) -> bool:
    node = tree.node(index)
    if node.kind is NodeKind.TEXT:
        return not node.text.strip()
    return node.tag in TRIMMABLE_TAGS


def trim_document(tree: DocumentTree) -> int:
    """Removes blank text and br/hr/nobr nodes from both ends of the body."""
    body = tree.body
    if body is None:
        return 0

    removed = 0
    for pick in (tree.first_child, tree.last_child):
        edge = pick(body)
        while edge is not None and _is_trimmable(tree, edge):
            tree.detach(edge)
            removed += 1
            edge = pick(body)
    return removed
