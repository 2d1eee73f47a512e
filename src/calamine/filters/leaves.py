# src/calamine/filters/leaves.py
import logging
from typing import Dict, Optional

from calamine.dom.core import DocumentTree, NodeKind

logger = logging.getLogger(__name__)

# Elements that are meaningful even without content
LEAF_EXCEPTIONS = frozenset({
    "area", "audio", "base", "br", "canvas", "col", "command", "embed", "hr",
    "iframe", "img", "input", "keygen", "meta", "nobr", "param", "path",
    "picture", "source", "svg", "textarea", "track", "video", "wbr",
    "select", "button", "object",
})


def leaf_map(tree: DocumentTree, index: int) -> Dict[int, bool]:
    """
    Classifies every node of the subtree at `index` as leaf or not.

    Blank text and comments are leaves; an element is a leaf when it is not
    an exception and all of its children are leaves. Evaluated children
    first via the reversed pre-order.
    """
    result: Dict[int, bool] = {}
    for current in reversed(tree.descendants(index, include_self=True)):
        node = tree.node(current)
        if node.kind is NodeKind.TEXT:
            result[current] = not node.text.strip()
        elif node.kind is NodeKind.COMMENT:
            result[current] = True
        elif node.tag in LEAF_EXCEPTIONS:
            result[current] = False
        else:
            result[current] = all(result[child] for child in node.children)
    return result


def is_leaf(tree: DocumentTree, index: int) -> bool:
    return leaf_map(tree, index)[index]


def remove_leaves(tree: DocumentTree, scope: Optional[int] = None) -> int:
    """
    Removes the top-most leaf elements below `scope` (default: the body).

    Returns:
        int: The number of removed elements.
    """
    scope = tree.body if scope is None else scope
    if scope is None:
        return 0

    leaves = leaf_map(tree, scope)
    removed = 0
    stack = list(reversed(tree.element_children(scope)))
    while stack:
        current = stack.pop()
        if leaves[current]:
            tree.detach(current)
            removed += 1
            continue
        stack.extend(reversed(tree.element_children(current)))

    if removed:
        logger.debug("Removed %d leaf elements.", removed)
    return removed
