# src/calamine/filters/breaks.py
from typing import Optional

from calamine.dom.core import DocumentTree

REPEATABLE_BREAKS = ("br", "hr")


def _previous_significant_sibling(tree: DocumentTree, index: int) -> Optional[int]:
    """The previous sibling, skipping whitespace-only text and comments."""
    sibling = tree.previous_sibling(index)
    while sibling is not None:
        node = tree.node(sibling)
        if node.is_element or (node.is_text and node.text.strip()):
            return sibling
        sibling = tree.previous_sibling(sibling)
    return None


def remove_duplicate_breaks(tree: DocumentTree, scope: Optional[int] = None) -> int:
    """
    Removes a br (hr) that directly follows another br (hr), ignoring
    whitespace between them.
    """
    scope = tree.body if scope is None else scope
    if scope is None:
        return 0

    duplicates = []
    for element in tree.elements_by_tag(scope, REPEATABLE_BREAKS):
        previous = _previous_significant_sibling(tree, element)
        if previous is not None and tree.tag(previous) == tree.tag(element):
            duplicates.append(element)

    # Collected first so a run of three keeps its first element only
    for element in duplicates:
        tree.detach(element)
    return len(duplicates)
