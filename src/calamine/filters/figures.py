# src/calamine/filters/figures.py
from typing import Optional

from calamine.dom.core import DocumentTree


def filter_figures(tree: DocumentTree, scope: Optional[int] = None) -> int:
    """
    Simplifies figures that no longer frame anything.

    A figure whose only child element is a figcaption is removed with its
    caption. A figure with no child elements, or with a single non-caption
    child element, is unwrapped. Figures with two or more child elements are
    kept.
    """
    scope = tree.body if scope is None else scope
    if scope is None:
        return 0

    changed = 0
    for figure in tree.elements_by_tag(scope, ("figure",)):
        if not tree.contains(scope, figure):
            continue
        children = tree.element_children(figure)
        if len(children) > 1:
            continue
        if children and tree.tag(children[0]) == "figcaption":
            tree.detach(figure)
        else:
            tree.unwrap(figure)
        changed += 1
    return changed
