# src/calamine/filters/lists.py
import logging
from typing import Optional

from calamine.dom.core import DocumentTree

logger = logging.getLogger(__name__)

LIST_TAGS = ("ul", "ol", "dl")
ITEM_TAGS = frozenset({"li", "dt", "dd"})


def _pad_before(tree: DocumentTree, parent: int, reference: int, first_moved: Optional[int]) -> None:
    previous = tree.previous_sibling(reference)
    if previous is not None and first_moved is not None and tree.is_text(previous) and tree.is_text(first_moved):
        tree.insert_before(parent, tree.create_text(" "), reference)


def _move_children_before(tree: DocumentTree, source: int, parent: int, reference: int) -> None:
    """Moves every child of `source` before `reference`, padding text seams."""
    children = tree.children(source)
    if not children:
        return
    _pad_before(tree, parent, reference, children[0])
    for child in children:
        tree.insert_before(parent, child, reference)
    following = tree.next_sibling(reference)
    if following is not None and tree.is_text(following) and tree.is_text(children[-1]):
        tree.insert_before(parent, tree.create_text(" "), reference)


def unwrap_list(tree: DocumentTree, list_index: int) -> bool:
    """
    Unwraps an empty or single-item list.

    A list without element children is replaced by its child nodes. A list
    whose only element child is an li/dt/dd is replaced by that item's
    children. Other lists are left alone.

    Returns:
        bool: True when the list was removed.
    """
    parent = tree.parent(list_index)
    if parent is None:
        return False

    items = tree.element_children(list_index)
    if not items:
        _move_children_before(tree, list_index, parent, list_index)
        tree.detach(list_index)
        return True

    if len(items) > 1 or tree.tag(items[0]) not in ITEM_TAGS:
        return False

    item = items[0]
    if not tree.children(item):
        previous = tree.previous_sibling(list_index)
        following = tree.next_sibling(list_index)
        if previous is not None and following is not None and tree.is_text(previous) and tree.is_text(following):
            tree.insert_before(parent, tree.create_text(" "), list_index)
    else:
        _move_children_before(tree, item, parent, list_index)
    tree.detach(list_index)
    return True


def unwrap_single_item_lists(tree: DocumentTree, scope: Optional[int] = None) -> int:
    scope = tree.body if scope is None else scope
    if scope is None:
        return 0

    unwrapped = 0
    for list_index in tree.elements_by_tag(scope, LIST_TAGS):
        if tree.is_attached(list_index) and unwrap_list(tree, list_index):
            unwrapped += 1

    if unwrapped:
        logger.debug("Unwrapped %d empty or single-item lists.", unwrapped)
    return unwrapped
