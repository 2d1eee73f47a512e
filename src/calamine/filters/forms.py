# src/calamine/filters/forms.py
import logging
from typing import Optional

from calamine.dom.core import DocumentTree

logger = logging.getLogger(__name__)

# Forms often wrap real content, and labels are kept as plain text
FORM_WRAPPERS = ("form", "label")

FORM_CONTROLS = ("button", "fieldset", "input", "optgroup", "option", "select", "textarea")


def filter_form_elements(tree: DocumentTree, scope: Optional[int] = None) -> int:
    """
    Unwraps form and label elements and removes the form controls.

    Args:
        tree (DocumentTree): The document.
        scope (Optional[int]): Subtree to filter, the body by default.

    Returns:
        int: The number of unwrapped plus removed elements.
    """
    scope = tree.body if scope is None else scope
    if scope is None:
        return 0

    wrappers = tree.elements_by_tag(scope, FORM_WRAPPERS)
    for element in reversed(wrappers):
        tree.unwrap(element)

    removed = 0
    for element in tree.elements_by_tag(scope, FORM_CONTROLS):
        # Controls inside an already removed fieldset or select
        if tree.contains(scope, element):
            tree.detach(element)
            removed += 1

    if wrappers or removed:
        logger.debug("Unwrapped %d form wrappers and removed %d controls.", len(wrappers), removed)
    return len(wrappers) + removed
