# src/calamine/filters/anchors.py
import logging
import re
from typing import Optional

from calamine.dom.core import DocumentTree

logger = logging.getLogger(__name__)

# "http://#top" and friends: a scheme followed by a bare fragment
_INVALID_HREF = re.compile(r"^\s*https?://#", re.IGNORECASE)


def is_invalid_href(value: Optional[str]) -> bool:
    return bool(value) and _INVALID_HREF.match(value) is not None


def remove_invalid_anchors(tree: DocumentTree, scope: Optional[int] = None) -> int:
    """Removes anchors, text included, whose href is a hostless URL such as `http://#top`."""
    scope = tree.body if scope is None else scope
    if scope is None:
        return 0

    removed = 0
    for anchor in tree.elements_by_tag(scope, ("a",)):
        # An invalid anchor nested in a removed one is already gone
        if not tree.contains(scope, anchor):
            continue
        if is_invalid_href(tree.get_attr(anchor, "href")):
            tree.detach(anchor)
            removed += 1

    if removed:
        logger.debug("Removed %d anchors with invalid hrefs.", removed)
    return removed


def unwrap_formatting_anchors(tree: DocumentTree, scope: Optional[int] = None) -> int:
    """Unwraps anchors without an href; they link nowhere and only carry formatting."""
    scope = tree.body if scope is None else scope
    if scope is None:
        return 0

    anchors = [a for a in tree.elements_by_tag(scope, ("a",)) if not tree.has_attr(a, "href")]
    for anchor in reversed(anchors):
        tree.unwrap(anchor)
    return len(anchors)
