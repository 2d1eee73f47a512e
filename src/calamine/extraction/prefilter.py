# src/calamine/extraction/prefilter.py
import logging
import re
from typing import Dict, List

from calamine.dom.core import DocumentTree, NodeKind

logger = logging.getLogger(__name__)

BLACKLISTED_TAGS = frozenset({
    "script", "style",
    "applet", "embed", "object", "param",
    "frame", "frameset", "iframe",
    "base", "basefont", "link", "meta", "title", "template",
    "bgsound", "command", "datalist", "dialog", "isindex", "math", "output",
    "progress", "spacer", "svg", "xmp",
})

# Wrappers whose fallback content is kept in place
UNWRAPPED_TAGS = frozenset({"noscript", "noframes"})

OPACITY_THRESHOLD = 0.3

_NEGATIVE_OFFSET = re.compile(r"^-\s*\d")


def parse_inline_style(style: str) -> Dict[str, str]:
    """Splits a `style` attribute into lowercase property -> value pairs."""
    declarations: Dict[str, str] = {}
    for chunk in (style or "").split(";"):
        name, sep, value = chunk.partition(":")
        if not sep:
            continue
        name = name.strip().lower()
        if name:
            declarations[name] = value.replace("!important", "").strip().lower()
    return declarations


def is_hidden(style: str) -> bool:
    """
    True for inline styles that hide an element: display:none,
    visibility:hidden, near-zero opacity, or absolute positioning pushed
    off-screen with a negative left/top offset.
    """
    if not style:
        return False
    props = parse_inline_style(style)

    if props.get("display") == "none":
        return True
    if props.get("visibility") == "hidden":
        return True

    opacity = props.get("opacity")
    if opacity:
        try:
            if float(opacity) <= OPACITY_THRESHOLD:
                return True
        except ValueError:
            pass

    if props.get("position") == "absolute":
        for offset in ("left", "top"):
            if _NEGATIVE_OFFSET.match(props.get(offset, "")):
                return True
    return False


def _is_script_anchor(tree: DocumentTree, index: int) -> bool:
    href = tree.get_attr(index, "href")
    return bool(href) and href.strip().lower().startswith("javascript:")


def prefilter(tree: DocumentTree) -> int:
    """
    Removes non-content elements, comments and inline-hidden elements from
    the document, then unwraps noscript/noframes wrappers and javascript:
    anchors.

    The walk is top-down and never descends into a subtree that was just
    removed, so no node is removed twice.

    Returns:
        int: The number of removed nodes (subtree roots).
    """
    if tree.root is None:
        logger.debug("Pre-filter skipped: document has no root.")
        return 0

    removed = 0
    to_unwrap: List[int] = []
    stack = list(reversed(tree.children(tree.root)))

    while stack:
        current = stack.pop()
        node = tree.node(current)

        if node.kind is NodeKind.COMMENT:
            tree.detach(current)
            removed += 1
            continue
        if node.kind is not NodeKind.ELEMENT:
            continue

        hidden = node.tag != "body" and is_hidden(node.attrs.get("style", ""))
        if node.tag in BLACKLISTED_TAGS or hidden:
            tree.detach(current)
            removed += 1
            continue

        if node.tag in UNWRAPPED_TAGS or (node.tag == "a" and _is_script_anchor(tree, current)):
            to_unwrap.append(current)

        stack.extend(reversed(node.children))

    # Deepest first, so an unwrapped parent never moves a pending child twice
    for index in reversed(to_unwrap):
        tree.unwrap(index)

    logger.debug("Pre-filter removed %d nodes and unwrapped %d wrappers.", removed, len(to_unwrap))
    return removed
