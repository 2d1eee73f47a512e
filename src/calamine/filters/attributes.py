# src/calamine/filters/attributes.py
import logging
from typing import Dict, Iterable, Mapping, Optional

from calamine.dom.core import DocumentTree
from calamine.extraction.annotate import is_annotation

logger = logging.getLogger(__name__)

# Elements not listed here lose every attribute
DEFAULT_ATTRIBUTE_WHITELIST: Dict[str, tuple] = {
    "a": ("href", "name", "title", "rel"),
    "iframe": ("src",),
    "source": ("media", "sizes", "srcset", "src", "type"),
    "img": ("src", "alt", "title", "srcset", "width", "height"),
}

BOOLEAN_ATTRIBUTES = frozenset({
    "allowfullscreen", "async", "autofocus", "autoplay", "checked", "compact",
    "controls", "declare", "default", "defaultchecked", "defaultmuted",
    "defaultselected", "defer", "disabled", "draggable", "enabled",
    "formnovalidate", "hidden", "indeterminate", "inert", "ismap", "itemscope",
    "loop", "multiple", "muted", "nohref", "noresize", "noshade", "novalidate",
    "nowrap", "open", "pauseonexit", "readonly", "required", "reversed",
    "scoped", "seamless", "selected", "sortable", "spellcheck", "translate",
    "truespeed", "typemustmatch", "visible",
})


def _document_elements(tree: DocumentTree, scope: Optional[int]) -> Iterable[int]:
    start = tree.root if scope is None else scope
    if start is None:
        return []
    return tree.elements(start, include_self=True)


def filter_attributes(
        tree: DocumentTree,
        whitelist: Optional[Mapping[str, Iterable[str]]] = None,
        keep_annotations: bool = True,
        scope: Optional[int] = None,
) -> int:
    """
    Strips every attribute that is not whitelisted for its element.

    Args:
        tree (DocumentTree): The document.
        whitelist: Tag -> allowed attribute names. Defaults to
                   DEFAULT_ATTRIBUTE_WHITELIST.
        keep_annotations (bool): Keep `data-calamine-*` diagnostics.
        scope (Optional[int]): Subtree to filter, the whole document by default.

    Returns:
        int: The number of removed attributes.
    """
    allowed = {tag: frozenset(names) for tag, names in (whitelist or DEFAULT_ATTRIBUTE_WHITELIST).items()}
    removed = 0
    for index in _document_elements(tree, scope):
        node = tree.node(index)
        permitted = allowed.get(node.tag, frozenset())
        for name in list(node.attrs):
            if name in permitted or (keep_annotations and is_annotation(name)):
                continue
            del node.attrs[name]
            removed += 1

    if removed:
        logger.debug("Stripped %d non-whitelisted attributes.", removed)
    return removed


def remove_empty_attributes(tree: DocumentTree, scope: Optional[int] = None) -> int:
    """Removes non-boolean attributes whose value is blank."""
    removed = 0
    for index in _document_elements(tree, scope):
        node = tree.node(index)
        for name, value in list(node.attrs.items()):
            if name not in BOOLEAN_ATTRIBUTES and not value.strip():
                del node.attrs[name]
                removed += 1
    return removed
