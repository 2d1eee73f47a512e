# src/calamine/filters/tables.py
import logging
from typing import List, Optional

from calamine.dom.core import DocumentTree
from calamine.filters.leaves import is_leaf

logger = logging.getLogger(__name__)

ROW_GROUP_TAGS = ("thead", "tbody", "tfoot")
CELL_TAGS = ("td", "th")


def table_rows(tree: DocumentTree, table: int) -> List[int]:
    """The table's own rows: direct `tr` children or those of its row groups."""
    rows: List[int] = []
    for child in tree.element_children(table):
        tag = tree.tag(child)
        if tag == "tr":
            rows.append(child)
        elif tag in ROW_GROUP_TAGS:
            rows.extend(r for r in tree.element_children(child) if tree.tag(r) == "tr")
    return rows


def row_cells(tree: DocumentTree, row: int) -> List[int]:
    return [c for c in tree.element_children(row) if tree.tag(c) in CELL_TAGS]


def is_single_column_table(tree: DocumentTree, table: int, row_scan_limit: int = 20) -> bool:
    """
    True when none of the first `row_scan_limit` rows has more than one
    non-leaf cell.
    """
    for row in table_rows(tree, table)[:row_scan_limit]:
        filled = 0
        for cell in row_cells(tree, row):
            if not is_leaf(tree, cell):
                filled += 1
                if filled > 1:
                    return False
    return True


def unwrap_table(tree: DocumentTree, table: int) -> None:
    """
    Replaces the table by its cell contents, row by row, with a paragraph
    break after every row and space padding around the whole.
    """
    parent = tree.parent(table)
    if parent is None:
        return

    tree.insert_before(parent, tree.create_text(" "), table)
    for row in table_rows(tree, table):
        for cell in row_cells(tree, row):
            for child in tree.children(cell):
                tree.insert_before(parent, child, table)
        tree.insert_before(parent, tree.create_element("p"), table)
    tree.insert_before(parent, tree.create_text(" "), table)
    tree.detach(table)


def unwrap_single_column_tables(tree: DocumentTree, row_scan_limit: int = 20,
                                scope: Optional[int] = None) -> int:
    scope = tree.body if scope is None else scope
    if scope is None:
        return 0

    unwrapped = 0
    # Document order; a nested table moved out by its parent's unwrap stays attached
    for table in tree.elements_by_tag(scope, ("table",)):
        if not tree.is_attached(table):
            continue
        if is_single_column_table(tree, table, row_scan_limit):
            unwrap_table(tree, table)
            unwrapped += 1

    if unwrapped:
        logger.debug("Unwrapped %d single-column tables.", unwrapped)
    return unwrapped
