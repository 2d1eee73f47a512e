# src/calamine/extraction/features.py
"""
Feature extractors.

Every extractor is a free function `(tree, body, tables) -> {index: bias}`
that reads the tree without mutating it. Contributions only target
elements inside the body subtree.
"""
import re
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Tuple

from calamine.dom.core import DocumentTree, NodeKind
from calamine.extraction.bias_tables import BiasTables

Contributions = Dict[int, float]
Extractor = Callable[[DocumentTree, int, BiasTables], Contributions]

TOKEN_SPLIT = re.compile(r"[\s\-_0-9]+")
SCORABLE_ATTRIBUTES = ("id", "name", "class", "itemprop", "role")
_LEADING_DIGITS = re.compile(r"^\s*(\d+)\s*(?:px)?\s*$", re.IGNORECASE)


def intrinsic_bias(tree: DocumentTree, body: int, tables: BiasTables) -> Contributions:
    out: Contributions = {}
    for index in tree.elements(body):
        bias = tables.intrinsic.get(tree.tag(index))
        if bias:
            out[index] = float(bias)
    return out


# (raw length, leading whitespace, trailing whitespace) of a node's text
TextSpan = Tuple[int, int, int]


def _text_span(text: str) -> TextSpan:
    raw = len(text)
    return raw, raw - len(text.lstrip()), raw - len(text.rstrip())


def _join_spans(spans: List[TextSpan]) -> TextSpan:
    raw = lead = trail = 0
    leading = True
    for span_raw, span_lead, span_trail in spans:
        blank = span_lead == span_raw
        if leading:
            lead += span_lead
            leading = blank
        trail = trail + span_raw if blank else span_trail
        raw += span_raw
    return raw, lead, trail


def _trimmed(span: TextSpan) -> int:
    raw, lead, trail = span
    return 0 if lead >= raw else raw - lead - trail


def measure_text(tree: DocumentTree, body: int) -> Tuple[Dict[int, int], Dict[int, int]]:
    """
    Computes trimmed text length and anchor text length per element.

    Walks the reversed pre-order so every node is finished before its
    parent, which gives a post-order accumulation without recursion. Each
    element keeps the raw length of its concatenated text plus its leading
    and trailing whitespace, so whitespace between child nodes counts while
    the outer whitespace does not. The anchor length of an `a[href]` is its
    own trimmed length, so anchors nested inside it are not counted twice.

    Returns:
        Tuple[Dict[int, int], Dict[int, int]]: text lengths, anchor lengths.
    """
    spans: Dict[int, TextSpan] = {}
    text_lengths: Dict[int, int] = {}
    anchor_lengths: Dict[int, int] = defaultdict(int)

    for index in reversed(tree.descendants(body, include_self=True)):
        node = tree.node(index)
        if node.kind is NodeKind.TEXT:
            spans[index] = _text_span(node.text)
            continue
        if node.kind is not NodeKind.ELEMENT:
            continue

        span = _join_spans([spans[child] for child in node.children if child in spans])
        spans[index] = span
        length = _trimmed(span)
        if length:
            text_lengths[index] = length

        if node.tag == "a" and "href" in node.attrs:
            anchor_lengths[index] = length

        parent = node.parent
        if parent is None or index == body:
            continue
        if anchor_lengths.get(index):
            anchor_lengths[parent] += anchor_lengths[index]

    return text_lengths, {index: length for index, length in anchor_lengths.items() if length}


def text_bias(tree: DocumentTree, body: int, tables: BiasTables) -> Contributions:
    text_lengths, anchor_lengths = measure_text(tree, body)
    out: Contributions = {}
    for index in tree.elements(body):
        length = text_lengths.get(index, 0)
        if not length:
            continue
        bias = tables.text_coefficient * length - tables.anchor_coefficient * anchor_lengths.get(index, 0)
        if tables.text_bias_cap is not None:
            bias = min(tables.text_bias_cap, bias)
        if bias:
            out[index] = bias
    return out


def parse_dimension(value: Optional[str]) -> Optional[int]:
    """Reads an integer pixel dimension ("300" or "300px"); anything else is unknown."""
    if not value:
        return None
    match = _LEADING_DIGITS.match(value)
    return int(match.group(1)) if match else None


def find_caption(tree: DocumentTree, image: int) -> Optional[int]:
    """The first figcaption of the image's closest figure ancestor, if any."""
    figure = tree.closest(image, ("figure",))
    if figure is None:
        return None
    captions = tree.elements_by_tag(figure, ("figcaption",))
    return captions[0] if captions else None


def image_bias(tree: DocumentTree, body: int, tables: BiasTables) -> Contributions:
    weights = tables.image
    out: Contributions = defaultdict(float)
    images_per_parent: Dict[int, int] = defaultdict(int)

    for image in tree.elements_by_tag(body, ("img",)):
        parent = tree.parent(image)
        if parent is None:
            continue
        images_per_parent[parent] += 1

        bias = 0.0
        width = parse_dimension(tree.get_attr(image, "width"))
        height = parse_dimension(tree.get_attr(image, "height"))
        if width is not None and height is not None:
            bias += weights.area_coefficient * min(weights.area_cap, width * height)

        if (tree.get_attr(image, "alt") or "").strip():
            bias += weights.alt_bonus
        if (tree.get_attr(image, "title") or "").strip():
            bias += weights.title_bonus

        caption = find_caption(tree, image)
        if caption is not None:
            has_text = bool(tree.text_content(caption).strip())
            bias += weights.caption_bonus if has_text else weights.empty_caption_bonus

        if bias:
            out[parent] += bias

    for parent, count in images_per_parent.items():
        if count > 1:
            out[parent] += weights.carousel_penalty * (count - 1)

    return {k: v for k, v in out.items() if v}


def ancestor_bias(tree: DocumentTree, body: int, tables: BiasTables) -> Contributions:
    out: Contributions = {}
    for index in tree.elements(body):
        bias = sum(tables.ancestor.get(tree.tag(child), 0.0) for child in tree.element_children(index))
        if bias:
            out[index] = float(bias)
    return out


def topology_bias(tree: DocumentTree, body: int, tables: BiasTables) -> Contributions:
    """
    Applies the list and landmark descendant penalties once per element and
    the upward bias once per qualifying element to its parent.

    Penalties are propagated top-down on an explicit stack, carrying
    whether a list container or landmark has been seen on the path.
    """
    out: Contributions = defaultdict(float)
    root = tree.root

    stack: List[Tuple[int, bool, bool]] = [
        (child, False, False) for child in reversed(tree.element_children(body))
    ]
    while stack:
        index, in_list, in_landmark = stack.pop()
        tag = tree.tag(index)

        if in_list:
            out[index] += tables.list_descendant_penalty
        if in_landmark:
            out[index] += tables.landmark_descendant_penalty

        upward = tables.upward.get(tag)
        parent = tree.parent(index)
        if upward and parent is not None and parent not in (body, root):
            out[parent] += upward

        child_in_list = in_list or tag in tables.list_container_tags
        child_in_landmark = in_landmark or tag in tables.landmark_tags
        stack.extend((child, child_in_list, child_in_landmark)
                     for child in reversed(tree.element_children(index)))

    return {k: v for k, v in out.items() if v}


def item_type_path(value: Optional[str]) -> Optional[str]:
    """'http://schema.org/NewsArticle' -> 'NewsArticle'."""
    if not value:
        return None
    value = value.strip()
    slash = value.rfind("/")
    if slash == -1:
        return None
    return value[slash + 1:] or None


def tokenize(value: str) -> List[str]:
    """Lowercase, de-duplicated tokens in first-seen order."""
    seen: Dict[str, None] = {}
    for token in TOKEN_SPLIT.split(value.lower()):
        if token:
            seen.setdefault(token, None)
    return list(seen)


def attribute_tokens(tree: DocumentTree, index: int) -> List[str]:
    values = [tree.get_attr(index, name) for name in SCORABLE_ATTRIBUTES]
    values.append(item_type_path(tree.get_attr(index, "itemtype")))
    return tokenize(" ".join(v for v in values if v))


def attribute_bias(tree: DocumentTree, body: int, tables: BiasTables) -> Contributions:
    out: Contributions = {}
    for index in tree.elements(body):
        if tree.tag(index) not in tables.attribute_bias_tags:
            continue
        bias = sum(tables.attribute_tokens.get(token, 0.0) for token in attribute_tokens(tree, index))
        if bias:
            out[index] = float(bias)
    return out


# (feature name, extractor) in a fixed order so aggregation is deterministic
EXTRACTORS: Tuple[Tuple[str, Extractor], ...] = (
    ("intrinsic", intrinsic_bias),
    ("text", text_bias),
    ("image", image_bias),
    ("ancestor", ancestor_bias),
    ("topology", topology_bias),
    ("attribute", attribute_bias),
)
