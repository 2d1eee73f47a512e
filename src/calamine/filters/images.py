# src/calamine/filters/images.py
import logging
import re
from typing import List, Optional
from urllib.parse import urljoin, urlparse

from calamine.dom.core import DocumentTree
from calamine.model import Descriptor

logger = logging.getLogger(__name__)


class SrcsetError(ValueError):
    """Raised when a srcset value cannot be parsed into descriptors."""


# Checked in order; the first plausible value becomes the image src
LAZY_IMAGE_ATTRIBUTES = (
    "load-src", "data-src", "data-src-full16x9", "data-src-large",
    "data-original-desktop", "data-baseurl", "data-flickity-lazyload",
    "data-lazy", "data-path", "data-image-src", "data-original",
    "data-adaptive-image", "data-imgsrc", "data-default-src", "data-hi-res-src",
)

MAX_URL_LENGTH = 3000
ALLOWED_SCHEMES = ("http", "https", "data")

_DESCRIPTOR = re.compile(r"^(?P<value>\d+(?:\.\d+)?)(?P<unit>[wxh])$", re.IGNORECASE)


def is_plausible_url(value: Optional[str], base_url: Optional[str] = None) -> bool:
    """
    Cheap plausibility test for a lazy-load attribute value.

    The value must have 2 to 3000 characters and no embedded whitespace.
    With a base URL, the resolved URL must use http(s) or data.
    """
    if not value:
        return False
    value = value.strip()
    if not (1 < len(value) <= MAX_URL_LENGTH) or any(ch.isspace() for ch in value):
        return False
    if base_url:
        try:
            resolved = urljoin(base_url, value)
        except ValueError:
            return False
        return urlparse(resolved).scheme.lower() in ALLOWED_SCHEMES
    return True


def _has_value(tree: DocumentTree, index: int, name: str) -> bool:
    return bool((tree.get_attr(index, name) or "").strip())


def has_source(tree: DocumentTree, image: int) -> bool:
    """True for images with a non-blank src/srcset, directly or via a picture source."""
    if _has_value(tree, image, "src") or _has_value(tree, image, "srcset"):
        return True

    picture = tree.closest(image, ("picture",))
    if picture is None:
        return False
    for source in tree.elements_by_tag(picture, ("source",)):
        if _has_value(tree, source, "src") or _has_value(tree, source, "srcset"):
            return True
    return False


def resolve_lazy_images(tree: DocumentTree, base_url: Optional[str] = None) -> int:
    """Promotes lazy-load attributes to `src` on images lacking src and srcset."""
    body = tree.body
    if body is None:
        return 0

    changed = 0
    for image in tree.elements_by_tag(body, ("img",)):
        if _has_value(tree, image, "src") or _has_value(tree, image, "srcset"):
            continue
        for name in LAZY_IMAGE_ATTRIBUTES:
            value = tree.get_attr(image, name)
            if value is not None and is_plausible_url(value, base_url):
                tree.remove_attr(image, name)
                tree.set_attr(image, "src", value.strip())
                changed += 1
                break
    return changed


def _parse_candidate(url: str, tokens: List[str], raw: str) -> Descriptor:
    width = height = None
    density = None
    for token in tokens:
        match = _DESCRIPTOR.match(token)
        if not match:
            raise SrcsetError(f"Invalid descriptor {token!r} in srcset {raw!r}.")
        unit = match.group("unit").lower()
        value = match.group("value")
        if unit == "x":
            if density is not None:
                raise SrcsetError(f"Duplicate density descriptor in srcset {raw!r}.")
            density = float(value)
            continue
        if "." in value:
            raise SrcsetError(f"Non-integer {unit} descriptor {token!r} in srcset {raw!r}.")
        if unit == "w":
            if width is not None:
                raise SrcsetError(f"Duplicate width descriptor in srcset {raw!r}.")
            width = int(value)
        else:
            if height is not None:
                raise SrcsetError(f"Duplicate height descriptor in srcset {raw!r}.")
            height = int(value)

    if density is not None and width is not None:
        raise SrcsetError(f"Width and density combined in srcset {raw!r}.")
    return Descriptor(url=url, width=width, height=height, density=density)


def parse_srcset(value: Optional[str]) -> List[Descriptor]:
    """
    Parses a srcset attribute value into an ordered list of descriptors.

    Candidates are separated by commas; a candidate is a URL followed by
    optional `<n>w`, `<n>h` or `<n>x` descriptors. A URL ending in a comma
    ends its candidate.

    Raises:
        SrcsetError: If a descriptor is malformed.
    """
    if not value:
        return []

    descriptors: List[Descriptor] = []
    pos, length = 0, len(value)

    while pos < length:
        while pos < length and (value[pos].isspace() or value[pos] == ","):
            pos += 1
        if pos >= length:
            break

        start = pos
        while pos < length and not value[pos].isspace():
            pos += 1
        url = value[start:pos]

        tokens: List[str] = []
        if url.endswith(","):
            url = url.rstrip(",")
        else:
            start = pos
            depth = 0
            while pos < length:
                ch = value[pos]
                if ch == "(":
                    depth += 1
                elif ch == ")" and depth:
                    depth -= 1
                elif ch == "," and not depth:
                    break
                pos += 1
            tokens = value[start:pos].split()
            pos += 1

        if not url:
            raise SrcsetError(f"Empty candidate URL in srcset {value!r}.")
        descriptors.append(_parse_candidate(url, tokens, value))

    return descriptors


def select_descriptor(descriptors: List[Descriptor]) -> Optional[Descriptor]:
    """The first descriptor with a url and a width or height, else the first with a url."""
    for descriptor in descriptors:
        if descriptor.url and (descriptor.width or descriptor.height):
            return descriptor
    for descriptor in descriptors:
        if descriptor.url:
            return descriptor
    return None


def resolve_responsive_images(tree: DocumentTree) -> int:
    """
    Gives srcset-only images a concrete src taken from their best descriptor.

    Width and height are cleared before the descriptor's dimensions are
    applied; the srcset attribute is removed afterwards. Images with a
    malformed srcset are skipped untouched.
    """
    body = tree.body
    if body is None:
        return 0

    changed = 0
    for image in tree.elements_by_tag(body, ("img",)):
        if _has_value(tree, image, "src") or not _has_value(tree, image, "srcset"):
            continue

        try:
            descriptors = parse_srcset(tree.get_attr(image, "srcset"))
        except SrcsetError as e:
            logger.debug("Skipping image %d: %s", image, e)
            continue

        descriptor = select_descriptor(descriptors)
        if descriptor is None:
            logger.debug("Skipping image %d: no usable srcset descriptor.", image)
            continue

        tree.remove_attr(image, "width")
        tree.remove_attr(image, "height")
        tree.set_attr(image, "src", descriptor.url)
        if descriptor.width:
            tree.set_attr(image, "width", str(descriptor.width))
        if descriptor.height:
            tree.set_attr(image, "height", str(descriptor.height))
        tree.remove_attr(image, "srcset")
        changed += 1
    return changed


def remove_sourceless_images(tree: DocumentTree) -> int:
    body = tree.body
    if body is None:
        return 0

    removed = 0
    for image in tree.elements_by_tag(body, ("img",)):
        if tree.parent(image) is not None and not has_source(tree, image):
            logger.debug("Removing sourceless image %d.", image)
            tree.detach(image)
            removed += 1
    return removed
