# tests/core/test_dom_tree.py
import pytest

from calamine.dom.builder import TreeBuilder
from calamine.dom.core import DocumentTree, NodeKind
from calamine.dom.serializer import serialize, serialize_children


def parse(html: str) -> DocumentTree:
    return TreeBuilder().parse(html)


def first(tree: DocumentTree, tag: str) -> int:
    return tree.elements_by_tag(tree.root, (tag,))[0]


# --- Builder ---

def test_builder_synthesizes_html_and_body():
    """Een fragment zonder <html> en <body> krijgt beide erbij."""
    tree = parse("<p>hallo</p>")
    assert tree.tag(tree.root) == "html"
    body = tree.body
    assert body is not None
    assert [tree.tag(c) for c in tree.element_children(body)] == ["p"]


def test_builder_keeps_head_outside_body():
    """Alleen niet-head kinderen van de root verhuizen naar de nieuwe body."""
    tree = parse("<html><head><title>t</title></head><p>x</p></html>")
    children = [tree.tag(c) for c in tree.element_children(tree.root)]
    assert children == ["head", "body"]
    assert tree.text_content(tree.body) == "x"


def test_builder_empty_input_has_no_root():
    """Lege invoer levert een boom zonder root (missing-root)."""
    for html in ("", "   ", "\ufeff"):
        tree = parse(html)
        assert tree.root is None
        assert tree.body is None


def test_builder_drops_doctype_and_joins_classes():
    """Doctype verdwijnt; multi-value attributen worden samengevoegd."""
    tree = parse('<!DOCTYPE html><html><body><div class="a b" ID="x">t</div></body></html>')
    div = first(tree, "div")
    assert tree.get_attr(div, "class") == "a b"
    assert tree.get_attr(div, "id") == "x"
    assert all(n.kind is not NodeKind.COMMENT for n in tree.nodes)


def test_builder_keeps_comments_as_nodes():
    """Commentaar wordt een COMMENT node in de boom."""
    tree = parse("<html><body><div><!-- note --></div></body></html>")
    div = first(tree, "div")
    kinds = [tree.node(c).kind for c in tree.children(div)]
    assert kinds == [NodeKind.COMMENT]


# --- Core operations ---

def test_unwrap_pads_adjacent_text_nodes():
    """Unwrap voegt spaties toe zodat woorden niet samensmelten."""
    tree = parse("<html><body><div>a<span>b</span>c</div></body></html>")
    div = first(tree, "div")
    tree.unwrap(first(tree, "span"))
    assert tree.text_content(div) == "a b c"
    assert tree.elements_by_tag(div, ("span",)) == []


def test_detach_and_attachment_checks():
    """Losgekoppelde subtrees zijn niet meer bereikbaar vanaf de root."""
    tree = parse("<html><body><div><p>x</p></div></body></html>")
    div, p = first(tree, "div"), first(tree, "p")
    assert tree.is_attached(p)
    assert tree.contains(div, p)
    assert tree.contains(p, p)

    tree.detach(div)
    assert not tree.is_attached(div)
    assert not tree.is_attached(p)
    assert tree.elements_by_tag(tree.root, ("p",)) == []
    # Tweede detach is een no-op
    tree.detach(div)


def test_insert_rejects_cycles():
    """Een element kan niet onder zijn eigen afstammeling gehangen worden."""
    tree = parse("<html><body><div><p>x</p></div></body></html>")
    div, p = first(tree, "div"), first(tree, "p")
    with pytest.raises(ValueError):
        tree.append_child(p, div)
    text = tree.first_child(p)
    with pytest.raises(ValueError):
        tree.append_child(text, tree.create_element("b"))


def test_siblings_and_closest():
    """Navigatie over siblings en voorouders."""
    tree = parse("<html><body><ul><li>a</li><li><b>b</b></li></ul></body></html>")
    first_li, second_li = tree.elements_by_tag(tree.root, ("li",))
    bold = first(tree, "b")
    assert tree.next_sibling(first_li) == second_li
    assert tree.previous_sibling(second_li) == first_li
    assert tree.previous_element_sibling(first_li) is None
    assert tree.closest(bold, ("ul", "ol")) == first(tree, "ul")
    assert tree.closest(bold, ("b",)) is None
    assert tree.closest(bold, ("b",), include_self=True) == bold
    assert tree.ancestors(bold)[:2] == [second_li, first(tree, "ul")]


def test_descendants_are_preorder():
    tree = parse("<html><body><div><p>1</p><p>2</p></div><span>3</span></body></html>")
    tags = [tree.tag(i) for i in tree.elements(tree.body)]
    assert tags == ["div", "p", "p", "span"]


# --- Serializer ---

def test_serializer_escapes_text_and_attributes():
    """Tekst en attribuutwaarden worden ge-escaped, void elementen krijgen geen eindtag."""
    tree = DocumentTree()
    tree.root = tree.create_element("html")
    body = tree.create_element("body")
    tree.append_child(tree.root, body)
    p = tree.create_element("p", {"title": 'say "hi"'})
    tree.append_child(body, p)
    tree.append_child(p, tree.create_text("a < b & c"))
    tree.append_child(body, tree.create_element("br"))

    assert serialize(tree) == '<html><body><p title="say &quot;hi&quot;">a &lt; b &amp; c</p><br></body></html>'
    assert serialize_children(tree, body) == '<p title="say &quot;hi&quot;">a &lt; b &amp; c</p><br>'


def test_serializer_leaves_script_text_raw():
    tree = DocumentTree()
    tree.root = tree.create_element("html")
    script = tree.create_element("script")
    tree.append_child(tree.root, script)
    tree.append_child(script, tree.create_text("if (a < b) {}"))
    assert serialize(tree) == "<html><script>if (a < b) {}</script></html>"


def test_serializer_empty_tree():
    assert serialize(DocumentTree()) == ""
    assert serialize_children(DocumentTree(), None) == ""


def test_round_trip_of_simple_document():
    html = '<html><head></head><body><div id="x"><p>a &amp; b</p><img src="i.png" alt="logo"></div></body></html>'
    assert serialize(parse(html)) == html
