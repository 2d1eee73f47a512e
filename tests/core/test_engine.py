# tests/core/test_engine.py
import pytest

from calamine.dom.core import DocumentTree
from calamine.dom.serializer import serialize_children
from calamine.engine import ContentExtractor
from calamine.extraction.annotate import ROOT_ATTRIBUTE
from calamine.model import ExtractionSettings

SCENARIO = (
    '<html><body><nav><ul><li><a href="#">X</a></li></ul></nav>'
    '<article><h1>T</h1><p>Long paragraph text...</p></article></body></html>'
)


@pytest.fixture
def extractor():
    """Een extractor met de standaardinstellingen."""
    return ContentExtractor(ExtractionSettings())


@pytest.fixture
def scoring_extractor():
    """Een extractor zonder signatures, zodat altijd de scoring-route gebruikt wordt."""
    return ContentExtractor(ExtractionSettings(signatures=[]))


def test_end_to_end_via_signature(extractor):
    """Het article wordt via de signature gekozen en de nav verdwijnt."""
    result = extractor.extract(SCENARIO)

    assert result.report.method == "signature"
    assert result.report.signature == "article"
    assert result.report.root_tag == "article"
    assert result.report.pruned is True
    assert result.content == "<article><h1>T</h1><p>Long paragraph text...</p></article>"
    assert result.html == "<html><body>" + result.content + "</body></html>"
    assert result.report.elements_before == 7
    assert result.report.elements_after == 3


def test_end_to_end_via_scoring(scoring_extractor):
    """Ook zonder signatures wint het article op basis van de scores."""
    result = scoring_extractor.extract(SCENARIO)

    assert result.report.method == "score"
    assert result.report.root_tag == "article"
    assert result.report.root_score > 0
    assert "<nav" not in result.html
    assert ">X<" not in result.html
    assert "<h1>T</h1>" in result.content
    assert "<p>Long paragraph text...</p>" in result.content


def test_annotate_marks_root_and_scores():
    """Met annotate staan de scores als data-attributen in de output."""
    extractor = ContentExtractor(ExtractionSettings(signatures=[], annotate=True))
    result = extractor.extract(SCENARIO)

    assert f'{ROOT_ATTRIBUTE}="score"' in result.content
    assert 'data-calamine-score="' in result.content
    assert 'data-calamine-intrinsic="200.00"' in result.content
    assert "<nav" not in result.html


def test_annotations_are_stripped_when_disabled(scoring_extractor):
    result = scoring_extractor.extract(SCENARIO)
    assert "data-calamine-" not in result.html


def test_no_candidate_keeps_document(extractor):
    """Zonder positieve score blijft het document heel, maar de filters draaien wel."""
    html = (
        '<html><body><ul><li><a href="#" class="x">x</a></li><li><a href="#">y</a></li></ul>'
        '<script>track()</script></body></html>'
    )
    result = extractor.extract(html)

    assert result.report.method == "none"
    assert result.report.root is None
    assert result.report.pruned is False
    assert result.content == '<ul><li><a href="#">x</a></li><li><a href="#">y</a></li></ul>'


@pytest.mark.parametrize("html", ["", "   ", "\ufeff"])
def test_empty_input(extractor, html):
    result = extractor.extract(html)
    assert result.report.method == "none"
    assert result.html == ""
    assert result.content == ""


def test_text_only_document(extractor):
    result = extractor.extract("just text")
    assert result.report.method == "none"
    assert result.content == "just text"


def test_boilerplate_around_content_is_removed(extractor):
    """Navigatie, zijbalk en footer rond de content worden weggesnoeid."""
    paragraphs = "".join(f"<p>Paragraph {i} with enough words to count as prose.</p>" for i in range(6))
    html = (
        "<html><head><title>t</title><script>x()</script></head><body>"
        '<header><a href="/">Home</a><a href="/news">News</a></header>'
        f'<div class="main"><h2>Headline</h2>{paragraphs}</div>'
        '<aside class="related"><ul><li><a href="/a">Other story</a></li><li><a href="/b">More</a></li></ul></aside>'
        "<footer>Copyright</footer>"
        "</body></html>"
    )
    result = extractor.extract(html)

    assert result.report.method == "score"
    assert result.report.root_tag == "div"
    assert "Paragraph 5" in result.content
    assert "Other story" not in result.html
    assert "Copyright" not in result.html
    assert "<script" not in result.html
    assert 'class="main"' not in result.content


def test_extract_tree_without_body():
    """Een boom zonder body levert een leeg rapport op."""
    tree = DocumentTree()
    tree.root = tree.create_element("html")
    report = ContentExtractor().extract_tree(tree)
    assert report.method == "none"


def test_deeply_nested_document_does_not_exhaust_the_stack(extractor):
    """Extreme nesting wordt iteratief verwerkt zonder RecursionError."""
    depth = 5000
    tree = DocumentTree()
    tree.root = tree.create_element("html")
    body = tree.create_element("body")
    tree.append_child(tree.root, body)

    parent = body
    for _ in range(depth):
        child = tree.create_element("div")
        tree.append_new(parent, child)
        parent = child
    paragraph = tree.create_element("p")
    tree.append_new(parent, paragraph)
    tree.append_new(paragraph, tree.create_text("Deep content " * 10))

    report = extractor.extract_tree(tree)

    assert report.root is not None
    assert tree.is_attached(paragraph)
    assert "Deep content" in serialize_children(tree, tree.body)


def test_content_cleaning_filters_run_in_pipeline(extractor):
    """Formulieren, losse captions, tracking-pixels en ongeldige links worden opgeruimd."""
    html = (
        '<html><body><nav><a href="/">Home</a></nav><article>'
        '<p>Story text with <a>plain</a> words.</p>'
        '<form><label>Email</label><input name="e"><button>Go</button></form>'
        '<figure><figcaption>Orphan caption</figcaption></figure>'
        '<img src="https://pixel.quantserve.com/pixel.gif"><a href="http://#top">Top</a>'
        '</article></body></html>'
    )
    result = extractor.extract(html, base_url="https://example.com/story")

    assert result.report.method == "signature"
    for fragment in ("<form", "<label", "<input", "<button", "<figure", "Orphan caption",
                     "quantserve", "http://#", ">Top<", "<a>"):
        assert fragment not in result.content
    assert "Email" in result.content
    assert "plain" in result.content
