# tests/performance_test.py
import time
from typing import List

from calamine.dom.builder import TreeBuilder
from calamine.engine import ContentExtractor
from calamine.model import ExtractionSettings

# --- CONFIGURATIE ---
# Aantal synthetische documenten en hun omvang.
DOCUMENT_COUNT = 200
PARAGRAPHS_PER_DOCUMENT = 40
NAV_LINKS_PER_DOCUMENT = 60


# --------------------


def build_document(seed: int) -> str:
    """Bouwt een synthetische nieuwspagina met navigatie, content en zijbalk."""
    nav = "".join(f'<li><a href="/section/{i}">Section {i}</a></li>' for i in range(NAV_LINKS_PER_DOCUMENT))
    paragraphs = "".join(
        f"<p>Paragraph {i} of story {seed}, long enough to be counted as real prose by the scorer.</p>"
        for i in range(PARAGRAPHS_PER_DOCUMENT)
    )
    related = "".join(f'<li><a href="/story/{seed}-{i}">Related story {i}</a></li>' for i in range(10))
    return (
        "<html><head><title>Story</title><script>track()</script></head><body>"
        f"<header><nav><ul>{nav}</ul></nav></header>"
        f'<div class="main"><h1>Story {seed}</h1>{paragraphs}'
        '<img data-src="/img/lead.jpg" alt="Lead"></div>'
        f'<aside class="related"><ul>{related}</ul></aside>'
        "<footer><p>Copyright</p></footer>"
        "</body></html>"
    )


def run_performance_test():
    """Meet de doorvoer van parsen en extraheren over synthetische documenten."""
    print(f"🚀 Start performance test met {DOCUMENT_COUNT} synthetische documenten")
    documents: List[str] = [build_document(i) for i in range(DOCUMENT_COUNT)]

    # 1. Alleen parsen
    builder = TreeBuilder()
    start_time = time.perf_counter()
    for html in documents:
        builder.parse(html)
    parse_duration = time.perf_counter() - start_time

    # 2. Volledige pipeline
    extractor = ContentExtractor(ExtractionSettings(signatures=[]))
    methods = {}
    start_time = time.perf_counter()
    for html in documents:
        result = extractor.extract(html, base_url="https://example.com/")
        methods[result.report.method] = methods.get(result.report.method, 0) + 1
    extract_duration = time.perf_counter() - start_time

    # 3. Toon de performance resultaten
    print("\n" + "—" * 40)
    print("📊 Performance Resultaten")
    print("—" * 40)
    print(f"   Documenten verwerkt:    {DOCUMENT_COUNT}")
    print(f"   Parsen:                 {parse_duration:.4f} seconden")
    print(f"   Parsen + extractie:     {extract_duration:.4f} seconden")
    if extract_duration > 0:
        print(f"   Snelheid:               {DOCUMENT_COUNT / extract_duration:.2f} documenten per seconde")
    print(f"   Methodes:               {methods}")
    print("—" * 40)

    print("\n✅ Test voltooid.")


if __name__ == "__main__":
    run_performance_test()
