from typing import Dict, List, Optional

import pytest

from site_agent.errors import FetchError, OcrError
from site_agent.pipeline.dom_rules import IMAGE_SOURCES_SCRIPT, SITE_STRUCTURE_SCRIPT
from site_agent.pipeline.extraction import parse_html_document, read_raw_structure


SHOP_HTML = """
<html>
<head><title>  Fractal   Shop </title></head>
<body>
<nav>
  <a href="/">Home</a>
  <a href="/cases">  Cases
  </a>
  <a>No link</a>
</nav>
<main>
  <section class="category">
    <h2>Cases</h2>
    <p class="description">Computer   cases</p>
    <div class="product">
      <a href="/cases/north"><span class="product-name">North</span></a>
      <span class="price">$149.99</span>
      <span class="rating">4.8</span>
    </div>
    <div data-type="product">
      <h3>Meshify  2</h3>
      <span class="price">$129</span>
    </div>
  </section>
  <div data-type="category">
    <h3>Fans</h3>
  </div>
</main>
</body>
</html>
"""


class FakePage:
    """Stands in for LoadedPage: structure is read from static HTML, images are canned."""
    def __init__(self, html: str = SHOP_HTML, images: Optional[List[str]] = None,
                 url: str = "https://shop.example/"):
        self.html = html
        self.images = images or []
        self.url = url
        self.calls = []

    async def evaluate(self, script, arg=None):
        self.calls.append((script, arg))
        if script == SITE_STRUCTURE_SCRIPT:
            return read_raw_structure(parse_html_document(self.html))
        if script == IMAGE_SOURCES_SCRIPT:
            return list(self.images)
        raise AssertionError(f"unexpected script: {script[:40]}")


class FakeFetcher:
    def __init__(self, page: Optional[FakePage] = None, error: Optional[str] = None):
        self.page = page or FakePage()
        self.error = error
        self.entered = False
        self.closed = False
        self.fetched: List[str] = []

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.closed = True

    async def fetch(self, url: str):
        self.fetched.append(url)
        if self.error:
            raise FetchError(self.error)
        return self.page


class FakeOcr:
    """Maps image URLs to transcripts; URLs mapped to None fail with OcrError."""
    def __init__(self, transcripts: Dict[str, Optional[str]]):
        self.transcripts = transcripts
        self.recognized: List[str] = []
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.closed = True

    async def recognize(self, image_url: str) -> str:
        self.recognized.append(image_url)
        text = self.transcripts.get(image_url)
        if text is None:
            raise OcrError(f"cannot read {image_url}")
        return text


@pytest.fixture
def shop_page():
    return FakePage()


@pytest.fixture
def fake_fetcher(shop_page):
    return FakeFetcher(shop_page)
