# site_agent/pipeline/extraction.py
import logging
import re
from functools import lru_cache
from typing import Any, Dict, List, Optional

import lxml.html
from cssselect import HTMLTranslator
from lxml import etree

from ..delegates import LoadedPage
from ..errors import FetchError
from ..models import Category, NavigationLink, Product, SiteSnapshot
from .dom_rules import DEFAULT_RULES, SITE_STRUCTURE_SCRIPT, SiteExtractionRules

logger = logging.getLogger(__name__)

_translator = HTMLTranslator()
# lxml refuses str input that still carries an encoding declaration (saved XHTML pages).
_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")


def clean_text(text: Optional[str]) -> str:
    """Collapses every whitespace run to a single space and trims both ends."""
    if not text:
        return ""
    return " ".join(text.split())


def build_snapshot(raw: Dict[str, Any], include_products: bool = True) -> SiteSnapshot:
    """
    Turns the raw structure read from a page into a SiteSnapshot.
    Missing keys or elements become empty strings; nothing here raises on odd markup.
    """
    categories: List[Category] = []
    for raw_category in raw.get("categories") or []:
        name = clean_text(raw_category.get("name"))
        products = ()
        if include_products:
            products = tuple(
                Product(
                    name=clean_text(raw_product.get("name")),
                    category=name,
                    price=clean_text(raw_product.get("price")),
                    description=clean_text(raw_product.get("description")),
                    rating=clean_text(raw_product.get("rating")),
                    url=raw_product.get("url") or "",
                )
                for raw_product in raw_category.get("products") or []
            )
        categories.append(Category(
            name=name,
            description=clean_text(raw_category.get("description")),
            products=products,
        ))

    navigation = tuple(
        NavigationLink(text=clean_text(link.get("text")), url=link.get("url"))
        for link in raw.get("navigation") or []
    )

    snapshot = SiteSnapshot(
        title=clean_text(raw.get("title")),
        categories=tuple(categories),
        navigation=navigation,
        main_content=clean_text(raw.get("mainContent")),
    )
    logger.debug("Built snapshot: %d categories, %d products, %d navigation links",
                 len(snapshot.categories), len(snapshot.all_products()), len(snapshot.navigation))
    return snapshot


async def extract_site_snapshot(page: LoadedPage, rules: SiteExtractionRules = DEFAULT_RULES,
                                include_products: bool = True) -> SiteSnapshot:
    """Reads categories, products, navigation, title and main text from the live DOM."""
    logger.info("Extracting site structure from %s", page.url)
    raw = await page.evaluate(SITE_STRUCTURE_SCRIPT, rules.as_dict())
    if not isinstance(raw, dict):
        raise FetchError(f"Unexpected structure script result: {type(raw).__name__}")
    return build_snapshot(raw, include_products=include_products)


# --- Saved HTML documents ---

@lru_cache(maxsize=64)
def _descendant_xpath(selector: str) -> str:
    # Descendants only, like Element.querySelectorAll; the context element itself never matches.
    return _translator.css_to_xpath(selector, prefix="descendant::")


def _select_all(root, selector: str) -> List[Any]:
    return root.xpath(_descendant_xpath(selector))


def _select_first(root, selector: str):
    matches = _select_all(root, selector)
    return matches[0] if matches else None


def _text_of(root, selector: str) -> str:
    element = _select_first(root, selector)
    return element.text_content() if element is not None else ""


def read_raw_structure(document, rules: SiteExtractionRules = DEFAULT_RULES) -> Dict[str, Any]:
    """Same output shape as SITE_STRUCTURE_SCRIPT, computed from an lxml document."""
    categories = []
    for category_element in _select_all(document, rules.category):
        products = []
        for product_element in _select_all(category_element, rules.product):
            link = _select_first(product_element, rules.product_link)
            products.append({
                "name": _text_of(product_element, rules.product_name),
                "price": _text_of(product_element, rules.product_price),
                "description": _text_of(product_element, rules.product_description),
                "rating": _text_of(product_element, rules.product_rating),
                "url": (link.get("href") if link is not None else None) or "",
            })
        categories.append({
            "name": _text_of(category_element, rules.category_name),
            "description": _text_of(category_element, rules.category_description),
            "products": products,
        })

    navigation = [
        {"text": anchor.text_content(), "url": anchor.get("href")}
        for anchor in _select_all(document, rules.navigation_link)
    ]

    title_element = document.find(".//title")
    return {
        "title": title_element.text_content() if title_element is not None else "",
        "categories": categories,
        "navigation": navigation,
        "mainContent": _text_of(document, rules.main_content),
    }


def parse_html_document(html: str):
    html = _XML_DECLARATION.sub("", html, count=1)
    try:
        return lxml.html.document_fromstring(html)
    except (etree.ParserError, ValueError) as e:
        raise FetchError(f"Could not parse HTML document: {e}") from e


def extract_snapshot_from_html(html: str, rules: SiteExtractionRules = DEFAULT_RULES,
                               include_products: bool = True) -> SiteSnapshot:
    """Applies the extraction rules to a saved HTML document instead of a live page."""
    document = parse_html_document(html)
    return build_snapshot(read_raw_structure(document, rules), include_products=include_products)
