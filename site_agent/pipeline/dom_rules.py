# site_agent/pipeline/dom_rules.py

# Selectors describing where site structure lives in the DOM. The rules are plain
# data: the same SiteExtractionRules drive the in-browser script below and the
# lxml-based reader used for saved HTML files.

from dataclasses import asdict, dataclass
from typing import Dict


@dataclass(frozen=True)
class SiteExtractionRules:
    category: str = '.category, [data-type="category"]'
    category_name: str = "h2, h3"
    category_description: str = ".description"
    product: str = '.product, [data-type="product"]'
    product_name: str = ".product-name, h3"
    product_price: str = ".price"
    product_description: str = ".description"
    product_rating: str = ".rating"
    product_link: str = "a"
    navigation_link: str = "nav a"
    main_content: str = "main"

    def as_dict(self) -> Dict[str, str]:
        return asdict(self)


DEFAULT_RULES = SiteExtractionRules()


# Reads raw (uncleaned) text for every rule. Text cleaning happens in Python so
# that the browser and lxml paths share one implementation.
SITE_STRUCTURE_SCRIPT = """
(rules) => {
  const textOf = (root, selector) => {
    const el = root.querySelector(selector);
    return el ? (el.textContent || '') : '';
  };
  const categories = Array.from(document.querySelectorAll(rules.category)).map((catEl) => ({
    name: textOf(catEl, rules.category_name),
    description: textOf(catEl, rules.category_description),
    products: Array.from(catEl.querySelectorAll(rules.product)).map((prodEl) => {
      const link = prodEl.querySelector(rules.product_link);
      return {
        name: textOf(prodEl, rules.product_name),
        price: textOf(prodEl, rules.product_price),
        description: textOf(prodEl, rules.product_description),
        rating: textOf(prodEl, rules.product_rating),
        url: (link && link.getAttribute('href')) || '',
      };
    }),
  }));
  const navigation = Array.from(document.querySelectorAll(rules.navigation_link)).map((a) => ({
    text: a.textContent || '',
    url: a.getAttribute('href'),
  }));
  return {
    title: document.title,
    categories,
    navigation,
    mainContent: textOf(document, rules.main_content),
  };
}
"""

# Resolved src of every <img> matched by the selector (all images when none is given).
IMAGE_SOURCES_SCRIPT = """
(selector) => Array.from(document.querySelectorAll(selector || 'img'))
  .filter((el) => el instanceof HTMLImageElement)
  .map((img) => img.src || '')
"""
