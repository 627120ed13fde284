# site_agent/models/site_models.py

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class Product:
    """
    A single product found inside a category block. The category is kept as a
    plain copy of the owning category's name, not a reference to it.
    """
    name: str
    category: str
    price: str = ""
    description: str = ""
    rating: str = ""
    url: str = ""


@dataclass(frozen=True)
class Category:
    name: str
    description: str = ""
    products: Tuple[Product, ...] = ()


@dataclass(frozen=True)
class NavigationLink:
    text: str
    url: Optional[str] = None  # raw href, None when the anchor has none


@dataclass(frozen=True)
class SiteSnapshot:
    """
    Everything one extraction call read from a page. Categories, products and
    navigation entries are stored in document order.
    """
    title: str
    categories: Tuple[Category, ...] = ()
    navigation: Tuple[NavigationLink, ...] = ()
    main_content: str = ""

    def all_products(self) -> Tuple[Product, ...]:
        return tuple(product for category in self.categories for product in category.products)


@dataclass(frozen=True)
class PriceSample:
    name: str
    price: Optional[float]  # None when the price text holds no usable number


@dataclass(frozen=True)
class ImageResult:
    image_url: str
    text: str = field(default="")
