# site_agent/pipeline/summary.py
import math
import re
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from ..models import Category, PriceSample, Product, SiteSnapshot


_NON_NUMERIC = re.compile(r'[^0-9.]')
# Longest leading decimal literal, the way JavaScript's parseFloat reads "12.5.3" as 12.5.
_LEADING_NUMBER = re.compile(r'\d+(?:\.\d*)?|\.\d+')


def parse_price(price: str) -> Optional[float]:
    """
    Strips everything but digits and dots, then reads the leading number.
    A price with no digits at all ("Contact us") reads as 0.0; a remainder that
    does not start with a number (".", "..") gives None.
    """
    digits = _NON_NUMERIC.sub('', price)
    if not digits:
        return 0.0
    match = _LEADING_NUMBER.match(digits)
    if not match:
        return None
    return float(match.group(0))


def format_price(value: Optional[float]) -> str:
    """
    Prints a parsed price the way JavaScript prints numbers: 10, 10.5, 1299.99,
    with exponent notation only below 1e-6 (1e-7) and from 1e21 up (1e+21).
    """
    if value is None or value == 0:
        return "0"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"

    # repr gives the shortest round-tripping digits; only the layout differs from JavaScript.
    sign, digit_tuple, exponent = Decimal(repr(value)).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    length = len(digits)
    point = exponent + length  # position of the decimal point relative to the digits

    if length <= point <= 21:
        text = digits + "0" * (point - length)
    elif 0 < point <= 21:
        text = f"{digits[:point]}.{digits[point:]}"
    elif -6 < point <= 0:
        text = "0." + "0" * -point + digits
    else:
        mantissa = digits if length == 1 else f"{digits[0]}.{digits[1:]}"
        text = f"{mantissa}e{'+' if point - 1 >= 0 else '-'}{abs(point - 1)}"
    return "-" + text if sign else text


def collect_price_samples(products: Iterable[Product]) -> List[PriceSample]:
    """One sample per product with a non-empty price, in the products' order."""
    return [PriceSample(name=product.name, price=parse_price(product.price))
            for product in products if product.price]


def find_price_extremes(samples: List[PriceSample]) -> Optional[Tuple[PriceSample, PriceSample]]:
    """
    Returns (cheapest, most expensive). The leftmost sample wins ties, and a sample
    without a usable price only wins when no sample has one.
    """
    if not samples:
        return None
    cheapest = most_expensive = samples[0]
    for sample in samples[1:]:
        if sample.price is None:
            continue
        if cheapest.price is None or sample.price < cheapest.price:
            cheapest = sample
        if most_expensive.price is None or sample.price > most_expensive.price:
            most_expensive = sample
    return cheapest, most_expensive


def _format_category(category: Category) -> str:
    section = f"{category.name}\n{'-' * len(category.name)}\n"
    if category.description:
        section += f"Description: {category.description}\n"

    if category.products:
        section += "\nProducts:\n"
        for product in category.products:
            section += f"\n• {product.name}"
            if product.price:
                section += f"\n  Price: {product.price}"
            if product.description:
                section += f"\n  Description: {product.description}"
            if product.rating:
                section += f"\n  Rating: {product.rating}"
        section += "\n"
    return section + "\n"


def format_summary(snapshot: SiteSnapshot) -> str:
    """Renders the snapshot as a plain-text report. Same snapshot, same bytes."""
    summary = f"Website: {snapshot.title}\n\n"
    navigation_lines = "\n".join(f"- {link.text}" for link in snapshot.navigation)
    summary += f"Navigation Structure:\n{navigation_lines}\n\n"

    if not snapshot.categories:
        return summary

    summary += "Product Categories:\n\n"
    summary += "".join(_format_category(category) for category in snapshot.categories)

    extremes = find_price_extremes(collect_price_samples(snapshot.all_products()))
    if extremes:
        cheapest, most_expensive = extremes
        summary += "\nPrice Analysis:\n"
        summary += f"Most Affordable: {cheapest.name} at {format_price(cheapest.price)}\n"
        summary += f"Premium Option: {most_expensive.name} at {format_price(most_expensive.price)}\n"
    return summary
