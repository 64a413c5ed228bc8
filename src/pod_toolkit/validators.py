# Rule-based validators for product input
# Violations are collected and returned, never raised

import re
from typing import Optional

from pod_toolkit.models import Product, ProductInput

MAX_TITLE_LENGTH = 140
MAX_TAGS = 13
MAX_TAG_LENGTH = 20

_PRICE_JUNK = re.compile(r"[^0-9.\-]")


def validate_product_input(data: ProductInput) -> list[str]:
    """Check a ProductInput against the listing rules.

    Every rule runs independently, so one call reports all problems.

    Args:
        data: Product input collected from the CLI

    Returns:
        List of human-readable violations, empty when the input is valid
    """
    errors: list[str] = []

    if not data.title or not data.title.strip():
        errors.append("Title is required")
    elif len(data.title) > MAX_TITLE_LENGTH:
        errors.append(f"Title must be {MAX_TITLE_LENGTH} characters or less")

    if not data.description or not data.description.strip():
        errors.append("Description is required")

    if data.price is None:
        errors.append("Price is required")
    elif data.price <= 0:
        errors.append("Price must be greater than 0")

    if data.quantity is None:
        errors.append("Quantity is required")
    elif data.quantity < 0:
        errors.append("Quantity must be 0 or greater")

    tags = data.tags or []
    if len(tags) > MAX_TAGS:
        errors.append(f"Maximum {MAX_TAGS} tags allowed")
    for i, tag in enumerate(tags):
        if len(tag) > MAX_TAG_LENGTH:
            errors.append(f"Tag {i + 1} exceeds {MAX_TAG_LENGTH} characters")

    return errors


def _strip_all(values: Optional[list[str]]) -> Optional[tuple[str, ...]]:
    if values is None:
        return None
    return tuple(v.strip() for v in values)


def convert_to_product(
    data: ProductInput,
    taxonomy_id: Optional[int] = None,
    shipping_profile_id: Optional[int] = None,
) -> Product:
    """Build a Product from already-validated input.

    Constraints are not re-checked here; call validate_product_input first.
    """
    return Product(
        title=data.title.strip(),
        description=data.description.strip(),
        price=data.price,
        quantity=data.quantity,
        tags=_strip_all(data.tags),
        materials=_strip_all(data.materials),
        taxonomy_id=taxonomy_id,
        shipping_profile_id=shipping_profile_id,
    )


def format_price(price: float) -> str:
    """Format a price for display, e.g. 12.5 -> '$12.50'"""
    return f"${price:.2f}"


def parse_price(text: str) -> float:
    """Parse a price string such as '$1,299.00' or '10.99'.

    Currency symbols and separators are dropped. A minus sign is kept,
    so '-5' parses to -5.0.

    Raises:
        ValueError: If no number can be read from the text.
    """
    cleaned = _PRICE_JUNK.sub("", text)
    if not any(ch.isdigit() for ch in cleaned):
        raise ValueError(f"Invalid price: {text!r}")
    return float(cleaned)


def parse_list(text: str) -> list[str]:
    """Split a comma-separated option value, dropping blank entries."""
    return [item.strip() for item in text.split(",") if item.strip()]
