# Product, listing result and print-provider records
# Data structures shared by validators, channels and providers

from dataclasses import asdict, dataclass, field
from typing import Any, Optional


@dataclass
class ProductInput:
    """Raw product fields collected from the command line"""

    title: str
    description: str
    price: Optional[float]
    quantity: Optional[int]
    tags: Optional[list[str]] = None
    materials: Optional[list[str]] = None
    images: Optional[list[str]] = None  # Image URLs, uploaded after the listing exists


@dataclass(frozen=True)
class Product:
    """Validated, channel-agnostic product"""

    title: str
    description: str
    price: float
    quantity: int
    tags: Optional[tuple[str, ...]] = None
    materials: Optional[tuple[str, ...]] = None
    taxonomy_id: Optional[int] = None  # Etsy only
    shipping_profile_id: Optional[int] = None  # Etsy only

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready dict, leaving out unset fields."""
        data: dict[str, Any] = {}
        for key, value in asdict(self).items():
            if value is None:
                continue
            data[key] = list(value) if isinstance(value, tuple) else value
        return data


@dataclass
class ProductImage:
    url: str
    rank: int


@dataclass
class ProductOperationResult:
    """Outcome of a channel operation"""

    success: bool
    message: str
    listing_id: Optional[str] = None
    errors: list[str] = field(default_factory=list)


@dataclass
class PrintVariant:
    sync_variant_id: Optional[int]
    name: str
    size: Optional[str] = None
    color: Optional[str] = None
    price: Optional[float] = None


@dataclass
class PrintProduct:
    """Product as reported by a print-on-demand provider"""

    sync_id: Optional[int]
    name: str
    price: Optional[float] = None
    image: Optional[str] = None  # Thumbnail URL
    variants: list[PrintVariant] = field(default_factory=list)
