# Print-on-demand provider interface and the Printful implementation
# Providers supply product/variant data; they are independent of sales channels

import logging
from typing import Any, Protocol

import httpx

from pod_toolkit.config import Config, ConfigurationError
from pod_toolkit.models import PrintProduct, PrintVariant

logger = logging.getLogger(__name__)

PROVIDERS = ("printful",)


class PrintProvider(Protocol):
    """Common interface for fulfilment services (Printful, Printify, ...)."""

    name: str

    async def get_products(self) -> list[PrintProduct]:
        ...

    async def get_product_info(self, product_id: int) -> PrintProduct | None:
        ...

    def is_configured(self) -> bool:
        ...


def _price(value: Any) -> float | None:
    # Printful sends prices as strings, e.g. "24.99"
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _dict_items(items: Any) -> list[dict]:
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        raise ValueError(f"Expected a list of objects, got {items!r:.200}")
    return items


def _to_variant(item: dict) -> PrintVariant:
    return PrintVariant(
        sync_variant_id=item.get("id"),
        name=item.get("name", ""),
        size=item.get("size"),
        color=item.get("color"),
        price=_price(item.get("retail_price")),
    )


def _to_product(item: dict) -> PrintProduct:
    return PrintProduct(
        sync_id=item.get("id"),
        name=item.get("name", ""),
        price=_price(item.get("retail_price")),
        image=item.get("thumbnail_url"),
    )


class PrintfulProvider:
    """Printful store API (``/store/products``), bearer-token authenticated.

    Lookups never raise: on any HTTP failure the error is logged and the
    call returns an empty list or ``None``.
    """

    name = "Printful"

    def __init__(
        self,
        config: Config,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not (config.printful and config.printful.api_key):
            raise ConfigurationError("Printful API key is required for Printful integration")
        self.api_key = config.printful.api_key
        self.base_url = config.printful.base_url.rstrip("/")
        self._transport = transport
        self._headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _request(self, path: str, expected: type) -> Any:
        """GET ``path`` and return the ``result`` member of the response.

        Raises:
            ValueError: If the body is not an object or ``result`` is not
                of the ``expected`` type.
        """
        logger.debug("Printful API GET %s", path)
        async with httpx.AsyncClient(
            base_url=self.base_url, headers=self._headers, transport=self._transport
        ) as client:
            resp = await client.get(path)
            if not resp.is_success:
                logger.error(
                    "Printful API error %s for %s: %s",
                    resp.status_code,
                    path,
                    resp.text[:500],
                )
            resp.raise_for_status()
            body = resp.json()
            if not isinstance(body, dict):
                raise ValueError(f"Unexpected Printful response body: {resp.text[:200]}")
            result = body.get("result")
            if result is not None and not isinstance(result, expected):
                raise ValueError(f"Unexpected Printful result for {path}: {type(result).__name__}")
            return result

    async def get_products(self) -> list[PrintProduct]:
        try:
            items = _dict_items(await self._request("/store/products", list) or [])
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Error fetching Printful products: %s", e)
            return []
        return [_to_product(item) for item in items]

    async def get_product_info(self, product_id: int) -> PrintProduct | None:
        """Fetch one sync product, including its variants when present."""
        try:
            data = await self._request(f"/store/products/{product_id}", dict)
            if not data:
                return None
            # Single-product responses wrap the product and its variants
            if "sync_product" in data:
                item = _dict_items([data["sync_product"]])[0]
                variants = _dict_items(data.get("sync_variants") or [])
            else:
                item, variants = data, []
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Error fetching Printful product %s: %s", product_id, e)
            return None

        product = _to_product(item)
        product.variants = [_to_variant(v) for v in variants]
        if product.price is None and product.variants:
            product.price = product.variants[0].price
        return product

    def is_configured(self) -> bool:
        return bool(self.api_key)


def get_provider(name: str, config: Config) -> PrintProvider:
    """Return the provider registered under ``name``.

    Raises:
        ValueError: If ``name`` is unknown.
        ConfigurationError: If the provider is missing its API key.
    """
    if (name or "").lower() == "printful":
        return PrintfulProvider(config)
    raise ValueError(
        f"Unknown provider '{name}'. Available providers: {', '.join(PROVIDERS)}"
    )
