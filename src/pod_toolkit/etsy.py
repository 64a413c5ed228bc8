import asyncio
import logging
from typing import Any, Mapping

import httpx

from pod_toolkit.config import Config, DEFAULT_ETSY_API_BASE
from pod_toolkit.models import Product, ProductOperationResult

logger = logging.getLogger(__name__)

# Etsy requires these on every new listing
DEFAULT_WHO_MADE = "i_did"
DEFAULT_WHEN_MADE = "2020_2024"
DEFAULT_TAXONOMY_ID = 1


class EtsyChannel:
    """Etsy Open API v3 sales channel.

    Every call is scoped to the configured shop and authenticated with the
    API keystring plus an OAuth bearer token. A fresh ``httpx.AsyncClient``
    is opened per operation; pass ``transport`` to route requests elsewhere
    (tests use ``httpx.MockTransport``).
    """

    name = "Etsy"

    def __init__(
        self,
        config: Config,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        etsy = config.etsy
        self.api_key = etsy.api_key if etsy else ""
        self.token = etsy.token if etsy else ""
        self.shop_id = etsy.shop_id if etsy else ""
        self.base_url = (etsy.base_url if etsy else DEFAULT_ETSY_API_BASE).rstrip("/")
        self._transport = transport
        self._headers = {
            "x-api-key": self.api_key,
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers,
            transport=self._transport,
        )

    def _listings_path(self, listing_id: str | None = None) -> str:
        path = f"/application/shops/{self.shop_id}/listings"
        if listing_id is not None:
            path += f"/{listing_id}"
        return path

    @staticmethod
    def _to_payload(fields: Mapping[str, Any]) -> dict[str, Any]:
        """Drop unset values and turn tuples into JSON arrays."""
        return {
            k: list(v) if isinstance(v, tuple) else v
            for k, v in fields.items()
            if v is not None
        }

    def to_etsy_payload(self, product: Product) -> dict[str, Any]:
        """Map a Product to the createDraftListing request body."""
        return self._to_payload({
            "quantity": product.quantity,
            "title": product.title,
            "description": product.description,
            "price": product.price,
            "who_made": DEFAULT_WHO_MADE,
            "when_made": DEFAULT_WHEN_MADE,
            "taxonomy_id": product.taxonomy_id or DEFAULT_TAXONOMY_ID,
            "shipping_profile_id": product.shipping_profile_id,
            "tags": product.tags,
            "materials": product.materials,
        })

    async def _send(self, method: str, path: str, payload: dict[str, Any]) -> dict:
        logger.debug("Etsy API %s %s", method, path)
        async with self._client() as client:
            resp = await client.request(method, path, json=payload)
            if not resp.is_success:
                logger.error(
                    "Etsy API error %s for %s %s: %s",
                    resp.status_code,
                    method,
                    path,
                    resp.text[:500],
                )
            resp.raise_for_status()
            data = resp.json() if resp.content else {}
            if not isinstance(data, dict):
                raise ValueError(f"Unexpected Etsy response body: {resp.text[:200]}")
            return data

    def _not_configured(self) -> ProductOperationResult:
        return ProductOperationResult(
            success=False,
            message="Etsy channel is not configured",
            errors=["Set ETSY_API_KEY, ETSY_TOKEN and ETSY_SHOP_ID"],
        )

    @staticmethod
    def _handle_error(exc: Exception) -> ProductOperationResult:
        """Convert any failure into a failed result with readable errors."""
        errors: list[str] = []

        if isinstance(exc, httpx.HTTPStatusError):
            resp = exc.response
            errors.append(f"API Error: {resp.status_code} - {resp.reason_phrase}")
            try:
                data = resp.json()
            except ValueError:
                data = None
            if isinstance(data, dict):
                if data.get("error"):
                    errors.append(str(data["error"]))
                if isinstance(data.get("errors"), list):
                    errors.extend(str(e) for e in data["errors"])
        elif isinstance(
            exc, (httpx.InvalidURL, httpx.UnsupportedProtocol, httpx.LocalProtocolError)
        ):
            errors.append(f"Request error: {exc}")
        elif isinstance(exc, httpx.RequestError):
            errors.append("No response from Etsy API. Please check your connection.")
        else:
            logger.exception("Unexpected error talking to Etsy", exc_info=exc)
            return ProductOperationResult(
                success=False,
                message="An unexpected error occurred",
                errors=[str(exc) or exc.__class__.__name__],
            )

        return ProductOperationResult(
            success=False, message="Failed to process request", errors=errors
        )

    # ------------------------------------------------------------------
    # SalesChannel implementation
    # ------------------------------------------------------------------

    async def create_listing(self, product: Product) -> ProductOperationResult:
        if not self.is_configured():
            return self._not_configured()
        try:
            data = await self._send("POST", self._listings_path(), self.to_etsy_payload(product))
        except Exception as e:
            return self._handle_error(e)

        listing_id = data.get("listing_id")
        logger.info("Created Etsy listing", extra={"listing_id": listing_id})
        return ProductOperationResult(
            success=True,
            listing_id=str(listing_id) if listing_id is not None else None,
            message="Product listing created successfully on Etsy",
        )

    async def update_listing(
        self, listing_id: str, changes: Mapping[str, Any]
    ) -> ProductOperationResult:
        if not self.is_configured():
            return self._not_configured()
        try:
            data = await self._send(
                "PATCH", self._listings_path(listing_id), self._to_payload(changes)
            )
        except Exception as e:
            return self._handle_error(e)

        returned_id = data.get("listing_id", listing_id)
        return ProductOperationResult(
            success=True,
            listing_id=str(returned_id),
            message="Product listing updated successfully on Etsy",
        )

    async def upload_images(
        self, listing_id: str, image_urls: list[str]
    ) -> ProductOperationResult:
        """Attach images by URL, ranked in the order given.

        All uploads run concurrently; if any one fails the whole step is
        reported as failed.
        """
        if not self.is_configured():
            return self._not_configured()
        path = f"{self._listings_path(listing_id)}/images"
        results = await asyncio.gather(
            *(
                self._send("POST", path, {"image_url": url, "rank": rank})
                for rank, url in enumerate(image_urls, start=1)
            ),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                return self._handle_error(result)

        return ProductOperationResult(
            success=True,
            listing_id=listing_id,
            message=f"{len(results)} image(s) uploaded successfully",
        )

    def is_configured(self) -> bool:
        return bool(self.api_key and self.token and self.shop_id)
