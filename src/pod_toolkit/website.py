"""Website sales channel: JSON export for a self-hosted storefront.

Products are written to ``{output_dir}/{id}.json`` (one file per product)
next to a ``products.json`` catalogue index that any static site or
frontend framework can read.

The catalogue is read and rewritten without locking; two CLI runs against
the same directory at once can lose an entry (last writer wins).
"""

import json
import logging
import re
import time
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from pod_toolkit.config import Config
from pod_toolkit.models import Product, ProductImage, ProductOperationResult

logger = logging.getLogger(__name__)

CATALOGUE_FILENAME = "products.json"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def slugify(title: str) -> str:
    """Lower-case, collapse non-alphanumeric runs to '-', trim hyphens."""
    return _NON_ALNUM.sub("-", title.lower()).strip("-")


def generate_id(title: str) -> str:
    """URL-safe listing id: title slug plus a base-36 millisecond timestamp."""
    return f"{slugify(title)}-{_to_base36(int(time.time() * 1000))}"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class WebsiteChannel:
    """Exports products as JSON files instead of calling a remote API."""

    name = "Website"

    def __init__(self, config: Config) -> None:
        self._base = Path(config.website.output_dir)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @property
    def output_dir(self) -> Path:
        return self._base

    def product_path(self, listing_id: str) -> Path:
        return self._base / f"{listing_id}.json"

    @property
    def catalogue_path(self) -> Path:
        return self._base / CATALOGUE_FILENAME

    @staticmethod
    def _write_json(path: Path, data: Any) -> None:
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")

    def _load_product(self, listing_id: str) -> dict[str, Any] | None:
        path = self.product_path(listing_id)
        if not path.exists():
            return None
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Product file {path} does not contain a JSON object")
        return data

    def _not_found(self, listing_id: str) -> ProductOperationResult:
        return ProductOperationResult(
            success=False,
            message=f"Product {listing_id} not found",
            errors=[f"File not found: {self.product_path(listing_id)}"],
        )

    def load_catalogue(self) -> list[dict[str, Any]]:
        """Return the catalogue entries; a missing or unreadable file is empty."""
        path = self.catalogue_path
        if not path.exists():
            return []
        try:
            catalogue = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Catalogue %s is unreadable, starting a new one", path)
            return []
        if not isinstance(catalogue, list):
            logger.warning("Catalogue %s is not a JSON array, starting a new one", path)
            return []
        return catalogue

    def _update_catalogue(self, listing_id: str, product: Mapping[str, Any]) -> None:
        """Upsert the summary entry for ``listing_id`` into products.json."""
        catalogue = self.load_catalogue()
        entry = {
            "id": listing_id,
            "title": product.get("title"),
            "price": product.get("price"),
            "quantity": product.get("quantity"),
        }
        for i, existing in enumerate(catalogue):
            if isinstance(existing, dict) and existing.get("id") == listing_id:
                catalogue[i] = {**existing, **entry}
                break
        else:
            catalogue.append(entry)
        self._write_json(self.catalogue_path, catalogue)

    # ------------------------------------------------------------------
    # SalesChannel implementation
    # ------------------------------------------------------------------

    async def create_listing(self, product: Product) -> ProductOperationResult:
        try:
            self._base.mkdir(parents=True, exist_ok=True)
            listing_id = generate_id(product.title)
            path = self.product_path(listing_id)
            now = _now()
            payload = {
                "id": listing_id,
                **product.to_dict(),
                "created_at": now,
                "updated_at": now,
            }
            self._write_json(path, payload)
            try:
                self._update_catalogue(listing_id, payload)
            except (OSError, TypeError, ValueError):
                # No product file without a catalogue entry
                path.unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to write product %r: %s", product.title, e)
            return ProductOperationResult(
                success=False,
                message="Failed to save product to website channel",
                errors=[str(e)],
            )

        logger.info("Saved product", extra={"listing_id": listing_id, "path": str(path)})
        return ProductOperationResult(
            success=True,
            listing_id=listing_id,
            message=f"Product saved to {path}",
        )

    async def update_listing(
        self, listing_id: str, changes: Mapping[str, Any]
    ) -> ProductOperationResult:
        try:
            existing = self._load_product(listing_id)
            if existing is None:
                return self._not_found(listing_id)
            fields = {
                k: list(v) if isinstance(v, tuple) else v for k, v in changes.items()
            }
            updated = {**existing, **fields, "id": listing_id, "updated_at": _now()}
            self._write_json(self.product_path(listing_id), updated)
            self._update_catalogue(listing_id, updated)
        except (OSError, TypeError, ValueError) as e:
            return ProductOperationResult(
                success=False,
                message="Failed to update product",
                errors=[str(e)],
            )

        return ProductOperationResult(
            success=True,
            listing_id=listing_id,
            message=f"Product {listing_id} updated",
        )

    async def upload_images(
        self, listing_id: str, image_urls: list[str]
    ) -> ProductOperationResult:
        """Append image entries, continuing the rank after existing images."""
        try:
            existing = self._load_product(listing_id)
            if existing is None:
                return self._not_found(listing_id)
            images = list(existing.get("images") or [])
            for url in image_urls:
                images.append(asdict(ProductImage(url=url, rank=len(images) + 1)))
            existing["images"] = images
            existing["updated_at"] = _now()
            self._write_json(self.product_path(listing_id), existing)
        except (OSError, TypeError, ValueError) as e:
            return ProductOperationResult(
                success=False,
                message="Failed to add images",
                errors=[str(e)],
            )

        return ProductOperationResult(
            success=True,
            listing_id=listing_id,
            message=f"{len(image_urls)} image(s) added to product JSON",
        )

    def is_configured(self) -> bool:
        return True
