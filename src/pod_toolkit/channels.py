# Sales channel interface and registry
# A channel is any storefront a validated Product can be published to

from typing import Any, Mapping, Protocol

from pod_toolkit.config import Config
from pod_toolkit.models import Product, ProductOperationResult

CHANNELS = ("etsy", "website")


class SalesChannel(Protocol):
    """Common interface for storefront back ends (Etsy, website export, ...).

    Implementations catch their own transport and I/O failures and report
    them through ProductOperationResult; none of these methods raise.
    """

    name: str

    async def create_listing(self, product: Product) -> ProductOperationResult:
        ...

    async def update_listing(
        self, listing_id: str, changes: Mapping[str, Any]
    ) -> ProductOperationResult:
        ...

    async def upload_images(
        self, listing_id: str, image_urls: list[str]
    ) -> ProductOperationResult:
        ...

    def is_configured(self) -> bool:
        ...


def get_channel(name: str, config: Config) -> SalesChannel:
    """Return the channel implementation registered under ``name``.

    Raises:
        ValueError: If ``name`` is not a known channel.
    """
    ch = (name or "").lower()
    if ch == "etsy":
        from pod_toolkit.etsy import EtsyChannel
        return EtsyChannel(config)
    if ch == "website":
        from pod_toolkit.website import WebsiteChannel
        return WebsiteChannel(config)
    raise ValueError(
        f"Unknown channel '{name}'. Available channels: {', '.join(CHANNELS)}"
    )
