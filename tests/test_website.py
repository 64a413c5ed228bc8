"""Tests for the website (JSON export) sales channel."""

import json
from pathlib import Path

import pytest

from pod_toolkit.config import Config, WebsiteConfig
from pod_toolkit.models import Product
from pod_toolkit.website import WebsiteChannel, generate_id, slugify


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    return tmp_path / "site" / "products"


@pytest.fixture
def channel(out_dir: Path) -> WebsiteChannel:
    """Return a WebsiteChannel writing to a not-yet-existing temp directory."""
    return WebsiteChannel(Config(website=WebsiteConfig(output_dir=str(out_dir))))


@pytest.fixture
def mug() -> Product:
    return Product(
        title="Mug",
        description="Nice",
        price=10,
        quantity=2,
        tags=("coffee", "gift"),
    )


def read_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))


class TestIds:
    def test_slugify(self):
        """Non-alphanumeric runs collapse to one hyphen, edges are trimmed"""
        assert slugify("  Hello, World!!  Mug ") == "hello-world-mug"
        assert slugify("--Cool Mug--") == "cool-mug"

    def test_generate_id_has_timestamp_suffix(self):
        """Ids are the slug plus a base-36 timestamp"""
        listing_id = generate_id("Sunset Poster")
        prefix, suffix = listing_id.rsplit("-", 1)
        assert prefix == "sunset-poster"
        assert suffix.isalnum()
        assert int(suffix, 36) > 0


class TestCreateListing:
    @pytest.mark.asyncio
    async def test_writes_product_file(self, channel, out_dir, mug):
        """The product file round-trips title, price and quantity"""
        result = await channel.create_listing(mug)

        assert result.success is True
        assert result.listing_id.startswith("mug-")
        path = out_dir / f"{result.listing_id}.json"
        assert path.exists()

        data = read_json(path)
        assert data["id"] == result.listing_id
        assert data["title"] == "Mug"
        assert data["price"] == 10
        assert data["quantity"] == 2
        assert data["tags"] == ["coffee", "gift"]
        assert data["created_at"] == data["updated_at"]

    @pytest.mark.asyncio
    async def test_file_is_indented(self, channel, out_dir, mug):
        result = await channel.create_listing(mug)
        text = (out_dir / f"{result.listing_id}.json").read_text()
        assert text.startswith("{\n  ")

    @pytest.mark.asyncio
    async def test_catalogue_gets_one_entry_per_product(self, channel, mug):
        """Two creates upsert two distinct catalogue entries"""
        first = await channel.create_listing(mug)
        second = await channel.create_listing(
            Product(title="Poster", description="A3 print", price=15.5, quantity=7)
        )

        catalogue = read_json(channel.catalogue_path)
        assert len(catalogue) == 2
        assert {e["id"] for e in catalogue} == {first.listing_id, second.listing_id}
        assert catalogue[0] == {
            "id": first.listing_id,
            "title": "Mug",
            "price": 10,
            "quantity": 2,
        }

    @pytest.mark.asyncio
    async def test_corrupt_catalogue_is_replaced(self, channel, out_dir, mug):
        """An unreadable products.json starts over instead of failing"""
        out_dir.mkdir(parents=True)
        (out_dir / "products.json").write_text("{not json")

        result = await channel.create_listing(mug)

        assert result.success is True
        catalogue = read_json(channel.catalogue_path)
        assert [e["id"] for e in catalogue] == [result.listing_id]

    @pytest.mark.asyncio
    async def test_unwritable_directory_fails_gracefully(self, tmp_path, mug):
        """I/O errors come back as a failed result"""
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        channel = WebsiteChannel(Config(website=WebsiteConfig(output_dir=str(blocker))))

        result = await channel.create_listing(mug)

        assert result.success is False
        assert result.message == "Failed to save product to website channel"
        assert result.errors


    @pytest.mark.asyncio
    async def test_catalogue_failure_removes_product_file(self, channel, out_dir, mug):
        """A failed catalogue write leaves no orphan product file behind"""
        out_dir.mkdir(parents=True)
        # A directory named products.json cannot be written as a file
        (out_dir / "products.json").mkdir()

        result = await channel.create_listing(mug)

        assert result.success is False
        assert result.message == "Failed to save product to website channel"
        assert [p.name for p in out_dir.iterdir()] == ["products.json"]


class TestCorruptProductFile:
    """Product files that hold something other than a JSON object"""

    @pytest.mark.asyncio
    async def test_upload_images_fails_gracefully(self, channel, out_dir):
        out_dir.mkdir(parents=True)
        (out_dir / "x.json").write_text("[]")

        result = await channel.upload_images("x", ["https://img/1.png"])

        assert result.success is False
        assert result.message == "Failed to add images"
        assert "does not contain a JSON object" in result.errors[0]

    @pytest.mark.asyncio
    async def test_update_listing_fails_gracefully(self, channel, out_dir):
        out_dir.mkdir(parents=True)
        (out_dir / "x.json").write_text('"just a string"')

        result = await channel.update_listing("x", {"price": 3})

        assert result.success is False
        assert result.message == "Failed to update product"


class TestUpdateListing:
    @pytest.mark.asyncio
    async def test_merges_without_clobbering(self, channel, out_dir, mug):
        """Only the given fields change"""
        created = await channel.create_listing(mug)

        result = await channel.update_listing(created.listing_id, {"price": 12.5})

        assert result.success is True
        data = read_json(out_dir / f"{created.listing_id}.json")
        assert data["price"] == 12.5
        assert data["title"] == "Mug"
        assert data["quantity"] == 2
        assert data["tags"] == ["coffee", "gift"]

    @pytest.mark.asyncio
    async def test_reindexes_catalogue(self, channel, mug):
        created = await channel.create_listing(mug)
        await channel.update_listing(created.listing_id, {"title": "Big Mug", "quantity": 5})

        catalogue = read_json(channel.catalogue_path)
        assert catalogue == [
            {"id": created.listing_id, "title": "Big Mug", "price": 10, "quantity": 5}
        ]

    @pytest.mark.asyncio
    async def test_unknown_listing_is_not_found(self, channel, out_dir):
        result = await channel.update_listing("missing-123", {"price": 1})

        assert result.success is False
        assert result.message == "Product missing-123 not found"
        assert result.errors == [f"File not found: {out_dir / 'missing-123.json'}"]


class TestUploadImages:
    @pytest.mark.asyncio
    async def test_ranks_continue_from_existing_images(self, channel, out_dir, mug):
        """A second upload keeps numbering after the first"""
        created = await channel.create_listing(mug)

        await channel.upload_images(created.listing_id, ["https://img/1.png", "https://img/2.png"])
        result = await channel.upload_images(created.listing_id, ["https://img/3.png"])

        assert result.success is True
        assert result.message == "1 image(s) added to product JSON"
        data = read_json(out_dir / f"{created.listing_id}.json")
        assert data["images"] == [
            {"url": "https://img/1.png", "rank": 1},
            {"url": "https://img/2.png", "rank": 2},
            {"url": "https://img/3.png", "rank": 3},
        ]

    @pytest.mark.asyncio
    async def test_unknown_listing_is_not_found(self, channel):
        result = await channel.upload_images("nope", ["https://img/1.png"])
        assert result.success is False
        assert "not found" in result.message


def test_is_always_configured(channel):
    assert channel.is_configured() is True
