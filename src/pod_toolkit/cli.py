#!/usr/bin/env python3
# CLI entry point for pod-toolkit
# Validate products and publish them to a sales channel

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict

from pod_toolkit import __version__
from pod_toolkit.channels import CHANNELS, get_channel
from pod_toolkit.config import (
    Config,
    ConfigurationError,
    get_config,
    missing_channel_config,
    validate_channel_config,
)
from pod_toolkit.logging_config import bind_command, configure_logging
from pod_toolkit.models import Product, ProductInput
from pod_toolkit.providers import PROVIDERS, get_provider
from pod_toolkit.validators import (
    convert_to_product,
    format_price,
    parse_list,
    parse_price,
    validate_product_input,
)

logger = logging.getLogger(__name__)


def _input_from_args(args: argparse.Namespace) -> ProductInput:
    return ProductInput(
        title=args.title,
        description=args.description,
        price=args.price,
        quantity=args.quantity,
        tags=args.tags,
        materials=args.materials,
        images=args.images,
    )


def _print_errors(header: str, errors: list[str]) -> None:
    print(header, file=sys.stderr)
    for error in errors:
        print(f"  - {error}", file=sys.stderr)


def _print_summary(product: Product, images: list[str] | None, indent: str = "") -> None:
    print(f"{indent}Title: {product.title}")
    print(f"{indent}Price: {format_price(product.price)}")
    print(f"{indent}Quantity: {product.quantity}")
    if product.tags:
        print(f"{indent}Tags ({len(product.tags)}): {', '.join(product.tags)}")
    if product.materials:
        print(f"{indent}Materials ({len(product.materials)}): {', '.join(product.materials)}")
    if images:
        print(f"{indent}Images: {len(images)} URL(s) provided")


# ===== validate-product =====


def run_validate_product(args: argparse.Namespace) -> int:
    """Validate product data without touching the network or disk."""
    print("🔍 Validating product data...\n")

    product_input = _input_from_args(args)
    if args.verbose:
        print("📦 Product input:")
        print(json.dumps(asdict(product_input), indent=2))
        print()

    errors = validate_product_input(product_input)
    if errors:
        _print_errors("❌ Validation failed:\n", errors)
        print("\n💡 Fix the errors above and try again.", file=sys.stderr)
        return 1

    product = convert_to_product(product_input)

    print("✅ Validation successful!\n")
    print("📋 Product summary:")
    description = product.description
    if len(description) > 60:
        description = description[:60] + "..."
    print(f"  Description: {description}")
    _print_summary(product, product_input.images, indent="  ")

    if args.verbose:
        print("\n📋 Product payload preview:")
        print(json.dumps(product.to_dict(), indent=2))

    print("\n💡 Product is ready to be submitted.")
    print('   Use the "add-product" command to create the listing.')
    return 0


# ===== add-product =====


def _report_config(config: Config, channel: str) -> None:
    missing = missing_channel_config(config, channel)
    print(f"\n🔧 Configuration check for '{channel}' (dry-run mode):")
    if channel == "etsy":
        for var in ("ETSY_API_KEY", "ETSY_TOKEN", "ETSY_SHOP_ID"):
            print(f"  {var}: {'❌ Missing' if var in missing else '✅ Set'}")
    else:
        print(f"  Output directory: {config.website.output_dir}")
    if missing:
        print(f"  ⚠️  Missing: {', '.join(missing)}")


async def run_add_product(args: argparse.Namespace, config: Config) -> int:
    """Validate product data and publish it to the selected channel.

    Returns:
        Process exit code
    """
    channel_name = (args.channel or "").lower()
    if channel_name not in CHANNELS:
        print(
            f"❌ Unknown channel '{args.channel}'. Available channels: {', '.join(CHANNELS)}",
            file=sys.stderr,
        )
        return 1

    product_input = _input_from_args(args)
    if args.verbose:
        print("📦 Product input prepared:")
        print(json.dumps(asdict(product_input), indent=2))

    errors = validate_product_input(product_input)
    if errors:
        _print_errors("❌ Validation errors:", errors)
        return 1
    logger.debug("Validation passed", extra={"channel": channel_name})

    if args.dry_run:
        _report_config(config, channel_name)
    else:
        try:
            validate_channel_config(config, channel_name)
        except ConfigurationError as e:
            print(f"❌ {e}", file=sys.stderr)
            return 1

    product = convert_to_product(
        product_input,
        taxonomy_id=args.taxonomy_id,
        shipping_profile_id=args.shipping_profile_id,
    )

    if args.dry_run:
        print("\n🧪 DRY RUN: Would create product listing with:")
    else:
        print(f"\n📝 Creating product listing on {channel_name}...")
    _print_summary(product, product_input.images)

    if args.verbose:
        print("\n📋 Product payload:")
        print(json.dumps(product.to_dict(), indent=2))

    if args.dry_run:
        print("\n✅ Dry run completed successfully!")
        print("💡 Product data is valid and ready to be submitted.")
        print("   Remove --dry-run to create the listing.")
        return 0

    channel = get_channel(channel_name, config)
    result = await channel.create_listing(product)

    if not result.success:
        _print_errors(f"\n❌ Failed to create product listing\n{result.message}", result.errors)
        return 1

    print("\n✅ Success!")
    print(result.message)
    if result.listing_id:
        print(f"Listing ID: {result.listing_id}")

    if product_input.images and result.listing_id:
        print("\nUploading images...")
        image_result = await channel.upload_images(result.listing_id, product_input.images)
        if image_result.success:
            print(f"✅ {image_result.message}")
        else:
            # Listing exists already; image failures do not fail the command
            _print_errors("⚠️  Warning: Failed to upload images", image_result.errors)

    return 0


# ===== provider-products =====


async def run_provider_products(args: argparse.Namespace, config: Config) -> int:
    """List products from a print provider, or show one with its variants."""
    try:
        validate_channel_config(config, args.provider)
        provider = get_provider(args.provider, config)
    except (ConfigurationError, ValueError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    if args.id is not None:
        product = await provider.get_product_info(args.id)
        if product is None:
            print(f"❌ Product {args.id} not found on {provider.name}", file=sys.stderr)
            return 1
        price = format_price(product.price) if product.price is not None else "n/a"
        print(f"📦 {product.name} (sync id {product.sync_id}) - {price}")
        if product.image:
            print(f"  Image: {product.image}")
        for variant in product.variants:
            details = ", ".join(v for v in (variant.size, variant.color) if v)
            variant_price = format_price(variant.price) if variant.price is not None else "n/a"
            print(f"  - {variant.name} [{details}] {variant_price} (variant {variant.sync_variant_id})")
        return 0

    products = await provider.get_products()
    if not products:
        print(f"No products found on {provider.name}.")
        return 0
    print(f"📦 {len(products)} product(s) on {provider.name}:")
    for product in products:
        price = format_price(product.price) if product.price is not None else "n/a"
        print(f"  - [{product.sync_id}] {product.name} {price}")
    return 0


# ===== argument parsing =====


def _add_product_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-t", "--title", required=True, help="Product title")
    parser.add_argument("-d", "--description", required=True, help="Product description")
    parser.add_argument(
        "-p", "--price", required=True, type=parse_price, help="Product price, e.g. 19.99"
    )
    parser.add_argument("-q", "--quantity", required=True, type=int, help="Available quantity")
    parser.add_argument("--tags", type=parse_list, help="Comma-separated tags (max 13)")
    parser.add_argument("--materials", type=parse_list, help="Comma-separated materials")
    parser.add_argument("--images", type=parse_list, help="Comma-separated image URLs")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pod-toolkit",
        description=(
            "Create print-on-demand products and publish them to any sales channel"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    validate = subparsers.add_parser(
        "validate-product", help="Validate product data without creating a listing"
    )
    _add_product_arguments(validate)
    validate.add_argument("--verbose", action="store_true", help="Show detailed validation output")

    add = subparsers.add_parser("add-product", help="Add a new product listing to a sales channel")
    _add_product_arguments(add)
    add.add_argument(
        "-c",
        "--channel",
        default="etsy",
        help=f"Sales channel to publish to ({', '.join(CHANNELS)}; default: etsy)",
    )
    add.add_argument("--taxonomy-id", type=int, help="Etsy taxonomy id (default: 1)")
    add.add_argument("--shipping-profile-id", type=int, help="Etsy shipping profile id")
    add.add_argument("--dry-run", action="store_true", help="Validate without publishing")
    add.add_argument("--verbose", action="store_true", help="Show detailed debug output")

    products = subparsers.add_parser(
        "provider-products", help="List products from a print-on-demand provider"
    )
    products.add_argument(
        "--provider",
        default="printful",
        choices=PROVIDERS,
        help="Print provider (default: printful)",
    )
    products.add_argument("--id", type=int, help="Show a single product and its variants")
    products.add_argument("--verbose", action="store_true", help="Show detailed debug output")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    config = get_config()
    configure_logging("DEBUG" if args.verbose else config.log_level)
    bind_command(args.command)

    if args.command == "validate-product":
        code = run_validate_product(args)
    elif args.command == "add-product":
        code = asyncio.run(run_add_product(args, config))
    else:
        code = asyncio.run(run_provider_products(args, config))

    sys.exit(code)


if __name__ == "__main__":
    main()
