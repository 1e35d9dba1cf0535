# src/main.py — v1
"""CLI entry point — catalog, likes, cart, login/logout, cache commands.

Usage:
    storesync categories [--refresh] [--retry N]
    storesync category <slug>
    storesync products list [--page N --limit N] | show <slug> | category <slug>
    storesync products featured | new | limited | home [--refresh]
    storesync likes list | toggle <product_id>
    storesync cart show | add <id> [--size S --color C --qty N] | remove <id> | clear
    storesync login <token> | logout
    storesync cache sweep
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from storesync.version import __version__

logger = logging.getLogger(__name__)


class _CliSignOutListener:
    """Reports sign-out notifications on the console."""

    def on_signed_out(self, event) -> None:
        logger.warning(
            "Sign-in required (%s); run 'storesync login <token>' and retry %s",
            event.reason, event.return_path,
        )


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        from storesync.config.settings import load_settings

        settings = load_settings()
        _setup_logging(settings, args.verbose)
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="storesync",
        description=f"storesync v{__version__} — storefront client state",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- categories ---
    p_categories = subparsers.add_parser("categories", help="Show the category tree")
    p_categories.add_argument(
        "--refresh", action="store_true", help="Bypass the local cache",
    )
    p_categories.add_argument(
        "--retry", type=int, default=1,
        help="Attempts with jittered backoff on API errors (default: 1)",
    )
    p_categories.set_defaults(func=_cmd_categories)

    p_category = subparsers.add_parser("category", help="Show one category")
    p_category.add_argument("slug", help="Category slug")
    p_category.set_defaults(func=_cmd_category)

    # --- products ---
    p_products = subparsers.add_parser("products", help="Browse the product catalog")
    products_sub = p_products.add_subparsers(dest="products_command", required=True)
    p_list = products_sub.add_parser("list", help="One page of products")
    p_list.add_argument("--page", type=int, default=1)
    p_list.add_argument("--limit", type=int, default=10)
    p_show = products_sub.add_parser("show", help="Show one product")
    p_show.add_argument("slug", help="Product slug")
    p_in_category = products_sub.add_parser("category", help="Products of a category")
    p_in_category.add_argument("slug", help="Category slug")
    products_sub.add_parser("featured", help="Featured products")
    products_sub.add_parser("new", help="New arrivals")
    products_sub.add_parser("limited", help="Limited edition products")
    p_home = products_sub.add_parser("home", help="Homepage sections")
    p_home.add_argument(
        "--refresh", action="store_true", help="Bypass the local cache",
    )
    p_products.set_defaults(func=_cmd_products)

    # --- likes ---
    p_likes = subparsers.add_parser("likes", help="Liked products")
    likes_sub = p_likes.add_subparsers(dest="likes_command", required=True)
    likes_sub.add_parser("list", help="List liked product ids")
    p_toggle = likes_sub.add_parser("toggle", help="Like or unlike a product")
    p_toggle.add_argument("product_id")
    p_likes.set_defaults(func=_cmd_likes)

    # --- cart ---
    p_cart = subparsers.add_parser("cart", help="Shopping cart")
    cart_sub = p_cart.add_subparsers(dest="cart_command", required=True)
    cart_sub.add_parser("show", help="Show cart lines")
    p_add = cart_sub.add_parser("add", help="Add a line")
    p_add.add_argument("product_id")
    p_add.add_argument("--size", default="")
    p_add.add_argument("--color", default="")
    p_add.add_argument("--qty", type=int, default=1)
    p_add.add_argument("--name", default="")
    p_add.add_argument("--price", type=float, default=0.0)
    p_remove = cart_sub.add_parser("remove", help="Remove a line")
    p_remove.add_argument("product_id")
    p_remove.add_argument("--size", default="")
    p_remove.add_argument("--color", default="")
    cart_sub.add_parser("clear", help="Empty the cart")
    p_cart.set_defaults(func=_cmd_cart)

    # --- credentials ---
    p_login = subparsers.add_parser("login", help="Store a bearer token")
    p_login.add_argument("token")
    p_login.set_defaults(func=_cmd_login)

    p_logout = subparsers.add_parser("logout", help="Forget the bearer token")
    p_logout.set_defaults(func=_cmd_logout)

    # --- cache ---
    p_cache = subparsers.add_parser("cache", help="Local cache maintenance")
    cache_sub = p_cache.add_subparsers(dest="cache_command", required=True)
    cache_sub.add_parser("sweep", help="Remove expired cache entries")
    p_cache.set_defaults(func=_cmd_cache)

    return parser


def _open(settings):
    from storesync.api.facade import create_storefront

    return create_storefront(settings, listeners=[_CliSignOutListener()])


async def _cmd_categories(args: argparse.Namespace, settings) -> int:
    """Print the category tree."""
    from storesync.client.errors import ApiError
    from storesync.client.retry import with_jittered_retry

    async with _open(settings) as storefront:
        service = storefront.categories
        fetch = service.refresh_category_tree if args.refresh else service.get_category_tree
        tree = await with_jittered_retry(
            fetch,
            attempts=max(args.retry, 1),
            retry_on=(ApiError,),
            operation="categories",
        )
    for category in tree:
        _print_category(category)
    return 0


async def _cmd_category(args: argparse.Namespace, settings) -> int:
    async with _open(settings) as storefront:
        category = await storefront.categories.get_category_by_slug(args.slug)
    _print_category(category)
    return 0


async def _cmd_products(args: argparse.Namespace, settings) -> int:
    """Browse products."""
    async with _open(settings) as storefront:
        service = storefront.products
        command = args.products_command
        if command == "show":
            product = await service.get_product_by_slug(args.slug)
            _print_product(product)
            for size in product.sizes:
                print(f"    size  {size.value or size.name}")
            for color in product.colors:
                print(f"    color {color.value or color.name}")
            return 0
        if command == "home":
            fetch = (
                service.refresh_homepage_sections if args.refresh
                else service.get_homepage_sections
            )
            for section, products in (await fetch()).items():
                print(f"{section}:")
                for product in products:
                    _print_product(product)
            return 0

        if command == "list":
            products = await service.get_products(args.page, args.limit)
        elif command == "category":
            products = await service.get_products_by_category(args.slug)
        elif command == "featured":
            products = await service.get_featured_products()
        elif command == "new":
            products = await service.get_new_arrivals()
        else:
            products = await service.get_limited_edition_products()
    for product in products:
        _print_product(product)
    return 0


async def _cmd_likes(args: argparse.Namespace, settings) -> int:
    """List or toggle liked products."""
    async with _open(settings) as storefront:
        if args.likes_command == "toggle":
            liked = await storefront.likes.toggle_like(args.product_id)
            print(f"{args.product_id}: {'liked' if liked else 'unliked'}")
            return 0
        for product_id in storefront.likes.liked_ids:
            print(product_id)
    return 0


async def _cmd_cart(args: argparse.Namespace, settings) -> int:
    """Show or change the cart."""
    from storesync.state.models import CartLine

    async with _open(settings) as storefront:
        cart = storefront.cart
        if args.cart_command == "add":
            await cart.add_line(
                CartLine(
                    item_id=args.product_id,
                    quantity=args.qty,
                    size=args.size,
                    color=args.color,
                    name=args.name,
                    price=args.price,
                )
            )
        elif args.cart_command == "remove":
            await cart.remove_line(args.product_id, args.size, args.color)
        elif args.cart_command == "clear":
            await cart.clear()

        for line in cart.items:
            variant = "/".join(v for v in line.variant_key if v) or "-"
            print(f"  {line.item_id:<12} {variant:<12} x{line.quantity:<4} {line.subtotal:>10.2f}")
        print(f"  Items: {cart.total_items}   Total: {cart.total_price:.2f}")
    return 0


async def _cmd_login(args: argparse.Namespace, settings) -> int:
    storefront = _open(settings)
    try:
        storefront.credentials.set_token(args.token)
    finally:
        await storefront.aclose()
    print("Token stored.")
    return 0


async def _cmd_logout(args: argparse.Namespace, settings) -> int:
    storefront = _open(settings)
    try:
        storefront.credentials.clear()
    finally:
        await storefront.aclose()
    print("Token cleared.")
    return 0


async def _cmd_cache(args: argparse.Namespace, settings) -> int:
    storefront = _open(settings)
    try:
        removed = storefront.cache.sweep_expired()
    finally:
        await storefront.aclose()
    print(f"Removed {removed} expired cache entries.")
    return 0


def _print_category(category, depth: int = 0) -> None:
    """Print a category and its children as an indented tree."""
    marker = "" if category.is_active else " (inactive)"
    print(f"{'  ' * depth}- {category.name} [{category.slug}]{marker}")
    for child in category.children:
        _print_category(child, depth + 1)


def _print_product(product) -> None:
    stock = "" if not product.inventory or product.in_stock() else " (sold out)"
    print(f"  {product.slug:<32} {product.effective_price:>10.2f}  {product.name}{stock}")


def _setup_logging(settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from storesync.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format="text" if verbose else settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
