"""Command-line interface for orderdesk."""

import argparse
import json
import sys

from . import __version__
from .catalog_store import ProductStore
from .config import Settings
from .errors import OrderdeskError
from .models import Order
from .order_store import OrderStore


def format_amount(minor_units: int, currency: str) -> str:
    return f"{minor_units // 100}.{minor_units % 100:02d} {currency}"


def format_order(order: Order, currency: str) -> str:
    """One-line summary of an order."""
    paid = "paid" if order.is_paid else "unpaid"
    return (
        f"{order.id[:8]}  {order.order_status.value:<18}  {paid:<6}  "
        f"{format_amount(order.amount, currency):>14}  {order.payment_method.value:<8}  "
        f"user={order.user_id}"
    )


def cmd_products_add(args: argparse.Namespace) -> int:
    """Add a product to the catalog."""
    try:
        settings = Settings.from_env()
        store = ProductStore(settings.data_dir)
        product = store.add_product(
            product_id=args.product_id,
            product_name=args.name,
            price=args.price,
            category=args.category or "",
            stock=args.stock,
        )
        print(f"Added product: {product.product_id}")
        print(f"  Name: {product.product_name}")
        print(f"  Price: {product.price}")
        return 0

    except OrderdeskError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_products_list(args: argparse.Namespace) -> int:
    """List catalog products."""
    try:
        settings = Settings.from_env()
        products = ProductStore(settings.data_dir).list_products()

        if args.json:
            print(json.dumps([p.to_dict() for p in products], indent=2))
            return 0

        if not products:
            print("No products.")
            return 0

        for p in products:
            print(f"{p.product_id:<12}  {p.price:>10}  {p.product_name}")
        return 0

    except OrderdeskError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_orders_list(args: argparse.Namespace) -> int:
    """List orders, newest first."""
    try:
        settings = Settings.from_env()
        store = OrderStore(settings.data_dir)
        orders = store.list_user_orders(args.user) if args.user else store.list_orders()

        if args.json:
            print(json.dumps([o.to_dict() for o in orders], indent=2))
            return 0

        if not orders:
            print("No orders.")
            return 0

        for order in orders:
            print(format_order(order, settings.currency_code))
        return 0

    except OrderdeskError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_orders_show(args: argparse.Namespace) -> int:
    """Show a single order as JSON."""
    try:
        settings = Settings.from_env()
        order = OrderStore(settings.data_dir).get_order(args.order_id)
        print(json.dumps(order.to_dict(), indent=2))
        return 0

    except OrderdeskError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the API server."""
    try:
        import uvicorn

        from .log import configure_logging

        settings = Settings.from_env()
        configure_logging(settings.log_level)

        if not settings.signing_secret:
            print(
                "Warning: no signing secret configured; payment verification will fail.",
                file=sys.stderr,
            )

        print("Starting orderdesk API server...")
        print(f"Data directory: {settings.data_dir}")
        print(f"API docs: http://{args.host}:{args.port}/docs")
        print()

        # When reload is enabled, uvicorn requires the app as an import string
        app_target = "orderdesk.api:app" if args.reload else None
        if app_target is None:
            from .api import app
            app_target = app

        uvicorn.run(
            app_target,
            host=args.host,
            port=args.port,
            reload=args.reload,
            workers=1,
        )
        return 0

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="orderdesk",
        description="Order placement, payment verification and fulfilment service",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument(
        "--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)"
    )
    serve_parser.add_argument(
        "--port", "-p", type=int, default=8000, help="Port to bind to (default: 8000)"
    )
    serve_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    # products (subcommand group)
    products_parser = subparsers.add_parser("products", help="Seed and list catalog products")
    products_subparsers = products_parser.add_subparsers(dest="products_command")

    # products add
    products_add_parser = products_subparsers.add_parser("add", help="Add a product")
    products_add_parser.add_argument("product_id", help="Product ID, e.g. PROD001")
    products_add_parser.add_argument("--name", "-n", required=True, help="Product name")
    products_add_parser.add_argument(
        "--price", required=True, help="Price in major currency units, e.g. 499.99"
    )
    products_add_parser.add_argument("--category", "-c", help="Category")
    products_add_parser.add_argument("--stock", type=int, default=0, help="Units in stock")

    # products list
    products_list_parser = products_subparsers.add_parser("list", help="List products")
    products_list_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # orders (subcommand group)
    orders_parser = subparsers.add_parser("orders", help="Inspect orders")
    orders_subparsers = orders_parser.add_subparsers(dest="orders_command")

    # orders list
    orders_list_parser = orders_subparsers.add_parser("list", help="List orders")
    orders_list_parser.add_argument("--user", "-u", help="Only orders of this user ID")
    orders_list_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # orders show
    orders_show_parser = orders_subparsers.add_parser("show", help="Show an order")
    orders_show_parser.add_argument("order_id", help="Order ID")

    return parser


def main() -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 0

    # Handle products subcommands
    if args.command == "products":
        if not getattr(args, "products_command", None):
            parser.parse_args(["products", "--help"])
            return 0
        if args.products_command == "add":
            return cmd_products_add(args)
        elif args.products_command == "list":
            return cmd_products_list(args)

    # Handle orders subcommands
    if args.command == "orders":
        if not getattr(args, "orders_command", None):
            parser.parse_args(["orders", "--help"])
            return 0
        if args.orders_command == "list":
            return cmd_orders_list(args)
        elif args.orders_command == "show":
            return cmd_orders_show(args)

    if args.command == "serve":
        return cmd_serve(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
