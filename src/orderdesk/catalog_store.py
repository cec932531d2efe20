"""Catalog storage for orderdesk.

The catalog is owned by another service; orderdesk only needs price and
display lookups plus a way to seed entries for local runs and tests.
"""

from decimal import Decimal
from pathlib import Path
from typing import Iterable

from .config import DATA_DIR
from .document_store import JsonDocumentFile
from .errors import DuplicateProductError, ProductNotFoundError
from .models import Product, _utc_now
from .pricing import to_minor_units

PRODUCTS_FILE = "products.json"


class ProductStore:
    """Read access to catalog products, keyed by product id."""

    def __init__(self, config_dir: Path | None = None):
        """
        Initialize ProductStore.

        Args:
            config_dir: Override data directory (for testing).
        """
        self.config_dir = config_dir or DATA_DIR
        self._file = JsonDocumentFile(self.config_dir, PRODUCTS_FILE, "products")

    def list_products(self) -> list[Product]:
        """List all catalog products."""
        return [Product.from_dict(p) for p in self._file.documents()]

    def get_product(self, product_id: str) -> Product:
        """
        Get a product by ID.

        Raises:
            ProductNotFoundError: If product doesn't exist.
        """
        for p in self.list_products():
            if p.product_id == product_id:
                return p
        raise ProductNotFoundError(product_id)

    def find_by_ids(self, product_ids: Iterable[str]) -> list[Product]:
        """Return the products matching any of the given ids; unknown ids are skipped."""
        wanted = set(product_ids)
        return [p for p in self.list_products() if p.product_id in wanted]

    def add_product(
        self,
        product_id: str,
        product_name: str,
        price: str,
        category: str = "",
        subcategory: str = "",
        description: str = "",
        images: list[str] | None = None,
        stock: int = 0,
    ) -> Product:
        """
        Add a product to the catalog.

        Raises:
            DuplicateProductError: If the product id is taken.
            InvalidPriceError: If the price isn't a non-negative amount in
                whole minor units.
        """
        to_minor_units(product_id, price)

        now = _utc_now()
        product = Product(
            product_id=product_id,
            product_name=product_name,
            price=str(Decimal(str(price))),
            category=category,
            subcategory=subcategory,
            description=description,
            images=images or [],
            stock=stock,
            created_at=now,
            updated_at=now,
        )

        with self._file.locked():
            data = self._file.load()
            for p in data["products"]:
                if p["product_id"] == product_id:
                    raise DuplicateProductError(product_id)
            data["products"].append(product.to_dict())
            self._file.save(data)

        return product
