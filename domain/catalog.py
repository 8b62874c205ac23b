from __future__ import annotations

from typing import Dict, Iterable, Optional

from .models import Product


DEFAULT_PRODUCTS = (
    Product(code="dana10", name="dana10", price=10000),
    Product(code="dana20", name="dana20", price=20000),
    Product(code="dana30", name="dana30", price=30000),
    Product(code="dana50", name="dana50", price=50000),
    Product(code="dana100", name="dana100", price=100000),
    Product(code="dana44", name="dana44", price=44000),
)


class Catalog:
    """Read-only product list keyed by product code."""

    def __init__(self, products: Iterable[Product] = DEFAULT_PRODUCTS) -> None:
        self._products: Dict[str, Product] = {p.code: p for p in products}

    def get(self, code: str) -> Optional[Product]:
        return self._products.get(code)

    def all(self) -> list[Product]:
        return list(self._products.values())
