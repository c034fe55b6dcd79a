# backend/carniceria/services/products_service.py
"""
Products Service - the catalog.

Products are edited directly (including quantity, for restocking and manual
corrections). Deletion is a hard delete: sales that reference the product
are left untouched and later render it as a placeholder.
"""
from __future__ import annotations

from ..extensions import db
from ..models import Product
from ..validation import fits_db_integer

PRODUCT_MUTABLE_FIELDS = {
    "name",
    "description",
    "unit",
    "quantity",
    "cost_price",
    "sale_price",
    "min_stock",
    "is_active",
}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def get_catalog() -> list[Product]:
    """Current catalog ordered by name (ORM objects, for reporting)."""
    return db.session.query(Product).order_by(Product.name.asc(), Product.id.asc()).all()


def list_products() -> list[dict]:
    return [p.to_dict() for p in get_catalog()]


def _find_product(product_id: int) -> Product | None:
    # Ids beyond the integer column range cannot exist
    if not fits_db_integer(product_id):
        return None
    return db.session.get(Product, product_id)


def get_product(product_id: int) -> dict | None:
    p = _find_product(product_id)
    return p.to_dict() if p else None


def create_product(*, patch: dict) -> dict:
    """Create product using a validated patch dict."""
    p = Product()
    apply_product_patch(p, patch)

    db.session.add(p)
    db.session.commit()
    return p.to_dict()


def update_product(*, product_id: int, patch: dict) -> dict | None:
    """
    Update a product.

    Returns:
        Updated product dict, or None if not found
    """
    p = _find_product(product_id)
    if not p:
        return None

    apply_product_patch(p, patch)
    db.session.commit()
    return p.to_dict()


def delete_product(*, product_id: int) -> bool:
    """
    Hard-delete a product. Historical sales keep their product_id.

    Returns:
        True if deleted, False if not found
    """
    p = _find_product(product_id)
    if not p:
        return False

    db.session.delete(p)
    db.session.commit()
    return True


def list_low_stock_products() -> list[Product]:
    """Products whose quantity-on-hand is at or below their minimum stock."""
    return [p for p in get_catalog() if p.is_low_stock]
