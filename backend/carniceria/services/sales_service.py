"""
Sales Service - stock-checked sale registration and the sale ledger.

A sale is registered in one transaction: lock the product row, check the
requested quantity against quantity-on-hand, apply a relative decrement
guarded by the same condition, append the ledger row, commit. Either both
writes are visible or neither is.
"""
from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, update

from ..extensions import db
from ..models import Sale, Product, format_decimal
from ..models.inventory import QUANTITY_SCALE, money_type
from ..time_utils import utcnow
from .concurrency import begin_write_transaction, lock_for_update, run_with_retry


class SaleError(Exception):
    """Raised for sale operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ProductNotFoundError(SaleError):
    """The referenced product does not exist."""

    def __init__(self, product_id: int):
        super().__init__("Product not found", details={"productId": product_id})
        self.product_id = product_id


class InsufficientStockError(SaleError):
    """Requested quantity exceeds quantity-on-hand. Recoverable by the user."""

    def __init__(self, available: Decimal, requested: Decimal):
        super().__init__(
            f"Insufficient stock. Available: {format_decimal(available)}, "
            f"Requested: {format_decimal(requested)}",
            details={
                "available": format_decimal(available),
                "requested": format_decimal(requested),
            },
        )
        self.available = available
        self.requested = requested


def _decrement_stock(product_id: int, quantity: Decimal) -> bool:
    """
    Relative decrement; False when the stock precondition no longer holds.

    Both sides are rounded to the column scale in SQL: SQLite stores NUMERIC
    as REAL, so an unrounded difference drifts (0.30 - 0.10 -> 0.1999...).
    """
    on_hand = func.round(Product.quantity, QUANTITY_SCALE, type_=money_type())
    stmt = (
        update(Product)
        .where(Product.id == product_id, on_hand >= quantity)
        .values(quantity=func.round(Product.quantity - quantity, QUANTITY_SCALE, type_=money_type()))
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    return result.rowcount == 1


def register_sale(*, product_id: int, quantity: Decimal, total_price: Decimal) -> Sale:
    """
    Record a sale and decrement stock atomically.

    `quantity` and `total_price` are validated Decimals (see
    validation.enforce_rules_sale); total_price is stored as given.

    Raises:
        ProductNotFoundError: no product with product_id
        InsufficientStockError: quantity > quantity-on-hand
    """
    def _op():
        try:
            begin_write_transaction()
            product = lock_for_update(
                db.session.query(Product).filter(Product.id == product_id)
            ).first()
            if product is None:
                raise ProductNotFoundError(product_id)

            available = Decimal(product.quantity)
            if quantity > available:
                raise InsufficientStockError(available=available, requested=quantity)

            if not _decrement_stock(product_id, quantity):
                # Row changed between the locked read and the update
                db.session.expire(product)
                raise InsufficientStockError(available=Decimal(product.quantity), requested=quantity)

            sale = Sale(
                product_id=product_id,
                quantity=quantity,
                total_price=total_price,
                sold_at=utcnow(),
            )
            db.session.add(sale)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return sale

    return run_with_retry(_op)


def list_sales() -> list[Sale]:
    """All sales, newest first, with their product joined when it still exists."""
    return (
        db.session.query(Sale)
        .order_by(Sale.sold_at.desc(), Sale.id.desc())
        .all()
    )


def list_sales_between(start, end) -> list[Sale]:
    """Sales with start <= sold_at < end (UTC-naive bounds), oldest first."""
    return (
        db.session.query(Sale)
        .filter(Sale.sold_at >= start, Sale.sold_at < end)
        .order_by(Sale.sold_at.asc(), Sale.id.asc())
        .all()
    )
