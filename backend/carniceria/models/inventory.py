from __future__ import annotations

from decimal import Decimal

import sqlalchemy as sa

from ..extensions import db

PRODUCT_UNITS = ("kg", "lb", "unit")

# NUMERIC(10,2): 8 integer digits, 2 fractional digits
QUANTITY_PRECISION = 10
QUANTITY_SCALE = 2


def money_type():
    return db.Numeric(QUANTITY_PRECISION, QUANTITY_SCALE, asdecimal=True)


def format_decimal(value: Decimal | None) -> str | None:
    """Wire format for quantities and prices: fixed two fractional digits."""
    if value is None:
        return None
    return f"{Decimal(value):.{QUANTITY_SCALE}f}"


class Product(db.Model):
    """
    Catalog entry for a cut or prepared product.

    quantity is the quantity-on-hand in `unit`. It is only ever decremented
    by sales_service.register_sale (relative, guarded update) or replaced by
    an explicit catalog edit; it never goes below zero.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
        db.Index("ix_products_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.Text, nullable=False)
    description = db.Column(db.Text, nullable=True)

    # One of PRODUCT_UNITS
    unit = db.Column(db.Text, nullable=False)

    quantity = db.Column(money_type(), nullable=False, default=Decimal("0"), server_default="0")
    cost_price = db.Column(money_type(), nullable=False, default=Decimal("0"), server_default="0")
    sale_price = db.Column(money_type(), nullable=False, default=Decimal("0"), server_default="0")

    # Low stock alert threshold
    min_stock = db.Column(money_type(), nullable=True, default=Decimal("5"), server_default="5")

    is_active = db.Column(db.Boolean, nullable=True, default=True, server_default=sa.true())

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} quantity={self.quantity} unit={self.unit}>"

    @property
    def is_low_stock(self) -> bool:
        threshold = self.min_stock if self.min_stock is not None else Decimal("0")
        return Decimal(self.quantity) <= Decimal(threshold)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "unit": self.unit,
            "quantity": format_decimal(self.quantity),
            "costPrice": format_decimal(self.cost_price),
            "salePrice": format_decimal(self.sale_price),
            "minStock": format_decimal(self.min_stock),
            "isActive": self.is_active,
        }
