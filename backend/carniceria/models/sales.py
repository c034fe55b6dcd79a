from __future__ import annotations

from ..extensions import db
from ..time_utils import utcnow, to_utc_z
from .inventory import money_type, format_decimal


class Sale(db.Model):
    """
    Append-only sale ledger entry.

    product_id is a logical reference to products.id. It is deliberately not
    a database-level foreign key: products are hard-deleted and historical
    sales must survive that, so readers treat a missing product as a
    placeholder instead of relying on referential integrity.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_sales_quantity_positive"),
        db.CheckConstraint("total_price >= 0", name="ck_sales_total_price_non_negative"),
        db.Index("ix_sales_sold_at", "sold_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, nullable=False, index=True)

    quantity = db.Column(money_type(), nullable=False)

    # Final charged amount; may differ from quantity * sale_price (discounts)
    total_price = db.Column(money_type(), nullable=False)

    sold_at = db.Column(db.DateTime, nullable=False, default=utcnow, server_default=db.func.now())

    product = db.relationship(
        "Product",
        primaryjoin="foreign(Sale.product_id) == Product.id",
        viewonly=True,
        lazy="joined",
        innerjoin=False,
    )

    def __repr__(self) -> str:
        return f"<Sale id={self.id} product_id={self.product_id} quantity={self.quantity}>"

    def to_dict(self, include_product: bool = False) -> dict:
        data = {
            "id": self.id,
            "productId": self.product_id,
            "quantity": format_decimal(self.quantity),
            "totalPrice": format_decimal(self.total_price),
            "soldAt": to_utc_z(self.sold_at),
        }
        if include_product:
            data["product"] = self.product.to_dict() if self.product is not None else None
        return data
