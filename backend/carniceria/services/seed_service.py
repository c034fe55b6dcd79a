# Overview: One-shot demo catalog for a fresh database.

from __future__ import annotations

import threading
from decimal import Decimal

from flask import Flask, current_app
from sqlalchemy import text

from ..extensions import db
from ..models import Product
from .concurrency import begin_write_transaction, run_with_retry

DEFAULT_CATALOG = (
    {
        "name": "Bife de Chorizo",
        "description": "Corte premium, tierno y jugoso",
        "unit": "kg",
        "quantity": Decimal("25.5"),
        "cost_price": Decimal("8500"),
        "sale_price": Decimal("12500"),
        "min_stock": Decimal("10"),
    },
    {
        "name": "Costillar",
        "description": "Ideal para asado",
        "unit": "kg",
        "quantity": Decimal("50"),
        "cost_price": Decimal("6000"),
        "sale_price": Decimal("8900"),
        "min_stock": Decimal("15"),
    },
    {
        "name": "Bondiola",
        "description": "Cerdo fresco",
        "unit": "kg",
        "quantity": Decimal("15"),
        "cost_price": Decimal("7000"),
        "sale_price": Decimal("10500"),
        "min_stock": Decimal("5"),
    },
    {
        "name": "Chorizo Puro Cerdo",
        "description": "Elaboración propia",
        "unit": "kg",
        "quantity": Decimal("30"),
        "cost_price": Decimal("4500"),
        "sale_price": Decimal("7000"),
        "min_stock": Decimal("8"),
    },
)


def _lock_catalog() -> None:
    begin_write_transaction()
    if db.engine.dialect.name == "postgresql":
        # Blocks other seeders, lets readers through
        db.session.execute(text("LOCK TABLE products IN SHARE ROW EXCLUSIVE MODE"))


def seed_catalog(catalog=DEFAULT_CATALOG) -> int:
    """
    Insert the demo catalog if, and only if, the products table is empty.

    Only inserts rows, so a concurrent sale against an existing product is
    never affected. Returns the number of products created.
    """
    def _op():
        try:
            _lock_catalog()
            if db.session.query(Product.id).first() is not None:
                db.session.rollback()
                return 0

            for row in catalog:
                db.session.add(Product(**row))
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return len(catalog)

    return run_with_retry(_op)


def _seed_in_background(app: Flask) -> None:
    with app.app_context():
        try:
            created = seed_catalog()
            if created:
                current_app.logger.info("Seeded catalog with %d products", created)
            else:
                current_app.logger.info("Catalog already populated, skipping seed")
        except Exception:
            current_app.logger.exception("Catalog seeding failed")
        finally:
            db.session.remove()


def schedule_seed(app: Flask, *, delay: float) -> threading.Timer:
    """Run seed_catalog once, `delay` seconds from now, off the request path."""
    timer = threading.Timer(delay, _seed_in_background, args=(app,))
    timer.daemon = True
    timer.start()
    return timer
