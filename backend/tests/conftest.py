"""
Pytest fixtures for the carniceria backend tests.

Provides a per-test SQLite database, a test client and a scripted
summarizer standing in for the language model.
"""

from decimal import Decimal

import pytest

from carniceria import create_app
from carniceria.extensions import db
from carniceria.models import Product, Sale


class FakeSummarizer:
    """Returns a canned response (or raises) and records every prompt."""

    def __init__(self, response=None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.prompts = []

    def summarize(self, prompt: str):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create application with a fresh file-backed SQLite database."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'test.sqlite3'}",
        'STORE_TIMEZONE': 'UTC',
        'SEED_ON_STARTUP': False,
        'AI_INTEGRATIONS_OPENAI_API_KEY': None,
    })
    app.extensions['summarizer'] = FakeSummarizer(response='{}')

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def summarizer(app):
    return app.extensions['summarizer']


@pytest.fixture(scope='function')
def make_product(app):
    """Factory for committed products; returns the product id."""
    def _make(**overrides) -> int:
        fields = {
            'name': 'Bife de Chorizo',
            'description': 'Corte premium, tierno y jugoso',
            'unit': 'kg',
            'quantity': Decimal('25.5'),
            'cost_price': Decimal('8500'),
            'sale_price': Decimal('12500'),
            'min_stock': Decimal('10'),
        }
        fields.update(overrides)
        product = Product(**fields)
        db.session.add(product)
        db.session.commit()
        return product.id
    return _make


@pytest.fixture(scope='function')
def make_sale(app):
    """Insert a ledger row directly (bypasses stock), e.g. for past days."""
    def _make(product_id: int, quantity: str, total_price: str, sold_at) -> int:
        sale = Sale(
            product_id=product_id,
            quantity=Decimal(quantity),
            total_price=Decimal(total_price),
            sold_at=sold_at,
        )
        db.session.add(sale)
        db.session.commit()
        return sale.id
    return _make


@pytest.fixture(scope='function')
def use_summarizer(app):
    """Install a FakeSummarizer with the given behaviour and return it."""
    def _use(response=None, error: Exception | None = None) -> FakeSummarizer:
        fake = FakeSummarizer(response=response, error=error)
        app.extensions['summarizer'] = fake
        return fake
    return _use


@pytest.fixture(scope='function')
def reload_product(app):
    """Re-read a product, ignoring anything cached in the identity map."""
    def _reload(product_id: int):
        db.session.expire_all()
        return db.session.get(Product, product_id)
    return _reload


@pytest.fixture(scope='function')
def count_sales(app):
    def _count() -> int:
        db.session.expire_all()
        return db.session.query(Sale).count()
    return _count
