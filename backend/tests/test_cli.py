from decimal import Decimal
from io import BytesIO

from openpyxl import load_workbook

from carniceria.extensions import db
from carniceria.models import Product
from carniceria.services import seed_service


def test_catalog_seed_is_idempotent(app):
    runner = app.test_cli_runner()

    first = runner.invoke(args=["catalog", "seed"])
    second = runner.invoke(args=["catalog", "seed"])

    assert first.exit_code == 0
    assert f"Seeded {len(seed_service.DEFAULT_CATALOG)} products" in first.output
    assert "SKIP" in second.output
    assert db.session.query(Product).count() == len(seed_service.DEFAULT_CATALOG)


def test_low_stock_listing(app, make_product):
    make_product(name="Bondiola", quantity=Decimal("3"), min_stock=Decimal("5"))
    make_product(name="Costillar", quantity=Decimal("50"), min_stock=Decimal("15"))

    result = app.test_cli_runner().invoke(args=["catalog", "low-stock"])

    assert result.exit_code == 0
    assert "Bondiola" in result.output
    assert "Costillar" not in result.output


def test_end_of_day_writes_workbook(app, make_product, tmp_path, use_summarizer):
    use_summarizer(response="{}")
    make_product()
    output = tmp_path / "cierre.xlsx"

    result = app.test_cli_runner().invoke(args=["reports", "end-of-day", "--output", str(output)])

    assert result.exit_code == 0, result.output
    assert "Sales today: 0" in result.output
    wb = load_workbook(BytesIO(output.read_bytes()))
    assert wb.sheetnames == ["Resumen", "Ventas", "Inventario"]


def test_reset_db_requires_confirmation(app, make_product):
    make_product()
    runner = app.test_cli_runner()

    refused = runner.invoke(args=["system", "reset-db"])
    assert refused.exit_code != 0
    assert db.session.query(Product).count() == 1

    db.session.remove()
    done = runner.invoke(args=["system", "reset-db", "--yes"])
    assert done.exit_code == 0
    assert db.session.query(Product).count() == 0
