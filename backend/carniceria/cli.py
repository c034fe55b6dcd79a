# Overview: Flask CLI command groups for bootstrap, catalog inspection and reports.

# backend/carniceria/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Catalog:
# - python -m flask catalog seed
#   Insert the demo catalog when no products exist (idempotent).
# - python -m flask catalog low-stock
#   List products at or below their minimum stock.
#
# Reports:
# - python -m flask reports end-of-day [--output cierre.xlsx]
#   Build today's report (calls the summarizer) and write the workbook.

from pathlib import Path

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import format_decimal
from .services import end_of_day_service, products_service, report_export_service, seed_service
from .time_utils import utcnow


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm dropping all tables')
@with_appcontext
def reset_db(yes):
    """Drop and recreate all tables."""
    if not yes:
        click.echo("FAIL Refusing to reset without --yes")
        raise SystemExit(1)
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@click.group('catalog')
def catalog_group():
    """Product catalog commands."""


@catalog_group.command('seed')
@with_appcontext
def seed_catalog():
    """Insert the demo catalog if the products table is empty."""
    created = seed_service.seed_catalog()
    if created:
        click.echo(f"PASS Seeded {created} products")
    else:
        click.echo("SKIP Catalog already has products")


@catalog_group.command('low-stock')
@with_appcontext
def low_stock():
    """List products at or below their minimum stock."""
    products = products_service.list_low_stock_products()
    if not products:
        click.echo("No products at or below minimum stock.")
        return

    click.echo("\n" + "="*70)
    click.echo(f"{'ID':<5} {'Name':<30} {'Quantity':>12} {'Min':>10} {'Unit':<6}")
    click.echo("="*70)
    for p in products:
        click.echo(
            f"{p.id:<5} {p.name[:30]:<30} {format_decimal(p.quantity):>12} "
            f"{format_decimal(p.min_stock) or '-':>10} {p.unit:<6}"
        )
    click.echo("="*70 + "\n")


@click.group('reports')
def reports_group():
    """End-of-day reporting commands."""


@reports_group.command('end-of-day')
@click.option('--output', type=click.Path(dir_okay=False, path_type=Path), default=None,
              help='Workbook path (default: cierre-diario-<date>.xlsx)')
@with_appcontext
def end_of_day(output):
    """Build today's report and write the xlsx workbook."""
    report = end_of_day_service.build_end_of_day_report(
        now=utcnow(),
        tz_name=current_app.config["STORE_TIMEZONE"],
        summarizer=current_app.extensions["summarizer"],
    )
    if report.analysis_error:
        click.echo(f"WARN  Narrative analysis unavailable: {report.analysis_error}")

    path = output or Path(report_export_service.export_filename(report))
    path.write_bytes(report_export_service.render_report_xlsx(report))

    click.echo(f"Sales today: {report.sales_count}")
    click.echo(f"Total value: ${format_decimal(report.total_sales_value)}")
    click.echo(f"PASS Wrote {path}")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(catalog_group)
    app.cli.add_command(reports_group)
