# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/docdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates tables and writes default company settings.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Inspection:
# - python -m flask documents list [--type QUOTE|DELIVERY]
#   List stored documents, newest first.
# - python -m flask products list
#   List inventory with stock.
# - python -m flask products low-stock [--threshold 5]
#   List products below the low-stock threshold.
# - python -m flask clients list
#   List the client directory.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .services import settings_service
from .services.clients_service import list_clients
from .services.document_service import DOCUMENT_TYPES, list_documents
from .services.products_service import list_products


def _money(cents: int, symbol: str) -> str:
    return f"{symbol}{cents / 100:,.2f}"


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize DocDesk: create tables and default company settings.

    Existing settings and data are left untouched.
    """
    click.echo("START Initializing DocDesk...")

    db.create_all()
    click.echo("PASS Tables ready")

    settings = settings_service.ensure_settings()
    click.echo(f"PASS Company: {settings.name}")
    click.echo(
        f"PASS Next quote: {settings.next_quote_number}, "
        f"next delivery: {settings.next_delivery_number}, "
        f"default tax: {settings.default_tax_rate}%"
    )


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('documents')
def documents_group():
    """Quote and delivery note inspection commands."""


@documents_group.command('list')
@click.option('--type', 'doc_type', type=click.Choice(DOCUMENT_TYPES, case_sensitive=False), help='Filter by type')
@with_appcontext
def list_documents_cli(doc_type):
    """List stored documents, newest first."""
    settings = settings_service.get_settings()
    docs = list_documents(doc_type=doc_type.upper() if doc_type else None)

    if not docs:
        click.echo("No documents found.")
        return

    click.echo("\n" + "=" * 90)
    click.echo(f"{'Number':<14} {'Type':<10} {'Date':<12} {'Client':<34} {'Total':>16}")
    click.echo("=" * 90)
    for d in docs:
        click.echo(
            f"{d.number or '-':<14} {d.type:<10} {d.date:<12} {d.client_name[:34]:<34} "
            f"{_money(d.total_cents, settings.currency_symbol):>16}"
        )
    click.echo("=" * 90 + "\n")


@click.group('products')
def products_group():
    """Inventory inspection commands."""


def _echo_products(products, symbol: str) -> None:
    click.echo("\n" + "=" * 90)
    click.echo(f"{'Code':<16} {'Description':<40} {'Stock':>8} {'Unit':<6} {'Price':>14}")
    click.echo("=" * 90)
    for p in products:
        click.echo(
            f"{p.code[:16]:<16} {p.description[:40]:<40} {p.stock:>8} {p.unit[:6]:<6} "
            f"{_money(p.price_cents, symbol):>14}"
        )
    click.echo("=" * 90 + "\n")


@products_group.command('list')
@with_appcontext
def list_products_cli():
    """List inventory with stock."""
    products = list_products()
    if not products:
        click.echo("No products found.")
        return
    _echo_products(products, settings_service.get_settings().currency_symbol)


@products_group.command('low-stock')
@click.option('--threshold', type=int, help='Defaults to LOW_STOCK_THRESHOLD')
@with_appcontext
def low_stock_cli(threshold):
    """List products whose stock is below the threshold."""
    if threshold is None:
        threshold = current_app.config["LOW_STOCK_THRESHOLD"]
    products = list_products(low_stock_below=threshold)
    if not products:
        click.echo(f"PASS No products below {threshold}.")
        return
    click.echo(f"WARN {len(products)} product(s) below {threshold}:")
    _echo_products(products, settings_service.get_settings().currency_symbol)


@click.group('clients')
def clients_group():
    """Client directory inspection commands."""


@clients_group.command('list')
@with_appcontext
def list_clients_cli():
    """List the client directory."""
    clients = list_clients()
    if not clients:
        click.echo("No clients found.")
        return

    click.echo("\n" + "=" * 90)
    click.echo(f"{'Name':<34} {'RIF':<16} {'Phone':<16} {'ID':<24}")
    click.echo("=" * 90)
    for c in clients:
        click.echo(f"{c.name[:34]:<34} {c.rif[:16]:<16} {c.phone[:16]:<16} {c.id:<24}")
    click.echo("=" * 90 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(documents_group)
    app.cli.add_command(products_group)
    app.cli.add_command(clients_group)
