"""
Pytest fixtures for DocDesk backend tests.

Provides an in-memory application, a clean database per test and a few
stored records to build documents from.
"""

import pytest
from docdesk import create_app
from docdesk.extensions import db
from docdesk.models import Client, Product
from docdesk.services.storage_service import CLIENTS_KEY, INVENTORY_KEY, upsert_entry


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'LOW_STOCK_THRESHOLD': 5,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app, db_session):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def cement(db_session):
    """Stored product with 10 units at 12.50."""
    product = Product(
        id="prod-cement",
        code="CEM-42",
        description="Cement bag 42.5kg",
        price_cents=1250,
        stock=10,
        unit="bag",
    )
    upsert_entry(INVENTORY_KEY, product.to_dict())
    return product


@pytest.fixture(scope='function')
def rebar(db_session):
    """Stored product with 3 units at 8.00."""
    product = Product(
        id="prod-rebar",
        code="REB-12",
        description="Rebar 12mm",
        price_cents=800,
        stock=3,
        unit="pc",
    )
    upsert_entry(INVENTORY_KEY, product.to_dict())
    return product


@pytest.fixture(scope='function')
def acme(db_session):
    """Stored client."""
    client = Client(
        id="client-acme",
        name="Acme Construcciones",
        rif="J-12345678-9",
        address="Av. Principal 1",
        phone="0414-0000000",
    )
    upsert_entry(CLIENTS_KEY, client.to_dict())
    return client
