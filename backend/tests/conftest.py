"""
Pytest fixtures for Sentra backend tests.

Provides an in-memory database, a fresh schema per test, the Flask test
client and a sync store wired to the same app.
"""

import pytest

from sentra import create_app
from sentra.extensions import db
from sentra.models import Client
from sentra.sync.adapters import Adapters
from sentra.sync.store import AppStore
from sentra.sync.transport import AppTransport


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'GHL_ONBOARDING_WEBHOOK_SECRET': None,
        'GHL_HANDOVER_WEBHOOK_SECRET': None,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
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
def acme(db_session):
    """A client with no invoices yet."""
    acme = Client(name="Alice Tan", business_name="Acme Sdn Bhd", email="alice@acme.test", phone="+60123456789")
    db_session.add(acme)
    db_session.commit()
    return acme


@pytest.fixture(scope='function')
def adapters(app):
    return Adapters.over(AppTransport(app))


@pytest.fixture(scope='function')
def store(db_session, adapters):
    """Sync store talking to the test app in-process."""
    return AppStore(adapters)


def create_invoice(client, client_id: int, amount: float = 1000, package: str = "Starter") -> dict:
    """Helper to create an invoice through the API."""
    resp = client.post('/api/invoices', json={
        'client_id': client_id,
        'package_name': package,
        'amount': amount,
    })
    assert resp.status_code == 201, resp.json
    return resp.json
