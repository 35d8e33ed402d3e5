"""
Pytest fixtures for care center backend tests.

Provides an in-memory database, a test client and small factories for
medicines and patients.
"""

from datetime import date

import pytest

from carecenter import create_app
from carecenter.extensions import db
from carecenter.services import inventory_service, patient_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
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
        db.session.rollback()
        db.session.info.clear()
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def make_medicine(db_session):
    """Factory: make_medicine(name="Paracetamol", price="5.99", stock=100)."""
    def _make(name="Paracetamol 500mg", price="5.99", stock=100, minimum=10,
              category="Analgesic", unit="tablet", expiry=date(2030, 1, 31)):
        return inventory_service.create_medicine(
            name=name,
            category=category,
            unit=unit,
            price=price,
            stock_quantity=stock,
            minimum_stock=minimum,
            expiry_date=expiry,
        )
    return _make


@pytest.fixture(scope='function')
def make_patient(db_session):
    """Factory: make_patient(name="Jane Doe")."""
    def _make(name="Jane Doe", gender="female", email=None):
        return patient_service.register_patient(
            name=name,
            date_of_birth="1990-04-02",
            gender=gender,
            email=email,
        )
    return _make


@pytest.fixture(scope='function')
def patient(make_patient):
    return make_patient()


@pytest.fixture(scope='function')
def medicine(make_medicine):
    return make_medicine()
