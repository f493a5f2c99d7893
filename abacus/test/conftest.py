"""
Pytest configuration and fixtures
"""
import os

# Keep test runs off the log files
os.environ.setdefault('ABACUS_LOG_TO_FILE', 'false')
os.environ.setdefault('ABACUS_LOG_LEVEL', 'WARNING')

from datetime import date

import pytest
from abacus import create_app
from abacus import db as _db

TODAY = date(2026, 6, 30)


@pytest.fixture(scope='function')
def app():
    """Create Flask application backed by an in-memory database"""
    app = create_app(
        {
            'TESTING': True,
            'SQLALCHEMY_DATABASE_URI': 'sqlite://',
            'MAX_IMPORT_ROWS': 50,
        },
        today_provider=lambda: TODAY,
    )

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create Flask test client"""
    return app.test_client()


@pytest.fixture(scope='function')
def coordinator(app):
    """The application's lifecycle coordinator"""
    return app.extensions['abacus']


def asset_candidate(**overrides):
    """A valid asset candidate; keyword arguments replace fields"""
    candidate = {
        'name': 'Engineering Workstation',
        'date_placed_in_service': '2022-01-15',
        'cost': '2000.00',
        'salvage_value': '200.00',
        'useful_life_years': 5,
    }
    candidate.update(overrides)
    return candidate
