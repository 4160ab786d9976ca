"""
Root pytest configuration and fixtures for unit and integration tests.
"""
import os
import sys
from datetime import timedelta
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Test configuration
os.environ['FLASK_ENV'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite:///:memory:'
os.environ['SESSION_SECRET'] = 'test-secret-key-for-testing-only'

CEO_EMAIL = 'ceo@company.com'
PASSWORD = 'Password123'


@pytest.fixture(scope='function')
def app():
    """Fresh application and empty in-memory database for every test."""
    from app import create_app
    from config import TestingConfig
    from models import db

    test_app = create_app(TestingConfig)

    with test_app.app_context():
        db.create_all()
        yield test_app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create a test client for the Flask application."""
    return app.test_client()


@pytest.fixture(scope='function')
def runner(app):
    """Create a CLI test runner."""
    return app.test_cli_runner()


@pytest.fixture(scope='function')
def identity(app):
    from services.identity_service import IdentityService
    return IdentityService()


@pytest.fixture(scope='function')
def ceo_user(identity):
    """The reserved CEO account; its profile is provisioned with the ceo role."""
    return identity.create_account(CEO_EMAIL, PASSWORD, 'Chief Executive')


@pytest.fixture(scope='function')
def collaborator_user(identity):
    return identity.create_account('collab@company.com', PASSWORD, 'Carla Collaborator')


@pytest.fixture(scope='function')
def sector(ceo_user):
    from services import task_service
    return task_service.create_sector(ceo_user.id, 'Coordination')


@pytest.fixture(scope='function')
def task(ceo_user, sector):
    from models import utcnow
    from services import task_service
    return task_service.create_task(
        ceo_user.id,
        title='Q1 Report',
        type='monthly',
        sector_id=sector.id,
        deadline=utcnow() + timedelta(days=7),
        urgency='urgent',
    )


def _login(client, email):
    response = client.post('/auth/login', json={'email': email, 'password': PASSWORD})
    assert response.status_code == 200, response.get_json()
    return client


@pytest.fixture(scope='function')
def ceo_client(client, ceo_user):
    """Test client logged in as the CEO."""
    return _login(client, CEO_EMAIL)


@pytest.fixture(scope='function')
def collaborator_client(client, collaborator_user):
    """Test client logged in as a collaborator."""
    return _login(client, 'collab@company.com')
