import pytest

from le_dashboard.app import create_app
from le_dashboard.models import db
from le_dashboard.services.storage import storage

ADMIN_CREDENTIALS = {'username': 'admin', 'password': 'admin-pass'}
USER_CREDENTIALS = {'username': 'clerk', 'password': 'clerk-pass'}


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        storage.create_user({**ADMIN_CREDENTIALS, 'role': 'Admin', 'firstName': 'Ada', 'lastName': 'Admin'})
        storage.create_user({**USER_CREDENTIALS, 'role': 'User'})
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _login(app, credentials):
    client = app.test_client()
    response = client.post('/api/auth/login', json=credentials)
    assert response.status_code == 200, response.get_json()
    return client


@pytest.fixture
def auth_client(app):
    """Test client logged in as an Admin."""
    return _login(app, ADMIN_CREDENTIALS)


@pytest.fixture
def user_client(app):
    """Test client logged in as a regular User."""
    return _login(app, USER_CREDENTIALS)


@pytest.fixture
def make_client(auth_client):
    def _make(**fields):
        payload = {'companyName': 'Acme Lifting Ltd', **fields}
        response = auth_client.post('/api/clients', json=payload)
        assert response.status_code == 201, response.get_json()
        return response.get_json()
    return _make


@pytest.fixture
def make_job(auth_client):
    def _make(**fields):
        response = auth_client.post('/api/jobs', json=fields)
        assert response.status_code == 201, response.get_json()
        return response.get_json()
    return _make
