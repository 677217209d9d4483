import pytest

from app import create_app
from extensions import db
from tests.helpers import ADMIN_EMAIL, ADMIN_PASSWORD


@pytest.fixture
def app():
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()

@pytest.fixture
def app_ctx(app):
    with app.test_request_context():
        yield app

@pytest.fixture
def client(app):
    return app.test_client()

@pytest.fixture
def admin_client(client):
    response = client.post('/admin/login', data={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})
    assert response.status_code == 302
    return client

@pytest.fixture
def store(app_ctx):
    return app_ctx.extensions['document_store']
