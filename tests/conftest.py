"""
Fixtures pytest partagées

    - encryption_key: clé de chiffrement de test, cache du chiffreur vidé
    - app / client: application 'testing' (SQLite en mémoire), tables créées
    - admin_user / plain_user: comptes persistés
    - admin_headers / user_headers: en-têtes Authorization JWT
"""
import pytest
from flask_jwt_extended import create_access_token

from catalog_admin.app import create_app
from catalog_admin.extensions import db as _db
from catalog_admin.models import User
from catalog_admin.core.crypto import KEY_SOURCES, reset_cipher
from catalog_admin.core.security import UserRoles


TEST_ENCRYPTION_KEY = 'test-locale-encryption-key'


@pytest.fixture(autouse=True)
def encryption_key(monkeypatch):
    for name in KEY_SOURCES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv('LOCALE_ENCRYPTION_KEY', TEST_ENCRYPTION_KEY)
    reset_cipher()
    yield TEST_ENCRYPTION_KEY
    reset_cipher()


@pytest.fixture
def app():
    app = create_app('testing')

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def session(db):
    return db.session


@pytest.fixture
def client(app):
    return app.test_client()


def _make_user(email, role, password='secret123'):
    user = User(email=email, name=email.split('@')[0], role=role, is_active=True)
    user.set_password(password)
    _db.session.add(user)
    _db.session.commit()
    return user


def _auth_headers(user):
    token = create_access_token(
        identity=user.id,
        additional_claims={'role': user.role, 'email': user.email, 'name': user.name}
    )
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def admin_user(app):
    return _make_user('admin@example.com', UserRoles.ADMIN)


@pytest.fixture
def plain_user(app):
    return _make_user('user@example.com', UserRoles.USER)


@pytest.fixture
def admin_headers(admin_user):
    return _auth_headers(admin_user)


@pytest.fixture
def user_headers(plain_user):
    return _auth_headers(plain_user)
