import pytest
from unittest.mock import MagicMock, patch

from flask_jwt_extended import create_access_token

from workdesk import create_app
from workdesk.database.models.user import User

WEBHOOK_SECRET = "test-webhook-secret"


@pytest.fixture
def app():
    app = create_app({
        'TESTING': True,
        'INIT_DB_ON_STARTUP': False,
        'SCHEDULER_ENABLED': False,
        'JWT_SECRET_KEY': 'test-jwt-secret-with-enough-length-for-hs256',
        'PAYMENT_WEBHOOK_SECRET': WEBHOOK_SECRET,
        'APP_URL': '',
        'SAAS_MODE': False,
    })
    yield app
    app.extensions['sdk_loader'].shutdown()


@pytest.fixture
def client(app):
    return app.test_client()


def _make_user(type='company', permissions=(), id='user-1', created_by=None):
    user = User(id=id, name='Test User', email=f'{id}@example.com', password_hash='x',
                type=type, created_by=created_by)
    user.get_permissions = MagicMock(return_value=list(permissions))
    return user


@pytest.fixture
def make_user():
    return _make_user


@pytest.fixture
def login(app):
    """
    Sign a user in for the test: returns auth headers and keeps
    User.find_by_id answering with that user until teardown.
    """
    patchers = []

    def _login(user):
        patcher = patch.object(User, 'find_by_id', return_value=user)
        patcher.start()
        patchers.append(patcher)
        with app.app_context():
            token = create_access_token(identity=str(user.id))
        return {'Authorization': f'Bearer {token}'}

    yield _login
    for patcher in reversed(patchers):
        patcher.stop()
