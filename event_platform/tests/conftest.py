import pytest

from event_platform.auth_service.utils import create_token
from event_platform.config import Settings
from event_platform.gateway.server import create_app

TEST_SECRET = "test_secret"


@pytest.fixture
def settings():
    return Settings(jwt_secret=TEST_SECRET, database_url="postgresql://test/test")


@pytest.fixture
def mock_db(mocker):
    """
    Mocks the connection pool, connection and cursor.
    """
    mock_pool = mocker.MagicMock()
    mock_conn = mocker.MagicMock()
    mock_cursor = mocker.MagicMock()

    # Setup the context manager for connection
    mock_conn.__enter__.return_value = mock_conn
    mock_conn.__exit__.return_value = None

    # Setup the context manager for cursor
    mock_cursor.__enter__.return_value = mock_cursor
    mock_cursor.__exit__.return_value = None

    # Connect cursor to connection, connection to pool
    mock_conn.cursor.return_value = mock_cursor
    mock_pool.connection.return_value = mock_conn

    return mock_pool, mock_conn, mock_cursor


@pytest.fixture
def app(settings, mock_db):
    mock_pool, _, _ = mock_db
    app = create_app(settings, pool=mock_pool)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def authority(app):
    return app.extensions["credential_authority"]


@pytest.fixture
def aggregator(app):
    return app.extensions["seat_availability"]


@pytest.fixture
def registrations(app):
    return app.extensions["registrations"]


@pytest.fixture
def auth_header():
    """
    Build an Authorization header for a user id and role.
    """
    def _header(user_id=1, is_admin=False):
        token = create_token(user_id, is_admin, TEST_SECRET)
        return {"Authorization": f"Bearer {token}"}
    return _header
