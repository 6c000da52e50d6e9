import pytest

from db import get_session, dispose_db
from main import create_app
from tests.factories import EmployeeFactory


@pytest.fixture
def app(tmp_path):
    """Flask app bound to a throwaway SQLite file."""
    app = create_app(f"sqlite:///{tmp_path / 'peopledir-test.sqlite'}")
    app.config.update(TESTING=True)
    yield app
    dispose_db()


@pytest.fixture
def client(app):
    """Return a Flask test client."""
    return app.test_client()


@pytest.fixture
def session(app):
    """Open a session on the test database and wire the factories to it."""
    s = get_session()
    EmployeeFactory._meta.sqlalchemy_session = s
    yield s
    EmployeeFactory._meta.sqlalchemy_session = None
    s.close()

