import pytest

from app import create_app
from config import Config
from log_store import LogStore
from models import LogEntry


@pytest.fixture
def log_path(tmp_path):
    return str(tmp_path / "log.csv")


@pytest.fixture
def config(log_path):
    cfg = Config(environ={})
    cfg["storage"]["path"] = log_path
    return cfg


@pytest.fixture
def store(log_path):
    log_store = LogStore(log_path)
    log_store.ensure_file()
    return log_store


@pytest.fixture
def sample_entry():
    return LogEntry(
        agent="curl/8.0",
        time="2024-01-01T00:00:00.000Z",
        method="GET",
        resource="/",
        version="HTTP/1.1",
        status=200,
    )


@pytest.fixture
def app(config):
    """Create a Flask test app."""
    application = create_app(config)
    application.config["TESTING"] = True
    yield application
    application.config["components"]["access_log"].shutdown()


@pytest.fixture
def client(app):
    """Create a Flask test client."""
    return app.test_client()


@pytest.fixture
def access_log(app):
    return app.config["components"]["access_log"]
