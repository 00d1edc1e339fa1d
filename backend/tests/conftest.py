"""Pytest configuration and shared fixtures."""

import pymysql
import pytest
from sqlalchemy.exc import OperationalError
from propmgr.config import get_settings


class FakeCursor:
    """DB-API cursor that records SQL and rejects statements containing INVALID."""

    def __init__(self, engine):
        self.engine = engine
        self.closed = False

    def execute(self, sql):
        self.engine.executed.append(sql)
        if "INVALID" in sql:
            raise pymysql.err.ProgrammingError(1064, "You have an error in your SQL syntax")

    def nextset(self):
        return None

    def close(self):
        self.closed = True


class FakeDBAPIConnection:
    def __init__(self, engine):
        self.engine = engine

    def cursor(self):
        return FakeCursor(self.engine)


class FakeConnection:
    def __init__(self, engine):
        self.engine = engine
        self.connection = FakeDBAPIConnection(engine)
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.closed = True
        return False


class FakeEngine:
    """Stands in for a MySQL server-scope engine."""

    def __init__(self, fail_connect=False):
        self.fail_connect = fail_connect
        self.executed = []
        self.connections = []

    def connect(self):
        if self.fail_connect:
            raise OperationalError("connect", {}, Exception("Can't connect to MySQL server"))
        connection = FakeConnection(self)
        self.connections.append(connection)
        return connection

    def dispose(self):
        pass


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Each test sees the environment it sets up."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def database_dir(tmp_path, monkeypatch):
    """Empty SQL script directory used as DATABASE_DIR."""
    directory = tmp_path / "database"
    directory.mkdir()
    monkeypatch.setenv("DATABASE_DIR", str(directory))
    return directory


@pytest.fixture
def write_sql(database_dir):
    """Write an SQL file into the database directory."""
    def _write(name, content):
        path = database_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def unreachable_engine():
    """Engine whose server cannot be reached."""
    return FakeEngine(fail_connect=True)
