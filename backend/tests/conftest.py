"""Shared fixtures: an in-memory stand-in for the connection pool."""

import contextlib
from dataclasses import replace

import pytest
from litestar.testing import TestClient

from app import create_app
from core.config import AppConfig, CorsConfig, DatabaseConfig


SAMPLE_ROWS = [
    {"Name": "Alice Johnson", "Age": 34, "Occupation": "Engineer"},
    {"Name": "Bob Martinez", "Age": 45, "Occupation": "Accountant"},
    {"Name": "Carla Nguyen", "Age": 29, "Occupation": "Designer"},
]


class FakeCursor:
    def __init__(self, conn: "FakeConnection"):
        self.conn = conn

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, query, params=None):
        self.conn.executed.append(query)
        # like psycopg without autocommit: the first statement opens a transaction
        self.conn.status = "INTRANS"
        if self.conn.pool.execute_error is not None:
            raise self.conn.pool.execute_error

    async def fetchall(self):
        return [dict(row) for row in self.conn.pool.rows]


class FakeConnection:
    def __init__(self, pool: "FakePool"):
        self.pool = pool
        self.executed: list = []
        self.status = "IDLE"
        self.commits = 0
        self.rollbacks = 0

    def cursor(self, row_factory=None):
        return FakeCursor(self)

    @contextlib.asynccontextmanager
    async def transaction(self):
        try:
            yield
        except BaseException:
            self.rollbacks += 1
            self.status = "IDLE"
            raise
        self.commits += 1
        self.status = "IDLE"


class FakePool:
    """Records every checkout and return so tests can detect leaks."""

    def __init__(self, rows=None):
        self.rows = list(SAMPLE_ROWS if rows is None else rows)
        self.getconn_error: Exception | None = None
        self.execute_error: Exception | None = None
        self.putconn_error: Exception | None = None
        self.getconn_calls = 0
        self.putconn_calls = 0
        self.checked_out = 0
        self.timeouts: list = []
        self.returned_statuses: list[str] = []
        self.connections: list[FakeConnection] = []
        self.closed = False

    async def getconn(self, timeout=None):
        self.getconn_calls += 1
        self.timeouts.append(timeout)
        if self.getconn_error is not None:
            raise self.getconn_error
        conn = FakeConnection(self)
        self.connections.append(conn)
        self.checked_out += 1
        return conn

    async def putconn(self, conn):
        self.putconn_calls += 1
        self.returned_statuses.append(conn.status)
        self.checked_out -= 1
        if self.putconn_error is not None:
            raise self.putconn_error

    @contextlib.asynccontextmanager
    async def connection(self, timeout=None):
        conn = await self.getconn(timeout)
        try:
            async with conn.transaction():
                yield conn
        finally:
            await self.putconn(conn)

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_pool():
    return FakePool()


@pytest.fixture
def make_config():
    """Factory fixture: AppConfig with a configured database and overrides."""

    def _make(allowed_origins=("http://localhost:3001",), allow_all=False, **database):
        base = DatabaseConfig(host="db.internal", password="s3cret")
        return AppConfig(
            database=replace(base, **database),
            cors=CorsConfig(allowed_origins=tuple(allowed_origins), allow_all=allow_all),
        )

    return _make


@pytest.fixture
def make_client(fake_pool, make_config):
    """Factory fixture yielding a TestClient bound to the fake pool."""
    clients = []

    def _make(config=None, pool=fake_pool):
        app = create_app(config or make_config(), pool=pool)
        client = TestClient(app=app, raise_server_exceptions=False)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)
