import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

import re
import sqlite3
from pathlib import Path

import pymysql
import pymysql.cursors
import pytest
from cryptography.fernet import Fernet

from securelogin import container as locator
from securelogin.config import Config

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    active INTEGER NOT NULL DEFAULT 1
);
CREATE TABLE IF NOT EXISTS items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    qty INTEGER NOT NULL DEFAULT 0,
    owner TEXT
);
"""

_DELETE_LIMIT = re.compile(r"^DELETE FROM (\S+) WHERE (.*) LIMIT (\d+)$", re.S)


def _from_pyformat(query: str) -> str:
    """Turn PyMySQL's %(name)s back into sqlite's :name."""
    query = re.sub(r"(?<!%)%\((\w+)\)s", r":\1", query)
    query = query.replace("%%", "%")
    m = _DELETE_LIMIT.match(query)
    if m:
        # sqlite is usually built without DELETE ... LIMIT
        table, where, limit = m.groups()
        query = f"DELETE FROM {table} WHERE rowid IN (SELECT rowid FROM {table} WHERE {where} LIMIT {limit})"
    return query


class FakeCursor:
    def __init__(self, conn: "FakeConnection", as_dict: bool):
        self._conn = conn
        self._as_dict = as_dict
        self._cur = None
        self.rowcount = -1

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, query, args=None):
        self._conn.executed.append((query, dict(args or {})))
        try:
            self._cur = self._conn.sqlite.execute(_from_pyformat(query), args or {})
        except sqlite3.Error as exc:
            raise pymysql.err.ProgrammingError(1064, str(exc)) from exc
        self.rowcount = self._cur.rowcount
        if self._cur.lastrowid:
            self._conn.last_id = self._cur.lastrowid
        return self.rowcount

    def fetchall(self):
        rows = self._cur.fetchall()
        if not self._as_dict:
            return tuple(rows)
        cols = [d[0] for d in self._cur.description]
        return [dict(zip(cols, r)) for r in rows]


class FakeConnection:
    """Just enough of pymysql.connections.Connection, backed by a sqlite file."""

    def __init__(self, path: Path, **kwargs):
        self.kwargs = kwargs
        self.sqlite = sqlite3.connect(str(path), isolation_level=None, check_same_thread=False)
        self.executed = []
        self.last_id = 0
        self.open = True

    def cursor(self, cursor=None):
        return FakeCursor(self, cursor is pymysql.cursors.DictCursor)

    def insert_id(self):
        return self.last_id

    def close(self):
        self.sqlite.close()
        self.open = False


class FakeMySQL:
    def __init__(self, path: Path):
        self.path = path
        self.connections = []
        self.fail_with = None

    def connect(self, **kwargs):
        if self.fail_with is not None:
            raise self.fail_with
        conn = FakeConnection(self.path, **kwargs)
        self.connections.append(conn)
        return conn

    def rows(self, sql, params=()):
        with sqlite3.connect(str(self.path)) as c:
            return c.execute(sql, params).fetchall()


@pytest.fixture()
def fake_mysql(tmp_path: Path, monkeypatch) -> FakeMySQL:
    db_path = tmp_path / "login.sqlite3"
    with sqlite3.connect(str(db_path)) as c:
        c.executescript(SCHEMA)
    fake = FakeMySQL(db_path)
    monkeypatch.setattr(pymysql, "connect", fake.connect)
    return fake


@pytest.fixture()
def secret_key() -> str:
    return Fernet.generate_key().decode("ascii")


@pytest.fixture()
def config(secret_key) -> Config:
    return Config.from_mapping(
        {
            "cookie": {"secret_key": secret_key, "path": "/", "secure": False, "http_only": True},
            "session": {"cookie_name": "login_session", "max_age": 3600},
            "database": {"hostname": "db.internal", "port": 3306, "database": "login", "username": "app"},
        }
    )


@pytest.fixture(autouse=True)
def _reset_locator():
    locator.clear()
    yield
    locator.clear()
