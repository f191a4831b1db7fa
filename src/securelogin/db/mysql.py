# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""MySQL access with bound parameters.

``MySQLConnect`` wraps one PyMySQL connection (one per request, no pool) and
adds select/insert/update/delete helpers. SQL uses ``:name`` placeholders; they
are rewritten to PyMySQL's ``%(name)s`` form and every value is bound by the
driver. Table names, column names and WHERE clauses are inserted verbatim and
must come from trusted code.
"""

from __future__ import annotations

import logging
import re
import warnings
from typing import Any, Dict, List, Mapping, Optional, Union

import pymysql
import pymysql.cursors

from securelogin.config import DatabaseConfig
from securelogin.errors import ConnectionFailedError, DatabaseWarning, InvalidArgumentError

logger = logging.getLogger(__name__)

FETCH_ASSOC = "assoc"
FETCH_NUM = "num"

_CURSORS = {
    FETCH_ASSOC: pymysql.cursors.DictCursor,
    FETCH_NUM: pymysql.cursors.Cursor,
}

# Quoted strings/identifiers are copied through; :name outside them becomes %(name)s.
_TOKEN_RE = re.compile(
    r"""(?P<quoted>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*"|`[^`]*`)"""
    r"""|(?<![:\w]):(?P<name>[A-Za-z_]\w*)"""
    r"""|(?P<percent>%)"""
)


def to_pyformat(sql: str) -> str:
    """Rewrite ``:name`` placeholders to ``%(name)s`` and escape literal ``%``."""

    def _sub(m: "re.Match[str]") -> str:
        if m.group("quoted") is not None:
            return m.group("quoted").replace("%", "%%")
        if m.group("name") is not None:
            return f"%({m.group('name')})s"
        return "%%"

    return _TOKEN_RE.sub(_sub, sql)


def _bind(params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    # Keys may be given as "name" or ":name".
    return {str(k).lstrip(":"): v for k, v in (params or {}).items()}


def _validate_port(port: Any) -> int:
    if isinstance(port, bool) or not isinstance(port, (int, str)):
        raise InvalidArgumentError(
            "The port argument is not a valid data type. Allowed: `str, int`. "
            f"Passed: `{type(port).__name__}`."
        )
    try:
        return int(port)
    except ValueError:
        raise InvalidArgumentError(f"The port argument is not numeric: {port!r}.") from None


class MySQLConnect:
    def __init__(
        self,
        hostname: str,
        port: Union[int, str],
        database: str,
        username: str,
        password: str = "",
        debug: bool = False,
    ) -> None:
        port_number = _validate_port(port)
        self.hostname = hostname
        self.port = port
        self.database = database
        self.debug = bool(debug)

        try:
            self.connection = pymysql.connect(
                host=hostname,
                port=port_number,
                user=username,
                password=password,
                database=database,
                charset="utf8",
                autocommit=True,
            )
        except pymysql.MySQLError as exc:
            logger.error("Connection to %s failed: %s", self.dsn, exc)
            raise ConnectionFailedError(f"Connection failed: {exc}") from exc

        if self.debug:
            logger.warning("MySQL debug mode: statement errors are reported as warnings")

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> "MySQLConnect":
        return cls(
            config.hostname,
            config.port,
            config.database,
            config.username,
            config.password,
            config.debug,
        )

    @property
    def dsn(self) -> str:
        return f"mysql:host={self.hostname};port={self.port};dbname={self.database};charset=utf8"

    def close(self) -> None:
        if getattr(self.connection, "open", False):
            self.connection.close()

    def __enter__(self) -> "MySQLConnect":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _run(self, sql: str, params: Mapping[str, Any], fetch_mode: Optional[str] = None) -> Any:
        """Execute one statement; returns rows when ``fetch_mode`` is given, else True."""
        cursor_class = _CURSORS[fetch_mode or FETCH_ASSOC]
        try:
            with self.connection.cursor(cursor_class) as cur:
                cur.execute(to_pyformat(sql), _bind(params))
                if fetch_mode is None:
                    return True
                return list(cur.fetchall())
        except pymysql.MySQLError as exc:
            if not self.debug:
                raise
            logger.warning("Statement failed: %s", exc)
            warnings.warn(f"{exc} [{sql}]", DatabaseWarning, stacklevel=3)
            return False if fetch_mode is None else []

    def execute(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> bool:
        """Run a statement that returns no rows (DDL, SET ...)."""
        return self._run(sql, params or {})

    def select(
        self,
        sql: str,
        params: Optional[Mapping[str, Any]] = None,
        fetch_mode: str = FETCH_ASSOC,
    ) -> List[Any]:
        """Run a SELECT; rows are dicts (FETCH_ASSOC) or tuples (FETCH_NUM)."""
        if fetch_mode not in _CURSORS:
            raise InvalidArgumentError(f"Unknown fetch mode: {fetch_mode!r}")
        return self._run(sql, params or {}, fetch_mode)

    def insert(self, table: str, data: Mapping[str, Any]) -> bool:
        if not data:
            raise InvalidArgumentError("insert() needs at least one column")
        keys = sorted(data)
        columns = "`, `".join(keys)
        values = ", ".join(f":{k}" for k in keys)
        return self._run(f"INSERT INTO {table} (`{columns}`) VALUES ({values})", data)

    def update(
        self,
        table: str,
        data: Mapping[str, Any],
        where: str,
        where_params: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        """UPDATE ``table`` SET data WHERE ``where``.

        ``where`` is appended as given. Its placeholders are bound after the data
        values, so a key present in both takes the ``where_params`` value.
        """
        if not data:
            raise InvalidArgumentError("update() needs at least one column")
        keys = sorted(data)
        fields = ",".join(f"`{k}`=:{k}" for k in keys)
        params = {**_bind(data), **_bind(where_params)}
        return self._run(f"UPDATE {table} SET {fields} WHERE {where}", params)

    def delete(
        self,
        table: str,
        where: str,
        params: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> bool:
        # LIMIT on DELETE is MySQL syntax; other engines may reject it.
        query = f"DELETE FROM {table} WHERE {where}"
        if limit:
            query += f" LIMIT {int(limit)}"
        return self._run(query, params or {})

    def last_insert_id(self) -> int:
        return self.connection.insert_id()
