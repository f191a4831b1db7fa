# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from securelogin.auth.passwords import hash_password, needs_rehash, verify_password
from securelogin.db.mysql import MySQLConnect

logger = logging.getLogger(__name__)

USERS_TABLE = "users"

# MySQL schema, applied by ensure_table(). There is no migration support.
USERS_DDL = """
CREATE TABLE IF NOT EXISTS {table} (
    id INT UNSIGNED NOT NULL AUTO_INCREMENT PRIMARY KEY,
    username VARCHAR(190) NOT NULL UNIQUE,
    password_hash VARCHAR(255) NOT NULL,
    active TINYINT(1) NOT NULL DEFAULT 1
) DEFAULT CHARSET=utf8
"""


@dataclass(frozen=True)
class UserRecord:
    id: int
    username: str
    password_hash: str
    active: bool


def _to_record(row: Dict[str, Any]) -> UserRecord:
    return UserRecord(
        id=int(row.get("id") or 0),
        username=str(row.get("username") or ""),
        password_hash=str(row.get("password_hash") or ""),
        active=bool(row.get("active")),
    )


class UserRepository:
    def __init__(self, db: MySQLConnect, table: str = USERS_TABLE) -> None:
        self.db = db
        self.table = table

    def ensure_table(self) -> bool:
        return self.db.execute(USERS_DDL.format(table=self.table))

    def get(self, username: str) -> Optional[UserRecord]:
        u = (username or "").strip()
        if not u:
            return None
        rows = self.db.select(
            f"SELECT id, username, password_hash, active FROM {self.table} WHERE username = :username LIMIT 1",
            {"username": u},
        )
        return _to_record(rows[0]) if rows else None

    def create(self, username: str, password: str, *, active: bool = True) -> UserRecord:
        u = (username or "").strip()
        if not u:
            raise ValueError("Empty username")
        self.db.insert(
            self.table,
            {"username": u, "password_hash": hash_password(password), "active": int(active)},
        )
        created = self.get(u)
        if created is None:
            raise LookupError(f"User '{u}' was not stored")
        return created

    def set_password(self, username: str, password: str) -> bool:
        return self.db.update(
            self.table,
            {"password_hash": hash_password(password)},
            "username = :where_username",
            {"where_username": username},
        )

    def set_active(self, username: str, active: bool) -> bool:
        return self.db.update(
            self.table,
            {"active": int(active)},
            "username = :where_username",
            {"where_username": username},
        )

    def remove(self, username: str) -> bool:
        return self.db.delete(self.table, "username = :username", {"username": username}, 1)

    def authenticate(self, username: str, password: str) -> Optional[UserRecord]:
        """Return the user when the password matches and the account is active."""
        user = self.get(username)
        if not user or not user.active:
            logger.info("Login refused for unknown or inactive user")
            return None
        if not verify_password(user.password_hash, password):
            logger.info("Login refused for user id=%s: bad password", user.id)
            return None
        if needs_rehash(user.password_hash):
            self.set_password(user.username, password)
        return user
