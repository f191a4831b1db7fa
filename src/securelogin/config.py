# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Deployment configuration.

Settings live in a YAML file (``config/config.yml`` by default, or the path in
``SECURELOGIN_CONFIG``). Secrets can be supplied through the environment
instead of the file:

- ``SECURELOGIN_SECRET_KEY`` overrides ``cookie.secret_key``
- ``SECURELOGIN_DB_PASSWORD`` overrides ``database.password``

The loaded ``Config`` is immutable.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from securelogin.errors import ConfigError

# Anchor the default config path to the project root, not the working directory.
BASE_DIR = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = BASE_DIR / "config" / "config.yml"

_TRUTHY = {"1", "true", "yes", "y", "on"}


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def _section(raw: Mapping[str, Any], name: str) -> Dict[str, Any]:
    sec = raw.get(name) if isinstance(raw, Mapping) else None
    return dict(sec) if isinstance(sec, Mapping) else {}


@dataclass(frozen=True)
class CookieConfig:
    secret_key: str
    path: str = "/"
    domain: Optional[str] = None
    secure: bool = True
    http_only: bool = True
    samesite: str = "lax"


@dataclass(frozen=True)
class SessionConfig:
    cookie_name: str = "login_session"
    max_age: int = 28800  # 8 hours
    salt: str = "securelogin.session.v1"


@dataclass(frozen=True)
class DatabaseConfig:
    hostname: str = "localhost"
    # Left as given (str or int); MySQLConnect validates the type.
    port: Union[int, str] = 3306
    database: str = ""
    username: str = ""
    password: str = ""
    debug: bool = False


@dataclass(frozen=True)
class Config:
    cookie: CookieConfig
    session: SessionConfig = field(default_factory=SessionConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "Config":
        c = _section(raw, "cookie")
        s = _section(raw, "session")
        d = _section(raw, "database")

        secret = str(c.get("secret_key") or "").strip()
        if not secret:
            raise ConfigError("Missing cookie.secret_key (or SECURELOGIN_SECRET_KEY)")

        cookie = CookieConfig(
            secret_key=secret,
            path=str(c.get("path") or "/"),
            domain=(str(c.get("domain") or "").strip() or None),
            secure=_as_bool(c.get("secure"), True),
            http_only=_as_bool(c.get("http_only"), True),
            samesite=str(c.get("samesite") or "lax").strip().lower(),
        )
        session = SessionConfig(
            cookie_name=str(s.get("cookie_name") or SessionConfig.cookie_name),
            max_age=int(s.get("max_age") or SessionConfig.max_age),
            salt=str(s.get("salt") or SessionConfig.salt),
        )
        database = DatabaseConfig(
            hostname=str(d.get("hostname") or "localhost"),
            port=d.get("port", 3306),
            database=str(d.get("database") or ""),
            username=str(d.get("username") or ""),
            password=str(d.get("password") or ""),
            debug=_as_bool(d.get("debug"), False),
        )
        return cls(cookie=cookie, session=session, database=database)


def _apply_env(raw: Dict[str, Any]) -> Dict[str, Any]:
    secret = os.getenv("SECURELOGIN_SECRET_KEY")
    if secret:
        raw.setdefault("cookie", {})["secret_key"] = secret
    db_password = os.getenv("SECURELOGIN_DB_PASSWORD")
    if db_password is not None:
        raw.setdefault("database", {})["password"] = db_password
    return raw


def load_config(path: Optional[Union[str, Path]] = None) -> Config:
    """Load the YAML config at ``path`` and apply environment overrides."""
    p = Path(path or os.getenv("SECURELOGIN_CONFIG") or DEFAULT_CONFIG_PATH).resolve()
    raw: Any = {}
    if p.exists():
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {p} must contain a mapping")
    raw = {k: (dict(v) if isinstance(v, Mapping) else v) for k, v in raw.items()}
    return Config.from_mapping(_apply_env(raw))
