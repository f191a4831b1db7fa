# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Wire the shared dependencies into a Container."""

from __future__ import annotations

from securelogin.auth.session import SessionSigner
from securelogin.config import Config
from securelogin.container import Container
from securelogin.cookie import CookieManager
from securelogin.db.mysql import MySQLConnect


def build_container(config: Config) -> Container:
    c = Container()
    c["config"] = config
    c["cookies"] = lambda c: CookieManager(c["config"].cookie)
    c["sessions"] = lambda c: SessionSigner(c["config"].cookie.secret_key, c["config"].session)
    # New connection on every lookup: callers own and close it.
    c["db"] = c.factory(lambda c: MySQLConnect.from_config(c["config"].database))
    return c
