# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Encrypted cookies.

Values are sealed with Fernet (AES-CBC + HMAC, version-tagged tokens) using the
per-deployment ``cookie.secret_key``. ``CookieManager`` holds the key;
``RequestCookies`` is the per-request view that reads the incoming cookies and
queues Set-Cookie headers until they are flushed onto the response. After the
flush every operation raises ``HeadersSentError``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from cryptography.fernet import Fernet
from starlette.responses import Response

from securelogin.config import CookieConfig
from securelogin.errors import HeadersSentError

logger = logging.getLogger(__name__)

# How far in the past a deleted cookie's expiry is set.
DELETE_OFFSET_SECONDS = 42000

Expiry = Union[int, float, datetime, None]


def generate_key() -> str:
    """Return a fresh secret suitable for ``cookie.secret_key``."""
    return Fernet.generate_key().decode("ascii")


def _expires_at(expire: Expiry) -> Optional[datetime]:
    """Absolute unix timestamp / datetime -> aware UTC datetime. 0 or None: session cookie."""
    if expire is None:
        return None
    if isinstance(expire, datetime):
        if expire.tzinfo is None:
            return expire.replace(tzinfo=timezone.utc)
        return expire.astimezone(timezone.utc)
    if not expire:
        return None
    return datetime.fromtimestamp(expire, tz=timezone.utc)


class CookieManager:
    def __init__(self, config: CookieConfig) -> None:
        # Fernet raises ValueError for a malformed key.
        self._fernet = Fernet(config.secret_key)
        self.config = config

    def encrypt(self, value: str) -> str:
        return self._fernet.encrypt(value.encode("utf-8")).decode("ascii")

    def decrypt(self, token: str) -> str:
        """Authenticate and decrypt ``token``; ``InvalidToken`` propagates."""
        return self._fernet.decrypt(token).decode("utf-8")

    def open(self, cookies: Mapping[str, str]) -> "RequestCookies":
        return RequestCookies(self, cookies)


class RequestCookies:
    def __init__(self, manager: CookieManager, cookies: Mapping[str, str]) -> None:
        self._manager = manager
        self._cookies: Dict[str, str] = dict(cookies)
        self._pending: List[Dict[str, Any]] = []
        self._sent = False

    @property
    def headers_sent(self) -> bool:
        return self._sent

    def _ensure_open(self) -> None:
        if self._sent:
            raise HeadersSentError()

    def _queue(self, name: str, value: str, expires: Optional[datetime]) -> None:
        cfg = self._manager.config
        self._pending.append(
            {
                "key": name,
                "value": value,
                "expires": expires,
                "path": cfg.path,
                "domain": cfg.domain,
                "secure": cfg.secure,
                "httponly": cfg.http_only,
                "samesite": cfg.samesite,
            }
        )

    def set(self, name: str, value: str, expire: Expiry = 0, *, use_encrypt: bool = True) -> None:
        self._ensure_open()
        if use_encrypt:
            value = self._manager.encrypt(value)
        self._queue(name, value, _expires_at(expire))

    def fetch(self, name: str, *, use_decrypt: bool = True) -> str:
        """Return the cookie value, or "" when the request does not carry it."""
        # Reads are refused after the flush as well, mirroring set/delete.
        self._ensure_open()
        if name not in self._cookies:
            return ""
        value = self._cookies[name]
        if use_decrypt:
            return self._manager.decrypt(value)
        return value

    def delete(self, name: str) -> None:
        self._ensure_open()
        if name not in self._cookies:
            return
        del self._cookies[name]
        expired = datetime.now(timezone.utc) - timedelta(seconds=DELETE_OFFSET_SECONDS)
        self._queue(name, "", expired)

    def flush(self, response: Response) -> None:
        """Write the queued cookies onto ``response``; later calls raise."""
        self._ensure_open()
        for kwargs in self._pending:
            response.set_cookie(**kwargs)
        if self._pending:
            logger.debug("Flushed %d cookie header(s)", len(self._pending))
        self._pending = []
        self._sent = True
