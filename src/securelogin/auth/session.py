# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from itsdangerous import BadSignature, URLSafeTimedSerializer

from securelogin.config import SessionConfig


@dataclass(frozen=True)
class SessionData:
    username: str


class SessionSigner:
    """Timestamped, signed session tokens carrying the username.

    The token goes into an encrypted cookie; the signature timestamp enforces
    ``max_age`` on the server side regardless of the cookie's own expiry.
    """

    def __init__(self, secret_key: str, config: SessionConfig) -> None:
        if not secret_key:
            raise ValueError("SessionSigner needs a secret key")
        self.config = config
        self._serializer = URLSafeTimedSerializer(secret_key=secret_key, salt=config.salt)

    def sign(self, username: str) -> str:
        return self._serializer.dumps({"u": username})

    def verify(self, token: str, *, max_age: Optional[int] = None) -> Optional[SessionData]:
        if not token:
            return None
        age = self.config.max_age if max_age is None else max_age
        try:
            data = self._serializer.loads(token, max_age=age)
        except BadSignature:
            # SignatureExpired and BadTimeSignature are both BadSignature.
            return None
        u = str((data or {}).get("u") or "").strip() if isinstance(data, dict) else ""
        if not u:
            return None
        return SessionData(username=u)
