# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations


class LoginError(Exception):
    """Base class for errors raised by securelogin."""


class InvalidArgumentError(LoginError, ValueError):
    """Malformed input, raised before any side effect."""


class HeadersSentError(LoginError, RuntimeError):
    """Cookies touched after the response headers were flushed."""

    def __init__(self, message: str = "The headers are already sent.") -> None:
        super().__init__(message)


class ConnectionFailedError(LoginError):
    """The database server is unreachable or rejected the credentials."""


class ConfigError(LoginError):
    pass


class DatabaseWarning(UserWarning):
    """Statement error reported as a warning when the connection runs in debug mode."""
