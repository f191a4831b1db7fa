# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Login helpers.

This package provides:
- Password hashing/verification (argon2)
- The users table repository (MySQLConnect)
- Signed session tokens (itsdangerous), stored in encrypted cookies
"""
