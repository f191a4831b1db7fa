# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Backend support for a web login system.

- Service locator / container (container.py)
- Encrypted cookies (cookie.py, Fernet)
- MySQL data access helpers (db/mysql.py, PyMySQL)
"""

__version__ = "0.1.0"
