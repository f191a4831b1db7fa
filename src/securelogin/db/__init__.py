# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from securelogin.db.mysql import FETCH_ASSOC, FETCH_NUM, MySQLConnect

__all__ = ["FETCH_ASSOC", "FETCH_NUM", "MySQLConnect"]
