#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from securelogin.auth.users import UserRepository
from securelogin.config import load_config
from securelogin.db.mysql import MySQLConnect
from securelogin.errors import ConnectionFailedError


def main() -> None:
    config = load_config()
    try:
        db = MySQLConnect.from_config(config.database)
    except ConnectionFailedError as exc:
        raise SystemExit(str(exc))

    with db:
        users = UserRepository(db)
        users.ensure_table()
        username = input("Username: ").strip()
        active_in = input("Active? [Y/n]: ").strip().lower()
        active = (active_in != "n")

        pw1 = getpass("Password: ")
        pw2 = getpass("Repeat password: ")
        if pw1 != pw2:
            raise SystemExit("Passwords do not match")

        if users.get(username):
            users.set_password(username, pw1)
            users.set_active(username, active)
            print(f"Updated -> {username}")
        else:
            u = users.create(username, pw1, active=active)
            print(f"OK -> {u.username} (id={u.id})")


if __name__ == "__main__":
    main()
