# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from cryptography.fernet import InvalidToken
from fastapi import Depends, FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from securelogin.auth.session import SessionSigner
from securelogin.auth.users import UserRepository
from securelogin.container import Container
from securelogin.cookie import RequestCookies
from securelogin.db.mysql import MySQLConnect
from securelogin.errors import ConnectionFailedError

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


@dataclass(frozen=True)
class CurrentUser:
    id: int
    username: str


def _safe_next(next_url: str) -> str:
    # Only same-site paths; "//host" would leave the site.
    n = (next_url or "").strip()
    if not n.startswith("/") or n.startswith("//"):
        return "/me"
    return n


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_cookies(request: Request) -> RequestCookies:
    return request.state.cookies


def get_sessions(container: Container = Depends(get_container)) -> SessionSigner:
    return container["sessions"]


def get_db(container: Container = Depends(get_container)) -> Iterator[MySQLConnect]:
    """One connection per request, closed when the request is done."""
    db = container["db"]
    try:
        yield db
    finally:
        db.close()


def get_users(db: MySQLConnect = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def current_user_optional(
    cookies: RequestCookies = Depends(get_cookies),
    sessions: SessionSigner = Depends(get_sessions),
    container: Container = Depends(get_container),
) -> Optional[CurrentUser]:
    try:
        token = cookies.fetch(sessions.config.cookie_name)
    except (InvalidToken, ValueError):
        # ValueError: non-ASCII garbage is rejected by base64 before Fernet sees it.
        logger.warning("Discarding session cookie that failed to decrypt")
        cookies.delete(sessions.config.cookie_name)
        return None
    sess = sessions.verify(token)
    if not sess:
        return None
    # Anonymous requests never touch the database.
    with container["db"] as db:
        u = UserRepository(db).get(sess.username)
    if not u or not u.active:
        return None
    return CurrentUser(id=u.id, username=u.username)


def require_user(request: Request, user: Optional[CurrentUser] = Depends(current_user_optional)) -> CurrentUser:
    if user:
        return user
    next_url = str(request.url.path)
    if request.url.query:
        next_url += "?" + request.url.query
    raise HTTPException(status_code=303, headers={"Location": f"/login?next={next_url}"})


def create_app(container: Container) -> FastAPI:
    app = FastAPI()
    app.state.container = container

    @app.middleware("http")
    async def _cookie_middleware(request: Request, call_next):
        cookies = container["cookies"].open(request.cookies)
        request.state.cookies = cookies
        response = await call_next(request)
        cookies.flush(response)
        return response

    @app.exception_handler(ConnectionFailedError)
    async def _db_unavailable(request: Request, exc: ConnectionFailedError):
        return JSONResponse({"detail": "Database unavailable"}, status_code=503)

    @app.get("/login", response_class=HTMLResponse)
    def login_get(request: Request, next: str = "/me"):
        return templates.TemplateResponse(request, "login.html", {"next": _safe_next(next), "error": ""})

    @app.post("/login")
    def login_post(
        request: Request,
        username: str = Form(...),
        password: str = Form(...),
        next: str = Form("/me"),
        users: UserRepository = Depends(get_users),
        sessions: SessionSigner = Depends(get_sessions),
        cookies: RequestCookies = Depends(get_cookies),
    ):
        u = users.authenticate(username, password)
        if not u:
            return templates.TemplateResponse(
                request,
                "login.html",
                {"next": _safe_next(next), "error": "Invalid credentials"},
                status_code=401,
            )
        cookies.set(
            sessions.config.cookie_name,
            sessions.sign(u.username),
            int(time.time()) + sessions.config.max_age,
        )
        return RedirectResponse(url=_safe_next(next), status_code=303)

    @app.post("/logout")
    def logout_post(
        sessions: SessionSigner = Depends(get_sessions),
        cookies: RequestCookies = Depends(get_cookies),
    ):
        cookies.delete(sessions.config.cookie_name)
        return RedirectResponse(url="/login", status_code=303)

    @app.get("/me")
    def me(user: CurrentUser = Depends(require_user)):
        return {"id": user.id, "username": user.username}

    return app
