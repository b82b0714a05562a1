# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, FastAPI, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from donors.auth.session import (
    COOKIE_NAME,
    MemorySessionStore,
    SessionIdentity,
    SessionStore,
    session_serializer,
    sign_token,
)
from donors.infra.donor_repo import DEFAULT_STORE_PATH, DonorRepo
from donors.pages import Flash, not_logged_in_page, render_page
from donors.permissions import cookie_settings, current_session_optional
from donors.services.donor_service import (
    authenticate,
    donor_list,
    profile_payload,
    register_donor,
    update_profile,
)

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
STATIC_DIR = Path(os.getenv("DONORS_STATIC_DIR", str(BASE_DIR / "static"))).resolve()

router = APIRouter()


def _repo(request: Request) -> DonorRepo:
    return request.app.state.repo


def _sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


def _page(template_name: str, flash: Optional[Flash] = None) -> HTMLResponse:
    return HTMLResponse(render_page(template_name, flash))


def _error(text: str, redirect_to: Optional[str] = None) -> Flash:
    return Flash(text=text, color="red", redirect_to=redirect_to)


# ------------------ Routes ------------------


@router.get("/", response_class=HTMLResponse)
def login_page():
    return _page("login.html")


@router.get("/register", response_class=HTMLResponse)
def register_page():
    return _page("register.html")


@router.post("/register", response_class=HTMLResponse)
def register_post(
    request: Request,
    username: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    bloodGroup: str = Form(""),
    district: str = Form(""),
    contactNumber: str = Form(""),
):
    try:
        res = register_donor(
            _repo(request),
            email=email,
            password=password,
            username=username,
            blood_group=bloodGroup,
            hometown=district,
            mobile=contactNumber,
        )
    except Exception:
        logger.exception("Registration failed for %s", email)
        return _page("register.html", _error("Internal Server Error 🚨", "/register"))

    if res.error == "duplicate":
        return _page("register.html", _error("Email already exists ❌", "/register"))
    if not res.ok:
        return _page("register.html", _error("Email and password are required ❌", "/register"))
    return _page("login.html", Flash(text="Registration Successful ✅ Please login", color="green", redirect_to="/"))


@router.post("/login", response_class=HTMLResponse)
def login_post(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
):
    try:
        res = authenticate(_repo(request), email, password)
    except Exception:
        logger.exception("Login failed for %s", email)
        return _page("login.html", _error("Something went wrong 🚨", "/"))

    if res.error == "not_found":
        return _page("login.html", _error("User not found ❌", "/"))
    if not res.ok:
        return _page("login.html", _error("Wrong password ❌", "/"))

    donor = res.donor
    sessions = _sessions(request)
    token = sessions.create(SessionIdentity(email=donor.email, username=donor.username))
    try:
        cookie = sign_token(token, request.app.state.signer)
    except Exception:
        sessions.destroy(token)
        logger.exception("Could not issue a session cookie for %s", donor.email)
        return _page("login.html", _error("Something went wrong 🚨", "/"))

    resp = RedirectResponse(url="/home", status_code=303)
    resp.set_cookie(COOKIE_NAME, cookie, max_age=sessions.max_age, **cookie_settings())
    logger.info("Donor %s logged in", donor.email)
    return resp


@router.get("/logout")
def logout(request: Request):
    sess = current_session_optional(request)
    if sess:
        _sessions(request).destroy(sess.token)
        logger.info("Donor %s logged out", sess.email)
    resp = RedirectResponse(url="/", status_code=303)
    resp.delete_cookie(COOKIE_NAME)
    return resp


@router.get("/home", response_class=HTMLResponse)
def home(request: Request):
    if not current_session_optional(request):
        return HTMLResponse(not_logged_in_page())
    return _page("home.html")


@router.get("/profile", response_class=HTMLResponse)
def profile(request: Request):
    if not current_session_optional(request):
        return HTMLResponse(not_logged_in_page())
    return _page("profile.html")


@router.get("/profile-data")
def profile_data(request: Request):
    sess = current_session_optional(request)
    if not sess:
        return JSONResponse({"error": "Not logged in"}, status_code=401)
    try:
        donor = _repo(request).find_by_email(sess.email)
    except Exception:
        logger.exception("Profile lookup failed for %s", sess.email)
        return JSONResponse({"error": "Something went wrong"}, status_code=500)
    if donor is None:
        return JSONResponse({"error": "User not found"}, status_code=404)
    return JSONResponse(profile_payload(donor))


@router.post("/updateProfile")
def update_profile_post(
    request: Request,
    username: str = Form(""),
    mobile: str = Form(""),
    hometown: str = Form(""),
    lastDonation: str = Form(""),
):
    # Any submitted blood group field is ignored: it cannot change after registration.
    sess = current_session_optional(request)
    if not sess:
        return PlainTextResponse("You are not logged in ❌")
    try:
        donor = update_profile(
            _repo(request),
            sess.email,
            username=username,
            mobile=mobile,
            hometown=hometown,
            last_donation=lastDonation,
        )
    except ValueError:
        return PlainTextResponse("Invalid last donation date ❌")
    except Exception:
        logger.exception("Profile update failed for %s", sess.email)
        return PlainTextResponse("Something went wrong 🚨")
    if donor is None:
        return PlainTextResponse("User not found ❌")

    _sessions(request).update(sess.token, username=donor.username)
    return RedirectResponse(url="/profile", status_code=303)


@router.get("/donorlist")
def donorlist(request: Request):
    try:
        return JSONResponse(donor_list(_repo(request)))
    except Exception:
        logger.exception("Donor list failed")
        return JSONResponse({"error": "Failed to fetch donors"}, status_code=500)


# ------------------ App factory ------------------


def create_app(
    *,
    repo: Optional[DonorRepo] = None,
    sessions: Optional[SessionStore] = None,
    static_dir: Path = STATIC_DIR,
) -> FastAPI:
    """Build the application. Raises RuntimeError when no SECRET_KEY is configured."""
    app = FastAPI(title="Blood donor registry")
    app.state.signer = session_serializer()
    app.state.repo = repo if repo is not None else DonorRepo(DEFAULT_STORE_PATH)
    app.state.sessions = sessions if sessions is not None else MemorySessionStore()

    @app.middleware("http")
    async def _session_middleware(request: Request, call_next):
        try:
            request.state.session = current_session_optional(request)
        except Exception:
            logger.exception("Ignoring unreadable session cookie")
            request.state.session = None
        request.state.session_checked = True
        return await call_next(request)

    app.include_router(router)
    # Unmatched paths fall through to static assets.
    app.mount("/", StaticFiles(directory=str(static_dir), check_dir=False), name="static")
    return app
