# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from donors.auth.session import COOKIE_NAME, SessionIdentity, unsign_token


@dataclass(frozen=True)
class CurrentSession:
    token: str
    identity: SessionIdentity

    @property
    def email(self) -> str:
        return self.identity.email


def load_session_from_request(request: Request) -> Optional[CurrentSession]:
    raw = request.cookies.get(COOKIE_NAME, "")
    if not raw:
        return None
    sessions = request.app.state.sessions
    token = unsign_token(raw, request.app.state.signer, max_age=sessions.max_age)
    if not token:
        return None
    ident = sessions.get(token)
    if ident is None:
        return None
    return CurrentSession(token=token, identity=ident)


def current_session_optional(request: Request) -> Optional[CurrentSession]:
    if getattr(request.state, "session_checked", False):
        return request.state.session
    return load_session_from_request(request)


def cookie_settings() -> dict:
    secure = os.getenv("DONORS_COOKIE_SECURE", "false").lower() in {"1", "true", "yes", "y"}
    return {"httponly": True, "samesite": "lax", "secure": secure}
