# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
import secrets
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Dict, Optional

from itsdangerous import BadSignature, BadTimeSignature, URLSafeTimedSerializer

COOKIE_NAME = os.getenv("DONORS_COOKIE_NAME", "donors_session")
DEFAULT_MAX_AGE_SECONDS = int(os.getenv("DONORS_SESSION_MAX_AGE", "28800"))  # 8 hours


def session_serializer() -> URLSafeTimedSerializer:
    """Build the cookie signer. Raises RuntimeError when no secret is configured."""
    secret = os.getenv("SECRET_KEY") or os.getenv("DONORS_SECRET_KEY")
    if not secret:
        raise RuntimeError("Missing SECRET_KEY (or DONORS_SECRET_KEY) in environment")
    salt = os.getenv("DONORS_SESSION_SALT", "donors.session.v1")
    return URLSafeTimedSerializer(secret_key=secret, salt=salt)


@dataclass(frozen=True)
class SessionIdentity:
    email: str
    username: str
    created_at: float = field(default_factory=time.time)


class SessionStore(ABC):
    """Maps opaque session tokens to the identity of a logged-in donor."""

    max_age: int = DEFAULT_MAX_AGE_SECONDS

    @abstractmethod
    def create(self, identity: SessionIdentity) -> str: ...

    @abstractmethod
    def get(self, token: str) -> Optional[SessionIdentity]: ...

    @abstractmethod
    def update(self, token: str, **changes: str) -> Optional[SessionIdentity]: ...

    @abstractmethod
    def destroy(self, token: str) -> bool: ...


class MemorySessionStore(SessionStore):
    """Single-process store. Sessions do not survive a restart."""

    def __init__(self, *, max_age: int = DEFAULT_MAX_AGE_SECONDS) -> None:
        self.max_age = max_age
        self._sessions: Dict[str, SessionIdentity] = {}
        self._lock = threading.Lock()

    def create(self, identity: SessionIdentity) -> str:
        token = secrets.token_urlsafe(32)
        with self._lock:
            self._sweep_expired()
            self._sessions[token] = identity
        return token

    def _sweep_expired(self) -> None:
        # caller holds the lock
        if not self.max_age:
            return
        cutoff = time.time() - self.max_age
        for token in [t for t, ident in self._sessions.items() if ident.created_at < cutoff]:
            del self._sessions[token]

    def get(self, token: str) -> Optional[SessionIdentity]:
        if not token:
            return None
        with self._lock:
            ident = self._sessions.get(token)
            if ident is None:
                return None
            if self.max_age and time.time() - ident.created_at > self.max_age:
                del self._sessions[token]
                return None
            return ident

    def update(self, token: str, **changes: str) -> Optional[SessionIdentity]:
        with self._lock:
            ident = self._sessions.get(token)
            if ident is None:
                return None
            # created_at is kept so an edit never extends the session
            ident = replace(ident, **changes)
            self._sessions[token] = ident
            return ident

    def destroy(self, token: str) -> bool:
        with self._lock:
            return self._sessions.pop(token, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


def sign_token(token: str, serializer: Optional[URLSafeTimedSerializer] = None) -> str:
    s = serializer or session_serializer()
    return s.dumps({"t": token})


def unsign_token(
    value: str,
    serializer: Optional[URLSafeTimedSerializer] = None,
    *,
    max_age: int = DEFAULT_MAX_AGE_SECONDS,
) -> Optional[str]:
    if not value:
        return None
    s = serializer or session_serializer()
    try:
        data = s.loads(value, max_age=max_age)
        if not isinstance(data, dict):
            return None
        t = str(data.get("t") or "").strip()
        return t or None
    except (BadSignature, BadTimeSignature):
        return None
