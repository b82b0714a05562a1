# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""YAML-backed donor collection.

One document file holds every donor, keyed by canonical email. Reads are
cached by file mtime; every write replaces the whole file atomically.
"""

from __future__ import annotations

import os
import threading
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

from donors.core.models import Donor
from donors.core.utils import canon_email, clean, iso_or_none, parse_iso_date

# Anchor the default store path to the project root (works well with editable installs).
BASE_DIR = Path(__file__).resolve().parents[3]
DEFAULT_STORE_PATH = Path(
    os.getenv("DONORS_STORE_PATH", str(BASE_DIR / "data" / "users.yml"))
).resolve()

STORE_VERSION = 1


class DonorStoreError(RuntimeError):
    """The document file could not be read or written."""


class DuplicateKeyError(ValueError):
    """A donor with the same email already exists."""


def _donor_from_doc(email: str, doc: Dict[str, Any]) -> Donor:
    raw_date = doc.get("last_donation")
    if isinstance(raw_date, datetime):
        last = raw_date.date()
    elif isinstance(raw_date, date):
        last = raw_date
    else:
        try:
            last = parse_iso_date(raw_date)
        except ValueError:
            last = None
    return Donor(
        email=email,
        password_hash=clean(doc.get("password_hash")),
        username=clean(doc.get("username")),
        mobile=clean(doc.get("mobile")),
        blood_group=clean(doc.get("blood")),
        hometown=clean(doc.get("hometown")),
        last_donation=last,
    )


def _donor_to_doc(donor: Donor) -> Dict[str, Any]:
    return {
        "password_hash": donor.password_hash,
        "username": donor.username,
        "mobile": donor.mobile,
        "blood": donor.blood_group,
        "hometown": donor.hometown,
        "last_donation": iso_or_none(donor.last_donation),
    }


class DonorRepo:
    def __init__(self, path: Path = DEFAULT_STORE_PATH) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._cache: Tuple[float, Dict[str, Donor]] = (0.0, {})

    # ------------------ file I/O ------------------

    def _read_file(self) -> Dict[str, Donor]:
        if not self.path.exists():
            return {}
        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise DonorStoreError(f"Cannot read donor store {self.path}: {e}") from e
        users = (raw.get("users") or {}) if isinstance(raw, dict) else {}
        if not isinstance(users, dict):
            raise DonorStoreError(f"Malformed donor store {self.path}: 'users' must be a mapping")
        out: Dict[str, Donor] = {}
        for key, doc in users.items():
            if not isinstance(doc, dict):
                continue
            email = canon_email(str(key))
            if not email:
                continue
            out[email] = _donor_from_doc(email, doc)
        return out

    def _load(self) -> Dict[str, Donor]:
        try:
            mtime = self.path.stat().st_mtime if self.path.exists() else 0.0
        except OSError:
            mtime = 0.0

        cached_mtime, cached = self._cache
        if mtime and mtime == cached_mtime:
            return dict(cached)

        donors = self._read_file()
        self._cache = (mtime, donors)
        return dict(donors)

    def _save(self, donors: Dict[str, Donor]) -> None:
        raw = {
            "version": STORE_VERSION,
            "users": {email: _donor_to_doc(d) for email, d in sorted(donors.items())},
        }
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(yaml.safe_dump(raw, sort_keys=False, allow_unicode=True), encoding="utf-8")
            os.replace(tmp, self.path)
            mtime = self.path.stat().st_mtime
        except OSError as e:
            raise DonorStoreError(f"Cannot write donor store {self.path}: {e}") from e
        self._cache = (mtime, dict(donors))

    # ------------------ collection API ------------------

    def find_by_email(self, email: str) -> Optional[Donor]:
        key = canon_email(email)
        if not key:
            return None
        with self._lock:
            return self._load().get(key)

    def insert(self, donor: Donor) -> Donor:
        donor = replace(donor, email=canon_email(donor.email))
        if not donor.email:
            raise ValueError("Donor email is required")
        with self._lock:
            donors = self._load()
            if donor.email in donors:
                raise DuplicateKeyError(f"Email already exists: {donor.email}")
            donors[donor.email] = donor
            self._save(donors)
        return donor

    def update(self, donor: Donor) -> Donor:
        """Replace a stored donor. Last writer wins."""
        donor = replace(donor, email=canon_email(donor.email))
        with self._lock:
            donors = self._load()
            if donor.email not in donors:
                raise KeyError(donor.email)
            donors[donor.email] = donor
            self._save(donors)
        return donor

    def list_all(self, fields: Dict[str, str]) -> List[Dict[str, Any]]:
        """Return every donor projected to ``fields`` (output key -> Donor attribute)."""
        with self._lock:
            donors = list(self._load().values())
        return [_project(d, fields.items()) for d in donors]

    def count(self) -> int:
        with self._lock:
            return len(self._load())

    def reload(self) -> None:
        """Forget cached documents so the next read goes to disk."""
        with self._lock:
            self._cache = (0.0, {})


def _project(donor: Donor, fields: Iterable[Tuple[str, str]]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, attr in fields:
        value = getattr(donor, attr)
        out[key] = iso_or_none(value) if isinstance(value, date) else value
    return out
