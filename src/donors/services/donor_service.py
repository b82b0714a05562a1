# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from donors.auth.passwords import hash_password, verify_password
from donors.core.models import DONOR_LIST_FIELDS, Donor
from donors.core.utils import canon_email, clean, iso_or_none, parse_iso_date
from donors.infra.donor_repo import DonorRepo, DuplicateKeyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisterResult:
    ok: bool
    donor: Optional[Donor] = None
    error: str = ""


@dataclass(frozen=True)
class LoginResult:
    ok: bool
    donor: Optional[Donor] = None
    error: str = ""


def register_donor(
    repo: DonorRepo,
    *,
    email: str,
    password: str,
    username: str,
    blood_group: str,
    hometown: str,
    mobile: str,
) -> RegisterResult:
    """Create a donor account. Store errors propagate to the caller."""
    key = canon_email(email)
    if not key or not password:
        return RegisterResult(ok=False, error="missing")

    if repo.find_by_email(key) is not None:
        return RegisterResult(ok=False, error="duplicate")

    donor = Donor(
        email=key,
        password_hash=hash_password(password),
        username=clean(username),
        mobile=clean(mobile),
        blood_group=clean(blood_group),
        hometown=clean(hometown),
    )
    try:
        donor = repo.insert(donor)
    except DuplicateKeyError:
        # Lost the race against a concurrent registration of the same email.
        return RegisterResult(ok=False, error="duplicate")
    logger.info("Registered donor %s", key)
    return RegisterResult(ok=True, donor=donor)


def authenticate(repo: DonorRepo, email: str, password: str) -> LoginResult:
    donor = repo.find_by_email(email)
    if donor is None:
        logger.info("Login failed for %s: unknown email", canon_email(email))
        return LoginResult(ok=False, error="not_found")
    if not verify_password(donor.password_hash, password):
        logger.info("Login failed for %s: wrong password", donor.email)
        return LoginResult(ok=False, error="wrong_password")
    return LoginResult(ok=True, donor=donor)


def update_profile(
    repo: DonorRepo,
    email: str,
    *,
    username: str,
    mobile: str,
    hometown: str,
    last_donation: Optional[str] = None,
) -> Optional[Donor]:
    """Apply the mutable profile fields. Returns None if the donor vanished.

    Raises ValueError for a malformed last donation date.
    """
    last = parse_iso_date(last_donation)
    donor = repo.find_by_email(email)
    if donor is None:
        return None
    donor = replace(
        donor,
        username=clean(username),
        mobile=clean(mobile),
        hometown=clean(hometown),
        last_donation=last,
    )
    try:
        donor = repo.update(donor)
    except KeyError:
        return None
    logger.info("Updated profile for %s", donor.email)
    return donor


def profile_payload(donor: Donor) -> Dict[str, Any]:
    return {
        "email": donor.email,
        "username": donor.username,
        "mobile": donor.mobile or "",
        "bloodGroup": donor.blood_group or "",
        "hometown": donor.hometown or "",
        "lastDonation": iso_or_none(donor.last_donation),
    }


def donor_list(repo: DonorRepo) -> List[Dict[str, Any]]:
    return repo.list_all(DONOR_LIST_FIELDS)
