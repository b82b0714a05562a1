# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Donor:
    email: str
    password_hash: str
    username: str
    mobile: str = ""
    blood_group: str = ""
    hometown: str = ""
    last_donation: Optional[date] = None


# Public projection used by the donor list (wire name -> attribute).
DONOR_LIST_FIELDS = {
    "username": "username",
    "blood": "blood_group",
    "mobile": "mobile",
    "lastDonation": "last_donation",
}
