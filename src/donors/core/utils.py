# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from datetime import date, datetime
from typing import Optional


def canon_email(s: str) -> str:
    """Canonicalise emails for storage and lookups (trim + lower)."""
    return (s or "").strip().lower()


def clean(s: Optional[str]) -> str:
    return str(s or "").strip()


def parse_iso_date(s: Optional[str]) -> Optional[date]:
    """Parse YYYY-MM-DD (a datetime prefix is tolerated). Empty -> None.

    Raises ValueError for anything else.
    """
    raw = clean(s)
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()


def iso_or_none(d: Optional[date]) -> Optional[str]:
    return d.isoformat() if d else None
