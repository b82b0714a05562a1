#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from donors.core.models import Donor
from donors.auth.passwords import hash_password
from donors.infra.donor_repo import DEFAULT_STORE_PATH, DonorRepo, DuplicateKeyError

STORE_PATH = DEFAULT_STORE_PATH


def main() -> None:
    repo = DonorRepo(STORE_PATH)

    email = input("Email: ").strip()
    username = input("Name: ").strip()
    blood = input("Blood group [e.g. O+]: ").strip().upper()
    mobile = input("Mobile: ").strip()
    hometown = input("Hometown: ").strip()

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    try:
        donor = repo.insert(
            Donor(
                email=email,
                password_hash=hash_password(pw1),
                username=username,
                mobile=mobile,
                blood_group=blood,
                hometown=hometown,
            )
        )
    except DuplicateKeyError as e:
        raise SystemExit(str(e))
    print(f"OK {donor.email} -> {STORE_PATH}")


if __name__ == "__main__":
    main()
