#!/usr/bin/env python3
from __future__ import annotations

from donors.infra.donor_repo import DEFAULT_STORE_PATH, DonorRepo
from donors.services.donor_service import donor_list


def main() -> None:
    for d in donor_list(DonorRepo(DEFAULT_STORE_PATH)):
        print(d)


if __name__ == "__main__":
    main()
