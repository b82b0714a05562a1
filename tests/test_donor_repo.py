from datetime import date

import pytest
import yaml

from donors.core.models import DONOR_LIST_FIELDS, Donor
from donors.infra.donor_repo import DonorRepo, DonorStoreError, DuplicateKeyError


def _donor(email="bob@example.com", **kw):
    base = dict(email=email, password_hash="h", username="Bob", mobile="1", blood_group="A+", hometown="X")
    base.update(kw)
    return Donor(**base)


def test_insert_and_find(repo, store_path):
    repo.insert(_donor(last_donation=date(2025, 1, 2)))
    assert store_path.exists()

    found = repo.find_by_email("bob@example.com")
    assert found.username == "Bob"
    assert found.last_donation == date(2025, 1, 2)
    assert repo.find_by_email("nobody@example.com") is None
    assert repo.find_by_email("") is None


def test_email_is_case_insensitive(repo):
    repo.insert(_donor(email="  Bob@Example.COM "))
    assert repo.find_by_email("bob@example.com").email == "bob@example.com"
    with pytest.raises(DuplicateKeyError):
        repo.insert(_donor(email="BOB@example.com"))
    assert repo.count() == 1


def test_update_replaces_record(repo):
    repo.insert(_donor())
    repo.update(_donor(username="Robert", mobile="2"))
    got = repo.find_by_email("bob@example.com")
    assert (got.username, got.mobile) == ("Robert", "2")


def test_update_missing_record_raises(repo):
    with pytest.raises(KeyError):
        repo.update(_donor())


def test_list_all_projection(repo):
    repo.insert(_donor())
    repo.insert(_donor(email="amy@example.com", username="Amy", blood_group="O-", last_donation=date(2024, 5, 6)))
    rows = repo.list_all(DONOR_LIST_FIELDS)
    assert len(rows) == 2
    for row in rows:
        assert set(row) == {"username", "blood", "mobile", "lastDonation"}
    amy = next(r for r in rows if r["username"] == "Amy")
    assert amy["blood"] == "O-"
    assert amy["lastDonation"] == "2024-05-06"


def test_data_survives_a_new_repo_instance(repo, store_path):
    repo.insert(_donor())
    assert DonorRepo(store_path).find_by_email("bob@example.com").username == "Bob"

    raw = yaml.safe_load(store_path.read_text(encoding="utf-8"))
    assert raw["version"] == 1
    assert raw["users"]["bob@example.com"]["blood"] == "A+"


def test_corrupt_file_raises_store_error(store_path):
    store_path.parent.mkdir(parents=True, exist_ok=True)
    store_path.write_text("users: [unclosed", encoding="utf-8")
    with pytest.raises(DonorStoreError):
        DonorRepo(store_path).find_by_email("bob@example.com")
