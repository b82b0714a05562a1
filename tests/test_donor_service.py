from donors.core.models import Donor
from donors.services.donor_service import authenticate, register_donor, update_profile


def _register(repo, email="jane@example.com", password="pw"):
    return register_donor(
        repo, email=email, password=password, username="Jane", blood_group="B+", hometown="K", mobile="1"
    )


def test_register_then_authenticate(repo):
    res = _register(repo)
    assert res.ok and res.donor.email == "jane@example.com"
    assert authenticate(repo, "Jane@Example.com", "pw").ok
    assert authenticate(repo, "jane@example.com", "nope").error == "wrong_password"
    assert authenticate(repo, "ghost@example.com", "pw").error == "not_found"


def test_register_requires_email_and_password(repo):
    assert _register(repo, email=" ").error == "missing"
    assert _register(repo, password="").error == "missing"
    assert repo.count() == 0


def test_insert_race_is_reported_as_duplicate(repo, monkeypatch):
    # The advisory lookup misses; the store itself still refuses the second insert.
    repo.insert(Donor(email="jane@example.com", password_hash="h", username="First"))
    monkeypatch.setattr(repo, "find_by_email", lambda email: None)
    res = _register(repo)
    assert not res.ok and res.error == "duplicate"
    assert repo.count() == 1


def test_update_profile_for_missing_donor(repo):
    assert update_profile(repo, "ghost@example.com", username="x", mobile="", hometown="") is None
