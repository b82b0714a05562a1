import pytest

from donors.auth.passwords import hash_password, verify_password


def test_hash_is_salted_and_verifies():
    h1 = hash_password("hunter22")
    h2 = hash_password("hunter22")
    assert h1 != "hunter22"
    assert h1 != h2
    assert verify_password(h1, "hunter22")
    assert verify_password(h2, "hunter22")


def test_verify_rejects_wrong_password_and_garbage_hash():
    h = hash_password("hunter22")
    assert not verify_password(h, "hunter23")
    assert not verify_password("not-a-hash", "hunter22")
    assert not verify_password("", "hunter22")
    assert not verify_password(h, "")


def test_empty_password_cannot_be_hashed():
    with pytest.raises(ValueError):
        hash_password("")
