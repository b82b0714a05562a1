import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from donors.app import create_app
from donors.auth.session import MemorySessionStore
from donors.infra.donor_repo import DonorRepo


@pytest.fixture(autouse=True)
def secret_key(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DONORS_FLASH_STYLE", "inline")


@pytest.fixture()
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "users.yml"


@pytest.fixture()
def repo(store_path: Path) -> DonorRepo:
    return DonorRepo(store_path)


@pytest.fixture()
def sessions() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture()
def client(repo, sessions) -> TestClient:
    app = create_app(repo=repo, sessions=sessions)
    return TestClient(app)


REGISTRATION = {
    "username": "Jane Doe",
    "email": "jane@example.com",
    "password": "s3cret-pass",
    "bloodGroup": "O+",
    "district": "Kandy",
    "contactNumber": "0712345678",
}


@pytest.fixture()
def registration() -> dict:
    return dict(REGISTRATION)


@pytest.fixture()
def logged_in(client, registration) -> TestClient:
    """Client holding a session cookie for a freshly registered donor."""
    client.post("/register", data=registration)
    r = client.post(
        "/login",
        data={"email": registration["email"], "password": registration["password"]},
        follow_redirects=False,
    )
    assert r.status_code == 303
    return client
