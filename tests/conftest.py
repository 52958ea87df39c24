import os
import tempfile

# settings are read at import time
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SEED_DEMO_DATA", "false")
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="store-manager-tests-"))

import pytest
from fastapi.testclient import TestClient

import services
from auth import add_user
from database import JsonStore, get_db
from main import app
from schemas import Caller, CreateStoreRequest, Role


def caller_for(user) -> Caller:
    return Caller(id=user.id, email=user.email, role=user.role)


@pytest.fixture
def store(tmp_path):
    return JsonStore(tmp_path / "data")


@pytest.fixture
def admin(store):
    return add_user(store, "admin@example.com", "admin123", "Admin", Role.ADMIN)


@pytest.fixture
def owner(store):
    return add_user(store, "owner@example.com", "owner123", "Owner A", Role.STORE_OWNER)


@pytest.fixture
def other_owner(store):
    return add_user(store, "other@example.com", "other123", "Owner B", Role.STORE_OWNER)


@pytest.fixture
def plain_user(store):
    return add_user(store, "user@example.com", "user123", "Plain User", Role.USER)


@pytest.fixture
def admin_caller(admin):
    return caller_for(admin)


@pytest.fixture
def owner_caller(owner):
    return caller_for(owner)


@pytest.fixture
def other_owner_caller(other_owner):
    return caller_for(other_owner)


@pytest.fixture
def user_caller(plain_user):
    return caller_for(plain_user)


@pytest.fixture
def owner_store(store, owner_caller):
    return services.create_store(
        store, owner_caller, CreateStoreRequest(name="Tech Paradise", description="Gadgets", category="Electronics")
    )


@pytest.fixture
def client(store):
    app.dependency_overrides[get_db] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login_headers(client):
    def _login(email: str, password: str) -> dict:
        res = client.post("/api/auth/login", json={"email": email, "password": password})
        assert res.status_code == 200, res.text
        return {"Authorization": f"Bearer {res.json()['token']}"}
    return _login
