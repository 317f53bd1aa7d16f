"""
Shared fixtures: a throwaway document store per test and helpers to create
users and act as them through FastAPI's dependency overrides.
"""

import pytest

from civic_backend.main import app
from civic_backend.authentication.schemas import CurrentUser
from civic_backend.authentication.security import get_current_user, get_optional_user
from civic_backend.database import DocumentStore, get_store, utcnow


@pytest.fixture
def store(tmp_path):
    """Fresh JSON store under tmp_path, injected into every route."""
    store = DocumentStore(str(tmp_path / "data")).open()
    app.dependency_overrides[get_store] = lambda: store
    yield store
    store.close()
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(store):
    """Insert a user document and return the matching CurrentUser identity."""
    counter = {"n": 0}

    def _make(role: str = "citizen", name: str = None, email: str = None) -> CurrentUser:
        counter["n"] += 1
        name = name or f"{role}{counter['n']}"
        doc = store.insert("users", {
            "name": name,
            "email": email or f"{name}@example.com",
            "hashed_password": "not-a-real-hash",
            "role": role,
            "phone": "",
            "notifications": [],
            "created_at": utcnow(),
        })
        return CurrentUser(user_id=doc["_id"], name=doc["name"], email=doc["email"], role=role)

    return _make


@pytest.fixture
def login_as():
    """Make subsequent requests run as ``user`` (None = anonymous)."""

    def _login(user):
        if user is None:
            app.dependency_overrides.pop(get_current_user, None)
            app.dependency_overrides.pop(get_optional_user, None)
            return None
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_optional_user] = lambda: user
        return user

    yield _login

    app.dependency_overrides.pop(get_current_user, None)
    app.dependency_overrides.pop(get_optional_user, None)
