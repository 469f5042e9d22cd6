# tests/conftest.py
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from socialfeed.core.config import Settings
from socialfeed.core.errors import StorageError
from socialfeed.core.messages import ErrorMessages
from socialfeed.main import create_app

PASSWORD = "test1234"


class FakeStorage:
    """
    In-memory stand-in for ObjectStorage.

    Set ``fail_after`` to make the n-th upload (0-based) raise.
    """

    def __init__(self) -> None:
        self.objects: Dict[str, Dict[str, Any]] = {}
        self.deleted: List[str] = []
        self.fail_after: Optional[int] = None
        self._counter = 0

    def upload_bytes(self, content: bytes, filename: Optional[str], content_type: str, prefix: str) -> str:
        if self.fail_after is not None and self._counter >= self.fail_after:
            raise StorageError(ErrorMessages.UPLOAD_FAILED)
        self._counter += 1
        url = f"https://cdn.test/{prefix}/{self._counter}-{filename}"
        self.objects[url] = {"content": content, "content_type": content_type}
        return url

    def delete_file(self, url: str) -> bool:
        self.deleted.append(url)
        return self.objects.pop(url, None) is not None


GOOGLE_TOKENS = {
    "google-alice": {
        "uid": "g-1",
        "email": "alice@gmail.com",
        "email_verified": True,
        "name": "Alice Kim",
        "picture": "https://lh3.googleusercontent.com/alice.png",
    },
    "google-alice-work": {
        "uid": "g-2",
        "email": "alice@work.io",
        "email_verified": True,
        "name": None,
        "picture": None,
    },
    "google-unverified": {
        "uid": "g-3",
        "email": "jiwon@mail.com",
        "email_verified": False,
        "name": "Not Jiwon",
        "picture": None,
    },
    "google-long": {
        "uid": "g-4",
        "email": ("x" * 60) + "@gmail.com",
        "email_verified": True,
        "name": "Long Name",
        "picture": None,
    },
}


def fake_google_verifier(token: str) -> Optional[Dict[str, Any]]:
    return GOOGLE_TOKENS.get(token)


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret-key",
        AUTO_CREATE_TABLES=True,
        ENVIRONMENT="test",
        DEBUG=False,
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def app(settings, engine, storage):
    return create_app(settings, engine=engine, storage=storage, google_verifier=fake_google_verifier)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def db(client, engine):
    """Direct session on the same in-memory database the app uses"""
    session = sessionmaker(bind=engine)()
    yield session
    session.close()


def signup(client, **overrides) -> Any:
    payload = {
        "email": "jiwon@mail.com",
        "username": "jiwon123",
        "password": PASSWORD,
        "name": "Jiwon Park",
    }
    payload.update(overrides)
    return client.post("/api/auth/signup", json=payload)


def sign_in(client, email: str = "jiwon@mail.com", password: str = PASSWORD) -> Any:
    response = client.post("/api/auth/callback/credentials", json={"email": email, "password": password})
    # Tests pass the token explicitly; drop the cookie the client just stored
    client.cookies.clear()
    return response


def auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_token(client) -> str:
    assert signup(client).status_code == 201
    response = sign_in(client)
    assert response.status_code == 200
    return response.json()["access_token"]
