import uuid

import pytest

from socialfeed.core.messages import ErrorMessages
from socialfeed.modules.user_management.models.user import User
from tests.conftest import PASSWORD, auth_headers, sign_in, signup


@pytest.fixture
def account(client):
    assert signup(client).status_code == 201


def test_correct_credentials_issue_session(client, account):
    response = client.post("/api/auth/callback/credentials", json={"email": "jiwon@mail.com", "password": PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["username"] == "jiwon123"
    assert body["user"]["email"] == "jiwon@mail.com"
    assert response.cookies.get("session-token") == body["access_token"]
    assert PASSWORD not in response.text


def test_form_encoded_credentials_are_accepted(client, account):
    response = client.post("/api/auth/callback/credentials", data={"email": "jiwon@mail.com", "password": PASSWORD})

    assert response.status_code == 200


@pytest.mark.parametrize("password", ["test123", "test12345", "Test1234", "test1234 ", " test1234", ""])
def test_near_miss_password_is_rejected(client, account, password):
    response = sign_in(client, password=password)

    assert response.status_code == 401
    assert response.json() == {"error": ErrorMessages.INVALID_CREDENTIALS}
    assert "session-token" not in response.cookies


def test_unknown_email_gets_same_answer(client, account):
    wrong_password = sign_in(client, password="nope")
    unknown_email = sign_in(client, email="nobody@mail.com")

    assert unknown_email.status_code == wrong_password.status_code == 401
    assert unknown_email.json() == wrong_password.json()


def test_email_is_matched_exactly(client, account):
    assert sign_in(client, email="JIWON@mail.com").status_code == 401


def test_missing_fields_are_rejected(client, account):
    response = client.post("/api/auth/callback/credentials", json={"email": "jiwon@mail.com"})

    assert response.status_code == 401


def test_account_without_password_cannot_use_credentials(client, db):
    db.add(User(
        id=str(uuid.uuid4()),
        email="alice@gmail.com",
        username="alice",
        name="Alice",
        hashed_password=None,
        auth_provider="google",
    ))
    db.commit()

    for password in ["", "None", PASSWORD]:
        assert sign_in(client, email="alice@gmail.com", password=password).status_code == 401


def test_unknown_provider_is_not_found(client):
    response = client.post("/api/auth/callback/github", json={})

    assert response.status_code == 404
    assert response.json() == {"error": ErrorMessages.UNKNOWN_PROVIDER}


def test_providers_are_listed(client):
    response = client.get("/api/auth/providers")

    assert response.json() == {"providers": ["credentials", "google"]}


def test_session_is_empty_when_signed_out(client):
    response = client.get("/api/auth/session")

    assert response.status_code == 200
    assert response.json() == {}


def test_session_with_invalid_token_is_empty(client):
    response = client.get("/api/auth/session", headers=auth_headers("garbage"))

    assert response.json() == {}


def test_session_exposes_identity_but_no_secret(client, db, user_token):
    response = client.get("/api/auth/session", headers=auth_headers(user_token))

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["username"] == "jiwon123"
    assert user["email"] == "jiwon@mail.com"
    assert user["name"] == "Jiwon Park"

    stored_hash = db.query(User).one().hashed_password
    assert PASSWORD not in response.text
    assert stored_hash not in response.text
    assert "password" not in response.text.lower()


def test_session_cookie_is_accepted(client, account):
    client.post("/api/auth/callback/credentials", json={"email": "jiwon@mail.com", "password": PASSWORD})

    response = client.get("/api/auth/session")

    assert response.json()["user"]["username"] == "jiwon123"


def test_signout_clears_cookie(client, account):
    client.post("/api/auth/callback/credentials", json={"email": "jiwon@mail.com", "password": PASSWORD})

    response = client.post("/api/auth/signout")

    assert response.status_code == 200
    assert client.get("/api/auth/session").json() == {}


def test_cookie_is_used_when_bearer_token_is_invalid(client, account):
    client.post("/api/auth/callback/credentials", json={"email": "jiwon@mail.com", "password": PASSWORD})

    response = client.get("/api/auth/session", headers=auth_headers("garbage"))

    assert response.json()["user"]["username"] == "jiwon123"
