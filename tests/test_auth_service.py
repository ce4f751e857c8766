from __future__ import annotations

from dataclasses import replace

import pytest
from sqlalchemy import func, select

from katafree.core.errors import DuplicateEmail, InvalidCredentials, InvalidToken, MissingToken, ValidationError
from katafree.core.security import decode_token, hash_password, verify_password
from katafree.db.models import User
from katafree.db.session import session_scope
from katafree.repositories.json_storage import JsonRepository
from katafree.services.auth_service import AuthService, public_user
from katafree.services.session_service import resolve_identity


@pytest.fixture()
def svc(repo, settings):
    return AuthService(repository=repo, settings=settings)


def _user_count(repo) -> int:
    if isinstance(repo, JsonRepository):
        return len(repo._load()["users"])
    with session_scope(repo._sessions) as session:
        return session.execute(select(func.count(User.id))).scalar_one()


def test_register_returns_token_and_public_user(svc, settings):
    result = svc.register("a@x.com", "pw123456")
    user = result["user"]
    assert set(user) == {"id", "email", "name", "plan"}
    assert user["name"] == "a"
    assert user["plan"] == "free"
    claims = decode_token(result["token"], settings.jwt_secret)
    assert claims["id"] == user["id"]
    assert claims["email"] == "a@x.com"
    assert claims["exp"] - claims["iat"] == 7 * 24 * 60 * 60


def test_register_stores_hashed_password(svc, repo):
    svc.register("a@x.com", "pw123456", name="Alice")
    stored = repo.find_user_by_email("a@x.com")
    assert stored["name"] == "Alice"
    assert stored["passwordHash"] != "pw123456"
    assert verify_password("pw123456", stored["passwordHash"])


def test_duplicate_registration_fails_without_mutation(svc, repo):
    svc.register("a@x.com", "pw123456")
    assert _user_count(repo) == 1
    before = repo.find_user_by_email("a@x.com")
    with pytest.raises(DuplicateEmail):
        svc.register("a@x.com", "different")
    assert _user_count(repo) == 1
    assert repo.find_user_by_email("a@x.com") == before


@pytest.mark.parametrize("email,password", [("", "pw"), ("a@x.com", ""), (None, None)])
def test_register_requires_email_and_password(svc, email, password):
    with pytest.raises(ValidationError):
        svc.register(email, password)


def test_login_succeeds_with_correct_password(svc):
    registered = svc.register("a@x.com", "pw123456")
    result = svc.login("a@x.com", "pw123456")
    assert result["user"] == registered["user"]


def test_login_failures_are_indistinguishable(svc):
    svc.register("a@x.com", "pw123456")
    with pytest.raises(InvalidCredentials) as wrong_password:
        svc.login("a@x.com", "nope")
    with pytest.raises(InvalidCredentials) as unknown_email:
        svc.login("b@x.com", "pw123456")
    assert wrong_password.value.message == unknown_email.value.message
    assert wrong_password.value.status_code == unknown_email.value.status_code == 401


def test_public_user_never_exposes_password_hash():
    user = {"id": 7, "email": "c@x.com", "passwordHash": hash_password("x")}
    assert public_user(user) == {"id": "7", "email": "c@x.com", "name": "c", "plan": "free"}


def test_resolve_identity(svc, settings):
    token = svc.register("a@x.com", "pw123456")["token"]
    identity = resolve_identity(f"Bearer {token}", settings)
    assert identity.email == "a@x.com"

    with pytest.raises(MissingToken):
        resolve_identity(None, settings)
    with pytest.raises(MissingToken):
        resolve_identity(f"Token {token}", settings)
    with pytest.raises(InvalidToken):
        resolve_identity("Bearer garbage", settings)
    with pytest.raises(InvalidToken):
        resolve_identity(f"Bearer {token}", replace(settings, jwt_secret="another-secret-0123456789abcdef-012345"))


def test_expired_token_is_invalid(repo, settings):
    short = replace(settings, jwt_ttl_seconds=-1)
    token = AuthService(repository=repo, settings=short).register("a@x.com", "pw123456")["token"]
    with pytest.raises(InvalidToken):
        resolve_identity(f"Bearer {token}", settings)
