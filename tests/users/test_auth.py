import pytest

from kindergarten.core.enums import Role
from kindergarten.core.exceptions import AuthenticationError, ConflictError, ValidationError
from kindergarten.users.model import CurrentUser
from kindergarten.users.service import AuthService
from kindergarten.users.tokens import TokenService
from tests.fakes import InMemoryUsers, make_user


def _auth(users=()):
    repo = InMemoryUsers(users)
    tokens = TokenService("unit-test-secret")
    return AuthService(repo, tokens), repo, tokens


def test_register_creates_parent_and_returns_token():
    svc, repo, tokens = _auth()
    token, user = svc.register(email="Mom@Example.com", password="secret1", first_name="Anna", last_name="K")

    assert user.role == Role.PARENT
    assert user.email == "mom@example.com"
    assert tokens.decode(token) == CurrentUser(user.user_id, Role.PARENT)


def test_register_refuses_other_roles():
    svc, _, _ = _auth()
    with pytest.raises(ValidationError) as exc:
        svc.register(email="a@b.co", password="secret1", first_name="A", last_name="B", role="admin")
    assert exc.value.details[0]["field"] == "role"


def test_register_duplicate_email_conflicts():
    svc, _, _ = _auth([make_user(1, Role.PARENT, email="a@b.co")])
    with pytest.raises(ConflictError):
        svc.register(email="a@b.co", password="secret1", first_name="A", last_name="B")


def test_register_collects_field_errors():
    svc, _, _ = _auth()
    with pytest.raises(ValidationError) as exc:
        svc.register(email="nope", password="123", first_name="", last_name="B")
    assert {d["field"] for d in exc.value.details} == {"email", "password", "first_name"}


def test_login_checks_password():
    svc, _, tokens = _auth([make_user(2, Role.TEACHER, email="t@k.co", password="teach123")])

    token, user = svc.login("t@k.co", "teach123")
    assert tokens.decode(token).role == Role.TEACHER

    with pytest.raises(AuthenticationError):
        svc.login("t@k.co", "wrong-pass")
    with pytest.raises(AuthenticationError):
        svc.login("ghost@k.co", "teach123")


def test_expired_token_is_rejected():
    tokens = TokenService("unit-test-secret", expire_hours=-1)
    token = tokens.issue(make_user(1, Role.ADMIN))
    with pytest.raises(AuthenticationError):
        tokens.decode(token)


def test_token_signed_with_other_secret_is_rejected():
    token = TokenService("one").issue(make_user(1, Role.ADMIN))
    with pytest.raises(AuthenticationError):
        TokenService("two").decode(token)


def test_empty_secret_is_refused():
    with pytest.raises(ValueError):
        TokenService("")
