import pytest
from jose import JWTError, jwt

from shopapi.config import settings
from shopapi.errors import EmailTakenError, InvalidCredentialsError, NotFoundError
from shopapi.models.session import UserSession
from shopapi.models.users import UserRole
from shopapi.services import accounts
from shopapi.utils.tokenJWT import ACCESS_TOKEN, REFRESH_TOKEN, decode_token


@pytest.fixture()
def db(session_factory):
    with session_factory() as session:
        yield session


def test_register_normalizes_email(db):
    user = accounts.register(db, "  Alice@Example.com ", "secret123")

    assert user.email == "alice@example.com"
    assert user.role == UserRole.CUSTOMER
    assert user.password_hash != "secret123"


def test_duplicate_email_is_case_insensitive(db):
    accounts.register(db, "alice@example.com", "secret123")

    with pytest.raises(EmailTakenError):
        accounts.register(db, "ALICE@example.com", "another123")


def test_login_issues_tokens_and_session(db):
    registered = accounts.register(db, "bob@example.com", "secret123")

    user, access, refresh = accounts.login(db, "Bob@example.com", "secret123")

    assert user.id == registered.id
    claims = decode_token(access)
    assert claims["sub"] == user.id
    assert claims["type"] == ACCESS_TOKEN
    assert claims["role"] == "customer"
    assert decode_token(refresh)["type"] == REFRESH_TOKEN
    assert db.query(UserSession).filter_by(user_id=user.id).count() == 1


@pytest.mark.parametrize("email,password", [
    ("bob@example.com", "wrongpass1"),
    ("nobody@example.com", "secret123"),
])
def test_login_rejects_bad_credentials(db, email, password):
    accounts.register(db, "bob@example.com", "secret123")

    with pytest.raises(InvalidCredentialsError):
        accounts.login(db, email, password)


def test_logout_drops_sessions(db):
    user = accounts.register(db, "carol@example.com", "secret123")
    accounts.login(db, "carol@example.com", "secret123")
    accounts.login(db, "carol@example.com", "secret123")

    assert accounts.logout(db, user.id) == 2
    with pytest.raises(NotFoundError):
        accounts.logout(db, user.id)


def test_tokens_are_signed_with_configured_key(db):
    accounts.register(db, "dave@example.com", "secret123")
    _, access, _ = accounts.login(db, "dave@example.com", "secret123")

    with pytest.raises(JWTError):
        jwt.decode(access, "not-the-key", algorithms=[settings.ALGORITHM])
