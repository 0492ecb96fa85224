# shopapi/services/accounts.py
import logging
from datetime import timedelta
from typing import Tuple

from sqlalchemy import func, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shopapi.config import settings
from shopapi.errors import EmailTakenError, InvalidCredentialsError, NotFoundError
from shopapi.models.users import User, UserRole
from shopapi.models.session import UserSession
from shopapi.utils.hashing import get_password_hash, verify_password
from shopapi.utils.ids import utcnow
from shopapi.utils.tokenJWT import create_access_token, create_refresh_token

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(func.lower(User.email) == normalize_email(email)).first()


# Create a customer account; emails are unique case-insensitively
def register(db: Session, email: str, password: str, role: UserRole = UserRole.CUSTOMER) -> User:
    if get_user_by_email(db, email) is not None:
        raise EmailTakenError(f"register: {normalize_email(email)} is already registered")

    user = User(email=normalize_email(email), password_hash=get_password_hash(password), role=role)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise EmailTakenError(f"register: {normalize_email(email)} is already registered") from exc
    db.refresh(user)
    logger.info("registered user %s", user.id)
    return user


# Verify credentials, issue access and refresh tokens and persist the refresh session
def login(db: Session, email: str, password: str) -> Tuple[User, str, str]:
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        raise InvalidCredentialsError()

    access_token = create_access_token(user)
    refresh_expiry = timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES)
    refresh_token = create_refresh_token(user, refresh_expiry)

    db.add(UserSession(user_id=user.id, refresh_token=refresh_token, expires_at=utcnow() + refresh_expiry))
    db.commit()
    return user, access_token, refresh_token


# Drop every refresh session of the user
def logout(db: Session, user_id: str) -> int:
    result = db.execute(delete(UserSession).where(UserSession.user_id == user_id))
    db.commit()
    if result.rowcount == 0:
        raise NotFoundError(f"logout: no active sessions for user {user_id}")
    return result.rowcount
