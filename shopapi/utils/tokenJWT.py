# shopapi/utils/tokenJWT.py
from datetime import timedelta
from typing import Optional

from jose import jwt, JWTError, ExpiredSignatureError
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from shopapi.config import settings
from shopapi.database import get_db
from shopapi.models.users import User
from shopapi.utils.ids import generate_id, utcnow

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

# Authorization scheme; missing headers are reported by get_current_user itself
bearer_scheme = HTTPBearer(auto_error=False)


def _auth_error(code: str, message: str, status_code: int = status.HTTP_401_UNAUTHORIZED) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"code": code, "message": message},
        headers={"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None,
    )


# Generate a signed token for the user
def create_token(user: User, token_type: str, expires_delta: timedelta) -> str:
    now = utcnow()
    to_encode = {
        "jti": generate_id(),
        "sub": user.id,
        "email": user.email,
        "role": getattr(user.role, "value", user.role),
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    return create_token(user, ACCESS_TOKEN, expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))


def create_refresh_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    return create_token(user, REFRESH_TOKEN, expires_delta or timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES))


def decode_token(token: str) -> dict:
    # Failures are classified by exception type, never by message text
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise _auth_error("TOKEN_EXPIRED", "Access token has expired")
    except JWTError:
        raise _auth_error("INVALID_TOKEN", "Invalid or malformed access token")


# Retrieve the currently authenticated user based on the JWT token
def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise _auth_error("MISSING_AUTH_HEADER", "Authorization header is required")
    if (credentials.scheme or "").lower() != "bearer":
        raise _auth_error("INVALID_AUTH_HEADER", "Invalid authorization header format. Use 'Bearer <token>'")

    payload = decode_token(credentials.credentials)
    if payload.get("type") != ACCESS_TOKEN or not payload.get("sub"):
        raise _auth_error("INVALID_TOKEN", "Invalid or malformed access token")

    user = db.get(User, payload["sub"])
    if user is None:
        raise _auth_error("AUTH_FAILED", "Authentication failed")

    # Picked up by the error handlers for request logging
    request.state.user_id = user.id
    return user


# Dependency factory for Role-Based Access Control
def role_required(*allowed_roles):
    def _checker(current_user: User = Depends(get_current_user)):
        role = getattr(current_user.role, "value", current_user.role)
        if allowed_roles and role not in allowed_roles:
            raise _auth_error("ADMIN_REQUIRED", "This operation requires admin privileges", status.HTTP_403_FORBIDDEN)
        return current_user
    return _checker
