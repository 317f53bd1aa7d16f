"""
Password hashing, JWT issuing and the current-user dependencies.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from civic_backend import config
from civic_backend.access import is_admin
from civic_backend.authentication import schemas
from civic_backend.database import DocumentStore, get_store
from civic_backend.errors import AuthenticationError, AuthorizationError

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def create_access_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or config.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    payload = {**data, "exp": expire}
    return jwt.encode(payload, config.SECRET_KEY, algorithm=config.ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError:
        raise AuthenticationError("Invalid or expired token")


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    store: DocumentStore = Depends(get_store),
) -> schemas.CurrentUser:
    """Resolve the bearer token to a stored user; 401 when absent or invalid."""
    if credentials is None:
        raise AuthenticationError("You must be logged in")

    payload = decode_access_token(credentials.credentials)
    user_id = payload.get("sub")
    user = store.get("users", user_id) if user_id else None
    if not user:
        raise AuthenticationError("User no longer exists")

    return schemas.CurrentUser(
        user_id=user["_id"],
        name=user.get("name"),
        email=user.get("email"),
        role=user.get("role", schemas.UserRole.CITIZEN.value),
    )


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    store: DocumentStore = Depends(get_store),
) -> Optional[schemas.CurrentUser]:
    """Like get_current_user, but anonymous requests resolve to None."""
    if credentials is None:
        return None
    return get_current_user(credentials, store)


def require_admin(current_user: schemas.CurrentUser = Depends(get_current_user)) -> schemas.CurrentUser:
    if not is_admin(current_user):
        raise AuthorizationError("Admin access required")
    return current_user
