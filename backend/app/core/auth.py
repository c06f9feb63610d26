from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.models.user import User, UserRole
from app.repositories.user_repository import UserRepository


def create_access_token(user_id: UUID, expires_in: timedelta | None = None) -> str:
    """Issue an access token for ``user_id``.

    Login lives in the external auth service; this mirrors the token it issues.
    """
    payload = {
        "sub": str(user_id),
        "type": "access",
        "exp": datetime.now(UTC) + (expires_in or timedelta(hours=settings.JWT_EXPIRE_HOURS)),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> UUID:
    """Decode an access token and return the user id it was issued for.

    Raises jwt.ExpiredSignatureError or jwt.InvalidTokenError on failure.
    """
    payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    if payload.get("type") != "access":
        raise jwt.InvalidTokenError("Invalid token type")
    try:
        return UUID(payload["sub"])
    except (KeyError, ValueError):
        raise jwt.InvalidTokenError("Invalid token subject") from None


def authenticate_token(token: str, db: Session) -> User | None:
    """Resolve a raw token to its user, or None when it is unusable."""
    try:
        user_id = decode_access_token(token)
    except jwt.InvalidTokenError:
        return None
    return UserRepository(db).get_by_id(user_id)


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    """Extract the user from the bearer token in the Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(status_code=401, detail="Not authorized, no token")

    if not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header format")

    token = auth_header[7:]
    try:
        user_id = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired") from None
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token") from None

    user = UserRepository(db).get_by_id(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    """Allow only admin users through."""
    if user.role != UserRole.ADMIN.value:
        raise HTTPException(status_code=403, detail="Access denied. Admin only.")
    return user


def is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN.value
