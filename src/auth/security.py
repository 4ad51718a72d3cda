"""Authentication and authorization utilities."""

import base64
import hashlib
import hmac
import time
from typing import Optional

from fastapi import Depends, HTTPException, Request, Response, status
from passlib.context import CryptContext

from src.api.deps import get_storage
from src.config import get_settings
from src.db.models import User
from src.services.storage import StorageService

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a password for storage."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


# Session token: base64(user_id:issued_at).hmac_sha256
def _signature(payload: bytes) -> str:
    secret = get_settings().secret_key.encode("utf-8")
    return hmac.new(secret, payload, hashlib.sha256).hexdigest()


def create_session_token(user_id: int, issued_at: Optional[int] = None) -> str:
    """Create a signed session token for the auth cookie."""
    ts = int(time.time()) if issued_at is None else issued_at
    payload = f"{user_id}:{ts}".encode("utf-8")
    encoded = base64.urlsafe_b64encode(payload).decode("ascii").rstrip("=")
    return f"{encoded}.{_signature(payload)}"


def verify_session_token(token: Optional[str]) -> Optional[int]:
    """Return the user id of a valid, unexpired token; None otherwise."""
    if not token or "." not in token:
        return None
    try:
        encoded, sig = token.rsplit(".", 1)
        encoded += "=" * (-len(encoded) % 4)
        payload = base64.urlsafe_b64decode(encoded)
        if not hmac.compare_digest(_signature(payload), sig):
            return None
        user_part, ts_part = payload.decode("utf-8").split(":", 1)
        user_id, issued_at = int(user_part), int(ts_part)
    except (ValueError, UnicodeDecodeError):
        return None

    if time.time() - issued_at > get_settings().session_max_age_seconds:
        return None
    return user_id


def set_session_cookie(response: Response, user_id: int) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=create_session_token(user_id),
        max_age=settings.session_max_age_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.app_env == "production",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=get_settings().session_cookie_name, path="/")


# ============== Dependencies ==============


async def get_current_user_optional(
    request: Request,
    storage: StorageService = Depends(get_storage),
) -> Optional[User]:
    """Resolve the session cookie to a user, or None for anonymous requests."""
    user_id = verify_session_token(request.cookies.get(get_settings().session_cookie_name))
    if user_id is None:
        return None
    user = await storage.get_user(user_id)
    if user is not None:
        request.state.user = user
    return user


async def require_user(
    user: Optional[User] = Depends(get_current_user_optional),
) -> User:
    """Dependency for routes that need a logged-in user."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


def ensure_owner(record, user: User, label: str, record_id: int):
    """Return the record if the user owns it; records of other users are reported as missing."""
    if record is None or record.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{label} {record_id} not found",
        )
    return record
