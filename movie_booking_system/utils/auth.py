"""
Session token utilities.

Authentication is a stub: tokens only tie a caller to its in-memory
booking session, they do not prove an identity.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel

from ..config import settings


class SessionTokenData(BaseModel):
    """Claims carried by a session token."""
    session_id: str
    email: Optional[str] = None


def create_session_token(
    session_id: str,
    email: Optional[str] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT naming a booking session.

    Args:
        session_id: The session store key
        email: The email the session logged in with
        expires_delta: Optional custom expiration time

    Returns:
        The encoded JWT token
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.SESSION_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": session_id, "email": email, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_session_token(token: str) -> Optional[SessionTokenData]:
    """
    Verify and decode a session token.

    Returns:
        SessionTokenData if the token is valid, None otherwise
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    session_id = payload.get("sub")
    if not session_id:
        return None
    return SessionTokenData(session_id=session_id, email=payload.get("email"))
