"""
Locally signed identity tokens.

Used when `auth_provider` is "jwt": development servers and the test suite
sign their own identity tokens instead of going through Firebase. The claims
mirror what a Firebase ID token gives us: a subject uid and an email.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from zapshift.app.core.config import settings


def create_identity_token(
    uid: str,
    email: Optional[str],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Sign an identity token for `uid` / `email`.

    Args:
        uid: Subject identifier (`sub` claim)
        email: Email claim; omitted from the token when None
        expires_delta: Lifetime, defaults to `access_token_expire_minutes`

    Example payload:
        {
            "sub": "local-uid-42",
            "email": "rider@example.com",
            "exp": 1234567890
        }
    """
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims: Dict[str, Any] = {
        "sub": uid,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    if email is not None:
        claims["email"] = email

    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_identity_token(token: str) -> Optional[Dict[str, Any]]:
    """Verified claims of `token`, or None if the signature or expiry check fails."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
