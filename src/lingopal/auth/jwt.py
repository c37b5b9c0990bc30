"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. The token
carries the user id as "sub" and an expiry; the signature (HS256 with the
server secret) makes tampering detectable. There is no revocation list;
expiry is the only bound on a token's lifetime.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from lingopal.config import Settings


class TokenError(Exception):
    """Raised when token verification fails, for any reason."""


def create_access_token(
    user_id: str,
    settings: Settings,
    expires_minutes: Optional[int] = None,
) -> str:
    """Create a signed access token for a user id."""
    now = datetime.now(timezone.utc)
    expires = now + timedelta(
        minutes=expires_minutes
        if expires_minutes is not None
        else settings.access_token_expire_minutes
    )
    payload = {
        "sub": user_id,
        "type": "access",
        "exp": expires,
        "iat": now,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, settings: Settings) -> str:
    """Verify an access token and return the user id it was issued for.

    Raises TokenError on failure. The message is only for server logs;
    callers get one generic 401 regardless of what went wrong.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")

    if payload.get("type") != "access":
        raise TokenError("Not an access token")
    return str(payload["sub"])
