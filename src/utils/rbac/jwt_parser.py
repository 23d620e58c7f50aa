"""
JWT Parser - session token minting and verification

Session tokens are HS256 JWTs carrying the user id, email and role. The
role claim is informational only: the gate always re-reads the stored user
record, so an administrator's role change applies on the next request.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union

import jwt

from src.utils.logging import get_logger
from src.utils.rbac.errors import AuthenticationError, RBACConfigError
from src.utils.rbac.users import User

logger = get_logger(__name__)

JWT_ALGORITHM = "HS256"

_SPAN_PATTERN = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$")
_SPAN_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400, "w": 604800}


def parse_expires_in(value: Union[int, str]) -> int:
    """
    Convert a token lifetime to seconds.

    Accepts an int, a bare number of seconds, or a span such as '30m',
    '12h', '7d' or '2w'.

    Raises:
        ValueError: If the value is not a positive lifetime
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid token lifetime: {value!r}")
    if isinstance(value, int):
        seconds = value
    else:
        match = _SPAN_PATTERN.match(str(value).lower())
        if not match:
            raise ValueError(f"Invalid token lifetime: {value!r}")
        seconds = int(match.group(1)) * _SPAN_SECONDS[match.group(2)]
    if seconds <= 0:
        raise ValueError(f"Token lifetime must be positive: {value!r}")
    return seconds


def issue_session_token(
    user: User,
    secret: str,
    expires_in: Union[int, str] = "7d",
    now: Optional[datetime] = None,
) -> str:
    """
    Mint a signed session token for a user.

    Args:
        user: The authenticated user
        secret: HMAC signing secret
        expires_in: Lifetime in seconds or as a span string
        now: Issue time (defaults to the current UTC time)

    Returns:
        Encoded JWT string
    """
    if not secret:
        raise RBACConfigError("JWT_SECRET is not configured")

    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=parse_expires_in(expires_in)),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def decode_session_token(token: Optional[str], secret: str) -> Dict[str, Any]:
    """
    Verify a session token's signature and expiry and return its claims.

    Raises:
        AuthenticationError: If the token is missing, malformed, expired,
                             signature-invalid or has no subject id
    """
    if not secret:
        raise RBACConfigError("JWT_SECRET is not configured")
    if not token:
        raise AuthenticationError("Authentication required")

    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired session token")
        raise AuthenticationError("Token has expired")
    except jwt.InvalidSignatureError:
        logger.info("Rejected session token with invalid signature")
        raise AuthenticationError("Invalid token signature")
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected malformed session token: {e}")
        raise AuthenticationError("Invalid token")

    if not claims.get("id"):
        raise AuthenticationError("Invalid token payload")
    return claims


def extract_bearer_token(header: Optional[str]) -> Optional[str]:
    """Token from an 'Authorization: Bearer <token>' header value."""
    if not header:
        return None
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None
