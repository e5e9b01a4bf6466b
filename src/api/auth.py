"""Bearer token authentication."""
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt
from jwt import ExpiredSignatureError
from jwt import InvalidTokenError as PyJWTInvalidTokenError

from src.core.exceptions import AuthenticationError

TOKEN_ISSUER = "tubely-access"


def get_bearer_token(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise AuthenticationError("Couldn't find JWT")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Malformed authorization header")
    return token.strip()


def issue_token(
    user_id: UUID,
    secret: str,
    expires_in: timedelta = timedelta(hours=1),
    algorithm: str = "HS256",
) -> str:
    """Sign an access token for ``user_id``."""
    now = datetime.now(tz=timezone.utc)
    claims = {
        "iss": TOKEN_ISSUER,
        "sub": str(user_id),
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


def validate_token(token: str, secret: str, algorithm: str = "HS256") -> UUID:
    """Validate a token and return the user id it was issued to."""
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            issuer=TOKEN_ISSUER,
            options={"require": ["exp", "sub"]},
        )
    except ExpiredSignatureError as e:
        raise AuthenticationError("Token expired") from e
    except PyJWTInvalidTokenError as e:
        raise AuthenticationError("Couldn't validate JWT") from e

    try:
        return UUID(claims["sub"])
    except (TypeError, ValueError) as e:
        raise AuthenticationError("Invalid token subject") from e
