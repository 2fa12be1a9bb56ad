"""Bearer tokens for the dashboard API.

Tokens are issued by the identity service that owns user sessions; this
module only needs to verify them and to mint them for tooling and tests.
The sub claim carries the user id that owns workflows and connections.
"""

from datetime import timedelta
from typing import Any

from jose import JWTError, jwt

from autoflow.core.config import get_settings
from autoflow.shared.utils import utc_now


def create_access_token(
    user_id: str,
    expires_delta: timedelta | None = None,
    **extra_claims: Any,
) -> str:
    """Return a signed token whose sub is user_id."""
    settings = get_settings()
    ttl = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {**extra_claims, "sub": user_id, "exp": utc_now() + ttl}
    return str(
        jwt.encode(
            claims,
            settings.secret_key.get_secret_value(),
            algorithm=settings.algorithm,
        )
    )


def verify_token(token: str) -> str:
    """Return the user id of a valid token.

    Raises:
        ValueError: Bad signature, expired, or no sub/exp claim.
    """
    settings = get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError("Invalid or expired token") from e
    user_id = claims.get("sub")
    if not user_id:
        raise ValueError("Token has no subject")
    return str(user_id)
