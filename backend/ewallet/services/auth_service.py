import logging
from typing import Optional

import jwt

from ewallet.config import JWT_ALGORITHM, JWT_ISSUER, JWT_SECRET

logger = logging.getLogger(__name__)


def verify_access_token(token: str) -> Optional[int]:
    """Verify a signed access token and return the user ID from its `sub` claim, or None on failure."""
    try:
        claims = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            issuer=JWT_ISSUER,
            # Issued tokens carry a numeric sub; it is checked below instead.
            options={"require": ["sub", "exp"], "verify_sub": False},
        )
    except jwt.PyJWTError as e:
        logger.warning("access_token_verification_failed", extra={"error": str(e)})
        return None

    sub = claims.get("sub")
    if isinstance(sub, bool):
        return None
    try:
        user_id = int(sub)
    except (TypeError, ValueError):
        logger.warning("access_token_invalid_subject", extra={"sub": repr(sub)})
        return None
    return user_id if user_id > 0 else None
