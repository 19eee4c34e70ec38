import logging
from typing import Optional

from fastapi import Header

from ewallet.errors import AuthenticationError
from ewallet.services.auth_service import verify_access_token

logger = logging.getLogger(__name__)


def get_current_user_id(authorization: Optional[str] = Header(default=None)) -> int:
    """
    FastAPI dependency that extracts and verifies the bearer access token.
    Attach with: user_id: int = Depends(get_current_user_id)

    Clients must send: Authorization: Bearer <access_token>
    """
    if not authorization:
        raise AuthenticationError("authorization header is required")

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError("invalid authorization header format")

    user_id = verify_access_token(parts[1])
    if user_id is None:
        raise AuthenticationError("invalid token")

    return user_id
