import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .db import get_db
from .errors import AccountLockedError, AuthError, PermissionDeniedError
from .models import BusinessOwner
from .security import ADMIN_ROLE, OWNER_ROLE, decode_access_token, issued_before

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _claims(credentials: HTTPAuthorizationCredentials | None) -> dict:
    if credentials is None or not credentials.credentials:
        raise AuthError("Not authenticated")
    claims = decode_access_token(credentials.credentials)
    if claims is None:
        logger.warning("Token verification failed - invalid or expired token")
        raise AuthError("Invalid or expired token")
    return claims


def get_current_owner(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> BusinessOwner:
    claims = _claims(credentials)
    if claims.get("role") != OWNER_ROLE:
        raise AuthError("Invalid or expired token")
    try:
        owner_id = int(claims.get("sub"))
    except (TypeError, ValueError):
        logger.warning("Invalid subject in token: %s", claims.get("sub"))
        raise AuthError("Invalid or expired token")

    owner = db.get(BusinessOwner, owner_id)
    if owner is None:
        raise AuthError("Invalid or expired token")
    if owner.status == "suspended":
        raise AuthError("Account is suspended")
    if issued_before(claims, owner.tokens_valid_after):
        logger.warning("Rejected token issued before force logout for owner %s", owner.id)
        raise AuthError("Session has been ended, please log in again")
    return owner


def require_writable_owner(
    owner: BusinessOwner = Depends(get_current_owner),
) -> BusinessOwner:
    if owner.is_locked:
        raise AccountLockedError("Account is locked; changes are not allowed")
    return owner


def get_current_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    claims = _claims(credentials)
    if claims.get("role") != ADMIN_ROLE:
        raise PermissionDeniedError("Admin access required")
    return str(claims.get("sub"))
