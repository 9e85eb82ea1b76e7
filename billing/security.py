from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import settings

OWNER_ROLE = "owner"
ADMIN_ROLE = "super_admin"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(
    subject: str | int,
    role: str = OWNER_ROLE,
    expires_delta: timedelta | None = None,
) -> str:
    """Encode a signed bearer token for ``subject``.

    ``iat`` is kept as a float timestamp so that a force logout issued in
    the same second as the token still invalidates it.
    """
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        minutes = (
            settings.admin_token_expire_minutes
            if role == ADMIN_ROLE
            else settings.access_token_expire_minutes
        )
        expires_delta = timedelta(minutes=minutes)
    to_encode = {
        "sub": str(subject),
        "role": role,
        "iat": now.timestamp(),
        "exp": now + expires_delta,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any] | None:
    try:
        return jwt.decode(
            token, settings.secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        return None


def issued_before(claims: dict[str, Any], watermark: datetime | None) -> bool:
    if watermark is None:
        return False
    if watermark.tzinfo is None:
        watermark = watermark.replace(tzinfo=timezone.utc)
    try:
        issued_at = float(claims.get("iat", 0))
    except (TypeError, ValueError):
        return True
    return issued_at < watermark.timestamp()
