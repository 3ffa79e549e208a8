"""
Credential helpers: password hashing and bearer-token handling.

Passwords are hashed with bcrypt through passlib; tokens are HS256 JWTs
(python-jose) whose ``sub`` claim carries the user id. The signing secret
comes from ``settings.JWT_SECRET``, which has no default.
"""
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from blog_api.config import settings
from blog_api.errors import InvalidToken

pwd_ctx = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    return pwd_ctx.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """Return True if *password* matches *hashed_password*.

    An unrecognised or corrupt hash verifies as False instead of raising.
    """
    try:
        return pwd_ctx.verify(password, hashed_password)
    except (ValueError, TypeError):
        return False


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> int:
    """
    Verify *token* and return the user id it was issued for.

    Raises ``InvalidToken`` for a bad signature, an expired token, a
    malformed token, or a subject that is not an integer id.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        raise InvalidToken(str(exc)) from exc

    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError) as exc:
        raise InvalidToken("token subject is not a user id") from exc
