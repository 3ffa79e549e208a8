"""
Auth service: registration and credential checks for the User aggregate.

Passwords are hashed by the ``User.password`` setter, so this module never
handles a stored hash directly, and ``user_to_dict`` never serialises it.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from blog_api.models import User
from blog_api.schemas import RegisterRequest
from blog_api.security import create_access_token

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def user_to_dict(user: User) -> dict:
    """Serialise a User ORM instance to a plain dict (no credentials)."""
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "bio": user.bio,
        "following": [u.id for u in user.following],
        "created_at": user.created_at.isoformat() if user.created_at else None,
        "updated_at": user.updated_at.isoformat() if user.updated_at else None,
    }


def _auth_payload(user: User) -> dict:
    return {"user": user_to_dict(user), "token": create_access_token(user.id)}


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def register(db: AsyncSession, data: RegisterRequest) -> dict:
    """
    Create a new user and return ``{user, token}``.

    Username and email uniqueness is enforced by the database; the
    ``IntegrityError`` raised by the flush is left for the router to
    translate.
    """
    user = User(username=data.username, email=data.email, bio=data.bio)
    user.password = data.password
    db.add(user)
    await db.flush()
    logger.info("Registered user id=%s", user.id)
    return _auth_payload(user)


async def authenticate(db: AsyncSession, email: str, password: str) -> dict | None:
    """
    Return ``{user, token}`` for a matching email/password pair.

    Returns None both for an unknown email and for a wrong password so the
    caller cannot tell the two apart.
    """
    q = (
        select(User)
        .where(User.email == email.strip().lower())
        .options(selectinload(User.following))
    )
    result = await db.execute(q)
    user = result.scalar_one_or_none()
    if user is None or not user.check_password(password):
        logger.info("Rejected login attempt")
        return None
    return _auth_payload(user)


async def get_user(db: AsyncSession, user_id: int) -> User | None:
    """Return the User ORM instance for *user_id*, or None."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()
