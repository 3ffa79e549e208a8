import logging
from typing import Annotated

from fastapi import Depends, Path
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.database import get_db
from blog_api.errors import InvalidToken, Unauthenticated
from blog_api.models import User
from blog_api.security import decode_access_token
from blog_api.services import auth_service

logger = logging.getLogger(__name__)

# Ids outside the 32-bit Integer column range cannot name a stored row; they
# fail path validation, which is reported as 404.
RecordId = Annotated[int, Path(ge=1, le=2_147_483_647)]

# auto_error=False so a missing or non-bearer header reaches us as None and
# is reported with the same 401 body as a bad token.
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Authentication gate for mutating endpoints.

    Resolves ``Authorization: Bearer <token>`` to the User it was issued
    for. Raises ``Unauthenticated`` when the header is missing, the token
    does not verify, or the user no longer exists. The request's database
    session is shared with the handler, so the returned User can be
    attached to new rows directly.
    """
    if credentials is None:
        raise Unauthenticated()

    try:
        user_id = decode_access_token(credentials.credentials)
    except InvalidToken as exc:
        logger.debug("Rejected bearer token: %s", exc)
        raise Unauthenticated() from exc

    user = await auth_service.get_user(db, user_id)
    if user is None:
        raise Unauthenticated()
    return user
