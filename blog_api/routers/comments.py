import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.database import get_db
from blog_api.dependencies import RecordId, get_current_user
from blog_api.errors import InternalFailure, NotFound, ValidationFailed
from blog_api.models import User
from blog_api.schemas import CommentCreate, CommentResponse, CommentUpdate, MessageResponse
from blog_api.services import comment_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts/{post_id}/comments", tags=["comments"])


@router.post("", status_code=201, response_model=CommentResponse)
async def add_comment(
    post_id: RecordId,
    data: CommentCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        comment = await comment_service.add_comment(db, post_id, data, user)
    except SQLAlchemyError as exc:
        logger.exception("Comment creation failed on post id=%s", post_id)
        raise ValidationFailed("Could not add comment") from exc
    if comment is None:
        raise NotFound("Post not found")
    return comment


@router.get("", response_model=list[CommentResponse])
async def list_comments(post_id: RecordId, db: AsyncSession = Depends(get_db)):
    try:
        return await comment_service.list_comments(db, post_id)
    except SQLAlchemyError as exc:
        logger.exception("Comment listing failed on post id=%s", post_id)
        raise InternalFailure("Could not fetch comments") from exc


# The post id in the path is not checked against the comment: lookup is
# by comment id and author only.
@router.patch("/{comment_id}", response_model=CommentResponse)
async def update_comment(
    post_id: RecordId,
    comment_id: RecordId,
    data: CommentUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        comment = await comment_service.update_comment(db, comment_id, user.id, data)
    except SQLAlchemyError as exc:
        logger.exception("Comment update failed for id=%s", comment_id)
        raise ValidationFailed("Could not update comment") from exc
    if comment is None:
        raise NotFound("Comment not found")
    return comment


@router.delete("/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    post_id: RecordId,
    comment_id: RecordId,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        deleted = await comment_service.delete_comment(db, comment_id, user.id)
    except SQLAlchemyError as exc:
        logger.exception("Comment deletion failed for id=%s", comment_id)
        raise InternalFailure("Could not delete comment") from exc
    if not deleted:
        raise NotFound("Comment not found")
    return {"message": "Comment deleted successfully"}
