import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.database import get_db
from blog_api.dependencies import RecordId, get_current_user
from blog_api.errors import InternalFailure, NotFound, ValidationFailed
from blog_api.models import User
from blog_api.schemas import MessageResponse, PostCreate, PostDetail, PostResponse, PostUpdate
from blog_api.services import post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])

POST_NOT_FOUND = "Post not found"


@router.post("", status_code=201, response_model=PostResponse)
async def create_post(
    data: PostCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        return await post_service.create_post(db, data, user)
    except SQLAlchemyError as exc:
        logger.exception("Post creation failed")
        raise ValidationFailed("Could not create post") from exc


@router.get("", response_model=list[PostResponse])
async def list_posts(db: AsyncSession = Depends(get_db)):
    try:
        return await post_service.get_posts(db)
    except SQLAlchemyError as exc:
        logger.exception("Post listing failed")
        raise InternalFailure("Could not fetch posts") from exc


# Declared before /{post_id} so "search" is not parsed as an id.
@router.get("/search", response_model=list[PostResponse])
async def search_posts(
    query: str = Query("", description="Terms to match against title and content."),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await post_service.search_posts(db, query)
    except SQLAlchemyError as exc:
        logger.exception("Post search failed")
        raise InternalFailure("Could not search posts") from exc


@router.get("/{post_id}", response_model=PostDetail)
async def get_post(post_id: RecordId, db: AsyncSession = Depends(get_db)):
    try:
        post = await post_service.get_post(db, post_id)
    except SQLAlchemyError as exc:
        logger.exception("Post fetch failed for id=%s", post_id)
        raise InternalFailure("Could not fetch post") from exc
    if post is None:
        raise NotFound(POST_NOT_FOUND)
    return post


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: RecordId,
    data: PostUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        post = await post_service.update_post(db, post_id, user.id, data)
    except SQLAlchemyError as exc:
        logger.exception("Post update failed for id=%s", post_id)
        raise ValidationFailed("Could not update post") from exc
    if post is None:
        raise NotFound(POST_NOT_FOUND)
    return post


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: RecordId,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        deleted = await post_service.delete_post(db, post_id, user.id)
    except SQLAlchemyError as exc:
        logger.exception("Post deletion failed for id=%s", post_id)
        raise InternalFailure("Could not delete post") from exc
    if not deleted:
        raise NotFound(POST_NOT_FOUND)
    return {"message": "Post deleted successfully"}
