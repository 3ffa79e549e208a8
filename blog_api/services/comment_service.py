"""
Comment service: CRUD for comments on a Post.

A post's comment list is the set of comments whose ``post_id`` points at
it, so creating or deleting the comment row is what adds it to or removes
it from the list. Both happen inside the request transaction owned by
``get_db``.

Update and delete look a comment up by id *and* author: a comment owned
by someone else is reported exactly like a missing one.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from blog_api.models import Comment, Post, User
from blog_api.schemas import CommentCreate, CommentUpdate

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def author_to_dict(author: User | None) -> dict | None:
    if author is None:
        return None
    return {"id": author.id, "username": author.username}


def comment_to_dict(comment: Comment) -> dict:
    return {
        "id": comment.id,
        "content": comment.content,
        "author": author_to_dict(comment.author),
        "post": comment.post_id,
        "created_at": comment.created_at.isoformat() if comment.created_at else None,
        "updated_at": comment.updated_at.isoformat() if comment.updated_at else None,
    }


async def _get_owned_comment(db: AsyncSession, comment_id: int, author_id: int) -> Comment | None:
    q = (
        select(Comment)
        .where(Comment.id == comment_id, Comment.author_id == author_id)
        .options(joinedload(Comment.author))
    )
    result = await db.execute(q)
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def add_comment(
    db: AsyncSession,
    post_id: int,
    data: CommentCreate,
    author: User,
) -> dict | None:
    """
    Append a new comment by *author* to the post identified by *post_id*.

    Returns the serialised comment, or None when the post does not exist.
    """
    result = await db.execute(select(Post.id).where(Post.id == post_id))
    if result.scalar_one_or_none() is None:
        return None

    comment = Comment(content=data.content, author=author, post_id=post_id)
    db.add(comment)
    await db.flush()
    return comment_to_dict(comment)


async def list_comments(db: AsyncSession, post_id: int) -> list[dict]:
    """Return every comment on *post_id*, newest first."""
    q = (
        select(Comment)
        .where(Comment.post_id == post_id)
        .options(joinedload(Comment.author))
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )
    result = await db.execute(q)
    return [comment_to_dict(c) for c in result.scalars().all()]


async def update_comment(
    db: AsyncSession,
    comment_id: int,
    author_id: int,
    data: CommentUpdate,
) -> dict | None:
    """Replace the content of a comment owned by *author_id*."""
    comment = await _get_owned_comment(db, comment_id, author_id)
    if comment is None:
        return None

    comment.content = data.content
    await db.flush()
    return comment_to_dict(comment)


async def delete_comment(db: AsyncSession, comment_id: int, author_id: int) -> bool:
    """
    Delete a comment owned by *author_id*, which also drops it from its
    post's comment list.

    Returns True on success, False when no such comment is owned by the
    requester.
    """
    comment = await _get_owned_comment(db, comment_id, author_id)
    if comment is None:
        return False

    await db.delete(comment)
    await db.flush()
    logger.info("Deleted comment id=%s from post id=%s", comment_id, comment.post_id)
    return True
