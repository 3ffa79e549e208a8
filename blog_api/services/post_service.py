"""
Post service: business logic for the Post aggregate.

Design notes
------------
- Eager loading via ``joinedload`` (many-to-one: author) and
  ``selectinload`` (one-to-many: comments) is used throughout to avoid
  N+1 queries. Relationships are ``lazy="noload"`` on the models, so a
  relationship that is not loaded here serialises as empty.
- Ownership is part of the lookup (``id`` *and* ``author_id``): update and
  delete cannot distinguish "not yours" from "does not exist".
- List endpoints are unbounded.
- Full-text search uses a ``to_tsvector`` GIN index and ``ts_rank`` on
  PostgreSQL. Other dialects (SQLite in tests) fall back to term matching
  scored in Python.
- Service functions flush but do not commit; the transaction boundary
  is owned by the ``get_db`` dependency in the router layer.
"""
import logging
import re

from sqlalchemy import desc, func, literal_column, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from blog_api.models import Comment, Post, User
from blog_api.schemas import PostCreate, PostUpdate
from blog_api.services.comment_service import author_to_dict, comment_to_dict

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_TERM_RE = re.compile(r"\w+", re.UNICODE)

# Fields a patch may overwrite. Identity, ownership, the comment list and
# timestamps are never taken from the request.
_WRITABLE_FIELDS: frozenset[str] = frozenset({"title", "content"})

_TS_CONFIG = literal_column("'english'")


def search_terms(query: str) -> list[str]:
    """Split *query* into distinct lowercase word terms, keeping order."""
    seen: dict[str, None] = {}
    for term in _TERM_RE.findall(query.lower()):
        seen.setdefault(term, None)
    return list(seen)


def score_text(text: str, terms: list[str]) -> tuple[int, int]:
    """
    Return ``(distinct terms matched, total occurrences)`` for *text*.

    Sorting on this tuple ranks a document that contains every query term
    above any document that contains only some of them.
    """
    matched = 0
    occurrences = 0
    lowered = text.lower()
    for term in terms:
        hits = len(re.findall(rf"\b{re.escape(term)}\b", lowered))
        if hits:
            matched += 1
            occurrences += hits
    return matched, occurrences


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _post_to_dict(post: Post) -> dict:
    """Serialise a Post ORM instance to a plain dict (comment ids only)."""
    return {
        "id": post.id,
        "title": post.title,
        "content": post.content,
        "author": author_to_dict(post.author),
        "comments": [c.id for c in post.comments],
        "created_at": post.created_at.isoformat() if post.created_at else None,
        "updated_at": post.updated_at.isoformat() if post.updated_at else None,
    }


def _post_detail_to_dict(post: Post) -> dict:
    """Serialise a Post ORM instance with its comments resolved."""
    data = _post_to_dict(post)
    data["comments"] = [comment_to_dict(c) for c in post.comments]
    return data


def _post_query():
    # populate_existing: posts already in the session pick up comments
    # added or removed since they were first loaded.
    return (
        select(Post)
        .options(joinedload(Post.author), selectinload(Post.comments))
        .execution_options(populate_existing=True)
    )


async def _get_owned_post(db: AsyncSession, post_id: int, author_id: int) -> Post | None:
    q = _post_query().where(Post.id == post_id, Post.author_id == author_id)
    result = await db.execute(q)
    return result.unique().scalar_one_or_none()


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def create_post(db: AsyncSession, data: PostCreate, author: User) -> dict:
    """Create a post owned by *author* and return its serialised dict."""
    post = Post(title=data.title, content=data.content, author=author)
    db.add(post)
    await db.flush()
    return _post_to_dict(post)


async def get_posts(db: AsyncSession) -> list[dict]:
    """Return every post, newest first, with authors resolved."""
    q = _post_query().order_by(Post.created_at.desc(), Post.id.desc())
    result = await db.execute(q)
    return [_post_to_dict(p) for p in result.unique().scalars().all()]


async def get_post(db: AsyncSession, post_id: int) -> dict | None:
    """
    Return the detail dict for *post_id* with each comment and its author
    resolved, or None when the post does not exist.
    """
    q = (
        select(Post)
        .where(Post.id == post_id)
        .options(
            joinedload(Post.author),
            selectinload(Post.comments).joinedload(Comment.author),
        )
        .execution_options(populate_existing=True)
    )
    result = await db.execute(q)
    post = result.unique().scalar_one_or_none()
    if post is None:
        return None
    return _post_detail_to_dict(post)


async def update_post(
    db: AsyncSession, post_id: int, author_id: int, data: PostUpdate
) -> dict | None:
    """
    Overwrite every writable field present in *data* on a post owned by
    *author_id*.

    Returns None when no such post is owned by the requester.
    """
    post = await _get_owned_post(db, post_id, author_id)
    if post is None:
        return None

    for field, value in data.model_dump(exclude_unset=True).items():
        if field in _WRITABLE_FIELDS:
            setattr(post, field, value)

    await db.flush()
    return _post_to_dict(post)


async def delete_post(db: AsyncSession, post_id: int, author_id: int) -> bool:
    """
    Delete a post owned by *author_id*. Its comments are left in place.

    Returns True on success, False when no such post is owned by the
    requester.
    """
    result = await db.execute(
        select(Post).where(Post.id == post_id, Post.author_id == author_id)
    )
    post = result.scalar_one_or_none()
    if post is None:
        return False

    await db.delete(post)
    await db.flush()
    logger.info("Deleted post id=%s", post_id)
    return True


async def search_posts(db: AsyncSession, query: str) -> list[dict]:
    """
    Return posts whose title or content match any term of *query*, most
    relevant first.
    """
    terms = search_terms(query)
    if not terms:
        return []

    if db.bind.dialect.name == "postgresql":
        return await _search_fulltext(db, terms)
    return await _search_terms(db, terms)


def fulltext_query(terms: list[str]):
    """Build the PostgreSQL ranked search over ``ix_posts_fulltext``."""
    # Must match the expression of the ix_posts_fulltext index.
    document = func.to_tsvector(
        _TS_CONFIG, Post.title + literal_column("' '") + Post.content
    )
    tsquery = func.to_tsquery(_TS_CONFIG, " | ".join(terms))
    score = func.ts_rank(document, tsquery).label("score")

    return (
        _post_query()
        .add_columns(score)
        .where(document.op("@@")(tsquery))
        .order_by(desc(score), Post.created_at.desc())
    )


async def _search_fulltext(db: AsyncSession, terms: list[str]) -> list[dict]:
    result = await db.execute(fulltext_query(terms))
    return [_post_to_dict(post) for post, _score in result.unique().all()]


async def _search_terms(db: AsyncSession, terms: list[str]) -> list[dict]:
    conditions = []
    for term in terms:
        pattern = f"%{term}%"
        conditions.append(Post.title.ilike(pattern))
        conditions.append(Post.content.ilike(pattern))

    result = await db.execute(_post_query().where(or_(*conditions)))
    ranked = []
    for post in result.unique().scalars().all():
        matched, occurrences = score_text(f"{post.title} {post.content}", terms)
        if matched:
            ranked.append((matched, occurrences, post))

    ranked.sort(key=lambda row: (row[0], row[1], row[2].created_at, row[2].id), reverse=True)
    return [_post_to_dict(post) for _, _, post in ranked]
