"""Post aggregation: derived counters, per-user flags and ranked search.

Every statement here projects the base ``Post`` entity alongside correlated
scalar subqueries, one per derived column. The requesting user id and the
search text only ever reach the database as bound parameters.
"""
from uuid import UUID

from sqlalchemy import Select, desc, func, literal_column, select
from sqlalchemy.orm import selectinload

from uboard.models.comment import Comment
from uboard.models.engagement import UserCheckin, UserPostLike, UserReport
from uboard.models.post import Post, Tag, post_tags
from uboard.models.user import User
from uboard.schemas.post import Coords, PostDetail, PostPreview, PostRead, TagRead
from uboard.schemas.user import AuthorPublic

ALL_TYPES = "All"

# ts_rank_cd normalization: 1 divides by 1 + log(document length), 4 by the
# mean harmonic distance between extents.
RANK_NORMALIZATION = 1 | 4


def _count(model, *criteria):
    return select(func.count()).select_from(model).where(*criteria).correlate(Post).scalar_subquery()


def derived_columns(user_id: UUID, with_comments: bool = False) -> list:
    columns = [
        _count(UserPostLike, UserPostLike.post_id == Post.id).label("like_count"),
        _count(
            UserPostLike, UserPostLike.post_id == Post.id, UserPostLike.user_id == user_id
        ).label("user_like_count"),
        _count(
            UserCheckin, UserCheckin.post_id == Post.id, UserCheckin.user_id == user_id
        ).label("user_checkin_count"),
        _count(UserCheckin, UserCheckin.post_id == Post.id).label("users_checked_in"),
        _count(
            UserReport, UserReport.post_id == Post.id, UserReport.user_id == user_id
        ).label("user_report_count"),
    ]
    if with_comments:
        columns.append(_count(Comment, Comment.post_id == Post.id).label("total_comments"))
    return columns


def _type_criteria(post_type: str, author_id: UUID | None = None) -> list:
    criteria = []
    if post_type != ALL_TYPES:
        criteria.append(Post.type == post_type)
    if author_id is not None:
        criteria.append(Post.author_id == author_id)
    return criteria


def _with_relations(stmt: Select) -> Select:
    return stmt.options(selectinload(Post.author), selectinload(Post.tags))


def detail_statement(user_id: UUID, post_id: UUID) -> Select:
    return _with_relations(select(Post, *derived_columns(user_id)).where(Post.id == post_id))


def list_statement(
    user_id: UUID,
    post_type: str,
    limit: int,
    offset: int,
    author_id: UUID | None = None,
) -> Select:
    return _with_relations(
        select(Post, *derived_columns(user_id, with_comments=True))
        .where(*_type_criteria(post_type, author_id))
        .order_by(desc(Post.created_at))
        .limit(limit)
        .offset(offset)
    )


def count_statement(post_type: str, author_id: UUID | None = None) -> Select:
    return select(func.count()).select_from(Post).where(*_type_criteria(post_type, author_id))


# --- Full-text search (PostgreSQL) ---


def _tag_text_subquery():
    return (
        select(
            post_tags.c.post_id.label("post_id"),
            func.string_agg(Tag.text, literal_column("' '")).label("tag_text"),
        )
        .join(Tag, Tag.id == post_tags.c.tag_id)
        .group_by(post_tags.c.post_id)
        .subquery("post_tag_text")
    )


def _weighted(column, weight: str):
    return func.setweight(func.to_tsvector(func.coalesce(column, literal_column("''"))), literal_column(f"'{weight}'"))


def search_document(tag_text):
    """Weighted document: title A, author names B, tags and location C, body D."""
    parts = [
        _weighted(Post.title, "A"),
        _weighted(User.first_name, "B"),
        _weighted(User.last_name, "B"),
        _weighted(tag_text.c.tag_text, "C"),
        _weighted(Post.location, "C"),
        _weighted(Post.body, "D"),
    ]
    document = parts[0]
    for part in parts[1:]:
        document = document.op("||")(part)
    return document


def _search_source(stmt: Select, post_type: str, query: str) -> tuple[Select, object]:
    tag_text = _tag_text_subquery()
    document = search_document(tag_text)
    ts_query = func.websearch_to_tsquery(query)
    stmt = (
        stmt.select_from(Post)
        .outerjoin(User, Post.author_id == User.id)
        .outerjoin(tag_text, tag_text.c.post_id == Post.id)
        .where(ts_query.op("@@")(document), *_type_criteria(post_type))
    )
    return stmt, func.ts_rank_cd(document, ts_query, RANK_NORMALIZATION)


def search_statement(user_id: UUID, post_type: str, query: str, limit: int, offset: int) -> Select:
    stmt, rank = _search_source(select(Post, *derived_columns(user_id, with_comments=True)), post_type, query)
    return _with_relations(
        stmt.add_columns(rank.label("rank")).order_by(desc("rank")).limit(limit).offset(offset)
    )


def search_count_statement(post_type: str, query: str) -> Select:
    stmt, _ = _search_source(select(func.count(Post.id)), post_type, query)
    return stmt


# --- Row mapping ---


def is_positive(count: int | None) -> bool:
    """Derive a per-user flag from its count column."""
    return (count or 0) > 0


def to_read(post: Post) -> PostRead:
    return PostRead(
        id=post.id,
        type=post.type,
        title=post.title,
        body=post.body,
        thumbnail=post.thumbnail,
        location=post.location or "",
        capacity=post.capacity or 0,
        coords=Coords(**post.coords) if post.coords else None,
        feedback_score=post.feedback_score or 0,
        author_id=post.author_id,
        created_at=post.created_at,
    )


def _derived_fields(row) -> dict:
    post = row[0]
    return {
        **to_read(post).model_dump(),
        "like_count": row.like_count,
        "does_user_like": is_positive(row.user_like_count),
        "is_user_checked_in": is_positive(row.user_checkin_count),
        "users_checked_in": row.users_checked_in,
        "did_user_report": is_positive(row.user_report_count),
        "author": AuthorPublic.model_validate(post.author) if post.author else None,
        "tags": [TagRead(tag_id=tag.id, text=tag.text) for tag in post.tags],
    }


def to_detail(row) -> PostDetail:
    return PostDetail(**_derived_fields(row))


def to_preview(row) -> PostPreview:
    rank = row._mapping.get("rank")
    return PostPreview(
        **_derived_fields(row),
        total_comments=row.total_comments,
        rank=float(rank) if rank is not None else None,
    )
