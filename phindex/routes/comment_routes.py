from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from loguru import logger
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from phindex.config import COMMENT_RATE, LIKE_RATE
from phindex.database import get_async_session
from phindex.deps.admin import ensure_owner_or_admin
from phindex.limiter import limiter
from phindex.models.account_model import Account
from phindex.models.comment_model import Comment, CommentLike, Notification
from phindex.models.profile_model import PersonProfile
from phindex.models.vote_model import Vote
from phindex.moderation.profanity import ensure_clean
from phindex.schemas.comment_schemas import (
    CommentAuthorOut,
    CommentOut,
    CreateCommentIn,
    LikeToggleOut,
    NotificationOut,
)
from phindex.utils.token_utils import get_current_user, get_current_user_optional

router = APIRouter(tags=["comments"])


# ------------------------------
# helpers
# ------------------------------
async def _nicknames(db: AsyncSession, user_ids) -> dict[str, str]:
    ids = set(user_ids)
    if not ids:
        return {}
    result = await db.execute(select(Account.id, Account.nickname).where(Account.id.in_(ids)))
    return {uid: nick for uid, nick in result.all()}


async def _votes_by_user(db: AsyncSession, profile_id: int, user_ids) -> dict[str, dict[str, str]]:
    ids = set(user_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(Vote.user_id, Vote.characteristic_type, Vote.classification)
        .where(Vote.profile_id == profile_id, Vote.user_id.in_(ids))
    )
    out: dict[str, dict[str, str]] = {}
    for uid, ctype, classification in result.all():
        out.setdefault(uid, {})[ctype] = classification
    return out


async def _liked_ids(db: AsyncSession, comment_ids, viewer_id: Optional[str]) -> set[int]:
    if not viewer_id or not comment_ids:
        return set()
    result = await db.execute(
        select(CommentLike.comment_id).where(
            CommentLike.comment_id.in_(list(comment_ids)),
            CommentLike.user_id == viewer_id,
        )
    )
    return set(result.scalars().all())


async def _descendant_ids(db: AsyncSession, comment_id: int) -> list[int]:
    found = [comment_id]
    frontier = [comment_id]
    while frontier:
        result = await db.execute(select(Comment.id).where(Comment.parent_comment_id.in_(frontier)))
        frontier = list(result.scalars().all())
        found.extend(frontier)
    return found


def _sort_key(sort: str):
    if sort == "top":
        return lambda c: (-(c.likes_count or 0), c.created_at, c.id)
    return lambda c: (c.created_at, c.id)


# ------------------------------
# Routes
# ------------------------------
@router.get("/profiles/{profile_id}/comments", response_model=List[CommentOut])
async def list_comments(
    profile_id: int,
    sort: Literal["recent", "top"] = Query("recent"),
    viewer: Optional[Account] = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_async_session),
):
    if not await db.get(PersonProfile, profile_id):
        raise HTTPException(status_code=404, detail="Profile not found")

    result = await db.execute(select(Comment).where(Comment.profile_id == profile_id))
    comments = list(result.scalars().all())

    author_ids = [c.user_id for c in comments]
    nicknames = await _nicknames(db, author_ids)
    votes = await _votes_by_user(db, profile_id, author_ids)
    liked = await _liked_ids(db, [c.id for c in comments], getattr(viewer, "id", None))

    nodes: dict[int, CommentOut] = {}
    for c in sorted(comments, key=_sort_key(sort)):
        nodes[c.id] = CommentOut(
            id=c.id,
            profile_id=c.profile_id,
            content=c.content,
            created_at=c.created_at,
            likes_count=c.likes_count or 0,
            parent_comment_id=c.parent_comment_id,
            user=CommentAuthorOut(id=c.user_id, nickname=nicknames.get(c.user_id)),
            user_votes=votes.get(c.user_id, {}),
            is_liked=c.id in liked,
        )

    roots: list[CommentOut] = []
    for node in nodes.values():
        parent = nodes.get(node.parent_comment_id) if node.parent_comment_id else None
        if parent is not None:
            parent.replies.append(node)
        else:
            roots.append(node)
    return roots


@router.post("/profiles/{profile_id}/comments", response_model=CommentOut, status_code=201)
@limiter.limit(COMMENT_RATE)
async def create_comment(
    request: Request,
    profile_id: int,
    payload: CreateCommentIn,
    user: Account = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    profile = await db.get(PersonProfile, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")

    content = payload.content.strip()
    if not content:
        raise HTTPException(status_code=400, detail="Comment cannot be empty")

    # Profanity check
    try:
        ensure_clean(content)
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail={"code": "PROFANITY", "message": "Comment contains inappropriate language."}
        )

    parent = None
    if payload.parent_comment_id is not None:
        parent = await db.get(Comment, payload.parent_comment_id)
        if not parent or parent.profile_id != profile_id:
            raise HTTPException(status_code=400, detail="Parent comment is not on this profile")

    comment = Comment(
        profile_id=profile_id,
        user_id=user.id,
        parent_comment_id=parent.id if parent else None,
        content=content,
        likes_count=0,
    )
    db.add(comment)
    await db.flush()

    if parent and parent.user_id != user.id:
        db.add(Notification(
            user_id=parent.user_id,
            type="reply",
            message=f"{user.nickname} replied to your comment on {profile.name}",
            profile_id=profile_id,
            comment_id=comment.id,
        ))

    await db.commit()
    await db.refresh(comment)

    votes = await _votes_by_user(db, profile_id, [user.id])
    return CommentOut(
        id=comment.id,
        profile_id=comment.profile_id,
        content=comment.content,
        created_at=comment.created_at,
        likes_count=0,
        parent_comment_id=comment.parent_comment_id,
        user=CommentAuthorOut(id=user.id, nickname=user.nickname),
        user_votes=votes.get(user.id, {}),
        is_liked=False,
    )


@router.post("/comments/{comment_id}/like", response_model=LikeToggleOut)
@limiter.limit(LIKE_RATE)
async def toggle_like(
    request: Request,
    comment_id: int,
    user: Account = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    comment = await db.get(Comment, comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")

    existing = (
        await db.execute(
            select(CommentLike)
            .where(CommentLike.comment_id == comment_id, CommentLike.user_id == user.id)
            .limit(1)
        )
    ).scalars().first()

    if existing:
        await db.delete(existing)
        liked = False
    else:
        db.add(CommentLike(comment_id=comment_id, user_id=user.id))
        liked = True
    await db.flush()

    # denorm from the source of truth
    count_stmt = select(func.count(CommentLike.id)).where(CommentLike.comment_id == comment_id)
    count = int((await db.execute(count_stmt)).scalar_one() or 0)
    comment.likes_count = count
    await db.commit()
    return LikeToggleOut(liked=liked, count=count)


@router.delete("/comments/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: int,
    user: Account = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    comment = await db.get(Comment, comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    ensure_owner_or_admin(user, comment.user_id)

    ids = await _descendant_ids(db, comment_id)
    await db.execute(delete(CommentLike).where(CommentLike.comment_id.in_(ids)))
    await db.execute(delete(Notification).where(Notification.comment_id.in_(ids)))
    # children first so the self-reference never dangles
    for cid in reversed(ids):
        await db.execute(delete(Comment).where(Comment.id == cid))
    await db.commit()

    logger.info("Comment {} and {} replies deleted by {}", comment_id, len(ids) - 1, user.id)
    return Response(status_code=204)


@router.get("/notifications", response_model=List[NotificationOut])
async def list_notifications(
    unread_only: bool = Query(False),
    user: Account = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    stmt = select(Notification).where(Notification.user_id == user.id)
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))
    result = await db.execute(stmt.order_by(Notification.created_at.desc(), Notification.id.desc()))
    return result.scalars().all()


@router.post("/notifications/{notification_id}/read", response_model=NotificationOut)
async def mark_notification_read(
    notification_id: int,
    user: Account = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    n = await db.get(Notification, notification_id)
    if not n or n.user_id != user.id:
        raise HTTPException(status_code=404, detail="Notification not found")
    n.is_read = True
    await db.commit()
    await db.refresh(n)
    return n
