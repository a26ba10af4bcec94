import logging
from collections import defaultdict
from typing import List, Optional

from fastapi import UploadFile
from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pixsoul.core.exceptions import EmptyComment, Forbidden, NotFound, ValidationError
from pixsoul.core.storage import UploadStorage
from pixsoul.models import Comment, Like, Memory, User
from pixsoul.services.follow_service import mutual_follow_ids

# Configure logging for this module
logger = logging.getLogger(__name__)


def _memory_to_dict(memory: Memory, username: str) -> dict:
    return {
        "id": memory.id,
        "user_id": memory.user_id,
        "username": username,
        "caption": memory.caption,
        "emotion": memory.emotion,
        "image_path": memory.image_path,
        "created_at": memory.created_at,
    }


async def _get_memory_or_404(db: AsyncSession, memory_id: int) -> Memory:
    memory = await db.get(Memory, memory_id)
    if memory is None:
        raise NotFound("Memory not found")
    return memory


async def list_my_memories(user_id: int, db: AsyncSession) -> List[dict]:
    """All memories owned by ``user_id``, newest first."""
    stmt = (
        select(Memory, User.username)
        .join(User, Memory.user_id == User.id)
        .where(Memory.user_id == user_id)
        .order_by(Memory.created_at.desc(), Memory.id.desc())
    )
    result = await db.execute(stmt)
    return [_memory_to_dict(memory, username) for memory, username in result.all()]


async def get_feed(viewer_id: int, db: AsyncSession) -> List[dict]:
    """
    Compose the viewer's feed.

    Visible memories are the viewer's own plus those of users in the
    viewer's mutual-follow circle. A one-way follow in either direction is
    not enough. Each memory carries its like and comment totals, whether
    the viewer liked it, and its comments oldest first.

    Args:
        viewer_id: The user the feed is built for
        db: AsyncSession for database operations

    Returns:
        List[dict]: Memories newest first
    """
    like_count = (
        select(func.count(Like.id))
        .where(Like.post_id == Memory.id)
        .correlate(Memory)
        .scalar_subquery()
    )
    comment_count = (
        select(func.count(Comment.id))
        .where(Comment.post_id == Memory.id)
        .correlate(Memory)
        .scalar_subquery()
    )
    liked = (
        select(Like.id)
        .where(Like.post_id == Memory.id, Like.user_id == viewer_id)
        .correlate(Memory)
        .exists()
    )
    stmt = (
        select(
            Memory,
            User.username,
            User.profile_image,
            like_count.label("likes"),
            comment_count.label("comment_count"),
            liked.label("liked"),
        )
        .join(User, Memory.user_id == User.id)
        .where(
            or_(
                Memory.user_id == viewer_id,
                Memory.user_id.in_(mutual_follow_ids(viewer_id)),
            )
        )
        .order_by(Memory.created_at.desc(), Memory.id.desc())
    )

    try:
        result = await db.execute(stmt)
        rows = result.all()

        comments_by_post = defaultdict(list)
        post_ids = [row.Memory.id for row in rows]
        if post_ids:
            comments = await db.execute(
                select(Comment.post_id, Comment.text, User.username)
                .join(User, Comment.user_id == User.id)
                .where(Comment.post_id.in_(post_ids))
                .order_by(Comment.id)
            )
            for post_id, text, commenter in comments.all():
                comments_by_post[post_id].append({"user": commenter, "text": text})
        # Read-only, but both queries share one snapshot
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    feed = []
    for row in rows:
        item = _memory_to_dict(row.Memory, row.username)
        item.update({
            "profile_image": row.profile_image,
            "likes": row.likes,
            "comment_count": row.comment_count,
            "liked": bool(row.liked),
            "comments": comments_by_post.get(row.Memory.id, []),
        })
        feed.append(item)
    return feed


async def _like_state(db: AsyncSession, post_id: int, user_id: int) -> dict:
    total = await db.execute(select(func.count(Like.id)).where(Like.post_id == post_id))
    mine = await db.execute(
        select(Like.id).where(Like.post_id == post_id, Like.user_id == user_id)
    )
    return {"likes": total.scalar_one(), "liked": mine.scalar_one_or_none() is not None}


async def toggle_like(db: AsyncSession, post_id: int, user_id: int) -> dict:
    """
    Like the memory if the user has not yet, otherwise remove the like.

    Returns:
        dict: ``{"likes": total, "liked": bool}`` after the toggle

    Raises:
        NotFound: If the memory does not exist
    """
    try:
        await _get_memory_or_404(db, post_id)
        existing = await db.execute(
            select(Like.id).where(Like.post_id == post_id, Like.user_id == user_id)
        )
        if existing.scalar_one_or_none() is not None:
            await db.execute(
                delete(Like).where(Like.post_id == post_id, Like.user_id == user_id)
            )
        else:
            db.add(Like(post_id=post_id, user_id=user_id))
            await db.flush()
        state = await _like_state(db, post_id, user_id)
        await db.commit()
    except IntegrityError:
        # The unique (post_id, user_id) constraint rejected a concurrent double like
        await db.rollback()
        logger.info(f"Concurrent like on {post_id} by {user_id} already recorded")
        state = await _like_state(db, post_id, user_id)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.debug(f"User {user_id} {'liked' if state['liked'] else 'unliked'} memory {post_id}")
    return state


async def add_comment(db: AsyncSession, post_id: int, user_id: int, text: Optional[str]) -> dict:
    """
    Append a comment to a memory.

    Returns:
        dict: ``{"user": commenter username, "text": stored text}``

    Raises:
        EmptyComment: If the text is missing or blank
        NotFound: If the memory does not exist
    """
    text = (text or "").strip()
    if not text:
        raise EmptyComment()

    try:
        await _get_memory_or_404(db, post_id)
        db.add(Comment(post_id=post_id, user_id=user_id, text=text))
        username = (
            await db.execute(select(User.username).where(User.id == user_id))
        ).scalar_one_or_none()
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    return {"user": username or "Unknown", "text": text}


async def delete_memory(
    db: AsyncSession, storage: UploadStorage, memory_id: int, owner_id: int
) -> None:
    """
    Delete a memory together with its likes and comments.

    Raises:
        NotFound: If the memory does not exist
        Forbidden: If ``owner_id`` does not own it; nothing is deleted
    """
    try:
        memory = await _get_memory_or_404(db, memory_id)
        if memory.user_id != owner_id:
            logger.warning(f"User {owner_id} tried to delete memory {memory_id} of user {memory.user_id}")
            raise Forbidden("You can only delete your own memories")
        image_path = memory.image_path

        await db.execute(delete(Like).where(Like.post_id == memory_id))
        await db.execute(delete(Comment).where(Comment.post_id == memory_id))
        await db.execute(delete(Memory).where(Memory.id == memory_id))
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await storage.delete(image_path)
    logger.info(f"Memory {memory_id} deleted by owner {owner_id}")


async def create_memory(
    db: AsyncSession,
    storage: UploadStorage,
    user_id: int,
    image: Optional[UploadFile],
    caption: Optional[str] = None,
    emotion: Optional[str] = None,
) -> Memory:
    """
    Store an uploaded image and record it as a new memory.

    Raises:
        ValidationError: If no image was sent or its type is not allowed
    """
    if image is None or not image.filename:
        raise ValidationError("Image required")

    image_path = await storage.save(image)
    memory = Memory(
        user_id=user_id,
        caption=caption,
        emotion=emotion,
        image_path=image_path,
    )
    db.add(memory)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        await storage.delete(image_path)
        raise

    logger.info(f"User {user_id} uploaded memory {memory.id}")
    return memory
