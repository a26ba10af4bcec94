import logging
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from pixsoul.core.exceptions import NotFound, ValidationError
from pixsoul.models import Follow, User

# Configure logging for this module
logger = logging.getLogger(__name__)

def mutual_follow_ids(user_id: int):
    """
    Select of the ids ``user_id`` follows and that follow ``user_id`` back.
    """
    back = aliased(Follow)
    return (
        select(Follow.following_id)
        .join(
            back,
            (back.follower_id == Follow.following_id) & (back.following_id == user_id),
        )
        .where(Follow.follower_id == user_id)
    )

async def toggle_follow(db: AsyncSession, follower_id: int, target_id: int) -> bool:
    """
    Follow ``target_id`` if not yet followed, otherwise unfollow.

    Args:
        db: AsyncSession for database operations
        follower_id: The acting user
        target_id: The user to follow or unfollow

    Returns:
        bool: The resulting "following" state

    Raises:
        ValidationError: On an attempt to follow oneself
        NotFound: If the target user does not exist
    """
    if follower_id == target_id:
        raise ValidationError("You can't follow yourself")

    try:
        target = await db.get(User, target_id)
        if target is None:
            raise NotFound("User not found")

        result = await db.execute(
            select(Follow.id).where(
                Follow.follower_id == follower_id,
                Follow.following_id == target_id,
            )
        )
        if result.scalar_one_or_none() is not None:
            await db.execute(
                delete(Follow).where(
                    Follow.follower_id == follower_id,
                    Follow.following_id == target_id,
                )
            )
            following = False
        else:
            db.add(Follow(follower_id=follower_id, following_id=target_id))
            following = True
        await db.commit()
    except IntegrityError:
        # A concurrent request inserted the same edge first
        await db.rollback()
        logger.info(f"Concurrent follow {follower_id}->{target_id} already recorded")
        return True
    except Exception:
        await db.rollback()
        raise

    logger.debug(f"User {follower_id} {'followed' if following else 'unfollowed'} {target_id}")
    return following

async def list_friends(viewer_id: int, db: AsyncSession) -> List[dict]:
    """Users the viewer follows and who follow the viewer back."""
    stmt = (
        select(User.id, User.username, User.profile_image)
        .where(User.id.in_(mutual_follow_ids(viewer_id)))
        .order_by(User.username)
    )
    result = await db.execute(stmt)
    return [
        {"id": row.id, "username": row.username, "profile_image": row.profile_image}
        for row in result.all()
    ]
