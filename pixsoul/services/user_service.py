from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pixsoul.core.exceptions import NotFound
from pixsoul.models import Follow, User

async def get_user_by_id(db: AsyncSession, user_id: int):
    """
    Retrieve a user by their unique identifier.

    Args:
        db: AsyncSession - Database session for executing queries
        user_id: int - Unique identifier of the user

    Returns:
        Optional[User]: User object if found, None otherwise
    """
    return await db.get(User, user_id)

async def get_current_user_info(user_id: int, db: AsyncSession) -> dict:
    """
    Profile of the logged-in user.

    Raises:
        NotFound: If the account no longer exists
    """
    user = await get_user_by_id(db, user_id)
    if user is None:
        raise NotFound("User not found")
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "profile_image": user.profile_image,
    }

async def list_users_with_status(viewer_id: int, db: AsyncSession) -> List[dict]:
    """
    Every other user, annotated with whether the viewer follows them
    (``is_following``) and whether they follow the viewer (``follows_back``).
    """
    is_following = (
        select(Follow.id)
        .where(Follow.follower_id == viewer_id, Follow.following_id == User.id)
        .exists()
    )
    follows_back = (
        select(Follow.id)
        .where(Follow.follower_id == User.id, Follow.following_id == viewer_id)
        .exists()
    )
    stmt = (
        select(
            User.id,
            User.username,
            User.profile_image,
            is_following.label("is_following"),
            follows_back.label("follows_back"),
        )
        .where(User.id != viewer_id)
        .order_by(User.username)
    )
    result = await db.execute(stmt)
    return [
        {
            "id": row.id,
            "username": row.username,
            "profile_image": row.profile_image,
            "is_following": bool(row.is_following),
            "follows_back": bool(row.follows_back),
        }
        for row in result.all()
    ]
