import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pixsoul.common import get_current_user
from pixsoul.core.exceptions import PixSoulError, StorageError
from pixsoul.init_db import get_db
from pixsoul.schemas.users import AllUsersResponse, CurrentUserResponse, FollowToggleResponse, UserSummary
from pixsoul.services.follow_service import list_friends, toggle_follow
from pixsoul.services.user_service import get_current_user_info, list_users_with_status

# Configure logging for the module
logger = logging.getLogger(__name__)

# Initialize router with prefix and tags for API documentation
router = APIRouter(prefix="/api", tags=["users"])


@router.get("/user", response_model=CurrentUserResponse)
async def get_current_user_info_api(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the logged-in user's profile.

    Raises:
        NotFound: If the account was removed after login
    """
    try:
        user = await get_current_user_info(current_user["uid"], db)
    except PixSoulError:
        raise
    except Exception:
        logger.exception("Error fetching current user")
        raise StorageError()
    return {"success": True, "user": user}


@router.get("/users/all", response_model=AllUsersResponse)
async def list_all_users_api(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    List every other user with ``is_following`` / ``follows_back`` flags.
    """
    try:
        users = await list_users_with_status(current_user["uid"], db)
    except Exception:
        logger.exception("Error listing users")
        raise StorageError()
    return {"success": True, "users": users}


@router.post("/follow/{user_id}", response_model=FollowToggleResponse)
async def toggle_follow_api(
    user_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Follow or unfollow ``user_id``.
    """
    try:
        following = await toggle_follow(db, current_user["uid"], user_id)
    except PixSoulError:
        raise
    except Exception:
        logger.exception("Follow error")
        raise StorageError("Error updating follow status")
    return {"following": following}


@router.get("/friends", response_model=List[UserSummary])
async def list_friends_api(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Users in a mutual follow with the current user."""
    try:
        return await list_friends(current_user["uid"], db)
    except Exception:
        logger.exception("Error listing friends")
        raise StorageError()
