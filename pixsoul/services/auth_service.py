import logging
from typing import Optional

from fastapi import UploadFile
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pixsoul.core.exceptions import Conflict, InvalidCredentials
from pixsoul.core.security import (
    hash_password,
    validate_email,
    validate_password,
    validate_username,
    verify_password,
)
from pixsoul.core.session_store import SessionStore
from pixsoul.core.storage import UploadStorage
from pixsoul.models import User
from pixsoul.models.user import DEFAULT_PROFILE_IMAGE

# Configure logging for this module
logger = logging.getLogger(__name__)

async def signup_user(
    db: AsyncSession,
    storage: UploadStorage,
    username: str,
    email: str,
    password: str,
    profile_image: Optional[UploadFile] = None,
) -> User:
    """
    Register a new account.

    Args:
        db: AsyncSession for database operations
        storage: Upload storage for the optional profile picture
        username: Must start with a letter
        email: Must look like an address
        password: Letters, digits and one of @$!%*?&, at least 8 characters
        profile_image: Optional uploaded picture

    Returns:
        User: The created user

    Raises:
        ValidationError: If any field is malformed (nothing is written)
        Conflict: If the username or email is already taken
    """
    username = (username or "").strip()
    email = (email or "").strip()
    has_image = profile_image is not None and bool(profile_image.filename)

    validate_username(username)
    validate_email(email)
    validate_password(password)
    if has_image:
        storage.validate(profile_image)

    result = await db.execute(
        select(User.id).where(or_(User.username == username, User.email == email))
    )
    if result.first() is not None:
        raise Conflict()

    image_path = await storage.save(profile_image) if has_image else DEFAULT_PROFILE_IMAGE
    user = User(
        username=username,
        email=email,
        password=hash_password(password),
        profile_image=image_path,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        # Lost a race against a concurrent signup with the same name or email
        logger.warning(f"Duplicate signup rejected for {username}")
        if has_image:
            await storage.delete(image_path)
        raise Conflict()
    except Exception:
        await db.rollback()
        if has_image:
            await storage.delete(image_path)
        raise

    logger.info(f"User {user.id} signed up as {username}")
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Check credentials. Unknown email and wrong password fail identically.
    """
    result = await db.execute(select(User).where(User.email == (email or "").strip()))
    user = result.scalar_one_or_none()
    if user is None or not verify_password(user.password, password or ""):
        raise InvalidCredentials()
    return user


def start_session(store: SessionStore, user: User, previous_sid: Optional[str] = None) -> str:
    """Drop any previous session and open a fresh one bound to ``user``."""
    store.destroy(previous_sid)
    sid = store.create({
        "user": {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "profile_image": user.profile_image or DEFAULT_PROFILE_IMAGE,
        }
    })
    logger.info(f"User {user.id} logged in")
    return sid


def end_session(store: SessionStore, sid: Optional[str]) -> None:
    store.destroy(sid)
