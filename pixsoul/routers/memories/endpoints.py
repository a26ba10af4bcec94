import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from pixsoul.common import get_current_user, get_storage
from pixsoul.core.exceptions import PixSoulError, StorageError
from pixsoul.core.storage import UploadStorage
from pixsoul.init_db import get_db
from pixsoul.schemas.auth import SuccessResponse
from pixsoul.schemas.memories import (
    CommentCreate,
    CommentResponse,
    FeedMemoryResponse,
    LikeToggleResponse,
    MemoryResponse,
)
from pixsoul.services.memory_service import (
    add_comment,
    create_memory,
    delete_memory,
    get_feed,
    list_my_memories,
    toggle_like,
)

# Configure logging for memory-related operations
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["memories"])


@router.get("/my-memories", response_model=List[MemoryResponse])
async def list_my_memories_api(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    try:
        return await list_my_memories(current_user["uid"], db)
    except Exception:
        logger.exception("Error fetching memories")
        raise StorageError("Error fetching memories")


@router.get("/memories", response_model=List[FeedMemoryResponse])
async def get_feed_api(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Home feed: own memories plus those of mutual followers, newest first,
    with like/comment totals and the comment thread of each memory.
    """
    try:
        return await get_feed(current_user["uid"], db)
    except Exception:
        logger.exception("Error fetching feed")
        raise StorageError("Error fetching memories")


@router.delete("/memories/{memory_id}", response_model=SuccessResponse)
async def delete_memory_api(
    memory_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: UploadStorage = Depends(get_storage),
):
    """
    Delete one of the current user's memories.

    Raises:
        NotFound: Unknown memory
        Forbidden: The memory belongs to someone else
    """
    try:
        await delete_memory(db, storage, memory_id, current_user["uid"])
    except PixSoulError:
        raise
    except Exception:
        logger.exception("Error deleting memory")
        raise StorageError("Error deleting memory")
    return SuccessResponse(message="Memory deleted")


@router.post("/like/{memory_id}", response_model=LikeToggleResponse)
async def toggle_like_api(
    memory_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    try:
        return await toggle_like(db, memory_id, current_user["uid"])
    except PixSoulError:
        raise
    except Exception:
        logger.exception("Like error")
        raise StorageError("Failed to like/unlike post")


@router.post("/comment/{memory_id}", response_model=CommentResponse)
async def add_comment_api(
    memory_id: int,
    body: CommentCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    try:
        comment = await add_comment(db, memory_id, current_user["uid"], body.text)
    except PixSoulError:
        raise
    except Exception:
        logger.exception("Comment insert error")
        raise StorageError("Database error.")
    return {"success": True, **comment}


@router.post("/upload")
async def upload_memory_api(
    image: Optional[UploadFile] = File(None),
    caption: Optional[str] = Form(None),
    emotion: Optional[str] = Form(None),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: UploadStorage = Depends(get_storage),
):
    """
    Upload a new memory (multipart: image, caption, emotion) and redirect to
    the gallery.
    """
    try:
        await create_memory(db, storage, current_user["uid"], image, caption, emotion)
    except PixSoulError:
        raise
    except Exception:
        logger.exception("Upload error")
        raise StorageError("Error uploading memory")
    return RedirectResponse(url="/gallery.html", status_code=status.HTTP_303_SEE_OTHER)
