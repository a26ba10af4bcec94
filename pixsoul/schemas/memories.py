from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

class MemoryResponse(BaseModel):
    id: int
    user_id: int
    username: str
    caption: Optional[str] = None
    emotion: Optional[str] = None
    image_path: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class FeedComment(BaseModel):
    user: str
    text: str

class FeedMemoryResponse(MemoryResponse):
    profile_image: str
    likes: int
    comment_count: int
    liked: bool
    comments: List[FeedComment] = []

class LikeToggleResponse(BaseModel):
    likes: int
    liked: bool

class CommentCreate(BaseModel):
    text: Optional[str] = None

class CommentResponse(BaseModel):
    success: bool = True
    user: str
    text: str
