from pydantic import BaseModel
from typing import List

class UserProfile(BaseModel):
    id: int
    username: str
    email: str
    profile_image: str

    class Config:
        from_attributes = True

class CurrentUserResponse(BaseModel):
    success: bool = True
    user: UserProfile

class UserSummary(BaseModel):
    id: int
    username: str
    profile_image: str

    class Config:
        from_attributes = True

class UserWithFollowStatus(UserSummary):
    is_following: bool
    follows_back: bool

class AllUsersResponse(BaseModel):
    success: bool = True
    users: List[UserWithFollowStatus]

class FollowToggleResponse(BaseModel):
    following: bool
