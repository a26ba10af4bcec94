from .user import User
from .follow import Follow
from .memory import Memory, Like, Comment

__all__ = ["User", "Follow", "Memory", "Like", "Comment"]
