from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from pixsoul.database import Base

DEFAULT_PROFILE_IMAGE = "default.png"

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    # werkzeug salted hash, never the raw password
    password = Column(String(255), nullable=False)
    profile_image = Column(String(255), nullable=False, default=DEFAULT_PROFILE_IMAGE)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    memories = relationship("Memory", back_populates="owner")
    following = relationship("Follow", foreign_keys="Follow.follower_id", back_populates="follower")
    followers = relationship("Follow", foreign_keys="Follow.following_id", back_populates="following")
