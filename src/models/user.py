"""User model."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from src.config import get_settings
from src.database import Base
from src.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """User model for authentication and post ownership."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    status = Column(String(255), nullable=False, default=lambda: get_settings().default_status)

    # The owner's post set; kept in sync through posts.creator_id
    posts = relationship("Post", back_populates="creator", order_by="Post.created_at.desc()")
