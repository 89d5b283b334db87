"""Post model."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class Post(Base, TimestampMixin):
    """A feed post. Visible to every authenticated user, mutable by its creator only."""

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    image_url = Column(String(1024), nullable=False)
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    creator = relationship("User", back_populates="posts")
