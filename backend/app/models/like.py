"""
Blog API — Like SQLAlchemy Model
==================================

What:  ORM model for the `likes` table.

Uniqueness:
    At most one like per (user, post). The service checks first to give a
    clean error, and the unique constraint settles concurrent double-likes.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.user import utc_now


class Like(Base):
    __tablename__ = "likes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    __table_args__ = (UniqueConstraint("user_id", "post_id", name="uq_likes_user_post"),)

    def __repr__(self) -> str:
        return f"<Like(user_id={self.user_id}, post_id={self.post_id})>"
