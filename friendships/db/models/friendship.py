"""Directed friendship edges."""

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from friendships.schemas.friendship import FriendshipStatus

from .base import Base

if TYPE_CHECKING:
    from .user import User


class Friendship(Base):
    """One directed edge user_id -> friend_user_id.

    A friendship between A and B is up to two rows, A->B and B->A, each owned
    by its user_id.
    """

    __tablename__ = "friendships"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    friend_user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default=FriendshipStatus.REQUESTED.value)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    user: Mapped["User"] = relationship(back_populates="friendships", foreign_keys=[user_id])

    __table_args__ = (
        UniqueConstraint("user_id", "friend_user_id", name="uq_friendships_user_friend"),
        CheckConstraint("user_id <> friend_user_id", name="ck_friendships_not_self"),
        CheckConstraint(
            "status IN ('requested', 'accepted', 'declined')",
            name="ck_friendships_status",
        ),
        Index("ix_friendships_friend_user_status", "friend_user_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Friendship({self.user_id} -> {self.friend_user_id}, status={self.status})>"
