"""SQLAlchemy models for the comments feature."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from content_service.core.database import NestedSetMixin, TimestampedBase, nested_set_constraints
from content_service.core.workflow import CommentStatus


class Comment(TimestampedBase, NestedSetMixin):
    """Threaded comment on a post.

    All comments share one forest; each top-level comment roots one thread
    and replies nest under the comment they answer. A reply always belongs
    to the same post as its parent.
    """

    __tablename__ = "comments"
    __table_args__ = nested_set_constraints()

    post_id: Mapped[int] = mapped_column(
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Post the thread belongs to",
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
        comment="Author user id",
    )
    content: Mapped[str] = mapped_column(Text, nullable=False, comment="Comment text")
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=CommentStatus.PENDING.value,
        index=True,
        comment="pending | approved | rejected",
    )

    @property
    def is_approved(self) -> bool:
        return self.status == CommentStatus.APPROVED

    @property
    def reply_count(self) -> int:
        """Number of replies anywhere below this comment."""
        return self.descendant_count

    @property
    def word_count(self) -> int:
        return len(self.content.split())

    def __repr__(self) -> str:
        """Return comment summary for debugging."""
        return f"<Comment(id={self.id}, post_id={self.post_id}, status={self.status})>"
