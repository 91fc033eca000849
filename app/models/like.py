"""
Like marker. Exactly one target (video, comment or tweet) per row; one row per (target, user).
Uniqueness is enforced by the database so toggles can rely on conditional writes.
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, CheckConstraint, UniqueConstraint
from app.database import Base
from app.models.document import DocumentMixin


class Like(DocumentMixin, Base):
    __tablename__ = "likes"
    __table_args__ = (
        CheckConstraint(
            "(CASE WHEN video_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN comment_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN tweet_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_likes_single_target",
        ),
        UniqueConstraint("video_id", "liked_by_id", name="uq_likes_video_user"),
        UniqueConstraint("comment_id", "liked_by_id", name="uq_likes_comment_user"),
        UniqueConstraint("tweet_id", "liked_by_id", name="uq_likes_tweet_user"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    video_id = Column(String(36), ForeignKey("videos.id"), nullable=True, index=True)
    comment_id = Column(String(36), ForeignKey("comments.id"), nullable=True, index=True)
    tweet_id = Column(String(36), ForeignKey("tweets.id"), nullable=True, index=True)
    liked_by_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    FIELD_COLUMNS = {
        "id": "id",
        "video": "video_id",
        "comment": "comment_id",
        "tweet": "tweet_id",
        "likedBy": "liked_by_id",
        "createdAt": "created_at",
    }

    def to_document(self) -> dict:
        return {
            "id": self.id,
            "video": self.video_id,
            "comment": self.comment_id,
            "tweet": self.tweet_id,
            "likedBy": self.liked_by_id,
            "createdAt": self.created_at,
        }
