"""Watch history: one row per (user, video). First view fixes the position; re-watching does not move it."""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Index
from app.database import Base
from app.models.document import DocumentMixin


class WatchHistoryEntry(DocumentMixin, Base):
    __tablename__ = "watch_history"
    __table_args__ = (Index("ix_watch_history_user_watched_at", "user_id", "watched_at"),)

    user_id = Column(String(36), ForeignKey("users.id"), primary_key=True)
    video_id = Column(String(36), ForeignKey("videos.id"), primary_key=True, index=True)
    watched_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    FIELD_COLUMNS = {
        "user": "user_id",
        "video": "video_id",
        "watchedAt": "watched_at",
    }

    def to_document(self) -> dict:
        return {
            "user": self.user_id,
            "video": self.video_id,
            "watchedAt": self.watched_at,
        }
