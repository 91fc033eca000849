"""Published or draft video. Media lives in the object store; only url + storage id are kept here."""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, Boolean, DateTime, Float, Integer, ForeignKey
from app.database import Base
from app.models.document import DocumentMixin, media_document


class Video(DocumentMixin, Base):
    __tablename__ = "videos"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    duration = Column(Float, nullable=False, default=0.0)  # seconds
    views = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=False)
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    video_file_url = Column(String(512), nullable=False)
    video_file_public_id = Column(String(255), nullable=False)
    thumbnail_url = Column(String(512), nullable=False)
    thumbnail_public_id = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    FIELD_COLUMNS = {
        "id": "id",
        "title": "title",
        "description": "description",
        "duration": "duration",
        "views": "views",
        "isPublished": "is_published",
        "owner": "owner_id",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }

    def to_document(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "duration": self.duration,
            "views": self.views,
            "isPublished": self.is_published,
            "owner": self.owner_id,
            "videoFile": media_document(self.video_file_url, self.video_file_public_id),
            "thumbnail": media_document(self.thumbnail_url, self.thumbnail_public_id),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
