import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, Integer, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.document import DocumentMixin


class Playlist(DocumentMixin, Base):
    __tablename__ = "playlists"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    entries = relationship(
        "PlaylistVideo",
        order_by="PlaylistVideo.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    FIELD_COLUMNS = {
        "id": "id",
        "name": "name",
        "description": "description",
        "owner": "owner_id",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }

    def to_document(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "owner": self.owner_id,
            "videos": [e.video_id for e in self.entries],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


class PlaylistVideo(Base):
    """Ordered set membership: (playlist, video) is the primary key, so a video appears once."""
    __tablename__ = "playlist_videos"

    playlist_id = Column(String(36), ForeignKey("playlists.id", ondelete="CASCADE"), primary_key=True)
    video_id = Column(String(36), ForeignKey("videos.id"), primary_key=True, index=True)
    position = Column(Integer, nullable=False, default=0)
    added_at = Column(DateTime, nullable=False, default=datetime.utcnow)
