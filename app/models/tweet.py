import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from app.database import Base
from app.models.document import DocumentMixin


class Tweet(DocumentMixin, Base):
    __tablename__ = "tweets"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    content = Column(Text, nullable=False)
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    FIELD_COLUMNS = {
        "id": "id",
        "content": "content",
        "owner": "owner_id",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }

    def to_document(self) -> dict:
        return {
            "id": self.id,
            "content": self.content,
            "owner": self.owner_id,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
