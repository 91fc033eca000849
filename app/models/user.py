import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime
from app.database import Base
from app.models.document import DocumentMixin, media_document


class User(DocumentMixin, Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(50), unique=True, nullable=False, index=True)  # stored lowercase
    email = Column(String(255), unique=True, nullable=False, index=True)  # stored lowercase
    full_name = Column(String(100), nullable=False, index=True)
    avatar_url = Column(String(512), nullable=False)
    avatar_public_id = Column(String(255), nullable=True)
    cover_image_url = Column(String(512), nullable=True)
    cover_image_public_id = Column(String(255), nullable=True)
    password = Column(String(255), nullable=False)
    # single active refresh token; rotated on login/refresh, cleared on logout
    refresh_token = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    FIELD_COLUMNS = {
        "id": "id",
        "username": "username",
        "email": "email",
        "fullName": "full_name",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }

    def to_document(self) -> dict:
        """Sanitized user: never carries password or refresh token."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "fullName": self.full_name,
            "avatar": media_document(self.avatar_url, self.avatar_public_id),
            "coverImage": media_document(self.cover_image_url, self.cover_image_public_id),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
