"""A row means subscriber follows channel. Both sides are users."""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from app.database import Base
from app.models.document import DocumentMixin


class Subscription(DocumentMixin, Base):
    __tablename__ = "subscriptions"
    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscriptions_subscriber_channel"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    subscriber_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    channel_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    FIELD_COLUMNS = {
        "id": "id",
        "subscriber": "subscriber_id",
        "channel": "channel_id",
        "createdAt": "created_at",
    }

    def to_document(self) -> dict:
        return {
            "id": self.id,
            "subscriber": self.subscriber_id,
            "channel": self.channel_id,
            "createdAt": self.created_at,
        }
