from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.auth import get_current_user
from app.core.responses import api_response
from app.database import get_db
from app.models.user import User
from app.repositories import views
from app.services import engagement
from app.utils.ids import parse_id

router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])


@router.post("/c/{channel_id}")
def toggle_subscription(channel_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    subscribed = engagement.toggle_subscription(db, user, parse_id(channel_id, "channelId"))
    message = "Subscribed successfully" if subscribed else "Unsubscribed successfully"
    return api_response({"subscribed": subscribed}, message)


@router.get("/c/{channel_id}")
def channel_subscribers(channel_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    subscribers = views.channel_subscribers(db, parse_id(channel_id, "channelId"))
    return api_response(subscribers, "Subscribers fetched successfully")


@router.get("/u/{subscriber_id}")
def subscribed_channels(subscriber_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    channels = views.subscribed_channels(db, parse_id(subscriber_id, "subscriberId"))
    return api_response(channels, "Subscribed channels fetched successfully")
