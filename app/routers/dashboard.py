"""Channel dashboard for the signed-in user."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.auth import get_current_user
from app.core.responses import api_response
from app.database import get_db
from app.models.user import User
from app.repositories import views

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("/stats")
def channel_stats(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return api_response(views.channel_stats(db, user.id), "Channel stats fetched successfully")


@router.get("/videos")
def channel_videos(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Every video of the channel, drafts included."""
    return api_response(views.channel_videos(db, user.id), "Channel videos fetched successfully")
