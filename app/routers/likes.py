"""Like toggles. Each call flips the caller's like; the response says where it landed."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.auth import get_current_user
from app.core.responses import api_response
from app.database import get_db
from app.models.user import User
from app.repositories import views
from app.services import engagement
from app.utils.ids import parse_id

router = APIRouter(prefix="/api/v1/likes", tags=["likes"])


def _toggled(is_liked: bool):
    return api_response({"isLiked": is_liked}, "Liked successfully" if is_liked else "Like removed successfully")


@router.post("/toggle/v/{video_id}")
def toggle_video_like(video_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _toggled(engagement.toggle_video_like(db, user, parse_id(video_id, "videoId")))


@router.post("/toggle/c/{comment_id}")
def toggle_comment_like(comment_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _toggled(engagement.toggle_comment_like(db, user, parse_id(comment_id, "commentId")))


@router.post("/toggle/t/{tweet_id}")
def toggle_tweet_like(tweet_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _toggled(engagement.toggle_tweet_like(db, user, parse_id(tweet_id, "tweetId")))


@router.get("/videos")
def liked_videos(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return api_response(views.liked_videos(db, user.id), "Liked videos fetched successfully")
