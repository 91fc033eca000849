from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app.auth import get_current_user
from app.core.responses import api_response
from app.database import get_db
from app.models.user import User
from app.repositories import views
from app.schemas.content import ContentBody
from app.services import comments as comment_service
from app.services.videos import get_watchable_video
from app.utils.ids import parse_id

router = APIRouter(prefix="/api/v1/comments", tags=["comments"])


@router.get("/{video_id}")
def list_comments(
    video_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    video = get_watchable_video(db, user, parse_id(video_id, "videoId"))
    comments = views.video_comments(db, video.id, user.id, page=page, limit=limit)
    return api_response(comments, "Comments fetched successfully")


@router.post("/{video_id}")
def add_comment(
    video_id: str,
    body: ContentBody,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    comment = comment_service.add_comment(db, user, parse_id(video_id, "videoId"), body.content)
    return api_response(comment.to_document(), "Comment added successfully", status.HTTP_201_CREATED)


@router.patch("/c/{comment_id}")
def update_comment(
    comment_id: str,
    body: ContentBody,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    comment = comment_service.update_comment(db, user, parse_id(comment_id, "commentId"), body.content)
    return api_response(comment.to_document(), "Comment edited successfully")


@router.delete("/c/{comment_id}")
def delete_comment(comment_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    comment_service.delete_comment(db, user, parse_id(comment_id, "commentId"))
    return api_response({"commentId": comment_id}, "Comment deleted successfully")
