"""
Video catalogue: public feed, upload, detail (counts a view), owner edits.
Drafts are visible only to their owner.
"""
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session
from app.auth import get_current_user
from app.core.errors import NotFoundError, ValidationError
from app.core.responses import api_response
from app.database import get_db
from app.models.user import User
from app.repositories import views
from app.services import videos as video_service
from app.services.media_storage import MediaStorage, get_media_storage
from app.services.uploads import StagedUploads
from app.utils.ids import parse_id

router = APIRouter(prefix="/api/v1/videos", tags=["videos"])


@router.get("")
def list_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    query: str | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_type: str | None = Query(None, alias="sortType"),
    user_id: str | None = Query(None, alias="userId"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Published videos. Optional full-text query, owner filter and sort (sortBy + sortType asc|desc)."""
    if sort_by is not None and sort_by not in views.SORTABLE_VIDEO_FIELDS:
        raise ValidationError(f"sortBy must be one of: {', '.join(views.SORTABLE_VIDEO_FIELDS)}")
    if sort_type is not None and sort_type not in ("asc", "desc"):
        raise ValidationError("sortType must be asc or desc")
    owner_id = parse_id(user_id, "userId") if user_id else None
    feed = views.video_feed(
        db,
        page=page,
        limit=limit,
        query=query,
        sort_by=sort_by,
        sort_type=sort_type or ("desc" if sort_by else None),
        owner_id=owner_id,
    )
    return api_response(feed, "Videos fetched successfully")


@router.post("")
def publish_video(
    title: str | None = Form(None),
    description: str | None = Form(None),
    video_file: UploadFile | None = File(None, alias="videoFile"),
    thumbnail: UploadFile | None = File(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
):
    """Upload a video with its thumbnail. New videos start unpublished."""
    with StagedUploads() as staged:
        video_path = staged.video(video_file, "videoFile")
        thumbnail_path = staged.image(thumbnail, "thumbnail")
        video = video_service.publish_video(
            db,
            storage,
            user,
            title=title,
            description=description,
            video_path=video_path,
            thumbnail_path=thumbnail_path,
        )
    return api_response(video.to_document(), "Video uploaded successfully", status.HTTP_201_CREATED)


@router.get("/{video_id}")
def get_video(video_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    video = video_service.get_watchable_video(db, user, parse_id(video_id, "videoId"))
    video_service.record_view(db, user, video)
    detail = views.video_detail(db, video.id, user.id)
    if detail is None:
        raise NotFoundError("Video not found")
    return api_response(detail, "Video details fetched successfully")


@router.patch("/toggle/publish/{video_id}")
def toggle_publish(video_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    video = video_service.toggle_publish(db, user, parse_id(video_id, "videoId"))
    return api_response({"isPublished": video.is_published}, "Video publish status toggled successfully")


@router.patch("/{video_id}")
def update_video(
    video_id: str,
    title: str | None = Form(None),
    description: str | None = Form(None),
    thumbnail: UploadFile | None = File(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
):
    video_id = parse_id(video_id, "videoId")
    with StagedUploads() as staged:
        video = video_service.update_video(
            db,
            storage,
            user,
            video_id,
            title=title,
            description=description,
            thumbnail_path=staged.image(thumbnail, "thumbnail"),
        )
    return api_response(video.to_document(), "Video updated successfully")


@router.delete("/{video_id}")
def delete_video(
    video_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
):
    video_service.delete_video(db, storage, user, parse_id(video_id, "videoId"))
    return api_response({}, "Video deleted successfully")
