"""Video lifecycle: publish, edit, publish toggle, view counting, cascading delete."""
import logging
from pathlib import Path

from sqlalchemy import not_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import InternalError, NotFoundError, ValidationError
from app.models.comment import Comment
from app.models.like import Like
from app.models.playlist import PlaylistVideo
from app.models.user import User
from app.models.video import Video
from app.models.watch_history import WatchHistoryEntry
from app.services.media_storage import RESOURCE_IMAGE, RESOURCE_VIDEO, MediaStorage
from app.services.ownership import delete_owned, update_owned

logger = logging.getLogger(__name__)


def publish_video(
    db: Session,
    storage: MediaStorage,
    user: User,
    *,
    title: str | None,
    description: str | None,
    video_path: Path | None,
    thumbnail_path: Path | None,
) -> Video:
    """Store both media files and create the video unpublished."""
    if not title or not title.strip() or not description or not description.strip():
        raise ValidationError("All fields are required")
    if video_path is None:
        raise ValidationError("videoFile is required")
    if thumbnail_path is None:
        raise ValidationError("thumbnail is required")

    video_file = storage.upload(video_path, "videos", RESOURCE_VIDEO)
    if not video_file:
        raise InternalError("Video file upload failed")
    thumbnail = storage.upload(thumbnail_path, "thumbnails", RESOURCE_IMAGE)
    if not thumbnail:
        storage.delete(video_file.public_id, RESOURCE_VIDEO)
        raise InternalError("Thumbnail upload failed")

    video = Video(
        title=title.strip(),
        description=description.strip(),
        duration=video_file.duration or 0.0,
        video_file_url=video_file.url,
        video_file_public_id=video_file.public_id,
        thumbnail_url=thumbnail.url,
        thumbnail_public_id=thumbnail.public_id,
        owner_id=user.id,
        is_published=False,
    )
    db.add(video)
    db.commit()
    db.refresh(video)
    logger.info("User %s uploaded video %s", user.id, video.id)
    return video


def update_video(
    db: Session,
    storage: MediaStorage,
    user: User,
    video_id: str,
    *,
    title: str | None,
    description: str | None,
    thumbnail_path: Path | None,
) -> Video:
    if not title or not title.strip() or not description or not description.strip():
        raise ValidationError("title and description are required")
    values = {"title": title.strip(), "description": description.strip()}
    uploaded = []

    def _replace_thumbnail(db: Session, video: Video) -> None:
        if thumbnail_path is None:
            return
        thumbnail = storage.upload(thumbnail_path, "thumbnails", RESOURCE_IMAGE)
        if not thumbnail:
            raise InternalError("Thumbnail upload failed")
        uploaded.append((video.thumbnail_public_id, thumbnail.public_id))
        values["thumbnail_url"] = thumbnail.url
        values["thumbnail_public_id"] = thumbnail.public_id

    try:
        video = update_owned(db, Video, video_id, user, values, "Video", before_update=_replace_thumbnail)
    except InternalError:
        for _, new_public_id in uploaded:
            storage.delete(new_public_id, RESOURCE_IMAGE)
        raise
    for old_public_id, _ in uploaded:
        storage.delete(old_public_id, RESOURCE_IMAGE)
    return video


def toggle_publish(db: Session, user: User, video_id: str) -> Video:
    return update_owned(db, Video, video_id, user, {"is_published": not_(Video.is_published)}, "Video")


def _delete_video_dependents(db: Session, video: Video) -> None:
    comment_ids = select(Comment.id).where(Comment.video_id == video.id)
    db.query(Like).filter(Like.comment_id.in_(comment_ids)).delete(synchronize_session=False)
    db.query(Like).filter(Like.video_id == video.id).delete(synchronize_session=False)
    db.query(Comment).filter(Comment.video_id == video.id).delete(synchronize_session=False)
    db.query(PlaylistVideo).filter(PlaylistVideo.video_id == video.id).delete(synchronize_session=False)
    db.query(WatchHistoryEntry).filter(WatchHistoryEntry.video_id == video.id).delete(synchronize_session=False)


def delete_video(db: Session, storage: MediaStorage, user: User, video_id: str) -> None:
    """Rows go in one transaction; stored media is removed afterwards, best effort."""
    video = delete_owned(db, Video, video_id, user, "Video", before_delete=_delete_video_dependents)
    logger.info("User %s deleted video %s", user.id, video.id)
    storage.delete(video.video_file_public_id, RESOURCE_VIDEO)
    storage.delete(video.thumbnail_public_id, RESOURCE_IMAGE)


def get_watchable_video(db: Session, user: User, video_id: str) -> Video:
    """Published videos are visible to everyone, drafts only to their owner."""
    video = db.get(Video, video_id)
    if video is None or (not video.is_published and video.owner_id != user.id):
        raise NotFoundError("Video not found")
    return video


def record_view(db: Session, user: User, video: Video) -> None:
    """Count one view and add the video to the viewer's history (once per video)."""
    db.query(Video).filter(Video.id == video.id).update(
        {"views": Video.views + 1}, synchronize_session=False
    )
    if db.get(WatchHistoryEntry, (user.id, video.id)) is None:
        db.add(WatchHistoryEntry(user_id=user.id, video_id=video.id))
    try:
        db.commit()
    except IntegrityError:
        # the same user opened the video twice concurrently; history already has it
        db.rollback()
        db.query(Video).filter(Video.id == video.id).update(
            {"views": Video.views + 1}, synchronize_session=False
        )
        db.commit()
