"""Playlists are an ordered set of videos; adding a video twice keeps one entry."""
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.models.playlist import Playlist, PlaylistVideo
from app.models.user import User
from app.models.video import Video
from app.services.ownership import delete_owned, update_owned
from app.services.videos import get_watchable_video


def _require_fields(name: str | None, description: str | None) -> tuple[str, str]:
    if not name or not name.strip() or not description or not description.strip():
        raise ValidationError("name and description both are required")
    return name.strip(), description.strip()


def create_playlist(db: Session, user: User, name: str | None, description: str | None) -> Playlist:
    name, description = _require_fields(name, description)
    playlist = Playlist(name=name, description=description, owner_id=user.id)
    db.add(playlist)
    db.commit()
    db.refresh(playlist)
    return playlist


def update_playlist(db: Session, user: User, playlist_id: str, name: str | None, description: str | None) -> Playlist:
    name, description = _require_fields(name, description)
    return update_owned(db, Playlist, playlist_id, user, {"name": name, "description": description}, "Playlist")


def _delete_entries(db: Session, playlist: Playlist) -> None:
    db.query(PlaylistVideo).filter(PlaylistVideo.playlist_id == playlist.id).delete(synchronize_session=False)


def delete_playlist(db: Session, user: User, playlist_id: str) -> None:
    delete_owned(db, Playlist, playlist_id, user, "Playlist", before_delete=_delete_entries)


def _require_video(db: Session, video_id: str) -> Video:
    video = db.get(Video, video_id)
    if video is None:
        raise NotFoundError("Video not found")
    return video


def add_video(db: Session, user: User, playlist_id: str, video_id: str) -> Playlist:
    get_watchable_video(db, user, video_id)

    def _insert_entry(db: Session, playlist: Playlist) -> None:
        if db.get(PlaylistVideo, (playlist.id, video_id)) is not None:
            return
        next_position = (
            db.query(func.coalesce(func.max(PlaylistVideo.position), -1))
            .filter(PlaylistVideo.playlist_id == playlist.id)
            .scalar()
        ) + 1
        db.add(PlaylistVideo(playlist_id=playlist.id, video_id=video_id, position=next_position))
        db.flush()

    playlist = update_owned(
        db, Playlist, playlist_id, user, {"updated_at": datetime.utcnow()}, "Playlist",
        before_update=_insert_entry,
    )
    db.expire(playlist, ["entries"])
    return playlist


def remove_video(db: Session, user: User, playlist_id: str, video_id: str) -> Playlist:
    """Videos unpublished after being added can still be taken out."""
    _require_video(db, video_id)

    def _remove_entry(db: Session, playlist: Playlist) -> None:
        db.query(PlaylistVideo).filter(
            PlaylistVideo.playlist_id == playlist.id, PlaylistVideo.video_id == video_id
        ).delete(synchronize_session=False)

    playlist = update_owned(
        db, Playlist, playlist_id, user, {"updated_at": datetime.utcnow()}, "Playlist",
        before_update=_remove_entry,
    )
    db.expire(playlist, ["entries"])
    return playlist
