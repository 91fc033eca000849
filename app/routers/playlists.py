from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.auth import get_current_user
from app.core.errors import NotFoundError
from app.core.responses import api_response
from app.database import get_db
from app.models.user import User
from app.repositories import views
from app.schemas.content import PlaylistBody
from app.services import playlists as playlist_service
from app.utils.ids import parse_id

router = APIRouter(prefix="/api/v1/playlist", tags=["playlists"])


@router.post("")
def create_playlist(body: PlaylistBody, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    playlist = playlist_service.create_playlist(db, user, body.name, body.description)
    return api_response(playlist.to_document(), "Playlist created successfully", status.HTTP_201_CREATED)


@router.get("/user/{user_id}")
def user_playlists(user_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    playlists = views.user_playlists(db, parse_id(user_id, "userId"))
    return api_response(playlists, "User playlists fetched successfully")


@router.patch("/add/{video_id}/{playlist_id}")
def add_video(
    video_id: str,
    playlist_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    playlist = playlist_service.add_video(db, user, parse_id(playlist_id, "playlistId"), parse_id(video_id, "videoId"))
    return api_response(playlist.to_document(), "Video added to playlist successfully")


@router.patch("/remove/{video_id}/{playlist_id}")
def remove_video(
    video_id: str,
    playlist_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    playlist = playlist_service.remove_video(db, user, parse_id(playlist_id, "playlistId"), parse_id(video_id, "videoId"))
    return api_response(playlist.to_document(), "Video removed from playlist successfully")


@router.get("/{playlist_id}")
def get_playlist(playlist_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Playlist with its published videos, totals and owner."""
    playlist = views.playlist_detail(db, parse_id(playlist_id, "playlistId"))
    if playlist is None:
        raise NotFoundError("Playlist not found")
    return api_response(playlist, "Playlist fetched successfully")


@router.patch("/{playlist_id}")
def update_playlist(
    playlist_id: str,
    body: PlaylistBody,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    playlist = playlist_service.update_playlist(
        db, user, parse_id(playlist_id, "playlistId"), body.name, body.description
    )
    return api_response(playlist.to_document(), "Playlist updated successfully")


@router.delete("/{playlist_id}")
def delete_playlist(playlist_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    playlist_service.delete_playlist(db, user, parse_id(playlist_id, "playlistId"))
    return api_response({}, "Playlist deleted successfully")
