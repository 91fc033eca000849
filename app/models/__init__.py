from app.models.user import User
from app.models.video import Video
from app.models.comment import Comment
from app.models.tweet import Tweet
from app.models.like import Like
from app.models.playlist import Playlist, PlaylistVideo
from app.models.subscription import Subscription
from app.models.watch_history import WatchHistoryEntry

__all__ = [
    "User", "Video", "Comment", "Tweet", "Like", "Playlist", "PlaylistVideo",
    "Subscription", "WatchHistoryEntry",
]
