"""Like and subscription toggles. Targets must exist; the flip itself is one conditional write."""
import logging

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.models.comment import Comment
from app.models.like import Like
from app.models.subscription import Subscription
from app.models.tweet import Tweet
from app.models.user import User
from app.services.markers import toggle_marker
from app.services.videos import get_watchable_video

logger = logging.getLogger(__name__)


def _require(db: Session, model, resource_id: str, label: str) -> None:
    if db.get(model, resource_id) is None:
        raise NotFoundError(f"{label} not found")


def toggle_video_like(db: Session, user: User, video_id: str) -> bool:
    get_watchable_video(db, user, video_id)
    return toggle_marker(db, Like, video_id=video_id, liked_by_id=user.id)


def toggle_comment_like(db: Session, user: User, comment_id: str) -> bool:
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    # comments of a draft are as hidden as the draft itself
    try:
        get_watchable_video(db, user, comment.video_id)
    except NotFoundError:
        raise NotFoundError("Comment not found") from None
    return toggle_marker(db, Like, comment_id=comment_id, liked_by_id=user.id)


def toggle_tweet_like(db: Session, user: User, tweet_id: str) -> bool:
    _require(db, Tweet, tweet_id, "Tweet")
    return toggle_marker(db, Like, tweet_id=tweet_id, liked_by_id=user.id)


def toggle_subscription(db: Session, user: User, channel_id: str) -> bool:
    if channel_id == user.id:
        raise ValidationError("You cannot subscribe to your own channel")
    _require(db, User, channel_id, "Channel")
    subscribed = toggle_marker(db, Subscription, subscriber_id=user.id, channel_id=channel_id)
    logger.info("User %s %s channel %s", user.id, "subscribed to" if subscribed else "unsubscribed from", channel_id)
    return subscribed
