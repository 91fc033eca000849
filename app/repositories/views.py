"""
Read models assembled with aggregation pipelines.
Each function returns plain documents ready for the response envelope.
"""
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.pipeline import Pipeline, contains, date_parts, first, last, size, total
from app.models.comment import Comment
from app.models.like import Like
from app.models.playlist import Playlist
from app.models.subscription import Subscription
from app.models.tweet import Tweet
from app.models.user import User
from app.models.video import Video
from app.models.watch_history import WatchHistoryEntry

# Fields accepted by ?sortBy= on the public feed
SORTABLE_VIDEO_FIELDS = ("createdAt", "updatedAt", "views", "duration", "title")

VIDEO_CARD_FIELDS = (
    "id", "videoFile.url", "thumbnail.url", "title", "description",
    "duration", "views", "isPublished", "owner", "createdAt",
)


def _user_brief(*extra: str) -> Pipeline:
    return Pipeline(User).project("id", "username", "fullName", "avatar.url", *extra)


# ---------- Videos ----------


def video_feed(
    db: Session,
    *,
    page: int = 1,
    limit: int = 10,
    query: str | None = None,
    sort_by: str | None = None,
    sort_type: str | None = None,
    owner_id: str | None = None,
) -> dict:
    """Published videos, optionally searched and filtered by owner, newest first unless sortBy is given."""
    pipeline = Pipeline(Video).search(query, "title", "description")
    if owner_id:
        pipeline.match(owner=owner_id)
    pipeline.match(isPublished=True)
    if sort_by and sort_type:
        pipeline.sort(**{sort_by: 1 if sort_type == "asc" else -1})
    else:
        pipeline.sort(createdAt=-1)
    return (
        pipeline
        .lookup(User, "owner", "id", "ownerDetails", Pipeline(User).project("id", "username", "avatar.url"))
        .add_fields(ownerDetails=first("ownerDetails"))
        .project(*VIDEO_CARD_FIELDS, "ownerDetails")
        .paginate(db, page=page, limit=limit)
    )


def video_detail(db: Session, video_id: str, viewer_id: str) -> dict | None:
    owner = (
        Pipeline(User)
        .lookup(Subscription, "id", "channel", "subscribers")
        .add_fields(
            subscribersCount=size("subscribers"),
            isSubscribed=contains("subscribers.subscriber", viewer_id),
        )
        .project("id", "username", "fullName", "avatar.url", "subscribersCount", "isSubscribed")
    )
    return (
        Pipeline(Video)
        .match(id=video_id)
        .lookup(Like, "id", "video", "likes")
        .lookup(User, "owner", "id", "owner", owner)
        .add_fields(
            likesCount=size("likes"),
            owner=first("owner"),
            isLiked=contains("likes.likedBy", viewer_id),
        )
        .project(
            "id", "videoFile.url", "thumbnail.url", "title", "description", "views",
            "createdAt", "duration", "isPublished", "owner", "likesCount", "isLiked",
        )
        .first(db)
    )


def liked_videos(db: Session, user_id: str) -> list[dict]:
    video = (
        Pipeline(Video)
        .match(or_(Video.is_published.is_(True), Video.owner_id == user_id))
        .lookup(User, "owner", "id", "ownerDetails", _user_brief())
        .add_fields(ownerDetails=first("ownerDetails"))
    )
    return (
        Pipeline(Like)
        .match(Like.video_id.isnot(None), likedBy=user_id)
        .sort(createdAt=-1)
        .lookup(Video, "video", "id", "likedVideo", video)
        .unwind("likedVideo")
        .project(*(f"likedVideo.{f}" for f in VIDEO_CARD_FIELDS), "likedVideo.ownerDetails")
        .run(db)
    )


# ---------- Users ----------


def channel_profile(db: Session, username: str, viewer_id: str) -> dict | None:
    return (
        Pipeline(User)
        .match(username=username.strip().lower())
        .lookup(Subscription, "id", "channel", "subscribers")
        .lookup(Subscription, "id", "subscriber", "subscribedTo")
        .add_fields(
            subscribersCount=size("subscribers"),
            channelsSubscribedToCount=size("subscribedTo"),
            isSubscribed=contains("subscribers.subscriber", viewer_id),
        )
        .project(
            "id", "fullName", "username", "email", "avatar.url", "coverImage.url",
            "subscribersCount", "channelsSubscribedToCount", "isSubscribed", "createdAt",
        )
        .first(db)
    )


def watch_history(db: Session, user_id: str) -> list[dict]:
    """Videos the user opened, most recently first-watched first."""
    video = (
        Pipeline(Video)
        .lookup(User, "owner", "id", "owner", Pipeline(User).project("id", "fullName", "username", "avatar.url"))
        .add_fields(owner=first("owner"))
        .project(*VIDEO_CARD_FIELDS)
    )
    entries = (
        Pipeline(WatchHistoryEntry)
        .match(user=user_id)
        .sort(watchedAt=-1)
        .lookup(Video, "video", "id", "video", video)
        .unwind("video")
        .run(db)
    )
    return [{**entry["video"], "watchedAt": entry["watchedAt"]} for entry in entries]


# ---------- Comments & tweets ----------


def video_comments(db: Session, video_id: str, viewer_id: str, *, page: int = 1, limit: int = 10) -> dict:
    return (
        Pipeline(Comment)
        .match(video=video_id)
        .sort(createdAt=-1)
        .lookup(User, "owner", "id", "owner", _user_brief())
        .lookup(Like, "id", "comment", "likes")
        .add_fields(
            likesCount=size("likes"),
            owner=first("owner"),
            isLiked=contains("likes.likedBy", viewer_id),
        )
        .project("id", "content", "createdAt", "updatedAt", "likesCount", "owner", "isLiked")
        .paginate(db, page=page, limit=limit)
    )


def user_tweets(db: Session, owner_id: str, viewer_id: str) -> list[dict]:
    return (
        Pipeline(Tweet)
        .match(owner=owner_id)
        .sort(createdAt=-1)
        .lookup(User, "owner", "id", "ownerDetails", Pipeline(User).project("id", "username", "avatar.url"))
        .lookup(Like, "id", "tweet", "likeDetails", Pipeline(Like).project("likedBy"))
        .add_fields(
            likesCount=size("likeDetails"),
            ownerDetails=first("ownerDetails"),
            isLiked=contains("likeDetails.likedBy", viewer_id),
        )
        .project("id", "content", "ownerDetails", "likesCount", "createdAt", "updatedAt", "isLiked")
        .run(db)
    )


# ---------- Subscriptions ----------


def channel_subscribers(db: Session, channel_id: str) -> list[dict]:
    """Subscribers of a channel; subscribedToSubscriber tells whether the channel follows them back."""
    subscriber = (
        Pipeline(User)
        .lookup(Subscription, "id", "channel", "subscribedToSubscriber")
        .add_fields(
            subscribedToSubscriber=contains("subscribedToSubscriber.subscriber", channel_id),
            subscribersCount=size("subscribedToSubscriber"),
        )
        .project("id", "username", "fullName", "avatar.url", "subscribedToSubscriber", "subscribersCount")
    )
    return (
        Pipeline(Subscription)
        .match(channel=channel_id)
        .sort(createdAt=-1)
        .lookup(User, "subscriber", "id", "subscriber", subscriber)
        .unwind("subscriber")
        .project("subscriber")
        .run(db)
    )


def subscribed_channels(db: Session, subscriber_id: str) -> list[dict]:
    latest = (
        Pipeline(Video)
        .match(isPublished=True)
        .sort(createdAt=1)
        .project(*VIDEO_CARD_FIELDS)
    )
    channel = (
        Pipeline(User)
        .lookup(Video, "id", "owner", "videos", latest)
        .add_fields(latestVideo=last("videos"))
        .project("id", "username", "fullName", "avatar.url", "latestVideo")
    )
    return (
        Pipeline(Subscription)
        .match(subscriber=subscriber_id)
        .sort(createdAt=-1)
        .lookup(User, "channel", "id", "subscribedChannel", channel)
        .unwind("subscribedChannel")
        .project("subscribedChannel")
        .run(db)
    )


# ---------- Playlists ----------


def playlist_detail(db: Session, playlist_id: str) -> dict | None:
    """Playlist with its published videos in playlist order."""
    videos = (
        Pipeline(Video)
        .match(isPublished=True)
        .project("id", "videoFile.url", "thumbnail.url", "title", "description", "duration", "createdAt", "views")
    )
    return (
        Pipeline(Playlist)
        .match(id=playlist_id)
        .lookup(Video, "videos", "id", "videos", videos)
        .lookup(User, "owner", "id", "owner", _user_brief())
        .add_fields(
            totalVideos=size("videos"),
            totalViews=total("videos.views"),
            owner=first("owner"),
        )
        .project("id", "name", "description", "createdAt", "updatedAt", "totalVideos", "totalViews", "videos", "owner")
        .first(db)
    )


def user_playlists(db: Session, owner_id: str) -> list[dict]:
    return (
        Pipeline(Playlist)
        .match(owner=owner_id)
        .sort(updatedAt=-1)
        .lookup(Video, "videos", "id", "videos", Pipeline(Video).match(isPublished=True).project("views"))
        .add_fields(totalVideos=size("videos"), totalViews=total("videos.views"))
        .project("id", "name", "description", "totalVideos", "totalViews", "createdAt", "updatedAt")
        .run(db)
    )


# ---------- Dashboard ----------


def channel_stats(db: Session, channel_id: str) -> dict:
    videos = (
        Pipeline(Video)
        .match(owner=channel_id)
        .lookup(Like, "id", "video", "likes", Pipeline(Like).project("id"))
        .add_fields(totalLikes=size("likes"))
        .project("views", "totalLikes")
        .run(db)
    )
    return {
        "totalSubscribers": Pipeline(Subscription).match(channel=channel_id).count(db),
        "totalLikes": sum(v["totalLikes"] for v in videos),
        "totalViews": sum(v["views"] for v in videos),
        "totalVideos": len(videos),
    }


def channel_videos(db: Session, channel_id: str) -> list[dict]:
    """All of the channel's videos, drafts included, for the owner's dashboard."""
    return (
        Pipeline(Video)
        .match(owner=channel_id)
        .sort(createdAt=-1)
        .lookup(Like, "id", "video", "likes", Pipeline(Like).project("id"))
        .add_fields(createdAt=date_parts("createdAt"), likesCount=size("likes"))
        .project(
            "id", "videoFile.url", "thumbnail.url", "title", "description", "views",
            "createdAt.year", "createdAt.month", "createdAt.day", "isPublished", "likesCount",
        )
        .run(db)
    )
