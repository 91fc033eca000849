from sqlalchemy.orm import Session

from app.models.like import Like
from app.models.tweet import Tweet
from app.models.user import User
from app.services.comments import require_content
from app.services.ownership import delete_owned, update_owned


def create_tweet(db: Session, user: User, content: str | None) -> Tweet:
    tweet = Tweet(content=require_content(content), owner_id=user.id)
    db.add(tweet)
    db.commit()
    db.refresh(tweet)
    return tweet


def update_tweet(db: Session, user: User, tweet_id: str, content: str | None) -> Tweet:
    content = require_content(content)
    return update_owned(db, Tweet, tweet_id, user, {"content": content}, "Tweet")


def _delete_tweet_likes(db: Session, tweet: Tweet) -> None:
    db.query(Like).filter(Like.tweet_id == tweet.id).delete(synchronize_session=False)


def delete_tweet(db: Session, user: User, tweet_id: str) -> None:
    delete_owned(db, Tweet, tweet_id, user, "Tweet", before_delete=_delete_tweet_likes)
