from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.auth import get_current_user
from app.core.responses import api_response
from app.database import get_db
from app.models.user import User
from app.repositories import views
from app.schemas.content import ContentBody
from app.services import tweets as tweet_service
from app.utils.ids import parse_id

router = APIRouter(prefix="/api/v1/tweets", tags=["tweets"])


@router.post("")
def create_tweet(body: ContentBody, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    tweet = tweet_service.create_tweet(db, user, body.content)
    return api_response(tweet.to_document(), "Tweet created successfully", status.HTTP_201_CREATED)


@router.get("/user/{user_id}")
def user_tweets(user_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    tweets = views.user_tweets(db, parse_id(user_id, "userId"), user.id)
    return api_response(tweets, "Tweets fetched successfully")


@router.patch("/{tweet_id}")
def update_tweet(
    tweet_id: str,
    body: ContentBody,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    tweet = tweet_service.update_tweet(db, user, parse_id(tweet_id, "tweetId"), body.content)
    return api_response(tweet.to_document(), "Tweet updated successfully")


@router.delete("/{tweet_id}")
def delete_tweet(tweet_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    tweet_service.delete_tweet(db, user, parse_id(tweet_id, "tweetId"))
    return api_response({"tweetId": tweet_id}, "Tweet deleted successfully")
