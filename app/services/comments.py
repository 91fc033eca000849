from sqlalchemy.orm import Session

from app.core.errors import ValidationError
from app.models.comment import Comment
from app.models.like import Like
from app.models.user import User
from app.services.ownership import delete_owned, update_owned
from app.services.videos import get_watchable_video


def require_content(content: str | None) -> str:
    if not content or not content.strip():
        raise ValidationError("content is required")
    return content.strip()


def add_comment(db: Session, user: User, video_id: str, content: str | None) -> Comment:
    content = require_content(content)
    get_watchable_video(db, user, video_id)
    comment = Comment(content=content, video_id=video_id, owner_id=user.id)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


def update_comment(db: Session, user: User, comment_id: str, content: str | None) -> Comment:
    content = require_content(content)
    return update_owned(db, Comment, comment_id, user, {"content": content}, "Comment")


def _delete_comment_likes(db: Session, comment: Comment) -> None:
    db.query(Like).filter(Like.comment_id == comment.id).delete(synchronize_session=False)


def delete_comment(db: Session, user: User, comment_id: str) -> None:
    delete_owned(db, Comment, comment_id, user, "Comment", before_delete=_delete_comment_likes)
