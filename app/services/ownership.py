"""
Owner-gated mutation shared by videos, comments, tweets and playlists:
Lookup (404) -> AuthorizeOwnership (403) -> Mutate (conditional on id and owner; 0 rows -> 500) -> Respond.
"""
import logging
from typing import Callable

from sqlalchemy.orm import Session

from app.core.errors import ForbiddenError, InternalError, NotFoundError
from app.models.user import User

logger = logging.getLogger(__name__)


def get_owned(db: Session, model, resource_id: str, user: User, label: str):
    """Load a resource and require that user owns it."""
    obj = db.get(model, resource_id)
    if obj is None:
        raise NotFoundError(f"{label} not found")
    if obj.owner_id != user.id:
        logger.info("User %s denied on %s %s owned by %s", user.id, label.lower(), resource_id, obj.owner_id)
        raise ForbiddenError(f"Only the owner can modify this {label.lower()}")
    return obj


def update_owned(
    db: Session,
    model,
    resource_id: str,
    user: User,
    values: dict,
    label: str,
    before_update: Callable[[Session, object], None] | None = None,
):
    """Apply values to an owned resource and return it refreshed. before_update runs in the same transaction."""
    obj = get_owned(db, model, resource_id, user, label)
    if before_update is not None:
        before_update(db, obj)
    changed = (
        db.query(model)
        .filter(model.id == obj.id, model.owner_id == user.id)
        .update(values, synchronize_session=False)
    )
    if not changed:
        db.rollback()
        raise InternalError(f"Failed to update {label.lower()}, please try again")
    db.commit()
    db.refresh(obj)
    return obj


def delete_owned(
    db: Session,
    model,
    resource_id: str,
    user: User,
    label: str,
    before_delete: Callable[[Session, object], None] | None = None,
):
    """
    Delete an owned resource; before_delete removes dependents in the same transaction.
    Returns the deleted row (detached) so callers can clean up external media.
    """
    obj = get_owned(db, model, resource_id, user, label)
    if before_delete is not None:
        before_delete(db, obj)
    deleted = (
        db.query(model)
        .filter(model.id == obj.id, model.owner_id == user.id)
        .delete(synchronize_session=False)
    )
    if not deleted:
        db.rollback()
        raise InternalError(f"Failed to delete {label.lower()}, please try again")
    db.expunge(obj)
    db.commit()
    return obj
