"""
Presence markers (likes, subscriptions) flipped with one conditional write.
The unique index on the marker makes delete-else-insert safe: if a concurrent
request inserts the same marker first, our insert fails and the marker is on anyway.
Any other integrity failure (a target deleted meanwhile) leaves no marker behind.
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError

logger = logging.getLogger(__name__)


def toggle_marker(db: Session, model, **criteria) -> bool:
    """Remove the marker matching criteria or create it. Returns True when the marker is now present."""
    filters = [getattr(model, name) == value for name, value in criteria.items()]
    removed = db.query(model).filter(*filters).delete(synchronize_session=False)
    if removed:
        db.commit()
        return False
    db.add(model(**criteria))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if not db.query(model).filter(*filters).first():
            logger.warning("%s marker %s rejected by the database", model.__name__, criteria)
            raise NotFoundError(f"{model.__name__} target not found")
        logger.info("%s marker %s already created by a concurrent request", model.__name__, criteria)
    return True
