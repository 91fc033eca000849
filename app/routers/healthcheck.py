import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.core.errors import InternalError
from app.core.responses import api_response
from app.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/healthcheck", tags=["healthcheck"])


@router.get("")
def healthcheck(db: Session = Depends(get_db)):
    """Liveness plus a database round trip."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Healthcheck database check failed: %s", e)
        raise InternalError("Database connection is not healthy", errors=[{"dbStatus": "disconnected"}]) from e
    return api_response({"message": "Everything is O.K", "dbStatus": "connected"}, "Healthcheck passed")
