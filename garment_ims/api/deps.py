"""Garment IMS — FastAPI dependencies and error mapping."""
import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from garment_ims.core.errors import ConflictError, EngineError, PersistenceError, ValidationError
from garment_ims.db.session import get_db

logger = logging.getLogger(__name__)


def http_error(exc: EngineError) -> HTTPException:
    """
    ValidationError -> 422 with the offending field (nothing was written).
    ConflictError -> 409, PersistenceError -> 503 with a generic message; the
    request transaction is rolled back by get_db and the client may resubmit.
    """
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.to_detail())
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message)
    if isinstance(exc, PersistenceError):
        logger.error("Persistence failure: %s", exc.message, exc_info=exc)
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage is temporarily unavailable. Please retry.",
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)


async def commit(db: AsyncSession) -> None:
    """Commit before side records are written; a failed commit is a 503 like any storage error."""
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        raise http_error(PersistenceError(f"Commit failed: {exc}")) from exc
