"""
Request dependencies.
"""

from fastapi import HTTPException, Request, status

from ..exceptions import ConflictError, NotFoundError, QueueError, ValidationError
from ..services.queue_service import QueueEngine


def get_engine(request: Request) -> QueueEngine:
    """Queue engine built by the application lifespan."""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Queue engine not initialized"
        )
    return engine


def to_http_error(error: QueueError) -> HTTPException:
    """Map an engine error to the matching HTTP status."""
    if isinstance(error, ValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"field": error.field, "message": error.message}
        )
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)
    if isinstance(error, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=error.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=error.message)
