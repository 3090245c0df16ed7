"""Map domain errors onto HTTP responses."""

from fastapi import HTTPException

from dispatch_engine.domain.errors import (
    AssignmentError,
    InvalidAssignmentRequest,
    NotFoundError,
    OrderNotAssignable,
    WorkerClaimConflict,
)


def to_http_exception(err: AssignmentError) -> HTTPException:
    if isinstance(err, InvalidAssignmentRequest):
        return HTTPException(status_code=400, detail=str(err))
    if isinstance(err, NotFoundError):
        return HTTPException(status_code=404, detail=str(err))
    if isinstance(err, WorkerClaimConflict):
        return HTTPException(
            status_code=409, detail={"error": str(err), "retryable": True}
        )
    if isinstance(err, OrderNotAssignable):
        return HTTPException(
            status_code=409, detail={"error": str(err), "retryable": False}
        )
    return HTTPException(status_code=500, detail=str(err))
