from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse

from dockerdemo.schemas.status import StatusErrorResponse, StatusOkResponse
from dockerdemo.services.status_service import StatusService
from dockerdemo.utils.log import app_logger

router = APIRouter(tags=["Status"])


def get_status_service(request: Request) -> StatusService:
    """Return the StatusService wired up in the app lifespan."""
    service = getattr(request.app.state, "status_service", None)
    if service is None:
        # lifespan did not run (app mounted without startup events)
        app_logger.error("api.status.not_ready")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database handle not initialised",
        )
    return service


@router.get(
    "/db-check",
    response_model=StatusOkResponse,
    summary="Probe the database",
    description="Runs one round-trip query against the database and reports "
                "its clock, or the reason the query failed.",
    responses={
        500: {
            "description": "Database unreachable, credentials rejected or reply malformed",
            "model": StatusErrorResponse,
        },
        504: {
            "description": "Database did not answer within DB_CHECK_TIMEOUT",
            "model": StatusErrorResponse,
        },
    },
)
async def db_check(service: StatusService = Depends(get_status_service)) -> JSONResponse:
    """Probe the database once and return the normalized envelope.

    Returns:
        200 with {"status": "ok", "database": ..., "serverTime": ...} when the
        probe succeeds, otherwise {"status": "error", "message": ..., "kind": ...}
        with the status code mapped from the failure kind.
    """
    result = await service.check()
    return JSONResponse(status_code=result.http_status, content=result.envelope())
