"""Liveness and database readiness probes."""
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from core.logging_config import get_logger
from core.response import error_response, success_response
from infrastructure.database import check_database
from shared.codes import BusinessCode


router = APIRouter(prefix="/health", tags=["Health"])
logger = get_logger(__name__)


@router.get("")
async def health_check():
    return success_response(data={"status": "healthy"})


@router.get("/db")
async def database_check():
    try:
        await check_database()
    except (SQLAlchemyError, OSError) as exc:
        logger.error("database_check_failed", error=str(exc))
        response = error_response(
            code=BusinessCode.SERVICE_UNAVAILABLE,
            message="Database unavailable",
            error_type="ServiceUnavailable",
        )
        return JSONResponse(status_code=503, content=response.model_dump(mode="json"))
    return success_response(data={"status": "ok"})
