import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from salesdesk.utils import now
from salesdesk.web.deps import AppDep

router = APIRouter(tags=["health"])

logger = structlog.get_logger(__name__)


@router.get("/ping", summary="Liveness probe", operation_id="ping")
async def ping() -> dict[str, bool]:
    return {"ok": True}


@router.get(
    "/health",
    summary="Health check",
    description="Report whether the database answers a ping.",
    operation_id="health",
    responses={503: {"description": "Database unreachable"}},
)
async def health(app: AppDep) -> JSONResponse:
    timestamp = now().isoformat()
    try:
        await app.check_database()
    except PyMongoError as e:
        logger.warning("health_check_failed", error=str(e))
        return JSONResponse(
            status_code=503, content={"status": "error", "timestamp": timestamp, "database": "disconnected"}
        )
    return JSONResponse(content={"status": "ok", "timestamp": timestamp, "database": "connected"})
