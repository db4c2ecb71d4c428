import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import EngineError, ErrorKind

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI):
    # ---------- Domain errors ----------
    @app.exception_handler(EngineError)
    async def handle_engine_error(request: Request, exc: EngineError):
        logger.warning("%s %s rejected: %s %s", request.method, request.url.path, exc.error_code, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.error_code,
                "kind": exc.kind,
                "message": exc.message,
                "details": {k: str(v) for k, v in exc.details.items()},
            },
        )

    # ---------- Storage errors ----------
    @app.exception_handler(SQLAlchemyError)
    async def handle_database_error(request: Request, exc: SQLAlchemyError):
        logger.error("storage failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content={
                "error": "STORAGE_UNAVAILABLE",
                "kind": ErrorKind.DOWNSTREAM,
                "message": "Storage is temporarily unavailable; the request can be retried",
                "details": {},
            },
        )
