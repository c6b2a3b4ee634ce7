import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError


logger = logging.getLogger(__name__)


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"detail": "Invalid request data"})


async def _integrity_error_handler(request: Request, exc: IntegrityError):
    logger.info("Constraint violation on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=400, content={"detail": "Invalid data: constraint violation"})


async def _database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Database error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(IntegrityError, _integrity_error_handler)
    app.add_exception_handler(SQLAlchemyError, _database_error_handler)
