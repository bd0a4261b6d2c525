import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from rentmyride.config import CORS_ORIGINS, LOG_LEVEL
from rentmyride.db import init_database
from rentmyride.routers import auth, bookings, businesses, cars, messages
from rentmyride.utils.errors import (
    NOT_AVAILABLE_MESSAGE,
    ApiError,
    ErrorCode,
    HTTP_STATUS,
    code_for_status,
    is_overlap_error,
)

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

DATE_FIELDS = {"start_date", "end_date"}


@asynccontextmanager
async def lifespan(_: FastAPI):
    "lifespan for initing database"
    init_database()
    yield


def error_response(code: ErrorCode, message: str, status_code=None, headers=None):
    return JSONResponse(
        status_code=status_code or HTTP_STATUS[code],
        content={"ok": False, "code": code.value, "message": message, "data": None},
        headers=headers,
    )


async def api_error_handler(_: Request, exc: ApiError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.code == ErrorCode.UNAUTHENTICATED else None
    return error_response(exc.code, exc.message, headers=headers)


async def validation_error_handler(_: Request, exc: RequestValidationError):
    errors = exc.errors()
    bad_dates = any(e["loc"][-1] in DATE_FIELDS and e["type"] != "missing" for e in errors if e.get("loc"))
    code = ErrorCode.INVALID_DATES if bad_dates else ErrorCode.INVALID_INPUT
    message = "; ".join(
        f"{'.'.join(str(p) for p in e['loc'] if p != 'body')}: {e['msg']}" for e in errors
    )
    logger.debug(f"Rejected request ({code.value}): {message}")
    return error_response(code, message or "Invalid input")


async def http_error_handler(_: Request, exc: StarletteHTTPException):
    return error_response(code_for_status(exc.status_code), str(exc.detail), status_code=exc.status_code)


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    if is_overlap_error(exc):
        return error_response(ErrorCode.NOT_AVAILABLE, NOT_AVAILABLE_MESSAGE)
    logger.exception(f"Database error on {request.method} {request.url.path}")
    return error_response(ErrorCode.DB_ERROR, f"{exc.__class__.__name__}: {getattr(exc, 'orig', exc)}")


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(ErrorCode.DB_ERROR, "Internal server error")


def create_app() -> FastAPI:
    application = FastAPI(
        lifespan=lifespan,
        title="RentMyRide",
        description="Car rental booking API based on FastAPI.",
        version="0.1.0",
        license_info={
            "name": "MIT",
            "url": "https://opensource.org/licenses/MIT",
        },
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(ApiError, api_error_handler)
    application.add_exception_handler(RequestValidationError, validation_error_handler)
    application.add_exception_handler(StarletteHTTPException, http_error_handler)
    application.add_exception_handler(SQLAlchemyError, database_error_handler)
    application.add_exception_handler(Exception, unhandled_error_handler)

    @application.get("/api/health", tags=["health"])
    def health():
        return {"ok": True}

    application.include_router(auth.router)
    application.include_router(businesses.router)
    application.include_router(cars.router)
    application.include_router(bookings.router)
    application.include_router(messages.router)
    return application


app = create_app()
